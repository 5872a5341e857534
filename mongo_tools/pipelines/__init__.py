from mongo_tools.pipelines.clone import run_clone, run_cross_cluster_clone
from mongo_tools.pipelines.download import default_export_dir, run_export
from mongo_tools.pipelines.drop import run_drop
from mongo_tools.pipelines.upload import run_import

__all__ = [
    "default_export_dir",
    "run_clone",
    "run_cross_cluster_clone",
    "run_drop",
    "run_export",
    "run_import",
]
