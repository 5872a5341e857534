import time
from datetime import datetime
from typing import Optional

from mongo_tools.config import DEFAULT_JSON_MODE
from mongo_tools.helpers.database.connection_to_db import Connection
from mongo_tools.helpers.logger import get_logger
from mongo_tools.models import TransferResult
from mongo_tools.transfer.engine import TransferEngine
from mongo_tools.transfer.progress import ProgressCallback
from mongo_tools.transfer.sinks import FileDirectorySink
from mongo_tools.transfer.sources import LiveDatabaseSource

logger = get_logger(__name__)


def default_export_dir(db_name: str, now: Optional[datetime] = None) -> str:
    """Directory name for a dump, e.g. shop-2024-05-01T10-30-00"""
    now = now or datetime.now()
    return f"{db_name}-{now.strftime('%Y-%m-%dT%H-%M-%S')}"


def run_export(
    connection: Connection,
    db_name: str,
    out_dir=None,
    on_collection: Optional[ProgressCallback] = None,
    engine: Optional[TransferEngine] = None,
    json_mode: str = DEFAULT_JSON_MODE,
) -> TransferResult:
    """
    Export a database into a directory of .jsonl record files and
    .indexes.json sidecars. The directory is created if needed.

    Returns:
        TransferResult: Counts and the output directory
    """
    engine = engine or TransferEngine()
    out_dir = out_dir or default_export_dir(db_name)
    start = time.monotonic()
    logger.info(f"Exporting '{db_name}' to {out_dir}")

    result = engine.transfer(
        LiveDatabaseSource(connection, db_name),
        FileDirectorySink(out_dir, json_mode=json_mode),
        on_collection,
    )

    logger.info(
        f"Export complete: {result.collections} collection(s), "
        f"{result.documents} document(s) in {time.monotonic() - start:.1f}s"
    )
    return result
