import time
from typing import Optional

from mongo_tools.helpers.database.connection_to_db import Connection
from mongo_tools.helpers.logger import get_logger
from mongo_tools.models import TransferResult
from mongo_tools.pipelines.clone import clear_target
from mongo_tools.transfer.engine import TransferEngine
from mongo_tools.transfer.progress import ProgressCallback
from mongo_tools.transfer.sinks import LiveDatabaseSink
from mongo_tools.transfer.sources import FileDirectorySource

logger = get_logger(__name__)


def run_import(
    connection: Connection,
    in_dir,
    target_db: str,
    replace: bool = True,
    on_collection: Optional[ProgressCallback] = None,
    engine: Optional[TransferEngine] = None,
) -> TransferResult:
    """
    Import a dump directory into a database.

    The directory is checked before anything else, so a missing directory
    leaves the target database untouched.

    Raises:
        SourceNotFound: If in_dir does not exist
    """
    source = FileDirectorySource(in_dir)
    engine = engine or TransferEngine()
    start = time.monotonic()
    logger.info(f"Importing {in_dir} into '{target_db}'")

    if replace and clear_target(connection, target_db):
        logger.info(f"Cleared target database '{target_db}'")

    result = engine.transfer(source, LiveDatabaseSink(connection, target_db), on_collection)

    logger.info(
        f"Import complete: {result.collections} collection(s), "
        f"{result.documents} document(s) in {time.monotonic() - start:.1f}s"
    )
    return result
