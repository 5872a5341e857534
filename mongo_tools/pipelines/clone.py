import time
from typing import Optional

from mongo_tools.helpers.database.catalog import find_database
from mongo_tools.helpers.database.connection_to_db import Connection
from mongo_tools.helpers.logger import get_logger
from mongo_tools.models import TransferResult
from mongo_tools.transfer.engine import TransferEngine
from mongo_tools.transfer.progress import ProgressCallback
from mongo_tools.transfer.sinks import LiveDatabaseSink
from mongo_tools.transfer.sources import LiveDatabaseSource

logger = get_logger(__name__)


def clear_target(connection: Connection, db_name: str) -> bool:
    """
    Drops db_name if it exists.

    Returns:
        bool: True if a database was dropped
    """
    if find_database(connection, db_name) is None:
        return False
    connection.drop_database(db_name)
    return True


def run_clone(
    connection: Connection,
    source_db: str,
    target_db: str,
    replace: bool = True,
    on_collection: Optional[ProgressCallback] = None,
    engine: Optional[TransferEngine] = None,
) -> TransferResult:
    """
    Clone a database into another database of the same cluster.

    Args:
        connection: Connected cluster
        source_db: Database to copy from
        target_db: Database to copy into
        replace: Drop target_db first when it already exists
        on_collection: Progress callback
        engine: Transfer engine (a fail-fast default when omitted)

    Returns:
        TransferResult: Collections and documents cloned
    """
    if source_db == target_db:
        raise ValueError("Source and target database must differ on the same cluster")

    engine = engine or TransferEngine()
    start = time.monotonic()
    logger.info(f"Cloning '{source_db}' into '{target_db}'")

    if replace and clear_target(connection, target_db):
        logger.info(f"Cleared target database '{target_db}'")

    result = engine.transfer(
        LiveDatabaseSource(connection, source_db),
        LiveDatabaseSink(connection, target_db),
        on_collection,
    )

    logger.info(
        f"Clone complete: {result.collections} collection(s), "
        f"{result.documents} document(s) in {time.monotonic() - start:.1f}s"
    )
    return result


def run_cross_cluster_clone(
    source_connection: Connection,
    target_connection: Connection,
    source_db: str,
    target_db: str,
    replace: bool = True,
    on_collection: Optional[ProgressCallback] = None,
    engine: Optional[TransferEngine] = None,
) -> TransferResult:
    """
    Clone a database from one cluster into a database of another cluster.
    Both connections must already be connected.
    """
    engine = engine or TransferEngine()
    start = time.monotonic()
    logger.info(f"Cloning '{source_db}' into '{target_db}' on another cluster")

    if replace and clear_target(target_connection, target_db):
        logger.info(f"Cleared '{target_db}' on target cluster")

    result = engine.transfer(
        LiveDatabaseSource(source_connection, source_db),
        LiveDatabaseSink(target_connection, target_db),
        on_collection,
    )

    logger.info(
        f"Clone complete: {result.collections} collection(s), "
        f"{result.documents} document(s) in {time.monotonic() - start:.1f}s"
    )
    return result
