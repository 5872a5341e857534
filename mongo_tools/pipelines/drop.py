from pymongo.errors import OperationFailure

from mongo_tools.config import SYSTEM_DBS
from mongo_tools.helpers.database.connection_to_db import Connection
from mongo_tools.helpers.logger import get_logger
from mongo_tools.models import DatabaseStats

logger = get_logger(__name__)


def run_drop(connection: Connection, db_name: str) -> DatabaseStats:
    """
    Drop a user database.

    Returns:
        DatabaseStats: What the database held just before it was dropped

    Raises:
        ValueError: For system databases (admin, local, config)
        OperationFailure: If the server refuses, e.g. missing permissions
    """
    if db_name in SYSTEM_DBS:
        raise ValueError(f"Refusing to drop system database '{db_name}'")

    stats = connection.get_stats(db_name)
    try:
        connection.drop_database(db_name)
    except OperationFailure as e:
        if e.code == 13:  # Unauthorized
            logger.error(f"No permission to drop database '{db_name}'")
        raise
    return stats
