"""Read-only inventory of a cluster: databases, collections, counts."""
from typing import List, Optional

from mongo_tools.helpers.database.connection_to_db import Connection
from mongo_tools.models import CollectionInfo, DatabaseInfo, DatabaseStats


def list_databases(connection: Connection) -> List[DatabaseInfo]:
    return connection.list_databases()


def list_collections(connection: Connection, db_name: str) -> List[CollectionInfo]:
    return connection.list_collections(db_name)


def get_stats(connection: Connection, db_name: str) -> DatabaseStats:
    return connection.get_stats(db_name)


def find_database(connection: Connection, db_name: str) -> Optional[DatabaseInfo]:
    """Returns the listing entry for db_name, or None if it does not exist."""
    for db in connection.list_databases():
        if db.name == db_name:
            return db
    return None


def get_stats_if_exists(connection: Connection, db_name: str) -> Optional[DatabaseStats]:
    """Stats for an existing database, None when the database is absent."""
    if find_database(connection, db_name) is None:
        return None
    return connection.get_stats(db_name)
