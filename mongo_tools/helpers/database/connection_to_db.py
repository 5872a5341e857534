from typing import List

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from mongo_tools.config import (
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    SYSTEM_COLLECTION_PREFIX,
    SYSTEM_DBS,
)
from mongo_tools.errors import ClusterConnectionError, NotConnected
from mongo_tools.helpers.logger import get_logger
from mongo_tools.models import CollectionInfo, DatabaseInfo, DatabaseStats

logger = get_logger(__name__)


class Connection:
    """
    Lifecycle handle to one MongoDB cluster.

    A Connection starts disconnected. Every data operation requires a prior
    successful connect() and raises NotConnected otherwise. One Connection
    should not be shared by two transfers running at the same time.

    Args:
        server_selection_timeout_ms: Upper bound for the initial connect
        client_factory: Callable building the driver client (MongoClient by default)
    """

    def __init__(
        self,
        server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
        client_factory=MongoClient,
    ):
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self._client_factory = client_factory
        self._client = None

    @classmethod
    def from_settings(cls, settings, client_factory=MongoClient) -> "Connection":
        return cls(
            server_selection_timeout_ms=settings.server_selection_timeout_ms,
            client_factory=client_factory,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def client(self):
        if self._client is None:
            raise NotConnected()
        return self._client

    def connect(self, uri: str) -> None:
        """
        Connects to the cluster behind the given connection string.

        Args:
            uri: MongoDB connection string (must not be empty)

        Raises:
            ValueError: If the connection string is empty
            ClusterConnectionError: If the server could not be reached or
                rejected the connection within the selection timeout
        """
        if not uri or not uri.strip():
            raise ValueError("Connection string must not be empty")

        if self._client is not None:
            self.disconnect()

        client = None
        try:
            client = self._client_factory(
                uri, serverSelectionTimeoutMS=self.server_selection_timeout_ms
            )
            # MongoClient connects lazily, ping to surface failures now
            client.admin.command("ping")
        except PyMongoError as e:
            if client is not None:
                client.close()
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise ClusterConnectionError(f"Could not connect to cluster: {e}") from e

        self._client = client
        logger.debug("Connected successfully to MongoDB!")

    def disconnect(self) -> None:
        """Closes the underlying client. Safe to call more than once."""
        client, self._client = self._client, None
        if client is None:
            return
        try:
            client.close()
        except PyMongoError as e:
            logger.warning(f"Error while closing MongoDB client: {e}")

    def database(self, db_name: str):
        """Returns the driver handle for a database."""
        return self.client[db_name]

    def collection_names(self, db_name: str) -> List[str]:
        """
        Names of the regular collections of a database, in server order.
        Views and server-internal system.* collections are skipped.
        """
        names = self.database(db_name).list_collection_names(filter={"type": "collection"})
        return [name for name in names if not name.startswith(SYSTEM_COLLECTION_PREFIX)]

    def list_databases(self) -> List[DatabaseInfo]:
        """Lists user databases in server order, system databases excluded."""
        databases = []
        for db in self.client.list_databases():
            if db["name"] in SYSTEM_DBS:
                continue
            databases.append(
                DatabaseInfo(name=db["name"], size_on_disk=db.get("sizeOnDisk"))
            )
        return databases

    def list_collections(self, db_name: str) -> List[CollectionInfo]:
        """Lists collections of a database with their document counts."""
        db = self.database(db_name)
        return [
            CollectionInfo(name=name, count=db[name].count_documents({}))
            for name in self.collection_names(db_name)
        ]

    def get_stats(self, db_name: str) -> DatabaseStats:
        """
        Collects the collection list and total document count of a database.
        Counts run one collection at a time.
        """
        collections = self.list_collections(db_name)
        total_documents = sum(c.count for c in collections)
        return DatabaseStats(
            name=db_name, collections=collections, total_documents=total_documents
        )

    def drop_database(self, db_name: str) -> None:
        self.client.drop_database(db_name)
        logger.info(f"Dropped database '{db_name}'")


def connect_to_mongodb(uri: str, settings=None, client_factory=MongoClient) -> Connection:
    """
    Opens a Connection to the given cluster.

    Args:
        uri: MongoDB connection string
        settings: Optional ToolSettings supplying the server selection timeout
        client_factory: Callable building the driver client

    Returns:
        Connection: A connected Connection
    """
    if settings is not None:
        connection = Connection.from_settings(settings, client_factory=client_factory)
    else:
        connection = Connection(client_factory=client_factory)
    connection.connect(uri)
    return connection
