"""Exceptions raised by mongo_tools."""


class MongoToolsError(Exception):
    """Base class for every error raised by this package."""


class NotConnected(MongoToolsError):
    """An operation was attempted on a Connection that is not connected."""

    def __init__(self, message="Not connected to a cluster."):
        super().__init__(message)


class ClusterConnectionError(MongoToolsError):
    """Connecting to a cluster timed out or was rejected."""


class SourceNotFound(MongoToolsError):
    """A file-based transfer source directory does not exist."""

    def __init__(self, path):
        self.path = str(path)
        super().__init__(f"Directory not found: {self.path}")


class RecordDecodeError(MongoToolsError):
    """A line of a record file is not valid extended JSON."""

    def __init__(self, line_number, cause):
        self.line_number = line_number
        super().__init__(f"Invalid record on line {line_number}: {cause}")


class TransferFailure(MongoToolsError):
    """
    A step of a transfer failed. The transfer was aborted at that point and
    the sink keeps whatever was written before the failure.

    Attributes:
        collection: Name of the collection being transferred
        step: One of "read", "insert", "indexes"
        cause: The underlying exception
    """

    def __init__(self, collection, step, cause):
        self.collection = collection
        self.step = step
        self.cause = cause
        super().__init__(
            f"Transfer of collection '{collection}' failed during {step}: {cause}"
        )


class ClusterNotFound(MongoToolsError):
    """No cluster with the requested name is registered."""


class DuplicateClusterError(MongoToolsError):
    """A cluster with the same name is already registered."""
