from mongo_tools.transfer.engine import TransferEngine, transfer
from mongo_tools.transfer.sinks import DocumentSink, FileDirectorySink, LiveDatabaseSink
from mongo_tools.transfer.sources import DocumentSource, FileDirectorySource, LiveDatabaseSource

__all__ = [
    "DocumentSink",
    "DocumentSource",
    "FileDirectorySink",
    "FileDirectorySource",
    "LiveDatabaseSink",
    "LiveDatabaseSource",
    "TransferEngine",
    "transfer",
]
