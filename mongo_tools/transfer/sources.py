"""Places documents are read from: a live database or a dump directory."""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterator, List

from mongo_tools.errors import SourceNotFound
from mongo_tools.transfer import file_codec


class DocumentSource(ABC):
    """Enumerates collections and yields their documents and index descriptors."""

    @abstractmethod
    def describe(self) -> str:
        ...

    @abstractmethod
    def collection_names(self) -> List[str]:
        """Collection names in the order they will be transferred."""

    @abstractmethod
    def iter_documents(self, collection_name: str) -> Iterator[Dict[str, Any]]:
        """Lazy sequence of documents. Each call starts from the beginning."""

    @abstractmethod
    def read_indexes(self, collection_name: str) -> List[Dict[str, Any]]:
        """Raw index descriptors of a collection."""


class LiveDatabaseSource(DocumentSource):
    def __init__(self, connection, db_name: str):
        self.connection = connection
        self.db_name = db_name

    def describe(self) -> str:
        return f"database '{self.db_name}'"

    def collection_names(self) -> List[str]:
        return self.connection.collection_names(self.db_name)

    def iter_documents(self, collection_name: str) -> Iterator[Dict[str, Any]]:
        return self.connection.database(self.db_name)[collection_name].find({})

    def read_indexes(self, collection_name: str) -> List[Dict[str, Any]]:
        collection = self.connection.database(self.db_name)[collection_name]
        return [dict(index) for index in collection.list_indexes()]


class FileDirectorySource(DocumentSource):
    """
    A directory of <collection>.jsonl record files, optionally each with a
    <collection>.indexes.json sidecar.

    Raises:
        SourceNotFound: If the directory does not exist
    """

    def __init__(self, directory):
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise SourceNotFound(self.directory)

    def describe(self) -> str:
        return f"directory '{self.directory}'"

    def collection_names(self) -> List[str]:
        record_files = sorted(
            p.name
            for p in self.directory.iterdir()
            if p.is_file() and p.name.endswith(file_codec.RECORD_SUFFIX)
        )
        return [file_codec.collection_name_from_record_file(name) for name in record_files]

    def iter_documents(self, collection_name: str) -> Iterator[Dict[str, Any]]:
        path = self.directory / file_codec.record_file_name(collection_name)
        with open(path, "r", encoding="utf-8") as f:
            yield from file_codec.read_records(f)

    def read_indexes(self, collection_name: str) -> List[Dict[str, Any]]:
        return file_codec.read_index_sidecar(
            self.directory / file_codec.sidecar_file_name(collection_name)
        )
