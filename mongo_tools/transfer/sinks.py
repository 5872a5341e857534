"""Places documents are written to: a live database or a dump directory."""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from pymongo.errors import CollectionInvalid

from mongo_tools.config import DEFAULT_JSON_MODE
from mongo_tools.transfer import file_codec
from mongo_tools.transfer.index_codec import to_index_models


class DocumentSink(ABC):
    """
    Receives one collection at a time: open_collection(), any number of
    insert_batch() calls, close_collection(), then write_indexes().
    """

    output_path: Optional[str] = None

    @abstractmethod
    def describe(self) -> str:
        ...

    @abstractmethod
    def open_collection(self, collection_name: str) -> None:
        ...

    @abstractmethod
    def insert_batch(self, collection_name: str, documents: List[Dict[str, Any]]) -> None:
        ...

    def close_collection(self, collection_name: str) -> None:
        pass

    @abstractmethod
    def write_indexes(self, collection_name: str, descriptors: List[Dict[str, Any]]) -> None:
        """Persist already normalized index descriptors."""


class LiveDatabaseSink(DocumentSink):
    def __init__(self, connection, db_name: str):
        self.connection = connection
        self.db_name = db_name

    def describe(self) -> str:
        return f"database '{self.db_name}'"

    def open_collection(self, collection_name: str) -> None:
        # Create it up front so empty collections exist on the target too
        try:
            self.connection.database(self.db_name).create_collection(collection_name)
        except CollectionInvalid:
            # Already there, kept when the target is not replaced
            pass

    def insert_batch(self, collection_name: str, documents: List[Dict[str, Any]]) -> None:
        self.connection.database(self.db_name)[collection_name].insert_many(documents)

    def write_indexes(self, collection_name: str, descriptors: List[Dict[str, Any]]) -> None:
        if not descriptors:
            return
        collection = self.connection.database(self.db_name)[collection_name]
        collection.create_indexes(to_index_models(descriptors))


class FileDirectorySink(DocumentSink):
    """Writes <collection>.jsonl and <collection>.indexes.json into a directory."""

    def __init__(self, directory, json_mode: str = DEFAULT_JSON_MODE):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.output_path = str(self.directory)
        self.json_mode = json_mode
        self._open_files = {}

    def describe(self) -> str:
        return f"directory '{self.directory}'"

    def open_collection(self, collection_name: str) -> None:
        path = self.directory / file_codec.record_file_name(collection_name)
        self._open_files[collection_name] = open(path, "w", encoding="utf-8")

    def insert_batch(self, collection_name: str, documents: List[Dict[str, Any]]) -> None:
        f = self._open_files[collection_name]
        f.writelines(file_codec.write_record(doc, self.json_mode) for doc in documents)

    def close_collection(self, collection_name: str) -> None:
        f = self._open_files.pop(collection_name, None)
        if f is not None:
            f.close()

    def write_indexes(self, collection_name: str, descriptors: List[Dict[str, Any]]) -> None:
        # Always written, an empty array records that there are no indexes
        file_codec.write_index_sidecar(
            self.directory / file_codec.sidecar_file_name(collection_name),
            descriptors,
            self.json_mode,
        )
