"""
Streaming transfer of a database's collections from a source to a sink.

Collections are copied one at a time in the order the source lists them.
Documents are buffered in batches of BATCH_SIZE and written with one bulk
call per batch, so memory use depends on the batch size and not on the size
of the collection. Indexes are replicated once all documents of a
collection are written.

Any failure aborts the whole transfer. Nothing is rolled back: collections
and batches written before the failure stay in the sink.
"""
import time
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from pymongo.errors import AutoReconnect

from mongo_tools.config import BATCH_SIZE
from mongo_tools.errors import NotConnected, TransferFailure
from mongo_tools.helpers.logger import get_logger
from mongo_tools.models import TransferResult
from mongo_tools.transfer.index_codec import normalize_indexes
from mongo_tools.transfer.progress import ProgressCallback
from mongo_tools.transfer.sinks import DocumentSink
from mongo_tools.transfer.sources import DocumentSource

logger = get_logger(__name__)

STEP_READ = "read"
STEP_INSERT = "insert"
STEP_INDEXES = "indexes"

_END = object()


@contextmanager
def _step(collection_name: str, step: str):
    """Re-raise any failure inside the block as a TransferFailure for that step."""
    try:
        yield
    except (NotConnected, TransferFailure):
        raise
    except Exception as e:
        raise TransferFailure(collection_name, step, e) from e


class TransferEngine:
    """
    Args:
        insert_retries: How many times a batch insert that failed with
            AutoReconnect is retried. 0 (the default) fails on the first error.
        retry_delay: Seconds to wait between retries
    """

    batch_size = BATCH_SIZE

    def __init__(self, insert_retries: int = 0, retry_delay: float = 1.0):
        if insert_retries < 0:
            raise ValueError("insert_retries cannot be negative")
        self.insert_retries = insert_retries
        self.retry_delay = retry_delay

    @classmethod
    def from_settings(cls, settings) -> "TransferEngine":
        return cls(insert_retries=settings.insert_retries)

    def transfer(
        self,
        source: DocumentSource,
        sink: DocumentSink,
        on_collection: Optional[ProgressCallback] = None,
    ) -> TransferResult:
        """
        Copy every collection of source into sink.

        Args:
            source: Where documents and index descriptors are read from
            sink: Where they are written to
            on_collection: Called with (name, position, total) before each collection

        Returns:
            TransferResult: Collections and documents transferred, plus the
            output directory when the sink is a directory

        Raises:
            TransferFailure: If reading, inserting or creating indexes fails
        """
        with _step("*", STEP_READ):
            collection_names = source.collection_names()

        total = len(collection_names)
        logger.info(
            f"Transferring {total} collection(s) from {source.describe()} to {sink.describe()}"
        )

        total_documents = 0
        for position, collection_name in enumerate(collection_names, start=1):
            if on_collection is not None:
                on_collection(collection_name, position, total)
            total_documents += self._transfer_collection(source, sink, collection_name)

        return TransferResult(
            collections=total,
            documents=total_documents,
            output_path=sink.output_path,
        )

    def _transfer_collection(
        self, source: DocumentSource, sink: DocumentSink, collection_name: str
    ) -> int:
        logger.info(f"Transferring collection: {collection_name}")

        with _step(collection_name, STEP_INSERT):
            sink.open_collection(collection_name)

        try:
            copied = self._copy_documents(source, sink, collection_name)
        finally:
            sink.close_collection(collection_name)

        with _step(collection_name, STEP_READ):
            indexes = normalize_indexes(source.read_indexes(collection_name))

        with _step(collection_name, STEP_INDEXES):
            sink.write_indexes(collection_name, indexes)

        if indexes:
            logger.info(f"Replicated {len(indexes)} index(es) for {collection_name}")
        logger.info(f"Completed collection {collection_name}: {copied} document(s)")
        return copied

    def _copy_documents(
        self, source: DocumentSource, sink: DocumentSink, collection_name: str
    ) -> int:
        copied = 0
        batch: List[Dict[str, Any]] = []

        with _step(collection_name, STEP_READ):
            documents = source.iter_documents(collection_name)

        try:
            while True:
                with _step(collection_name, STEP_READ):
                    document = next(documents, _END)
                if document is _END:
                    break

                batch.append(document)
                if len(batch) >= self.batch_size:
                    self._flush(sink, collection_name, batch)
                    copied += len(batch)
                    batch = []
        finally:
            # Releases the cursor or record file when the loop is aborted
            close = getattr(documents, "close", None)
            if close is not None:
                close()

        # Final partial batch
        if batch:
            self._flush(sink, collection_name, batch)
            copied += len(batch)

        return copied

    def _flush(self, sink: DocumentSink, collection_name: str, batch: List[Dict[str, Any]]):
        attempt = 0
        while True:
            try:
                sink.insert_batch(collection_name, batch)
                logger.debug(f"Flushed {len(batch)} document(s) into {collection_name}")
                return
            except AutoReconnect as e:
                if attempt >= self.insert_retries:
                    raise TransferFailure(collection_name, STEP_INSERT, e) from e
                attempt += 1
                logger.warning(
                    f"Batch insert into {collection_name} failed ({e}), "
                    f"retry {attempt}/{self.insert_retries}"
                )
                time.sleep(self.retry_delay)
            except NotConnected:
                raise
            except Exception as e:
                raise TransferFailure(collection_name, STEP_INSERT, e) from e


def transfer(
    source: DocumentSource,
    sink: DocumentSink,
    on_collection: Optional[ProgressCallback] = None,
) -> TransferResult:
    """Transfer with the default engine: fail fast, no retries."""
    return TransferEngine().transfer(source, sink, on_collection)
