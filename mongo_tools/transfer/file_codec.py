"""
Line-delimited extended JSON record files and their index sidecar files.

A collection named "users" is stored as users.jsonl (one document per line)
next to users.indexes.json (a JSON array of normalized index descriptors).
"""
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterator, List, TextIO

from bson import json_util
from bson.errors import BSONError

from mongo_tools.config import DEFAULT_JSON_MODE
from mongo_tools.errors import RecordDecodeError

RECORD_SUFFIX = ".jsonl"
SIDECAR_SUFFIX = ".indexes.json"

JSON_OPTIONS = {
    "relaxed": json_util.RELAXED_JSON_OPTIONS,
    "canonical": json_util.CANONICAL_JSON_OPTIONS,
}


def record_file_name(collection_name: str) -> str:
    return f"{collection_name}{RECORD_SUFFIX}"


def sidecar_file_name(collection_name: str) -> str:
    return f"{collection_name}{SIDECAR_SUFFIX}"


def collection_name_from_record_file(path) -> str:
    name = Path(path).name
    return name[: -len(RECORD_SUFFIX)]


def _json_options(json_mode: str):
    try:
        return JSON_OPTIONS[json_mode]
    except KeyError:
        raise ValueError(f"Unknown JSON mode '{json_mode}'") from None


def write_record(document: Dict[str, Any], json_mode: str = DEFAULT_JSON_MODE) -> str:
    """Serialize one document to a single newline-terminated extended JSON line."""
    return json_util.dumps(document, json_options=_json_options(json_mode)) + "\n"


def read_records(stream: TextIO) -> Iterator[Dict[str, Any]]:
    """
    Lazily decode documents from a record stream.

    Blank and whitespace-only lines are skipped. The first malformed line
    raises RecordDecodeError; nothing after it is read.
    """
    for line_number, line in enumerate(stream, start=1):
        text = line.strip()
        if not text:
            continue
        try:
            document = json_util.loads(text)
        except (ValueError, TypeError, BSONError) as e:
            raise RecordDecodeError(line_number, e) from e
        if not isinstance(document, dict):
            raise RecordDecodeError(line_number, "expected a JSON object")
        yield document


def write_index_sidecar(
    path, descriptors: List[Dict[str, Any]], json_mode: str = DEFAULT_JSON_MODE
) -> None:
    """
    Write index descriptors as a JSON array. The file is written to a
    temporary name first and renamed into place.
    """
    path = Path(path)
    text = json_util.dumps(descriptors, indent=2, json_options=_json_options(json_mode))
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def read_index_sidecar(path) -> List[Dict[str, Any]]:
    """Read index descriptors from a sidecar file. A missing file means no indexes."""
    path = Path(path)
    if not path.exists():
        return []
    with open(path, "r", encoding="utf-8") as f:
        descriptors = json_util.loads(f.read())
    if not isinstance(descriptors, list):
        raise ValueError(f"{path} does not contain a JSON array")
    return descriptors
