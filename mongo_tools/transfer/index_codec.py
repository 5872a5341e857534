"""
Normalization of index descriptors so they can be recreated on another
collection.

Descriptors read from a live collection carry a format version ("v") and,
on older servers, the namespace they belong to ("ns"). Both are bound to
the original collection and are rejected when creating an index elsewhere.
"""
from typing import Any, Dict, Iterable, List, Optional

from pymongo import IndexModel

ID_INDEX_NAME = "_id_"
CONTEXT_FIELDS = ("v", "ns")


def is_id_index(descriptor: Dict[str, Any]) -> bool:
    return descriptor.get("name") == ID_INDEX_NAME


def normalize_index(descriptor: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Normalize one index descriptor.

    Args:
        descriptor: Raw descriptor as returned by list_indexes() or read from a sidecar file

    Returns:
        None for the implicit _id index, otherwise a copy without the version
        and namespace fields. Every other field is kept as is.
    """
    if is_id_index(descriptor):
        return None
    return {k: v for k, v in descriptor.items() if k not in CONTEXT_FIELDS}


def normalize_indexes(descriptors: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    normalized = []
    for descriptor in descriptors:
        index = normalize_index(descriptor)
        if index is not None:
            normalized.append(index)
    return normalized


def to_index_model(descriptor: Dict[str, Any]) -> IndexModel:
    """Build a pymongo IndexModel from a normalized descriptor, keeping key order."""
    options = {k: v for k, v in descriptor.items() if k != "key"}
    keys = list(descriptor["key"].items())
    return IndexModel(keys, **options)


def to_index_models(descriptors: Iterable[Dict[str, Any]]) -> List[IndexModel]:
    return [to_index_model(d) for d in descriptors]
