"""
Storage layer for jsondb.

- paths: name validation and existence checks
- codec: entries and the collection file format
- collection_store: create/read/append of collection files
"""

from .codec import (
    Collection,
    Entry,
    Operation,
    build_entry,
    decode_collection,
    encode_collection,
)
from .collection_store import COLLECTION_SUFFIX, CollectionStore
from .paths import FileKind, path_exists, validate_name

__all__ = [
    "COLLECTION_SUFFIX",
    "Collection",
    "CollectionStore",
    "Entry",
    "FileKind",
    "Operation",
    "build_entry",
    "decode_collection",
    "encode_collection",
    "path_exists",
    "validate_name",
]
