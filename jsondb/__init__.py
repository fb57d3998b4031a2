"""
jsondb - Embedded, file-backed JSON document store.

Data model:
    Database    -> a directory that contains Collections
    Collection  -> a <name>.json file holding an append-only list of Entries
    Entry       -> id, timestamp, operation tag and the JSON document

Architecture:
    ┌──────────┐     ┌──────────┐     ┌─────────────────┐     ┌────────────┐
    │  Shell   │────▶│ Database │────▶│ CollectionStore │────▶│ <name>.json│
    └──────────┘     └──────────┘     └───────┬─────────┘     └────────────┘
                                              │
                                    codec (entries, file format)
                                    paths (name and path guards)

Invariants:
    - Collection files are replaced atomically (temp file, fsync, rename)
    - Entries are never mutated or removed once appended
    - Collection names are validated before any path is built from them
    - One process per database directory; there is no file locking

Version: see _version.py.
"""

from ._version import __version__
from .database import Database
from .errors import (
    AlreadyExistsError,
    CorruptCollectionError,
    EmptyDocumentError,
    EncodeError,
    InvalidNameError,
    JsonDbError,
    NotFoundError,
    StorageIOError,
)
from .storage import Collection, CollectionStore, Entry, Operation

__all__ = [
    "__version__",
    "AlreadyExistsError",
    "Collection",
    "CollectionStore",
    "CorruptCollectionError",
    "Database",
    "EmptyDocumentError",
    "EncodeError",
    "Entry",
    "InvalidNameError",
    "JsonDbError",
    "NotFoundError",
    "Operation",
    "StorageIOError",
]
