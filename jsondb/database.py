"""
Database handle for jsondb.

A database is a directory; each collection is a <name>.json file directly
inside it. Database validates and forwards per-collection calls to a
CollectionStore bound to that directory.

Invariants:
    - initialize never reuses an existing path (no silent overwrite)
    - load never creates anything
    - Collection contents are only checked when a collection is accessed
    - A Database holds no global state; any number may coexist

Example:
    >>> db = Database.initialize("./mydb")
    >>> db.create_collection("users")
    >>> db.insert_record("users", {"name": "Ada"})
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from .errors import AlreadyExistsError, EmptyDocumentError, NotFoundError, StorageIOError
from .operations import get_handler
from .storage.codec import Collection, Entry, Operation
from .storage.collection_store import CollectionStore
from .storage.paths import FileKind, path_exists

logger = logging.getLogger(__name__)


def _is_empty_document(document: Any) -> bool:
    return document is None or (isinstance(document, (dict, list)) and not document)


class Database:
    """Handle bound to one database directory.

    Use Database.initialize or Database.load rather than the constructor.

    Attributes:
        base_dir: Database directory
        store: CollectionStore for the directory
    """

    def __init__(
        self,
        base_dir: str | os.PathLike[str],
        fsync: bool = True,
        indent: int | None = 2,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.store = CollectionStore(self.base_dir, fsync=fsync, indent=indent)

    def __repr__(self) -> str:
        return f"Database({str(self.base_dir)!r})"

    @classmethod
    def initialize(cls, base_dir: str | os.PathLike[str], **options: Any) -> Database:
        """Create a new database directory, including missing parents.

        Args:
            base_dir: Directory to create
            **options: fsync/indent passed to the CollectionStore

        Returns:
            Database bound to the new directory

        Raises:
            AlreadyExistsError: If anything already exists at base_dir
            StorageIOError: If the directory cannot be created
        """
        exists, kind = path_exists(base_dir)
        if exists:
            raise AlreadyExistsError(
                f"database with name {os.fspath(base_dir)!r} already exists. "
                "Use 'load' command to open it",
                path=os.fspath(base_dir),
                conflict=kind.value if kind else FileKind.FILE.value,
            )

        try:
            Path(base_dir).mkdir(parents=True)
        except FileExistsError as e:
            raise AlreadyExistsError(
                f"database with name {os.fspath(base_dir)!r} already exists",
                path=os.fspath(base_dir),
                conflict=FileKind.DIRECTORY.value,
            ) from e
        except OSError as e:
            raise StorageIOError(
                f"failed to create database directory: {e}", path=os.fspath(base_dir)
            ) from e

        logger.info("Initialized database", extra={"base_dir": os.fspath(base_dir)})
        return cls(base_dir, **options)

    @classmethod
    def load(cls, base_dir: str | os.PathLike[str], **options: Any) -> Database:
        """Attach to an existing database directory.

        Raises:
            NotFoundError: If base_dir doesn't exist or is not a directory
            StorageIOError: If base_dir cannot be inspected
        """
        exists, kind = path_exists(base_dir)
        if not exists:
            raise NotFoundError(
                f"database with path {os.fspath(base_dir)!r} does not exist",
                resource_type="database",
                resource_id=os.fspath(base_dir),
            )
        if kind is not FileKind.DIRECTORY:
            raise NotFoundError(
                f"database path {os.fspath(base_dir)!r} is not a directory",
                resource_type="database",
                resource_id=os.fspath(base_dir),
            )

        logger.info("Loaded database", extra={"base_dir": os.fspath(base_dir)})
        return cls(base_dir, **options)

    def create_collection(self, name: str) -> Path:
        """Create an empty collection. See CollectionStore.create."""
        return self.store.create(name)

    def insert_record(self, collection_name: str, document: Any) -> Entry:
        """Insert a document as a new entry.

        Args:
            collection_name: Target collection
            document: Non-empty JSON value

        Returns:
            The appended Entry

        Raises:
            EmptyDocumentError: If document is None or an empty object/array
            InvalidNameError, NotFoundError, CorruptCollectionError,
            EncodeError, StorageIOError: From the store
        """
        if _is_empty_document(document):
            raise EmptyDocumentError("data cannot be empty", operation=Operation.INSERT.value)
        return self.execute(Operation.INSERT, collection_name, document)

    def execute(self, operation: Operation, collection_name: str, document: Any = None) -> Entry:
        """Run an operation through its registered handler.

        Raises:
            UnsupportedOperationError: If the operation has no handler yet
        """
        handler = get_handler(operation)
        return handler.execute(self.store, collection_name, document)

    def read_collection(self, name: str) -> Collection:
        """Read every entry of a collection. See CollectionStore.read_all."""
        return self.store.read_all(name)

    def list_collections(self) -> list[str]:
        return self.store.list_collections()
