"""
Collection file store for jsondb.

This module owns the collection files inside one database directory:
- create: write a fresh, empty collection file
- read_all: load and decode a whole collection
- append: add one entry using an atomic replace

Invariants:
    - Every collection name is validated before a path is built from it
    - create never overwrites an existing file or directory
    - A collection file is always either the previous complete state or
      the new complete state, never a partial write
    - A corrupt collection is never treated as empty
    - No file handle outlives the call that opened it

How to change safely:
    - Keep the temp file in the same directory as the target so the
      rename stays on one filesystem
    - Do not add retries here; callers decide
    - This store assumes a single writer process per database directory
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..errors import (
    AlreadyExistsError,
    CorruptCollectionError,
    NotFoundError,
    StorageIOError,
)
from .codec import Collection, Entry, decode_collection, encode_collection
from .paths import FileKind, path_exists, validate_name

logger = logging.getLogger(__name__)

COLLECTION_SUFFIX = ".json"
TEMP_SUFFIX = ".tmp"


class CollectionStore:
    """One-file-per-collection JSON store rooted at a database directory.

    Example:
        >>> store = CollectionStore("./mydb")
        >>> store.create("users")
        >>> store.append("users", build_entry(Operation.INSERT, {"name": "Ada"}))
        >>> len(store.read_all("users"))
        1
    """

    def __init__(
        self,
        base_dir: str | os.PathLike[str],
        fsync: bool = True,
        indent: int | None = 2,
    ) -> None:
        """Initialize the store.

        Args:
            base_dir: Database directory holding the collection files
            fsync: Force temp files to stable storage before rename
            indent: JSON indentation for collection files
        """
        self.base_dir = Path(base_dir)
        self.fsync = fsync
        self.indent = indent

    def path_for(self, name: str) -> Path:
        """Get the collection file path for a validated name."""
        validate_name(name)
        return self.base_dir / f"{name}{COLLECTION_SUFFIX}"

    def create(self, name: str) -> Path:
        """Create an empty collection file.

        Args:
            name: Collection name

        Returns:
            Path of the new collection file

        Raises:
            InvalidNameError: If the name is unsafe
            AlreadyExistsError: If a file or directory is already at the path
            StorageIOError: On any other filesystem failure
        """
        path = self.path_for(name)

        exists, kind = path_exists(path)
        if exists:
            if kind is FileKind.DIRECTORY:
                raise AlreadyExistsError(
                    f"a directory exists at {str(path)!r}; cannot create collection with that name",
                    path=str(path),
                    conflict=FileKind.DIRECTORY.value,
                )
            raise AlreadyExistsError(
                f"collection {name!r} already exists",
                path=str(path),
                conflict=FileKind.FILE.value,
            )

        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(
                f"failed to create database directory: {e}", path=str(self.base_dir)
            ) from e

        content = encode_collection(Collection(), indent=self.indent)

        # Exclusive create: a file that appeared since the check is not overwritten
        try:
            f = open(path, "xb")
        except FileExistsError as e:
            raise AlreadyExistsError(
                f"collection {name!r} already exists",
                path=str(path),
                conflict=FileKind.FILE.value,
            ) from e
        except OSError as e:
            raise StorageIOError(
                f"failed to create collection file {str(path)!r}: {e}", path=str(path)
            ) from e

        try:
            with f:
                f.write(content)
                f.flush()
                if self.fsync:
                    os.fsync(f.fileno())
        except OSError as e:
            self._remove_quietly(path)
            raise StorageIOError(
                f"failed to write initial collection: {e}", path=str(path)
            ) from e

        logger.info("Created collection", extra={"collection": name, "path": str(path)})
        return path

    def read_all(self, name: str) -> Collection:
        """Read every entry of a collection.

        The whole file is read into memory.

        Raises:
            InvalidNameError: If the name is unsafe
            NotFoundError: If the collection file doesn't exist
            CorruptCollectionError: If the file content is malformed
            StorageIOError: On any other filesystem failure
        """
        path = self.path_for(name)

        try:
            with open(path, "rb") as f:
                data = f.read()
        except FileNotFoundError as e:
            raise NotFoundError(
                f"collection {name!r} does not exist",
                resource_type="collection",
                resource_id=name,
            ) from e
        except OSError as e:
            raise StorageIOError(
                f"failed to read collection {name!r}: {e}", path=str(path)
            ) from e

        collection = decode_collection(data, source=str(path))
        logger.debug(
            "Read collection",
            extra={"collection": name, "entries": len(collection.entries)},
        )
        return collection

    def append(self, name: str, entry: Entry) -> None:
        """Append one entry to a collection, all-or-nothing.

        The updated collection is written to a temp file next to the
        target, flushed to disk, and renamed over the target. On failure
        the temp file is removed and the original file is untouched.

        Args:
            name: Collection name
            entry: Entry to append

        Raises:
            InvalidNameError: If the name is unsafe
            NotFoundError: If the collection doesn't exist
            CorruptCollectionError: If the existing file is malformed
            EncodeError: If the updated collection cannot be serialized
            StorageIOError: If writing, syncing or renaming fails
        """
        path = self.path_for(name)

        try:
            collection = self.read_all(name)
        except CorruptCollectionError:
            logger.error("Refusing to append to corrupt collection", extra={"collection": name})
            raise

        collection.entries.append(entry)
        content = encode_collection(collection, indent=self.indent)

        tmp_path = path.with_name(path.name + TEMP_SUFFIX)
        try:
            self._replace_atomically(path, tmp_path, content)
        except OSError as e:
            self._remove_quietly(tmp_path)
            raise StorageIOError(
                f"failed to write updated collection {name!r}: {e}", path=str(path)
            ) from e
        except BaseException:
            self._remove_quietly(tmp_path)
            raise

        logger.info(
            "Appended entry",
            extra={
                "collection": name,
                "entry_id": entry.id,
                "op": entry.op.value,
                "entries": len(collection.entries),
            },
        )

    def list_collections(self) -> list[str]:
        """List collection names in the database directory, sorted.

        Raises:
            StorageIOError: If the directory cannot be listed
        """
        try:
            children = list(self.base_dir.iterdir())
        except OSError as e:
            raise StorageIOError(
                f"failed to list database directory: {e}", path=str(self.base_dir)
            ) from e

        return sorted(
            child.name[: -len(COLLECTION_SUFFIX)]
            for child in children
            if child.name.endswith(COLLECTION_SUFFIX) and child.is_file()
        )

    def _replace_atomically(self, path: Path, tmp_path: Path, content: bytes) -> None:
        """Write content to tmp_path, sync, close, rename over path."""
        with open(tmp_path, "wb") as f:
            f.write(content)
            f.flush()
            if self.fsync:
                os.fsync(f.fileno())
        logger.debug("Wrote temp collection", extra={"path": str(tmp_path), "bytes": len(content)})

        os.replace(tmp_path, path)
        logger.debug("Renamed temp collection", extra={"src": str(tmp_path), "dst": str(path)})

    def _remove_quietly(self, path: Path) -> None:
        """Best-effort removal; failures are only logged."""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(
                "Failed to remove file",
                extra={"path": str(path), "error": str(e)},
            )
