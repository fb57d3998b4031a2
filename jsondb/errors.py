"""
Error types for jsondb.

This module defines all exception types raised by the storage layer:
- JsonDbError: Base exception
- InvalidNameError: Unsafe collection name
- AlreadyExistsError: Database or collection target already present
- NotFoundError: Database or collection absent
- CorruptCollectionError: Collection file cannot be decoded
- EncodeError: Document cannot be serialized to JSON
- EmptyDocumentError: Required document payload missing
- StorageIOError: Any other filesystem failure

Invariants:
    - All errors inherit from JsonDbError
    - Errors carry a stable code and a details dict
    - Filesystem errors keep the original OSError as __cause__
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class JsonDbError(Exception):
    """Base exception for all jsondb errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "JSONDB_ERROR"
        self.details = details or {}


class InvalidNameError(JsonDbError):
    """Name is not safe to use as a path segment.

    Raised when:
    - Name is empty
    - Name contains a path separator or '..'
    - Name contains characters outside [A-Za-z0-9_-]
    """

    def __init__(self, message: str, name: str) -> None:
        super().__init__(message, code="INVALID_NAME", details={"name": name})
        self.name = name


class AlreadyExistsError(JsonDbError):
    """Target of init or create is already present.

    Attributes:
        path: Filesystem path that already exists
        conflict: "file" or "directory", the kind of object found there
    """

    def __init__(self, message: str, path: str, conflict: str) -> None:
        super().__init__(
            message,
            code="ALREADY_EXISTS",
            details={"path": path, "conflict": conflict},
        )
        self.path = path
        self.conflict = conflict


class NotFoundError(JsonDbError):
    """Resource not found.

    Raised when:
    - Database directory doesn't exist
    - Collection file doesn't exist
    """

    def __init__(
        self,
        message: str,
        resource_type: str,
        resource_id: str,
    ) -> None:
        super().__init__(
            message,
            code="NOT_FOUND",
            details={
                "resource_type": resource_type,
                "resource_id": resource_id,
            },
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class CorruptCollectionError(JsonDbError):
    """Collection file exists but does not hold a valid collection."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message, code="CORRUPT_COLLECTION", details={"path": path})
        self.path = path


class EncodeError(JsonDbError):
    """Document cannot be serialized to JSON."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="ENCODE_ERROR")


class EmptyDocumentError(JsonDbError):
    """Operation requires a document but none was given."""

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message, code="EMPTY_DOCUMENT", details={"operation": operation})
        self.operation = operation


class StorageIOError(JsonDbError):
    """Filesystem operation failed (permission denied, disk full, ...)."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message, code="IO_ERROR", details={"path": path})
        self.path = path


class NoDatabaseLoadedError(JsonDbError):
    """A command needs a database but none is loaded."""

    def __init__(self, message: str = "no database loaded. Use 'init' or 'load' command first") -> None:
        super().__init__(message, code="NO_DATABASE")


class UnsupportedOperationError(JsonDbError):
    """Operation kind has no execution strategy yet."""

    def __init__(self, message: str, operation: str) -> None:
        super().__init__(
            message,
            code="UNSUPPORTED_OPERATION",
            details={"operation": operation},
        )
        self.operation = operation
