"""
Filesystem path guards for jsondb.

Two checks run before any path is touched:
- validate_name: is a collection name safe to use as one path segment
- path_exists: does a path exist, and is it a file or a directory

Invariants:
    - A valid name never escapes the database directory
    - "Not found" is the only stat failure reported as non-existence;
      permission and other errors are raised
"""

from __future__ import annotations

import os
import re
import stat
from enum import Enum

from ..errors import InvalidNameError, StorageIOError

_SAFE_NAME = re.compile(r"[A-Za-z0-9_-]+")


class FileKind(Enum):
    """Kind of filesystem object found at a path."""

    FILE = "file"
    DIRECTORY = "directory"


def path_exists(path: str | os.PathLike[str]) -> tuple[bool, FileKind | None]:
    """Stat a path.

    Args:
        path: Path to check

    Returns:
        (exists, kind). kind is None when the path does not exist.

    Raises:
        StorageIOError: If the stat fails for any reason other than the
            path being absent.
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return False, None
    except OSError as e:
        raise StorageIOError(f"cannot stat {os.fspath(path)!r}: {e}", path=os.fspath(path)) from e

    if stat.S_ISDIR(st.st_mode):
        return True, FileKind.DIRECTORY
    return True, FileKind.FILE


def validate_name(name: str) -> None:
    """Check that a collection name is a safe single path segment.

    Raises:
        InvalidNameError: If the name is empty, contains a separator or
            '..', or has characters outside [A-Za-z0-9_-].
    """
    if not name:
        raise InvalidNameError("name is empty", name)
    if os.sep in name or "/" in name or (os.altsep and os.altsep in name) or ".." in name:
        raise InvalidNameError(f"invalid characters in name {name!r}", name)
    if not _SAFE_NAME.fullmatch(name):
        raise InvalidNameError(f"name {name!r} must match [A-Za-z0-9_-]+", name)
