"""
Entry and collection codec for jsondb.

A collection file is one JSON object holding an append-only log:

    {
      "entries": [
        {"_id": "<32 hex>", "ts": <unix ns>, "op": "insert", "doc": {...}},
        ...
      ]
    }

Invariants:
    - Field names _id, ts, op, doc are fixed and round-trip exactly
    - "entries" is always written, even when empty
    - Zero-byte input decodes to an empty collection, not an error
    - A decoded collection never has a None entries list

How to change safely:
    - New entry fields must be optional on decode so old files still load
    - Never rename the on-disk field names
"""

from __future__ import annotations

import json
import secrets
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors import CorruptCollectionError, EmptyDocumentError, EncodeError

ENTRIES_FIELD = "entries"


class Operation(Enum):
    """Kind of action an entry records.

    Only INSERT is produced today. QUERY, UPDATE and DELETE are reserved
    for the execution layer in jsondb.operations.
    """

    INSERT = "insert"
    QUERY = "query"
    DELETE = "delete"
    UPDATE = "update"

    @property
    def requires_document(self) -> bool:
        return self is Operation.INSERT


@dataclass(frozen=True)
class Entry:
    """One immutable record in a collection log.

    Attributes:
        id: 32 lowercase hex chars, 128 random bits
        ts: Creation time in Unix nanoseconds (display ordering only)
        op: Operation that produced the entry
        doc: JSON payload, None for operations without one
    """

    id: str
    ts: int
    op: Operation
    doc: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the on-disk dictionary form."""
        data: Dict[str, Any] = {"_id": self.id, "ts": self.ts, "op": self.op.value}
        if self.doc is not None:
            data["doc"] = self.doc
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Entry:
        """Create from the on-disk dictionary form.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has the wrong type or op is unknown
        """
        entry_id = data["_id"]
        ts = data["ts"]
        if not isinstance(entry_id, str):
            raise ValueError(f"_id must be a string, got {type(entry_id).__name__}")
        if not isinstance(ts, int) or isinstance(ts, bool):
            raise ValueError(f"ts must be an integer, got {type(ts).__name__}")
        return cls(id=entry_id, ts=ts, op=Operation(data["op"]), doc=data.get("doc"))


@dataclass
class Collection:
    """In-memory form of a collection file: entries in append order."""

    entries: List[Entry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)


def new_entry_id() -> str:
    """Return a fresh 128-bit random id, hex encoded."""
    return secrets.token_hex(16)


def build_entry(operation: Operation, document: Any = None) -> Entry:
    """Turn a caller's document into a log entry.

    The document is serialized and parsed back, so the entry owns an
    independent copy in canonical JSON form.

    Args:
        operation: Operation tag for the entry
        document: Any JSON-serializable value, or None

    Returns:
        New Entry with a fresh id and the current timestamp

    Raises:
        EmptyDocumentError: If the operation needs a document and none was given
        EncodeError: If the document is not JSON-serializable
    """
    if document is None:
        if operation.requires_document:
            raise EmptyDocumentError(
                f"{operation.value} requires a document", operation=operation.value
            )
        doc = None
    else:
        try:
            payload = json.dumps(document, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise EncodeError(f"document cannot be encoded as JSON: {e}") from e
        doc = json.loads(payload)

    return Entry(id=new_entry_id(), ts=time.time_ns(), op=operation, doc=doc)


def encode_collection(collection: Collection, indent: Optional[int] = 2) -> bytes:
    """Serialize a collection to pretty-printed UTF-8 JSON.

    Raises:
        EncodeError: If an entry document is not JSON-serializable
    """
    obj = {ENTRIES_FIELD: [entry.to_dict() for entry in collection.entries]}
    try:
        text = json.dumps(obj, indent=indent, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodeError(f"collection cannot be encoded as JSON: {e}") from e
    return (text + "\n").encode("utf-8")


def decode_collection(data: bytes, source: Optional[str] = None) -> Collection:
    """Parse collection file bytes.

    Args:
        data: Raw file content
        source: Path used in error messages

    Returns:
        Decoded Collection. Empty input gives an empty Collection.

    Raises:
        CorruptCollectionError: If the content is not a valid collection
    """
    where = f" in {source}" if source else ""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CorruptCollectionError(f"collection is not valid UTF-8{where}: {e}", path=source) from e

    # A created-but-never-written file is a legitimate empty collection
    if not text.strip():
        return Collection()

    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptCollectionError(f"decode collection JSON{where}: {e}", path=source) from e

    if not isinstance(obj, dict):
        raise CorruptCollectionError(f"collection must be a JSON object{where}", path=source)

    raw_entries = obj.get(ENTRIES_FIELD)
    if raw_entries is None:
        return Collection()
    if not isinstance(raw_entries, list):
        raise CorruptCollectionError(f"'{ENTRIES_FIELD}' must be an array{where}", path=source)

    entries = []
    for index, raw in enumerate(raw_entries):
        if not isinstance(raw, dict):
            raise CorruptCollectionError(f"entry {index} is not an object{where}", path=source)
        try:
            entries.append(Entry.from_dict(raw))
        except KeyError as e:
            raise CorruptCollectionError(
                f"entry {index} is missing field {e}{where}", path=source
            ) from e
        except ValueError as e:
            raise CorruptCollectionError(f"entry {index} is invalid{where}: {e}", path=source) from e

    return Collection(entries=entries)
