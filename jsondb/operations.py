"""
Execution strategies per operation kind.

Each Operation maps to at most one handler. The append/read protocol in
CollectionStore does not care which handler produced an entry; it only
stores whatever entry it is given.

Only INSERT has a handler. Whether QUERY, UPDATE and DELETE will replay
the log or do something else is undecided, so they raise
UnsupportedOperationError and never touch the collection file.

How to change safely:
    - Add a handler by registering it in HANDLERS
    - Handlers must go through CollectionStore.append; never rewrite
      existing entries
"""

from __future__ import annotations

from typing import Any, Dict, Protocol

from .errors import UnsupportedOperationError
from .storage.codec import Entry, Operation, build_entry
from .storage.collection_store import CollectionStore


class OperationHandler(Protocol):
    """Executes one operation kind against a collection."""

    def execute(self, store: CollectionStore, collection: str, document: Any) -> Entry:
        ...


class InsertHandler:
    """Append the document as a new insert entry."""

    def execute(self, store: CollectionStore, collection: str, document: Any) -> Entry:
        entry = build_entry(Operation.INSERT, document)
        store.append(collection, entry)
        return entry


HANDLERS: Dict[Operation, OperationHandler] = {
    Operation.INSERT: InsertHandler(),
}


def get_handler(operation: Operation) -> OperationHandler:
    """Look up the handler for an operation.

    Raises:
        UnsupportedOperationError: If the operation has no handler yet
    """
    handler = HANDLERS.get(operation)
    if handler is None:
        raise UnsupportedOperationError(
            f"{operation.value} is not supported yet", operation=operation.value
        )
    return handler
