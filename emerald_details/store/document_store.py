"""
Document store interface.

Per-collection documents keyed by string id. Queries support equality and
range filters, array-contains, ordering and limit. Writes support partial
merge updates, atomic increments and a compare-and-set used to claim time
slots. Subcollections are addressed by path, e.g.
``conversations/<id>/messages``.

The production deployment talks to a managed document database; the
bundled ``InMemoryDocumentStore`` implements the same contract for
development, tests and the console demo.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

_MISSING = object()
_CLOSED = object()

FILTER_OPERATORS = ("==", "!=", "<", "<=", ">", ">=", "array_contains", "in")


def get_path(doc: dict[str, Any], path: str, default: Any = _MISSING) -> Any:
    """Read a dotted field path (``time_slot.date``) from a document."""
    current: Any = doc
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def set_path(doc: dict[str, Any], path: str, value: Any) -> None:
    """Write a dotted field path, creating intermediate maps."""
    parts = path.split(".")
    current = doc
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = value


@dataclass(frozen=True)
class FieldFilter:
    """A single field predicate applied by ``DocumentStore.query``."""
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator {self.op!r}. Valid: {FILTER_OPERATORS}")

    def matches(self, doc: dict[str, Any]) -> bool:
        actual = get_path(doc, self.field)
        if actual is _MISSING:
            return False
        try:
            if self.op == "==":
                return actual == self.value
            if self.op == "!=":
                return actual != self.value
            if self.op == "<":
                return actual < self.value
            if self.op == "<=":
                return actual <= self.value
            if self.op == ">":
                return actual > self.value
            if self.op == ">=":
                return actual >= self.value
            if self.op == "array_contains":
                return isinstance(actual, list) and self.value in actual
            return actual in self.value
        except TypeError:
            # Incomparable types never match, e.g. None against a datetime
            return False


class DocumentSubscription:
    """
    Live feed of documents written to one collection.

    Iterate with ``async for``; iteration ends once ``cancel()`` is called.
    The store seeds the feed with the documents already present, in the
    requested order, then pushes each subsequent write as it happens.
    """

    def __init__(self, collection: str, on_cancel: Callable[["DocumentSubscription"], None]) -> None:
        self.collection = collection
        self._queue: asyncio.Queue = asyncio.Queue()
        self._on_cancel = on_cancel
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    def push(self, doc: dict[str, Any]) -> None:
        if not self._cancelled:
            self._queue.put_nowait(doc)

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._queue.put_nowait(_CLOSED)
        self._on_cancel(self)

    def __aiter__(self) -> "DocumentSubscription":
        return self

    async def __anext__(self) -> dict[str, Any]:
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def pending(self) -> int:
        """Number of delivered-but-unread documents."""
        return self._queue.qsize()


class DocumentStore(ABC):
    """Async document database contract used by every repository."""

    @abstractmethod
    async def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        """Create or replace a document; ``merge=True`` merges into an existing one."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Return a copy of the document, or None if it does not exist."""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Partially update an existing document (dotted paths allowed).

        Raises:
            NotFoundError: If the document does not exist.
        """

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Optional[list[FieldFilter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Return copies of all documents matching every filter."""

    @abstractmethod
    async def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> int:
        """Atomically add ``amount`` to a numeric field and return the new value."""

    @abstractmethod
    async def compare_and_set(
        self, collection: str, doc_id: str, field: str, expected: Any, new_value: Any
    ) -> bool:
        """Atomically write ``new_value`` only if the field currently equals ``expected``.

        Raises:
            NotFoundError: If the document does not exist.
        """

    @abstractmethod
    def subscribe(self, collection: str, order_by: Optional[str] = None) -> DocumentSubscription:
        """Open a live feed over a collection."""
