"""In-process implementation of the document store contract."""

import asyncio
import copy
import logging
from collections import defaultdict
from typing import Any, Optional

from emerald_details.errors import NotFoundError, StoreError
from emerald_details.store.document_store import (
    DocumentStore,
    DocumentSubscription,
    FieldFilter,
    get_path,
    set_path,
)

logger = logging.getLogger(__name__)


def _sort_key(field: str):
    def key(doc: dict[str, Any]) -> tuple[bool, Any]:
        value = get_path(doc, field, None)
        return (value is not None, value)
    return key


def _deep_merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed document store.

    Documents are deep-copied on every read and write so callers never
    share mutable state with the store. Increment and compare-and-set run
    under a single asyncio lock.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._subscribers: dict[str, list[DocumentSubscription]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        if not doc_id:
            raise StoreError(f"Document id is required for writes to '{collection}'")
        docs = self._collections[collection]
        if merge and doc_id in docs:
            _deep_merge(docs[doc_id], data)
        else:
            docs[doc_id] = copy.deepcopy(data)
        logger.debug("Stored %s/%s (merge=%s)", collection, doc_id, merge)
        self._notify(collection, docs[doc_id])

    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        doc = self._collections[collection].get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        doc = self._require(collection, doc_id)
        for path, value in fields.items():
            set_path(doc, path, copy.deepcopy(value))
        logger.debug("Updated %s/%s fields=%s", collection, doc_id, sorted(fields))

    async def delete(self, collection: str, doc_id: str) -> bool:
        existed = self._collections[collection].pop(doc_id, None) is not None
        if existed:
            logger.debug("Deleted %s/%s", collection, doc_id)
        return existed

    async def query(
        self,
        collection: str,
        filters: Optional[list[FieldFilter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        filters = filters or []
        matched = [
            doc for doc in self._collections[collection].values()
            if all(f.matches(doc) for f in filters)
        ]
        if order_by:
            matched.sort(key=_sort_key(order_by), reverse=descending)
        if limit is not None:
            matched = matched[:limit]
        return copy.deepcopy(matched)

    async def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> int:
        async with self._lock:
            doc = self._require(collection, doc_id)
            current = get_path(doc, field, 0) or 0
            set_path(doc, field, current + amount)
            return current + amount

    async def compare_and_set(
        self, collection: str, doc_id: str, field: str, expected: Any, new_value: Any
    ) -> bool:
        async with self._lock:
            doc = self._require(collection, doc_id)
            if get_path(doc, field, None) != expected:
                return False
            set_path(doc, field, copy.deepcopy(new_value))
            return True

    def subscribe(self, collection: str, order_by: Optional[str] = None) -> DocumentSubscription:
        subscription = DocumentSubscription(collection, self._unsubscribe)
        existing = list(self._collections[collection].values())
        if order_by:
            existing.sort(key=_sort_key(order_by))
        for doc in existing:
            subscription.push(copy.deepcopy(doc))
        self._subscribers[collection].append(subscription)
        logger.debug("Subscription opened on %s (%d existing)", collection, len(existing))
        return subscription

    def subscriber_count(self, collection: str) -> int:
        return len(self._subscribers.get(collection, []))

    def reset(self) -> None:
        """Drop all data and cancel every subscription. Used by test fixtures."""
        for subs in list(self._subscribers.values()):
            for sub in list(subs):
                sub.cancel()
        self._collections.clear()
        self._subscribers.clear()

    def _require(self, collection: str, doc_id: str) -> dict[str, Any]:
        doc = self._collections[collection].get(doc_id)
        if doc is None:
            raise NotFoundError(f"Document {collection}/{doc_id} not found")
        return doc

    def _notify(self, collection: str, doc: dict[str, Any]) -> None:
        for subscription in list(self._subscribers.get(collection, [])):
            subscription.push(copy.deepcopy(doc))

    def _unsubscribe(self, subscription: DocumentSubscription) -> None:
        subs = self._subscribers.get(subscription.collection, [])
        if subscription in subs:
            subs.remove(subscription)
        logger.debug("Subscription closed on %s", subscription.collection)
