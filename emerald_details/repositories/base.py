"""
Generic collection repository mapping pydantic records to store documents.

Every entity repository subclasses ``Repository`` and adds the filtered
queries its callers need. Reads always go to the store; repositories keep
no cached copies of query results.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Generic, Optional, TypeVar

from pydantic import BaseModel

from emerald_details.errors import NotFoundError
from emerald_details.store.document_store import DocumentStore, FieldFilter

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class Repository(Generic[ModelT]):
    """CRUD and filtered listing over one collection."""

    collection: ClassVar[str] = ""
    model: ClassVar[type[BaseModel]]

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    @property
    def store(self) -> DocumentStore:
        return self._store

    def _collection(self) -> str:
        return self.collection

    def doc_id(self, record: ModelT) -> str:
        return record.id  # type: ignore[attr-defined]

    def to_doc(self, record: ModelT) -> dict[str, Any]:
        return record.model_dump()

    def from_doc(self, doc: dict[str, Any]) -> ModelT:
        return self.model.model_validate(doc)  # type: ignore[return-value]

    async def create(self, record: ModelT) -> ModelT:
        await self._store.set(self._collection(), self.doc_id(record), self.to_doc(record))
        logger.debug("Created %s/%s", self._collection(), self.doc_id(record))
        return record

    async def save(self, record: ModelT) -> ModelT:
        """Merge the full record into its document (creating it if needed)."""
        await self._store.set(
            self._collection(), self.doc_id(record), self.to_doc(record), merge=True
        )
        return record

    async def get(self, doc_id: str) -> Optional[ModelT]:
        doc = await self._store.get(self._collection(), doc_id)
        return self.from_doc(doc) if doc is not None else None

    async def require(self, doc_id: str) -> ModelT:
        record = await self.get(doc_id)
        if record is None:
            raise NotFoundError(f"{self.model.__name__} {doc_id} not found")
        return record

    async def find(
        self,
        filters: Optional[list[FieldFilter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[ModelT]:
        docs = await self._store.query(
            self._collection(), filters, order_by=order_by, descending=descending, limit=limit
        )
        return [self.from_doc(doc) for doc in docs]

    async def update_fields(self, doc_id: str, fields: dict[str, Any]) -> None:
        await self._store.update(self._collection(), doc_id, fields)

    async def delete(self, doc_id: str) -> bool:
        return await self._store.delete(self._collection(), doc_id)
