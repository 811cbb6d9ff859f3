from emerald_details.store.document_store import (
    DocumentStore,
    DocumentSubscription,
    FieldFilter,
)
from emerald_details.store.memory import InMemoryDocumentStore

__all__ = ["DocumentStore", "DocumentSubscription", "FieldFilter", "InMemoryDocumentStore"]
