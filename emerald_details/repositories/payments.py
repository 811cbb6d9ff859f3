"""Saved payment methods (per customer) and payment transactions."""

import logging

from emerald_details.repositories.base import Repository
from emerald_details.schemas.appointment_schema import PaymentStatus
from emerald_details.schemas.payment_schema import PaymentMethod, Transaction
from emerald_details.store.document_store import FieldFilter

logger = logging.getLogger(__name__)


class TransactionRepository(Repository[Transaction]):
    collection = "payments"
    model = Transaction

    async def for_customer(self, customer_id: str) -> list[Transaction]:
        return await self.find(
            [FieldFilter("customer_id", "==", customer_id)],
            order_by="created_at", descending=True,
        )

    async def for_appointment(self, appointment_id: str) -> list[Transaction]:
        return await self.find([FieldFilter("appointment_id", "==", appointment_id)])

    async def mark_refunded(self, transaction_id: str) -> None:
        await self.update_fields(transaction_id, {"status": PaymentStatus.REFUNDED})


class PaymentMethodRepository:
    """Payment methods live in a per-customer subcollection."""

    def __init__(self, store) -> None:
        self._store = store

    @staticmethod
    def _collection(customer_id: str) -> str:
        return f"users/{customer_id}/payment_methods"

    async def for_customer(self, customer_id: str) -> list[PaymentMethod]:
        docs = await self._store.query(self._collection(customer_id))
        return [PaymentMethod.model_validate(doc) for doc in docs]

    async def add(self, customer_id: str, method: PaymentMethod) -> PaymentMethod:
        """Save a method. The first one saved, or one marked default, becomes the only default."""
        existing = await self.for_customer(customer_id)
        if not existing:
            method = method.model_copy(update={"is_default": True})
        if method.is_default:
            for other in existing:
                if other.is_default:
                    await self._store.update(
                        self._collection(customer_id), other.id, {"is_default": False}
                    )
        await self._store.set(self._collection(customer_id), method.id, method.model_dump())
        logger.info("Payment method added for %s: %s", customer_id, method.display_name)
        return method

    async def remove(self, customer_id: str, method_id: str) -> bool:
        return await self._store.delete(self._collection(customer_id), method_id)

    async def set_default(self, customer_id: str, method_id: str) -> None:
        for method in await self.for_customer(customer_id):
            await self._store.update(
                self._collection(customer_id), method.id, {"is_default": method.id == method_id}
            )
