"""
Payment gateway contract and the placeholder gateway.

No real card processor is integrated yet; ``MockPaymentGateway`` returns
synthetic intent ids and always succeeds. Swap in a real gateway by
implementing ``PaymentGateway`` and wiring it in ``EmeraldApp``.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Protocol

from emerald_details.config import settings
from emerald_details.errors import PaymentError

logger = logging.getLogger(__name__)


@dataclass
class PaymentIntent:
    id: str
    amount_cents: int
    currency: str
    customer_id: str
    appointment_id: str
    status: str = "requires_confirmation"
    payment_method_id: Optional[str] = None


class PaymentGateway(Protocol):
    async def create_payment_intent(
        self, amount: float, customer_id: str, appointment_id: str
    ) -> PaymentIntent: ...

    async def confirm_payment_intent(
        self, intent_id: str, payment_method_id: str
    ) -> PaymentIntent: ...

    async def refund(self, intent_id: str) -> None: ...


class MockPaymentGateway:
    """Synthetic-success gateway used until a processor is integrated."""

    def __init__(self, currency: Optional[str] = None) -> None:
        self._currency = currency or settings.payments.currency
        self._intents: dict[str, PaymentIntent] = {}

    async def create_payment_intent(
        self, amount: float, customer_id: str, appointment_id: str
    ) -> PaymentIntent:
        if amount <= 0:
            raise PaymentError(f"Payment amount must be positive, got {amount}")
        intent = PaymentIntent(
            id=f"pi_mock_{uuid.uuid4().hex[:8]}",
            amount_cents=round(amount * 100),
            currency=self._currency,
            customer_id=customer_id,
            appointment_id=appointment_id,
        )
        self._intents[intent.id] = intent
        return intent

    async def confirm_payment_intent(self, intent_id: str, payment_method_id: str) -> PaymentIntent:
        intent = self._intents.get(intent_id)
        if intent is None:
            raise PaymentError(f"Unknown payment intent {intent_id}")
        intent.status = "succeeded"
        intent.payment_method_id = payment_method_id
        logger.info("Mock payment confirmed: %s (%d %s)", intent_id, intent.amount_cents, intent.currency)
        return intent

    async def refund(self, intent_id: str) -> None:
        intent = self._intents.get(intent_id)
        if intent is None:
            raise PaymentError(f"Unknown payment intent {intent_id}")
        intent.status = "refunded"


def build_gateway(name: Optional[str] = None) -> PaymentGateway:
    """Resolve the configured gateway by name."""
    name = (name or settings.payments.gateway).lower()
    if name == "mock":
        return MockPaymentGateway()
    raise ValueError(f"Unknown payment gateway '{name}'. Available: ['mock']")
