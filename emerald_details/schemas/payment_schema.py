"""Saved payment methods and payment transactions."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from emerald_details.schemas.appointment_schema import PaymentStatus
from emerald_details.utils import format_currency, new_id, utcnow


class PaymentMethodType(str, Enum):
    CARD = "card"
    WALLET = "wallet"
    BANK_ACCOUNT = "bank_account"


class PaymentMethod(BaseModel):
    id: str = Field(default_factory=new_id)
    type: PaymentMethodType
    is_default: bool = False
    card_last4: Optional[str] = None
    card_brand: Optional[str] = None
    card_exp_month: Optional[int] = None
    card_exp_year: Optional[int] = None
    gateway_method_id: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.type == PaymentMethodType.CARD:
            if self.card_brand and self.card_last4:
                return f"{self.card_brand.capitalize()} ****{self.card_last4}"
            return "Card"
        if self.type == PaymentMethodType.WALLET:
            return "Wallet"
        return "Bank Account"

    @property
    def expiration(self) -> Optional[str]:
        if self.card_exp_month is None or self.card_exp_year is None:
            return None
        return f"{self.card_exp_month:02d}/{self.card_exp_year % 100:02d}"


class Transaction(BaseModel):
    """Payment status record for one appointment."""
    id: str = Field(default_factory=new_id)
    appointment_id: str
    customer_id: str
    amount: float
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def formatted_amount(self) -> str:
        return format_currency(self.amount)
