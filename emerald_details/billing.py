"""Charge and refund appointments through the configured payment gateway."""

import logging

from emerald_details.errors import EmeraldError, ValidationError
from emerald_details.integrations.payments import PaymentGateway
from emerald_details.repositories.appointments import AppointmentRepository
from emerald_details.repositories.payments import TransactionRepository
from emerald_details.results import OperationResult
from emerald_details.schemas.appointment_schema import PaymentStatus
from emerald_details.schemas.payment_schema import Transaction

logger = logging.getLogger(__name__)


class PaymentService:

    def __init__(
        self,
        gateway: PaymentGateway,
        transactions: TransactionRepository,
        appointments: AppointmentRepository,
    ) -> None:
        self._gateway = gateway
        self._transactions = transactions
        self._appointments = appointments

    async def process_payment(
        self, appointment_id: str, payment_method_id: str
    ) -> OperationResult[Transaction]:
        """Charge the appointment's stored total and mark it paid.

        The amount always comes from the appointment record, never from
        the caller.
        """
        try:
            appointment = await self._appointments.require(appointment_id)
            if appointment.payment_status == PaymentStatus.PAID:
                raise ValidationError(f"Appointment {appointment_id} is already paid")
            intent = await self._gateway.create_payment_intent(
                appointment.total_price, appointment.customer_id, appointment.id
            )
            intent = await self._gateway.confirm_payment_intent(intent.id, payment_method_id)
        except EmeraldError as e:
            logger.warning("Payment failed for %s: %s", appointment_id, e)
            return OperationResult.fail(e)

        transaction = Transaction(
            appointment_id=appointment.id,
            customer_id=appointment.customer_id,
            amount=appointment.total_price,
            status=PaymentStatus.PAID,
            payment_method_id=payment_method_id,
            payment_intent_id=intent.id,
        )
        try:
            await self._transactions.create(transaction)
            await self._appointments.update_payment_status(
                appointment.id, PaymentStatus.PAID, payment_intent_id=intent.id
            )
        except EmeraldError as e:
            logger.error(
                "Charged intent %s but could not record payment for %s: %s",
                intent.id, appointment.id, e,
            )
            return OperationResult.fail(e)
        logger.info("Payment %s recorded for %s", transaction.formatted_amount, appointment.id)
        return OperationResult.ok(transaction, message="Payment successful")

    async def refund_transaction(self, transaction_id: str) -> OperationResult[Transaction]:
        try:
            transaction = await self._transactions.require(transaction_id)
            if transaction.status != PaymentStatus.PAID or not transaction.payment_intent_id:
                raise ValidationError(f"Transaction {transaction_id} cannot be refunded")
            await self._gateway.refund(transaction.payment_intent_id)
        except EmeraldError as e:
            logger.warning("Refund failed for %s: %s", transaction_id, e)
            return OperationResult.fail(e)

        try:
            await self._transactions.mark_refunded(transaction_id)
            await self._appointments.update_payment_status(
                transaction.appointment_id, PaymentStatus.REFUNDED
            )
        except EmeraldError as e:
            logger.error(
                "Refunded intent %s but could not record it for %s: %s",
                transaction.payment_intent_id, transaction_id, e,
            )
            return OperationResult.fail(e)
        refunded = transaction.model_copy(update={"status": PaymentStatus.REFUNDED})
        return OperationResult.ok(refunded, message="Refund issued")
