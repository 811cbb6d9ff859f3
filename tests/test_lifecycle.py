"""Tests for appointment lifecycle actions and payment processing."""

import pytest

from emerald_details.billing import PaymentService
from emerald_details.booking.lifecycle import AppointmentLifecycle
from emerald_details.errors import PaymentError, StoreError
from emerald_details.integrations.payments import MockPaymentGateway, build_gateway
from emerald_details.repositories import AppointmentRepository, TransactionRepository
from emerald_details.schemas.appointment_schema import AppointmentStatus, PaymentStatus
from emerald_details.schemas.payment_schema import Transaction
from emerald_details.store.memory import InMemoryDocumentStore
from tests.conftest import make_appointment, make_customer, make_employee, make_slot


class FailingPaymentsStore(InMemoryDocumentStore):
    """Rejects every transaction write."""

    async def set(self, collection, doc_id, data, merge=False):
        if collection == "payments":
            raise StoreError("payments write rejected")
        await super().set(collection, doc_id, data, merge)


class TestAppointmentLifecycle:
    @pytest.mark.asyncio
    async def test_assign_confirms_and_tags_slot(self, appointment_repo, slot_repo):
        slot = await slot_repo.create(make_slot())
        appt = await appointment_repo.create(make_appointment(slot=slot))
        lifecycle = AppointmentLifecycle(appointment_repo, slot_repo)

        result = await lifecycle.assign_employee(appt.id, make_employee())

        assert result.success
        assert result.value.status == AppointmentStatus.CONFIRMED
        assert result.value.employee_name == "Ben Detailer"
        assert (await slot_repo.require(slot.id)).assigned_employee_id == "emp-1"

    @pytest.mark.asyncio
    async def test_assign_succeeds_when_slot_record_missing(self, appointment_repo, slot_repo):
        # the appointment's slot snapshot was never stored as a slot document
        appt = await appointment_repo.create(make_appointment())
        lifecycle = AppointmentLifecycle(appointment_repo, slot_repo)

        result = await lifecycle.assign_employee(appt.id, make_employee())

        assert result.success
        assert "time slot record not updated" in result.message
        assert (await appointment_repo.require(appt.id)).status == AppointmentStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_assign_customer_rejected(self, appointment_repo):
        appt = await appointment_repo.create(make_appointment())
        result = await AppointmentLifecycle(appointment_repo).assign_employee(appt.id, make_customer())
        assert result.error == "ValidationError"

    @pytest.mark.asyncio
    async def test_start_and_complete(self, appointment_repo):
        appt = await appointment_repo.create(make_appointment())
        lifecycle = AppointmentLifecycle(appointment_repo)
        await lifecycle.assign_employee(appt.id, make_employee())
        assert (await lifecycle.start_service(appt.id)).value.status == AppointmentStatus.IN_PROGRESS
        assert (await lifecycle.complete(appt.id)).value.status == AppointmentStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_start_pending_fails(self, appointment_repo):
        appt = await appointment_repo.create(make_appointment())
        result = await AppointmentLifecycle(appointment_repo).start_service(appt.id)
        assert not result.success
        assert result.error == "InvalidTransitionError"

    @pytest.mark.asyncio
    async def test_cancel_completed_fails(self, appointment_repo):
        appt = await appointment_repo.create(make_appointment(status=AppointmentStatus.COMPLETED))
        result = await AppointmentLifecycle(appointment_repo).cancel(appt.id)
        assert result.error == "InvalidTransitionError"
        assert (await appointment_repo.require(appt.id)).status == AppointmentStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_cancel_missing(self, appointment_repo):
        result = await AppointmentLifecycle(appointment_repo).cancel("nope")
        assert result.error == "NotFoundError"


class TestMockGateway:
    @pytest.mark.asyncio
    async def test_synthetic_intent_id(self):
        intent = await MockPaymentGateway().create_payment_intent(35.0, "cust-1", "appt-1")
        assert intent.id.startswith("pi_mock_")
        assert len(intent.id) == len("pi_mock_") + 8
        assert intent.amount_cents == 3500

    @pytest.mark.asyncio
    async def test_rejects_non_positive_amount(self):
        with pytest.raises(PaymentError):
            await MockPaymentGateway().create_payment_intent(0, "cust-1", "appt-1")

    def test_build_unknown_gateway(self):
        with pytest.raises(ValueError, match="Unknown payment gateway"):
            build_gateway("stripe")


class TestPaymentService:
    @pytest.mark.asyncio
    async def test_process_marks_paid(self, appointment_repo, transaction_repo):
        appt = await appointment_repo.create(make_appointment(total_price=52.5))
        service = PaymentService(MockPaymentGateway(), transaction_repo, appointment_repo)

        result = await service.process_payment(appt.id, "pm_1")

        assert result.success
        assert result.value.amount == 52.5
        assert result.value.formatted_amount == "$52.50"
        stored = await appointment_repo.require(appt.id)
        assert stored.payment_status == PaymentStatus.PAID
        assert stored.payment_intent_id == result.value.payment_intent_id
        assert len(await transaction_repo.for_customer("cust-1")) == 1

    @pytest.mark.asyncio
    async def test_double_payment_rejected(self, appointment_repo, transaction_repo):
        appt = await appointment_repo.create(make_appointment())
        service = PaymentService(MockPaymentGateway(), transaction_repo, appointment_repo)
        await service.process_payment(appt.id, "pm_1")
        again = await service.process_payment(appt.id, "pm_1")
        assert again.error == "ValidationError"

    @pytest.mark.asyncio
    async def test_refund(self, appointment_repo, transaction_repo):
        appt = await appointment_repo.create(make_appointment())
        service = PaymentService(MockPaymentGateway(), transaction_repo, appointment_repo)
        paid = await service.process_payment(appt.id, "pm_1")

        refunded = await service.refund_transaction(paid.value.id)

        assert refunded.value.status == PaymentStatus.REFUNDED
        assert (await transaction_repo.require(paid.value.id)).status == PaymentStatus.REFUNDED
        assert (await appointment_repo.require(appt.id)).payment_status == PaymentStatus.REFUNDED
        assert (await service.refund_transaction(paid.value.id)).error == "ValidationError"

    @pytest.mark.asyncio
    async def test_refund_unknown_intent(self, appointment_repo, transaction_repo):
        tx = await transaction_repo.create(Transaction(
            appointment_id="a", customer_id="c", amount=10,
            status=PaymentStatus.PAID, payment_intent_id="pi_mock_missing",
        ))
        service = PaymentService(MockPaymentGateway(), transaction_repo, appointment_repo)
        result = await service.refund_transaction(tx.id)
        assert result.error == "PaymentError"

    @pytest.mark.asyncio
    async def test_unrecorded_charge_is_reported(self):
        store = FailingPaymentsStore()
        appointments = AppointmentRepository(store)
        appt = await appointments.create(make_appointment())
        service = PaymentService(MockPaymentGateway(), TransactionRepository(store), appointments)

        result = await service.process_payment(appt.id, "pm_1")

        assert result.error == "StoreError"
        assert (await appointments.require(appt.id)).payment_status == PaymentStatus.PENDING

    @pytest.mark.asyncio
    async def test_unrecorded_refund_is_reported(self, appointment_repo, transaction_repo):
        gateway = MockPaymentGateway()
        appt = await appointment_repo.create(make_appointment())
        paid = await PaymentService(gateway, transaction_repo, appointment_repo).process_payment(appt.id, "pm_1")
        # appointment record lives elsewhere, so the status write fails
        broken = PaymentService(gateway, transaction_repo, AppointmentRepository(InMemoryDocumentStore()))

        result = await broken.refund_transaction(paid.value.id)

        assert result.error == "NotFoundError"
