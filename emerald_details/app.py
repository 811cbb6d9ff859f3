"""
Application composition root.

``EmeraldApp`` wires the document store, repositories, integrations and
workflows together once, and maps the signed-in user's role to the screen
set that client shows. Role dispatch happens here and nowhere else.
"""

import logging
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from emerald_details.auth import AuthenticationManager
from emerald_details.billing import PaymentService
from emerald_details.booking.lifecycle import AppointmentLifecycle
from emerald_details.booking.wizard import BookingWizard
from emerald_details.errors import AuthenticationError
from emerald_details.integrations.geocoding import Geocoder, NominatimGeocoder
from emerald_details.integrations.identity import IdentityProvider, InMemoryIdentityProvider
from emerald_details.integrations.payments import PaymentGateway, build_gateway
from emerald_details.messaging.relay import MessageRelay
from emerald_details.repositories import (
    AppointmentRepository,
    PaymentMethodRepository,
    ServicePackageRepository,
    TimeSlotRepository,
    TransactionRepository,
    UserRepository,
)
from emerald_details.schemas.user_schema import User, UserRole
from emerald_details.store.document_store import DocumentStore
from emerald_details.store.memory import InMemoryDocumentStore

logger = logging.getLogger(__name__)


class Screen(str, Enum):
    BOOK = "book"
    MY_APPOINTMENTS = "my_appointments"
    MESSAGES = "messages"
    PROFILE = "profile"
    SCHEDULE = "schedule"
    DASHBOARD = "dashboard"
    ALL_APPOINTMENTS = "all_appointments"
    SERVICES = "services"
    EMPLOYEES = "employees"
    SETTINGS = "settings"


ROLE_SCREENS: dict[UserRole, tuple[Screen, ...]] = {
    UserRole.CUSTOMER: (Screen.BOOK, Screen.MY_APPOINTMENTS, Screen.MESSAGES, Screen.PROFILE),
    UserRole.EMPLOYEE: (Screen.SCHEDULE, Screen.MESSAGES, Screen.PROFILE),
    UserRole.ADMIN: (
        Screen.DASHBOARD, Screen.ALL_APPOINTMENTS, Screen.SERVICES,
        Screen.EMPLOYEES, Screen.SETTINGS,
    ),
}


def screens_for(role: UserRole) -> tuple[Screen, ...]:
    """Screen set for a role, in tab order."""
    return ROLE_SCREENS[UserRole(role)]


class EmeraldApp:
    """Everything one client process needs, built from a single store."""

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        identity: Optional[IdentityProvider] = None,
        geocoder: Optional[Geocoder] = None,
        gateway: Optional[PaymentGateway] = None,
    ) -> None:
        self.store = store or InMemoryDocumentStore()
        self.geocoder = geocoder or NominatimGeocoder()

        self.services = ServicePackageRepository(self.store)
        self.slots = TimeSlotRepository(self.store)
        self.appointments = AppointmentRepository(self.store, slots=self.slots)
        self.users = UserRepository(self.store)
        self.transactions = TransactionRepository(self.store)
        self.payment_methods = PaymentMethodRepository(self.store)

        self.auth = AuthenticationManager(identity or InMemoryIdentityProvider(), self.users)
        self.relay = MessageRelay(self.store)
        self.lifecycle = AppointmentLifecycle(self.appointments, self.slots)
        self.payments = PaymentService(
            gateway or build_gateway(), self.transactions, self.appointments
        )

    def booking_wizard(self, customer: User, session_id: Optional[str] = None) -> BookingWizard:
        return BookingWizard(
            customer,
            services=self.services,
            slots=self.slots,
            appointments=self.appointments,
            users=self.users,
            geocoder=self.geocoder,
            session_id=session_id,
        )

    def home_screens(self) -> tuple[Screen, ...]:
        user = self.auth.current_user
        if user is None:
            raise AuthenticationError("Not signed in")
        return screens_for(user.role)

    async def seed(self, start: Optional[date] = None, days: int = 7) -> None:
        """Seed the default catalog (if empty) and slots for ``days`` days from ``start``."""
        if not await self.services.all():
            await self.services.seed_defaults()
        start = start or date.today()
        await self.slots.generate_for_range(start, start + timedelta(days=days - 1))
