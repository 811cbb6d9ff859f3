"""Shared test fixtures and helpers."""

from datetime import date, datetime, timezone
from typing import Optional

import pytest

from emerald_details.booking.state_machine import BookingFlowStateMachine
from emerald_details.messaging.relay import MessageRelay
from emerald_details.repositories import (
    AppointmentRepository,
    PaymentMethodRepository,
    ServicePackageRepository,
    TimeSlotRepository,
    TransactionRepository,
    UserRepository,
)
from emerald_details.scheduling.slot_generator import generate_daily_slots
from emerald_details.schemas.appointment_schema import (
    Appointment,
    AppointmentStatus,
    PaymentStatus,
)
from emerald_details.schemas.location_schema import Location
from emerald_details.schemas.service_schema import ServicePackage
from emerald_details.schemas.slot_schema import TimeSlot
from emerald_details.schemas.user_schema import User, UserRole
from emerald_details.schemas.vehicle_schema import Vehicle, VehicleSize
from emerald_details.store.memory import InMemoryDocumentStore

# Monday
MONDAY = date(2025, 3, 17)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def service_repo(store):
    return ServicePackageRepository(store)


@pytest.fixture
def slot_repo(store):
    return TimeSlotRepository(store)


@pytest.fixture
def appointment_repo(store, slot_repo):
    return AppointmentRepository(store, slots=slot_repo)


@pytest.fixture
def user_repo(store):
    return UserRepository(store)


@pytest.fixture
def transaction_repo(store):
    return TransactionRepository(store)


@pytest.fixture
def payment_method_repo(store):
    return PaymentMethodRepository(store)


@pytest.fixture
def relay(store):
    return MessageRelay(store)


@pytest.fixture
def booking_flow():
    return BookingFlowStateMachine()


class StaticGeocoder:
    """Geocoder double that resolves every address to one fixed location."""

    def __init__(self, location: Optional[Location] = None) -> None:
        self.location = location
        self.queries: list[str] = []

    async def geocode(self, address: str) -> Optional[Location]:
        self.queries.append(address)
        if self.location is None:
            return None
        return self.location.model_copy(update={"address": address})

    async def reverse_geocode(self, latitude: float, longitude: float) -> Optional[Location]:
        return self.location

    async def search(self, query, near=None, radius_m=None) -> list[Location]:
        self.queries.append(query)
        return [self.location] if self.location else []


def make_location(address: str = "233 S Wacker Dr") -> Location:
    return Location(
        latitude=41.8789,
        longitude=-87.6359,
        address=address,
        city="Chicago",
        state="IL",
        zip_code="60606",
    )


def make_service(
    name: str = "Express Wash",
    base_price: float = 35.0,
    duration: int = 30,
    is_active: bool = True,
    sort_order: int = 1,
) -> ServicePackage:
    return ServicePackage(
        name=name,
        description=f"{name} package",
        base_price=base_price,
        duration=duration,
        features=["Hand wash"],
        is_active=is_active,
        sort_order=sort_order,
    )


def make_vehicle(size: VehicleSize = VehicleSize.SEDAN, make: str = "Honda") -> Vehicle:
    return Vehicle(make=make, model="Accord", year=2021, color="Blue", size=size)


def make_customer(
    auth_uid: str = "cust-1",
    name: str = "Ana Customer",
    vehicles: Optional[list[Vehicle]] = None,
) -> User:
    return User(
        auth_uid=auth_uid,
        name=name,
        email=f"{auth_uid}@example.com",
        phone="3125550199",
        role=UserRole.CUSTOMER,
        vehicles=vehicles if vehicles is not None else [],
    )


def make_employee(auth_uid: str = "emp-1", name: str = "Ben Detailer") -> User:
    return User(
        auth_uid=auth_uid,
        name=name,
        email=f"{auth_uid}@example.com",
        phone="3125550100",
        role=UserRole.EMPLOYEE,
        is_available=True,
    )


def make_slot(day: date = MONDAY, index: int = 0) -> TimeSlot:
    return generate_daily_slots(day)[index]


def make_appointment(
    customer_id: str = "cust-1",
    status: AppointmentStatus = AppointmentStatus.PENDING,
    payment_status: PaymentStatus = PaymentStatus.PENDING,
    total_price: float = 35.0,
    slot: Optional[TimeSlot] = None,
    employee_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Appointment:
    return Appointment(
        customer_id=customer_id,
        customer_name="Ana Customer",
        customer_phone="3125550199",
        employee_id=employee_id,
        employee_name="Ben Detailer" if employee_id else None,
        vehicle=make_vehicle(),
        service=make_service(),
        time_slot=slot or make_slot(),
        location=make_location(),
        status=status,
        total_price=total_price,
        payment_status=payment_status,
        created_at=created_at or datetime.now(timezone.utc),
    )
