from emerald_details.repositories.appointments import AppointmentRepository, RevenueStats
from emerald_details.repositories.base import Repository
from emerald_details.repositories.payments import PaymentMethodRepository, TransactionRepository
from emerald_details.repositories.services import ServicePackageRepository
from emerald_details.repositories.time_slots import TimeSlotRepository
from emerald_details.repositories.users import UserRepository

__all__ = [
    "AppointmentRepository", "RevenueStats", "Repository",
    "PaymentMethodRepository", "TransactionRepository",
    "ServicePackageRepository", "TimeSlotRepository", "UserRepository",
]
