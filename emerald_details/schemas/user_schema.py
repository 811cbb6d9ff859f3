"""User profiles for customers, employees and administrators."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from emerald_details.schemas.vehicle_schema import Vehicle
from emerald_details.utils import new_id, utcnow


class UserRole(str, Enum):
    CUSTOMER = "customer"
    EMPLOYEE = "employee"
    ADMIN = "admin"


class User(BaseModel):
    """Profile document, keyed in the store by the identity provider's uid."""
    id: str = Field(default_factory=new_id)
    auth_uid: str = ""
    name: str
    email: str
    phone: str
    role: UserRole = UserRole.CUSTOMER
    is_email_verified: bool = False
    profile_image_url: Optional[str] = None
    payment_customer_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    # Customer-specific
    vehicles: Optional[list[Vehicle]] = None

    # Employee-specific
    is_available: Optional[bool] = None
    assigned_appointment_ids: Optional[list[str]] = None

    def find_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        for vehicle in self.vehicles or []:
            if vehicle.id == vehicle_id:
                return vehicle
        return None
