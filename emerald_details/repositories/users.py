"""User profile repository. Profiles are keyed by the identity provider uid."""

import logging
from typing import Optional

from emerald_details.errors import ValidationError
from emerald_details.repositories.base import Repository
from emerald_details.schemas.user_schema import User, UserRole
from emerald_details.schemas.vehicle_schema import Vehicle
from emerald_details.store.document_store import FieldFilter

logger = logging.getLogger(__name__)


class UserRepository(Repository[User]):
    collection = "users"
    model = User

    def doc_id(self, record: User) -> str:
        return record.auth_uid or record.id

    async def create_profile(self, user: User, auth_uid: str) -> User:
        user = user.model_copy(update={"auth_uid": auth_uid})
        await self.create(user)
        logger.info("Profile created for %s (%s)", user.email, user.role.value)
        return user

    async def get_by_auth_uid(self, auth_uid: str) -> Optional[User]:
        return await self.get(auth_uid)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        matches = await self.find([FieldFilter("id", "==", user_id)], limit=1)
        return matches[0] if matches else None

    async def update_profile(self, user: User) -> User:
        return await self.save(user)

    async def update_email_verification(self, auth_uid: str, is_verified: bool) -> None:
        await self.update_fields(auth_uid, {"is_email_verified": is_verified})

    async def employees(self) -> list[User]:
        return await self.find([FieldFilter("role", "==", UserRole.EMPLOYEE)])

    async def customers(self) -> list[User]:
        return await self.find([FieldFilter("role", "==", UserRole.CUSTOMER)])

    async def update_employee_availability(self, auth_uid: str, is_available: bool) -> None:
        await self.update_fields(auth_uid, {"is_available": is_available})

    async def add_vehicle(self, auth_uid: str, vehicle: Vehicle) -> User:
        user = await self.require(auth_uid)
        if user.role != UserRole.CUSTOMER:
            raise ValidationError("Only customers can save vehicles")
        vehicles = list(user.vehicles or []) + [vehicle]
        await self.update_fields(auth_uid, {"vehicles": [v.model_dump() for v in vehicles]})
        logger.info("Vehicle added for %s: %s", auth_uid, vehicle.display_name)
        return user.model_copy(update={"vehicles": vehicles})

    async def remove_vehicle(self, auth_uid: str, vehicle_id: str) -> User:
        user = await self.require(auth_uid)
        if user.role != UserRole.CUSTOMER:
            raise ValidationError("Only customers can save vehicles")
        vehicles = [v for v in user.vehicles or [] if v.id != vehicle_id]
        await self.update_fields(auth_uid, {"vehicles": [v.model_dump() for v in vehicles]})
        return user.model_copy(update={"vehicles": vehicles})
