"""
Account session management.

``AuthenticationManager`` wraps the identity provider and the profile
repository. Forms are validated locally before any provider call, and
every failure is recorded in ``error_message`` and returned as a failed
``OperationResult``.
"""

from typing import Optional

from emerald_details.config import settings
from emerald_details.errors import AuthenticationError, EmeraldError, ValidationError
from emerald_details.integrations.identity import IdentityProvider
from emerald_details.logging_context import get_session_logger
from emerald_details.repositories.users import UserRepository
from emerald_details.results import OperationResult
from emerald_details.schemas.user_schema import User, UserRole
from emerald_details.schemas.vehicle_schema import Vehicle
from emerald_details.utils import normalize_phone

logger = get_session_logger(__name__)


def validate_sign_up(
    name: str,
    email: str,
    phone: str,
    password: str,
    confirm_password: str,
    min_password_length: Optional[int] = None,
) -> None:
    """Reject an incomplete sign-up form.

    Raises:
        ValidationError: naming the first problem found.
    """
    min_length = min_password_length or settings.accounts.min_password_length
    for label, value in (("Name", name), ("Email", email), ("Phone", phone)):
        if not value or not value.strip():
            raise ValidationError(f"{label} is required")
    if len(password) < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters")
    if password != confirm_password:
        raise ValidationError("Passwords do not match")


def validate_sign_in(email: str, password: str) -> None:
    if not email or not email.strip():
        raise ValidationError("Email is required")
    if not password:
        raise ValidationError("Password is required")


class AuthenticationManager:
    """Current-user session for one client."""

    def __init__(self, identity: IdentityProvider, users: UserRepository) -> None:
        self._identity = identity
        self._users = users
        self.current_user: Optional[User] = None
        self.error_message: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def _fail(self, exc: Exception) -> OperationResult:
        self.error_message = str(exc)
        logger.warning("Auth operation failed: %s", exc)
        return OperationResult.fail(exc)

    def _require_user(self) -> User:
        if self.current_user is None:
            raise AuthenticationError("Not signed in")
        return self.current_user

    # ------------------------------------------------------------------ #
    # Session
    # ------------------------------------------------------------------ #

    async def sign_up(
        self,
        name: str,
        email: str,
        phone: str,
        password: str,
        confirm_password: str,
        role: UserRole = UserRole.CUSTOMER,
    ) -> OperationResult[User]:
        """Create credentials and a profile, then send the verification email."""
        self.error_message = None
        try:
            validate_sign_up(name, email, phone, password, confirm_password)
            uid = await self._identity.sign_up(email.strip().lower(), password)
            user = User(
                name=name.strip(),
                email=email.strip().lower(),
                phone=normalize_phone(phone),
                role=role,
                vehicles=[] if role == UserRole.CUSTOMER else None,
                is_available=True if role == UserRole.EMPLOYEE else None,
            )
            user = await self._users.create_profile(user, uid)
            await self._identity.send_email_verification(uid)
        except EmeraldError as e:
            return self._fail(e)
        self.current_user = user
        logger.info("Signed up %s as %s", user.email, role.value)
        return OperationResult.ok(user)

    async def sign_in(self, email: str, password: str) -> OperationResult[User]:
        self.error_message = None
        try:
            validate_sign_in(email, password)
            uid = await self._identity.sign_in(email, password)
            user = await self._users.get_by_auth_uid(uid)
            if user is None:
                await self._identity.sign_out()
                raise AuthenticationError("User profile not found")
        except EmeraldError as e:
            return self._fail(e)
        self.current_user = user
        logger.info("Signed in %s", user.email)
        return OperationResult.ok(user)

    async def sign_out(self) -> OperationResult[None]:
        try:
            await self._identity.sign_out()
        except EmeraldError as e:
            return self._fail(e)
        self.current_user = None
        return OperationResult.ok()

    # ------------------------------------------------------------------ #
    # Verification and recovery
    # ------------------------------------------------------------------ #

    async def send_email_verification(self) -> OperationResult[None]:
        try:
            user = self._require_user()
            await self._identity.send_email_verification(user.auth_uid)
        except EmeraldError as e:
            return self._fail(e)
        return OperationResult.ok()

    async def check_email_verification(self) -> bool:
        """Refresh verification state and persist it on the profile once verified."""
        if self.current_user is None:
            return False
        try:
            verified = await self._identity.is_email_verified(self.current_user.auth_uid)
            if verified and not self.current_user.is_email_verified:
                await self._users.update_email_verification(self.current_user.auth_uid, True)
                self.current_user = self.current_user.model_copy(update={"is_email_verified": True})
        except EmeraldError as e:
            self._fail(e)
            return False
        return verified

    async def send_password_reset(self, email: str) -> OperationResult[None]:
        try:
            if not email or not email.strip():
                raise ValidationError("Email is required")
            await self._identity.send_password_reset(email)
        except EmeraldError as e:
            return self._fail(e)
        return OperationResult.ok(message=f"Password reset sent to {email.strip()}")

    # ------------------------------------------------------------------ #
    # Profile
    # ------------------------------------------------------------------ #

    async def update_profile(self, name: str, phone: str) -> OperationResult[User]:
        try:
            user = self._require_user()
            if not name.strip() or not phone.strip():
                raise ValidationError("Name and phone are required")
            updated = user.model_copy(update={"name": name.strip(), "phone": normalize_phone(phone)})
            await self._users.update_profile(updated)
        except EmeraldError as e:
            return self._fail(e)
        self.current_user = updated
        return OperationResult.ok(updated)

    async def add_vehicle(self, vehicle: Vehicle) -> OperationResult[User]:
        try:
            user = self._require_user()
            updated = await self._users.add_vehicle(user.auth_uid, vehicle)
        except EmeraldError as e:
            return self._fail(e)
        self.current_user = updated
        return OperationResult.ok(updated)

    async def remove_vehicle(self, vehicle_id: str) -> OperationResult[User]:
        try:
            user = self._require_user()
            updated = await self._users.remove_vehicle(user.auth_uid, vehicle_id)
        except EmeraldError as e:
            return self._fail(e)
        self.current_user = updated
        return OperationResult.ok(updated)
