"""
Identity provider contract and an in-process implementation.

The provider owns credentials and yields a stable uid that every domain
record uses as its user foreign key. Profiles themselves live in the
``users`` collection (see ``UserRepository``).
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Protocol

from passlib.context import CryptContext

from emerald_details.errors import AuthenticationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class IdentityProvider(Protocol):
    """Email/password identity operations."""

    async def sign_up(self, email: str, password: str) -> str: ...

    async def sign_in(self, email: str, password: str) -> str: ...

    async def sign_out(self) -> None: ...

    @property
    def current_uid(self) -> Optional[str]: ...

    async def send_email_verification(self, uid: str) -> None: ...

    async def is_email_verified(self, uid: str) -> bool: ...

    async def send_password_reset(self, email: str) -> None: ...


@dataclass
class AuthAccount:
    uid: str
    email: str
    password_hash: str
    email_verified: bool = False


class InMemoryIdentityProvider:
    """
    Credential store for development, tests and the console demo.

    Verification and reset "emails" are recorded in ``outbox`` instead of
    being delivered.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, AuthAccount] = {}
        self._current_uid: Optional[str] = None
        self.outbox: list[tuple[str, str]] = []

    @property
    def current_uid(self) -> Optional[str]:
        return self._current_uid

    def _by_email(self, email: str) -> Optional[AuthAccount]:
        return self._accounts.get(email.strip().lower())

    def _by_uid(self, uid: str) -> AuthAccount:
        for account in self._accounts.values():
            if account.uid == uid:
                return account
        raise AuthenticationError(f"No account with uid {uid}")

    async def sign_up(self, email: str, password: str) -> str:
        key = email.strip().lower()
        if key in self._accounts:
            raise AuthenticationError("The email address is already in use by another account.")
        account = AuthAccount(
            uid=uuid.uuid4().hex,
            email=key,
            password_hash=pwd_context.hash(password),
        )
        self._accounts[key] = account
        self._current_uid = account.uid
        logger.info("Account created: %s", key)
        return account.uid

    async def sign_in(self, email: str, password: str) -> str:
        account = self._by_email(email)
        if account is None or not pwd_context.verify(password, account.password_hash):
            raise AuthenticationError("Invalid email or password.")
        self._current_uid = account.uid
        return account.uid

    async def sign_out(self) -> None:
        self._current_uid = None

    async def send_email_verification(self, uid: str) -> None:
        account = self._by_uid(uid)
        self.outbox.append(("verify_email", account.email))

    async def is_email_verified(self, uid: str) -> bool:
        return self._by_uid(uid).email_verified

    def mark_email_verified(self, uid: str) -> None:
        """Simulate the user following the verification link."""
        self._by_uid(uid).email_verified = True

    async def send_password_reset(self, email: str) -> None:
        account = self._by_email(email)
        if account is None:
            raise AuthenticationError("There is no user record corresponding to this email.")
        self.outbox.append(("password_reset", account.email))
