"""Tests for the authentication manager and in-memory identity provider."""

import pytest

from emerald_details.auth import AuthenticationManager, validate_sign_up
from emerald_details.errors import AuthenticationError, ValidationError
from emerald_details.integrations.identity import InMemoryIdentityProvider
from emerald_details.schemas.user_schema import UserRole
from tests.conftest import make_vehicle


@pytest.fixture
def identity():
    return InMemoryIdentityProvider()


@pytest.fixture
def auth(identity, user_repo):
    return AuthenticationManager(identity, user_repo)


async def _sign_up(auth, email="ana@example.com", role=UserRole.CUSTOMER):
    return await auth.sign_up("Ana", email, "(312) 555-0199", "secret1", "secret1", role=role)


class TestFormValidation:
    @pytest.mark.parametrize("name,email,phone,message", [
        ("", "a@b.com", "123", "Name is required"),
        ("Ana", "  ", "123", "Email is required"),
        ("Ana", "a@b.com", "", "Phone is required"),
    ])
    def test_required_fields(self, name, email, phone, message):
        with pytest.raises(ValidationError, match=message):
            validate_sign_up(name, email, phone, "secret1", "secret1")

    def test_short_password(self):
        with pytest.raises(ValidationError, match="at least 6"):
            validate_sign_up("Ana", "a@b.com", "123", "12345", "12345")

    def test_passwords_must_match(self):
        with pytest.raises(ValidationError, match="do not match"):
            validate_sign_up("Ana", "a@b.com", "123", "secret1", "secret2")

    @pytest.mark.asyncio
    async def test_invalid_form_never_reaches_provider(self, auth, identity):
        result = await auth.sign_up("Ana", "a@b.com", "123", "short", "short")
        assert result.error == "ValidationError"
        assert auth.error_message.startswith("Password must be")
        assert identity.current_uid is None


class TestSignUp:
    @pytest.mark.asyncio
    async def test_creates_profile_and_sends_verification(self, auth, identity, user_repo):
        result = await _sign_up(auth, email="Ana@Example.com")
        assert result.success
        user = result.value
        assert user.email == "ana@example.com"
        assert user.phone == "3125550199"
        assert user.vehicles == []
        assert user.is_available is None
        assert (await user_repo.get_by_auth_uid(user.auth_uid)) is not None
        assert identity.outbox == [("verify_email", "ana@example.com")]
        assert auth.is_authenticated

    @pytest.mark.asyncio
    async def test_employee_starts_available(self, auth):
        result = await _sign_up(auth, role=UserRole.EMPLOYEE)
        assert result.value.is_available is True
        assert result.value.vehicles is None

    @pytest.mark.asyncio
    async def test_duplicate_email(self, auth):
        await _sign_up(auth)
        result = await _sign_up(auth)
        assert result.error == "AuthenticationError"
        assert "already in use" in auth.error_message


class TestSignIn:
    @pytest.mark.asyncio
    async def test_round_trip(self, auth):
        await _sign_up(auth)
        await auth.sign_out()
        assert not auth.is_authenticated
        result = await auth.sign_in("ana@example.com", "secret1")
        assert result.success
        assert auth.current_user.name == "Ana"

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth):
        await _sign_up(auth)
        await auth.sign_out()
        result = await auth.sign_in("ana@example.com", "nope-nope")
        assert result.error == "AuthenticationError"
        assert not auth.is_authenticated

    @pytest.mark.asyncio
    async def test_missing_profile_signs_out(self, auth, identity):
        await identity.sign_up("ghost@example.com", "secret1")
        result = await auth.sign_in("ghost@example.com", "secret1")
        assert result.message == "User profile not found"
        assert identity.current_uid is None


class TestAccountActions:
    @pytest.mark.asyncio
    async def test_email_verification_persisted(self, auth, identity, user_repo):
        user = (await _sign_up(auth)).value
        assert await auth.check_email_verification() is False
        identity.mark_email_verified(user.auth_uid)
        assert await auth.check_email_verification() is True
        assert (await user_repo.require(user.auth_uid)).is_email_verified is True

    @pytest.mark.asyncio
    async def test_update_profile(self, auth, user_repo):
        user = (await _sign_up(auth)).value
        result = await auth.update_profile("Ana Maria", "312-555-0000")
        assert result.success
        assert (await user_repo.require(user.auth_uid)).name == "Ana Maria"

    @pytest.mark.asyncio
    async def test_vehicle_management(self, auth):
        await _sign_up(auth)
        vehicle = make_vehicle()
        assert (await auth.add_vehicle(vehicle)).success
        assert auth.current_user.find_vehicle(vehicle.id) is not None
        assert (await auth.remove_vehicle(vehicle.id)).value.vehicles == []

    @pytest.mark.asyncio
    async def test_employee_cannot_add_vehicle(self, auth):
        await _sign_up(auth, role=UserRole.EMPLOYEE)
        result = await auth.add_vehicle(make_vehicle())
        assert result.error == "ValidationError"

    @pytest.mark.asyncio
    async def test_actions_require_sign_in(self, auth):
        result = await auth.update_profile("Ana", "123")
        assert result.error == "AuthenticationError"

    @pytest.mark.asyncio
    async def test_password_reset(self, auth, identity):
        await _sign_up(auth)
        assert (await auth.send_password_reset("ana@example.com")).success
        assert ("password_reset", "ana@example.com") in identity.outbox
        assert (await auth.send_password_reset("nobody@example.com")).error == "AuthenticationError"


class TestIdentityProvider:
    @pytest.mark.asyncio
    async def test_passwords_are_hashed(self, identity):
        uid = await identity.sign_up("a@b.com", "secret1")
        account = identity._by_uid(uid)
        assert account.password_hash != "secret1"

    @pytest.mark.asyncio
    async def test_unknown_uid(self, identity):
        with pytest.raises(AuthenticationError):
            await identity.is_email_verified("nope")
