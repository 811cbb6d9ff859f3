"""Tests for application composition and role dispatch."""

import pytest

from emerald_details.app import EmeraldApp, Screen, screens_for
from emerald_details.errors import AuthenticationError
from emerald_details.schemas.user_schema import UserRole
from tests.conftest import MONDAY, StaticGeocoder


class TestRoleDispatch:
    def test_customer_screens(self):
        assert screens_for(UserRole.CUSTOMER) == (
            Screen.BOOK, Screen.MY_APPOINTMENTS, Screen.MESSAGES, Screen.PROFILE,
        )

    def test_employee_screens(self):
        assert screens_for(UserRole.EMPLOYEE) == (Screen.SCHEDULE, Screen.MESSAGES, Screen.PROFILE)

    def test_admin_screens(self):
        assert Screen.DASHBOARD in screens_for("admin")
        assert Screen.BOOK not in screens_for(UserRole.ADMIN)

    def test_every_role_has_screens(self):
        assert all(screens_for(role) for role in UserRole)


class TestEmeraldApp:
    def test_home_screens_require_sign_in(self):
        app = EmeraldApp(geocoder=StaticGeocoder())
        with pytest.raises(AuthenticationError):
            app.home_screens()

    @pytest.mark.asyncio
    async def test_seed_is_catalog_idempotent(self):
        app = EmeraldApp(geocoder=StaticGeocoder())
        await app.seed(start=MONDAY, days=7)
        await app.seed(start=MONDAY, days=1)
        assert len(await app.services.all()) == 5
        assert len(await app.slots.for_day(MONDAY)) == 10

    @pytest.mark.asyncio
    async def test_signed_in_customer_gets_booking_screens(self):
        app = EmeraldApp(geocoder=StaticGeocoder())
        await app.auth.sign_up("Ana", "ana@example.com", "3125550199", "secret1", "secret1")
        assert app.home_screens()[0] == Screen.BOOK
        wizard = app.booking_wizard(app.auth.current_user)
        assert wizard.customer.email == "ana@example.com"
