"""
Emerald Details console entry point.

Runs against the in-memory document store, so no credentials or network
access are needed.

Usage:
    Full booking walkthrough:   python main.py demo
    Print generated slots:      python main.py slots --start 2025-03-10 --days 5
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, timedelta

from emerald_details.app import EmeraldApp, screens_for
from emerald_details.config import settings
from emerald_details.integrations.payments import MockPaymentGateway
from emerald_details.scheduling.slot_generator import business_days, generate_slots_for_range
from emerald_details.schemas.location_schema import Location
from emerald_details.schemas.user_schema import User, UserRole
from emerald_details.schemas.vehicle_schema import Vehicle, VehicleSize

logger = logging.getLogger(__name__)

GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_LOCATION = Location(
    latitude=41.8781,
    longitude=-87.6298,
    address="233 S Wacker Dr",
    city="Chicago",
    state="IL",
    zip_code="60606",
)


def say(text: str) -> None:
    print(f"{GREEN}{BOLD}[{settings.business.name}]{RESET} {GREEN}{text}{RESET}")


def step(text: str) -> None:
    print(f"{DIM}  >> {text}{RESET}")


def _next_business_day(start: date) -> date:
    return next(business_days(start, start + timedelta(days=7)))


async def run_demo(address: str = "") -> int:
    app = EmeraldApp(gateway=MockPaymentGateway())
    start = _next_business_day(date.today() + timedelta(days=1))
    await app.seed(start=start, days=7)
    step(f"Seeded catalog and slots from {start}")

    result = await app.auth.sign_up(
        "Ana Customer", "ana@example.com", "(312) 555-0199", "detail123", "detail123"
    )
    if not result:
        print(f"{RED}Sign-up failed: {result.message}{RESET}")
        return 1
    customer = result.value
    step(f"Signed up {customer.email}; screens: {[s.value for s in app.home_screens()]}")

    vehicle = Vehicle(make="Honda", model="Accord", year=2021, color="Blue", size=VehicleSize.SEDAN)
    await app.auth.add_vehicle(vehicle)

    wizard = app.booking_wizard(app.auth.current_user)
    services = await wizard.load_services()
    wizard.select_service(services[0].id)
    wizard.next()
    wizard.select_vehicle(vehicle.id)
    wizard.next()
    slots = await wizard.choose_date(start)
    wizard.select_slot(slots[0].id)
    wizard.next()
    if address:
        located = await wizard.resolve_address(address)
        if not located:
            print(f"{YELLOW}Could not resolve address ({located.message}); using demo address{RESET}")
            wizard.select_location(DEMO_LOCATION)
    else:
        wizard.select_location(DEMO_LOCATION)
    wizard.set_notes("Parked in the visitor lot")
    wizard.next()

    for label, value in wizard.review_summary().items():
        step(f"{label:>8}: {value}")

    booked = await wizard.confirm()
    if not booked:
        print(f"{RED}Booking failed: {booked.message}{RESET}")
        return 1
    appointment = booked.value
    say(f"Booked {appointment.service.name} for {appointment.formatted_price}")

    employee = await app.users.create_profile(
        User(name="Ben Detailer", email="ben@example.com", phone="3125550100",
             role=UserRole.EMPLOYEE, is_available=True),
        auth_uid="employee-ben",
    )
    assigned = await app.lifecycle.assign_employee(appointment.id, employee)
    step(f"{assigned.message}; status: {assigned.value.status.value}")
    step(f"Employee screens: {[s.value for s in screens_for(employee.role)]}")

    convo = await app.relay.get_or_create_conversation(
        customer.auth_uid, customer.name, employee.auth_uid, employee.name, appointment.id
    )
    await app.relay.send_message(
        convo.id, employee.auth_uid, employee.name, customer.auth_uid, "On my way!"
    )
    convo = await app.relay.get_conversation(convo.id)
    step(f"Unread for customer: {convo.unread_for(customer.auth_uid)}")

    await app.lifecycle.start_service(appointment.id)
    await app.lifecycle.complete(appointment.id)
    paid = await app.payments.process_payment(appointment.id, "pm_demo")
    say(f"Payment: {paid.message} ({paid.value.formatted_amount})")

    stats = await app.appointments.revenue_stats()
    say(f"Revenue total {stats.total:.2f}, this week {stats.this_week:.2f}")
    return 0


def print_slots(start: date, days: int) -> int:
    slots = generate_slots_for_range(start, start + timedelta(days=days - 1))
    current = None
    for slot in slots:
        if slot.formatted_date != current:
            current = slot.formatted_date
            print(f"{BOLD}{current}{RESET}")
        print(f"  {slot.formatted_time_range}")
    print(f"{DIM}{len(slots)} slots{RESET}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=f"{settings.business.name} booking core")
    sub = parser.add_subparsers(dest="command", required=True)

    demo = sub.add_parser("demo", help="Run one booking end-to-end against the in-memory store")
    demo.add_argument(
        "--address", default="",
        help="Geocode this address instead of using the built-in demo location",
    )

    slots = sub.add_parser("slots", help="Print the slots generated for a date range")
    slots.add_argument("--start", type=date.fromisoformat, default=date.today())
    slots.add_argument("--days", type=int, default=7)

    args = parser.parse_args()
    if args.command == "demo":
        sys.exit(asyncio.run(run_demo(args.address)))
    sys.exit(print_slots(args.start, args.days))


if __name__ == "__main__":
    main()
