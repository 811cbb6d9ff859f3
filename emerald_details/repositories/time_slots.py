"""Time slot repository: availability queries, generation and claiming."""

import logging
from datetime import date
from typing import Optional

from emerald_details.errors import SlotUnavailableError
from emerald_details.repositories.base import Repository
from emerald_details.scheduling.slot_generator import generate_slots_for_range
from emerald_details.schemas.slot_schema import TimeSlot
from emerald_details.store.document_store import FieldFilter
from emerald_details.utils import day_bounds

logger = logging.getLogger(__name__)


class TimeSlotRepository(Repository[TimeSlot]):
    collection = "time_slots"
    model = TimeSlot

    async def for_day(self, day: date) -> list[TimeSlot]:
        start, end = day_bounds(day)
        return await self.find(
            [FieldFilter("date", ">=", start), FieldFilter("date", "<", end)],
            order_by="start_time",
        )

    async def available_for_day(self, day: date) -> list[TimeSlot]:
        """Slots whose date is within ``[startOfDay, startOfDay+1)`` and still available."""
        start, end = day_bounds(day)
        return await self.find(
            [
                FieldFilter("date", ">=", start),
                FieldFilter("date", "<", end),
                FieldFilter("is_available", "==", True),
            ],
            order_by="start_time",
        )

    async def in_range(self, start: date, end: date) -> list[TimeSlot]:
        range_start, _ = day_bounds(start)
        _, range_end = day_bounds(end)
        return await self.find(
            [FieldFilter("date", ">=", range_start), FieldFilter("date", "<", range_end)],
            order_by="start_time",
        )

    async def generate_for_range(
        self,
        start: date,
        end: date,
        employee_id: Optional[str] = None,
        employee_name: Optional[str] = None,
    ) -> list[TimeSlot]:
        """Persist five slots per business day, one write per slot.

        Not deduplicated: running this twice over overlapping dates
        stores duplicate slots.
        """
        slots = generate_slots_for_range(start, end, employee_id, employee_name)
        for slot in slots:
            await self.create(slot)
        logger.info("Generated %d slots from %s to %s", len(slots), start, end)
        return slots

    async def mark_unavailable(self, slot_id: str) -> None:
        """Unconditional write of ``is_available=False``."""
        await self.update_fields(slot_id, {"is_available": False})

    async def claim(self, slot_id: str) -> None:
        """Atomically flip the slot from available to unavailable.

        Raises:
            SlotUnavailableError: If another booking already holds the slot.
            NotFoundError: If the slot does not exist.
        """
        claimed = await self._store.compare_and_set(
            self.collection, slot_id, "is_available", True, False
        )
        if not claimed:
            raise SlotUnavailableError(f"Time slot {slot_id} is no longer available")
        logger.info("Slot claimed: %s", slot_id)

    async def release(self, slot_id: str) -> None:
        await self.update_fields(slot_id, {"is_available": True})
        logger.info("Slot released: %s", slot_id)

    async def assign_employee(self, slot_id: str, employee_id: str, employee_name: str) -> None:
        await self.update_fields(slot_id, {
            "assigned_employee_id": employee_id,
            "assigned_employee_name": employee_name,
        })
