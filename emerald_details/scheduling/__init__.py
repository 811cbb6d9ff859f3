from emerald_details.scheduling.pricing import SIZE_MULTIPLIERS, multiplier, price
from emerald_details.scheduling.slot_generator import (
    business_days,
    generate_daily_slots,
    generate_slots_for_range,
    is_weekend,
)

__all__ = [
    "SIZE_MULTIPLIERS", "multiplier", "price",
    "business_days", "generate_daily_slots", "generate_slots_for_range", "is_weekend",
]
