"""Service pricing: base price scaled by the vehicle size multiplier.

No taxes, discounts or dynamic pricing. Amounts are not rounded here;
rounding happens only in display formatting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from emerald_details.schemas.vehicle_schema import VehicleSize

if TYPE_CHECKING:
    from emerald_details.schemas.service_schema import ServicePackage
    from emerald_details.schemas.vehicle_schema import Vehicle

SIZE_MULTIPLIERS: dict[VehicleSize, float] = {
    VehicleSize.COMPACT: 0.9,
    VehicleSize.SEDAN: 1.0,
    VehicleSize.SUV: 1.3,
    VehicleSize.TRUCK: 1.4,
    VehicleSize.VAN: 1.5,
    VehicleSize.LUXURY: 1.6,
}


def multiplier(size: VehicleSize) -> float:
    """Return the fixed price multiplier for a size category."""
    return SIZE_MULTIPLIERS[VehicleSize(size)]


def price(service: ServicePackage, vehicle: Vehicle) -> float:
    """Price of ``service`` for ``vehicle``: ``base_price * multiplier(size)``."""
    return service.base_price * multiplier(vehicle.size)
