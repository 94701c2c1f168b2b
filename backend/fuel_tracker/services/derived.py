"""Fields computed from other fields rather than accepted from the caller."""

from __future__ import annotations

from decimal import Decimal

from fuel_tracker.core.errors import RecordValidationError
from fuel_tracker.services.money import quantize_km, quantize_unit_price


ZERO_UNIT_PRICE = Decimal("0.000")


def derive_price_per_unit(
    *,
    total_price: Decimal,
    fuel_quantity: Decimal | None,
    explicit: Decimal | None = None,
) -> Decimal:
    if explicit is not None:
        return quantize_unit_price(explicit)
    if fuel_quantity is None or fuel_quantity <= 0:
        raise RecordValidationError("price_per_unit", "pricePerLiter is required when fuelQuantity is zero")
    return quantize_unit_price(Decimal(total_price) / Decimal(fuel_quantity))


def session_distance(start_mileage: Decimal | None, end_mileage: Decimal | None) -> Decimal | None:
    if start_mileage is None or end_mileage is None:
        return None
    return quantize_km(Decimal(end_mileage) - Decimal(start_mileage))


def average_price_per_unit(*, total_cost: Decimal, total_quantity: Decimal) -> Decimal:
    """Cost-weighted average: total cost over total volume, not a mean of unit prices."""
    if total_quantity <= 0:
        return ZERO_UNIT_PRICE
    return quantize_unit_price(Decimal(total_cost) / Decimal(total_quantity))
