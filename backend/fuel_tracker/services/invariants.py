from __future__ import annotations

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncConnection

from fuel_tracker.models.fuel_purchase import FuelPurchase
from fuel_tracker.models.mileage_session import MileageSession
from fuel_tracker.services.validation import MIN_FUEL_QUANTITY


def _count(model: type) -> Select:
    return select(func.count()).select_from(model)


INVARIANT_QUERIES = {
    "mileage_sessions.end_before_start": _count(MileageSession).where(
        MileageSession.end_mileage.is_not(None),
        MileageSession.end_mileage < MileageSession.start_mileage,
    ),
    "mileage_sessions.negative_start": _count(MileageSession).where(MileageSession.start_mileage < 0),
    "mileage_sessions.blank_vehicle": _count(MileageSession).where(func.trim(MileageSession.vehicle) == ""),
    "fuel_purchases.missing_unit_price": _count(FuelPurchase).where(FuelPurchase.price_per_unit.is_(None)),
    "fuel_purchases.quantity_below_minimum": _count(FuelPurchase).where(
        FuelPurchase.fuel_quantity < MIN_FUEL_QUANTITY
    ),
    "fuel_purchases.negative_amounts": _count(FuelPurchase).where(
        or_(
            FuelPurchase.odometer_reading < 0,
            FuelPurchase.total_price < 0,
            FuelPurchase.price_per_unit < 0,
            FuelPurchase.tax_paid < 0,
        )
    ),
    "fuel_purchases.blank_vehicle": _count(FuelPurchase).where(func.trim(FuelPurchase.vehicle) == ""),
}


async def collect_violations(conn: AsyncConnection) -> dict[str, int]:
    """Row counts per broken invariant; only non-zero counts are returned."""
    violations: dict[str, int] = {}
    for name, stmt in INVARIANT_QUERIES.items():
        count = int((await conn.scalar(stmt)) or 0)
        if count:
            violations[name] = count
    return violations
