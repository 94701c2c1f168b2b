from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_tracker.models.fuel_purchase import FuelPurchase
from fuel_tracker.models.mileage_session import MileageSession
from fuel_tracker.services.derived import average_price_per_unit
from fuel_tracker.services.money import quantize_km, quantize_money, quantize_volume
from fuel_tracker.services.validation import normalize_vehicle


@dataclass(frozen=True)
class DateRange:
    """Inclusive on both ends."""

    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


def month_range(*, year: int, month: int) -> DateRange:
    start = date(year, month, 1)
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    return DateRange(start=start, end=next_month - timedelta(days=1))


@dataclass(kw_only=True)
class SummaryTotals:
    total_quantity: Decimal = Decimal("0.000")
    total_cost: Decimal = Decimal("0.00")
    total_tax: Decimal = Decimal("0.00")
    total_distance: Decimal = Decimal("0.0")
    transaction_count: int = 0

    @property
    def average_price_per_unit(self) -> Decimal:
        return average_price_per_unit(total_cost=self.total_cost, total_quantity=self.total_quantity)

    def add_purchase(self, purchase: FuelPurchase) -> None:
        self.total_quantity = quantize_volume(self.total_quantity + purchase.fuel_quantity)
        self.total_cost = quantize_money(self.total_cost + purchase.total_price)
        self.total_tax = quantize_money(self.total_tax + (purchase.tax_paid or Decimal("0")))
        self.transaction_count += 1


@dataclass(kw_only=True)
class VehicleSummary(SummaryTotals):
    vehicle: str


@dataclass(frozen=True)
class FuelSummary:
    period: DateRange
    vehicle: str | None
    rows: list[VehicleSummary] = field(default_factory=list)
    totals: SummaryTotals = field(default_factory=SummaryTotals)


def _closed_distance_by_vehicle(
    sessions: Iterable[MileageSession],
    *,
    window: DateRange,
    default_vehicle: str | None,
) -> dict[str, Decimal]:
    distances: dict[str, Decimal] = {}
    for record in sessions:
        distance = record.total_distance
        if distance is None or record.session_date not in window:
            continue
        name = normalize_vehicle(record.vehicle, default=default_vehicle)
        distances[name] = quantize_km(distances.get(name, Decimal("0")) + distance)
    return distances


def summarize_fuel_purchases(
    purchases: Iterable[FuelPurchase],
    sessions: Iterable[MileageSession] = (),
    *,
    start: date,
    end: date,
    vehicle: str | None = None,
    default_vehicle: str | None = None,
) -> FuelSummary:
    """
    Reduce the purchases dated within [start, end] into one row per vehicle plus a grand total.

    The distance of a row is the sum of closed mileage sessions for the same vehicle dated
    within the window; purchases and sessions are not linked record-by-record.
    Rows are ordered by vehicle name. Nothing matching yields no rows and zero totals.
    """
    window = DateRange(start=start, end=end)
    wanted = normalize_vehicle(vehicle, default=default_vehicle) if vehicle is not None and vehicle.strip() else None

    by_vehicle: dict[str, VehicleSummary] = {}
    for purchase in purchases:
        if purchase.purchase_date not in window:
            continue
        name = normalize_vehicle(purchase.vehicle, default=default_vehicle)
        if wanted is not None and name != wanted:
            continue
        row = by_vehicle.get(name)
        if row is None:
            row = by_vehicle[name] = VehicleSummary(vehicle=name)
        row.add_purchase(purchase)

    distances = _closed_distance_by_vehicle(sessions, window=window, default_vehicle=default_vehicle)
    totals = SummaryTotals()
    rows = [by_vehicle[name] for name in sorted(by_vehicle)]
    for row in rows:
        row.total_distance = distances.get(row.vehicle, Decimal("0.0"))
        totals.total_quantity = quantize_volume(totals.total_quantity + row.total_quantity)
        totals.total_cost = quantize_money(totals.total_cost + row.total_cost)
        totals.total_tax = quantize_money(totals.total_tax + row.total_tax)
        totals.total_distance = quantize_km(totals.total_distance + row.total_distance)
        totals.transaction_count += row.transaction_count

    return FuelSummary(period=window, vehicle=wanted, rows=rows, totals=totals)


def mileage_totals_by_vehicle(
    sessions: Iterable[MileageSession],
    canonical: Iterable[str] = (),
    *,
    default_vehicle: str | None = None,
) -> dict[str, Decimal]:
    """Distance over all closed sessions per vehicle; canonical vehicles always appear, at 0 if unused."""
    totals: dict[str, Decimal] = {name: Decimal("0.0") for name in canonical}
    for record in sessions:
        distance = record.total_distance
        if distance is None:
            continue
        name = normalize_vehicle(record.vehicle, default=default_vehicle)
        totals[name] = quantize_km(totals.get(name, Decimal("0")) + distance)
    return totals


async def fuel_summary(
    session: AsyncSession,
    *,
    start: date,
    end: date,
    vehicle: str | None = None,
    default_vehicle: str | None = None,
) -> FuelSummary:
    purchases = (
        await session.execute(
            select(FuelPurchase)
            .where(FuelPurchase.purchase_date >= start, FuelPurchase.purchase_date <= end)
            .order_by(FuelPurchase.purchase_date, FuelPurchase.id)
        )
    ).scalars().all()
    sessions = (
        await session.execute(
            select(MileageSession).where(
                MileageSession.session_date >= start,
                MileageSession.session_date <= end,
                MileageSession.end_mileage.is_not(None),
            )
        )
    ).scalars().all()
    return summarize_fuel_purchases(
        purchases,
        sessions,
        start=start,
        end=end,
        vehicle=vehicle,
        default_vehicle=default_vehicle,
    )
