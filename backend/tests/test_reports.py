from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_tracker.models.fuel_purchase import FuelPurchase
from fuel_tracker.models.mileage_session import MileageSession
from fuel_tracker.services.reports import (
    fuel_summary,
    mileage_totals_by_vehicle,
    month_range,
    summarize_fuel_purchases,
)


def _purchase(vehicle: str, qty: str, cost: str, *, day: date = date(2024, 6, 10), tax: str = "0") -> FuelPurchase:
    return FuelPurchase(
        purchase_date=day,
        odometer_reading=Decimal("1000.0"),
        fuel_quantity=Decimal(qty),
        total_price=Decimal(cost),
        price_per_unit=Decimal(cost) / Decimal(qty),
        tax_paid=Decimal(tax),
        vehicle=vehicle,
    )


def _session(vehicle: str, start: str, end: str | None, *, day: date = date(2024, 6, 10)) -> MileageSession:
    return MileageSession(
        session_date=day,
        start_mileage=Decimal(start),
        end_mileage=Decimal(end) if end is not None else None,
        vehicle=vehicle,
    )


def test_month_range_is_inclusive() -> None:
    june = month_range(year=2024, month=6)
    assert (june.start, june.end) == (date(2024, 6, 1), date(2024, 6, 30))

    feb = month_range(year=2024, month=2)
    assert feb.end == date(2024, 2, 29)

    dec = month_range(year=2023, month=12)
    assert (dec.start, dec.end) == (date(2023, 12, 1), date(2023, 12, 31))
    assert date(2023, 12, 31) in dec
    assert date(2024, 1, 1) not in dec


def test_summary_groups_by_vehicle() -> None:
    purchases = [
        _purchase("A", "10", "20"),
        _purchase("A", "5", "12"),
        _purchase("B", "8", "16"),
    ]

    summary = summarize_fuel_purchases(purchases, start=date(2024, 6, 1), end=date(2024, 6, 30))

    a, b = summary.rows
    assert a.vehicle == "A"
    assert a.total_quantity == Decimal("15")
    assert a.total_cost == Decimal("32")
    assert a.transaction_count == 2
    assert a.average_price_per_unit == Decimal("2.133")

    assert b.vehicle == "B"
    assert b.total_quantity == Decimal("8")
    assert b.total_cost == Decimal("16")
    assert b.transaction_count == 1
    assert b.average_price_per_unit == Decimal("2.000")

    assert summary.totals.total_quantity == Decimal("23")
    assert summary.totals.total_cost == Decimal("48")
    assert summary.totals.transaction_count == 3
    assert summary.totals.average_price_per_unit == Decimal("2.087")


def test_summary_empty_range_is_not_an_error() -> None:
    purchases = [_purchase("A", "10", "20", day=date(2024, 5, 31))]

    summary = summarize_fuel_purchases(purchases, start=date(2024, 6, 1), end=date(2024, 6, 30))

    assert summary.rows == []
    assert summary.totals.transaction_count == 0
    assert summary.totals.total_cost == Decimal("0")
    assert summary.totals.average_price_per_unit == Decimal("0")


def test_summary_range_bounds_are_inclusive() -> None:
    purchases = [
        _purchase("A", "10", "20", day=date(2024, 6, 1)),
        _purchase("A", "10", "20", day=date(2024, 6, 30)),
        _purchase("A", "10", "20", day=date(2024, 7, 1)),
    ]

    summary = summarize_fuel_purchases(purchases, start=date(2024, 6, 1), end=date(2024, 6, 30))

    assert summary.totals.transaction_count == 2


def test_summary_vehicle_filter_and_default_vehicle() -> None:
    purchases = [
        _purchase("", "10", "20"),
        _purchase("Nissan Xtrail", "5", "10"),
        _purchase("Subaru Legacy", "8", "16"),
    ]

    summary = summarize_fuel_purchases(
        purchases,
        start=date(2024, 6, 1),
        end=date(2024, 6, 30),
        vehicle=" Nissan Xtrail ",
    )

    assert summary.vehicle == "Nissan Xtrail"
    assert [row.vehicle for row in summary.rows] == ["Nissan Xtrail"]
    assert summary.rows[0].transaction_count == 2
    assert summary.rows[0].total_quantity == Decimal("15")


def test_summary_distance_from_closed_sessions_of_same_vehicle() -> None:
    purchases = [_purchase("A", "10", "20"), _purchase("B", "8", "16")]
    sessions = [
        _session("A", "1000", "1050"),
        _session("A", "1050", "1075.5"),
        _session("A", "1075.5", None),
        _session("A", "900", "990", day=date(2024, 7, 2)),
        _session("B", "500", "520"),
        _session("C", "10", "20"),
    ]

    summary = summarize_fuel_purchases(purchases, sessions, start=date(2024, 6, 1), end=date(2024, 6, 30))

    distances = {row.vehicle: row.total_distance for row in summary.rows}
    assert distances == {"A": Decimal("75.5"), "B": Decimal("20.0")}
    assert summary.totals.total_distance == Decimal("95.5")


def test_summary_sums_tax() -> None:
    purchases = [_purchase("A", "10", "20", tax="2.61"), _purchase("A", "5", "12", tax="1.57")]

    summary = summarize_fuel_purchases(purchases, start=date(2024, 6, 1), end=date(2024, 6, 30))

    assert summary.rows[0].total_tax == Decimal("4.18")
    assert summary.totals.total_tax == Decimal("4.18")


def test_mileage_totals_seed_canonical_vehicles() -> None:
    sessions = [
        _session("Nissan Xtrail", "1000", "1050"),
        _session("Nissan Xtrail", "1050", None),
        _session("Camper", "0", "12.5"),
    ]

    totals = mileage_totals_by_vehicle(sessions, ["Nissan Xtrail", "Nissan Sentra", "Subaru Legacy"])

    assert totals == {
        "Nissan Xtrail": Decimal("50.0"),
        "Nissan Sentra": Decimal("0"),
        "Subaru Legacy": Decimal("0"),
        "Camper": Decimal("12.5"),
    }


@pytest.mark.asyncio
async def test_fuel_summary_reads_from_database(db_session: AsyncSession) -> None:
    db_session.add_all(
        [
            _purchase("A", "10", "20"),
            _purchase("A", "5", "12"),
            _purchase("B", "8", "16"),
            _purchase("B", "8", "16", day=date(2024, 7, 1)),
            _session("A", "1000", "1050"),
        ]
    )
    await db_session.commit()

    summary = await fuel_summary(db_session, start=date(2024, 6, 1), end=date(2024, 6, 30))

    assert [(row.vehicle, row.transaction_count) for row in summary.rows] == [("A", 2), ("B", 1)]
    assert summary.rows[0].total_distance == Decimal("50.0")
    assert summary.rows[0].average_price_per_unit == Decimal("2.133")
