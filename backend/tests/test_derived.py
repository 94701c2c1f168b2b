from __future__ import annotations

from decimal import Decimal

import pytest

from fuel_tracker.core.errors import RecordValidationError
from fuel_tracker.models.mileage_session import MileageSession
from fuel_tracker.services.derived import average_price_per_unit, derive_price_per_unit, session_distance


@pytest.mark.parametrize(
    ("total", "quantity", "expected"),
    [
        ("50.00", "25.000", "2.000"),
        ("32.00", "15.000", "2.133"),
        ("81.17", "40.310", "2.014"),
        ("10.00", "3.000", "3.333"),
        ("0.00", "12.000", "0.000"),
    ],
)
def test_unit_price_is_total_over_quantity_rounded_to_three_places(total: str, quantity: str, expected: str) -> None:
    assert derive_price_per_unit(total_price=Decimal(total), fuel_quantity=Decimal(quantity)) == Decimal(expected)


def test_explicit_unit_price_wins() -> None:
    price = derive_price_per_unit(
        total_price=Decimal("50.00"),
        fuel_quantity=Decimal("25.000"),
        explicit=Decimal("1.9999"),
    )
    assert price == Decimal("2.000")


@pytest.mark.parametrize("quantity", [Decimal("0"), Decimal("-1"), None])
def test_unit_price_without_quantity_is_rejected(quantity: Decimal | None) -> None:
    with pytest.raises(RecordValidationError) as exc:
        derive_price_per_unit(total_price=Decimal("50.00"), fuel_quantity=quantity)
    assert exc.value.field == "price_per_unit"
    assert exc.value.message == "pricePerLiter is required when fuelQuantity is zero"


def test_session_distance() -> None:
    assert session_distance(Decimal("1000.0"), None) is None
    assert session_distance(Decimal("1000.0"), Decimal("1050.0")) == Decimal("50.0")
    assert session_distance(Decimal("10.25"), Decimal("20.5")) == Decimal("10.3")


def test_model_distance_follows_end_reading() -> None:
    record = MileageSession(start_mileage=Decimal("1000.0"), end_mileage=None)
    assert record.total_distance is None
    assert record.is_open

    record.end_mileage = Decimal("1012.5")
    assert record.total_distance == Decimal("12.5")
    assert not record.is_open


def test_average_price_is_cost_weighted() -> None:
    assert average_price_per_unit(total_cost=Decimal("32.00"), total_quantity=Decimal("15.000")) == Decimal("2.133")
    assert average_price_per_unit(total_cost=Decimal("10.00"), total_quantity=Decimal("0")) == Decimal("0.000")
