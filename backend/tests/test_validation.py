from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from fuel_tracker.core.errors import MileageConflictError, RecordValidationError
from fuel_tracker.services.validation import (
    normalize_end_mileage,
    normalize_fuel_purchase,
    normalize_mileage_session,
    normalize_vehicle,
)


def _purchase(**overrides: object) -> dict[str, object]:
    raw: dict[str, object] = {
        "date": "2024-06-01",
        "odometer_reading": 12345.6,
        "fuel_quantity": 40.31,
        "total_price": 81.17,
    }
    raw.update(overrides)
    return raw


def test_fuel_purchase_is_normalized_and_derived() -> None:
    data = normalize_fuel_purchase(_purchase(vehicle="  Subaru Legacy "))

    assert data.purchase_date == date(2024, 6, 1)
    assert data.odometer_reading == Decimal("12345.6")
    assert data.fuel_quantity == Decimal("40.310")
    assert data.total_price == Decimal("81.17")
    assert data.price_per_unit == Decimal("2.014")
    assert data.tax_paid == Decimal("0.00")
    assert data.start_mileage is None
    assert data.vehicle == "Subaru Legacy"


def test_fuel_purchase_accepts_legacy_client_names() -> None:
    data = normalize_fuel_purchase(
        {
            "date": "2024-06-01T08:30:00",
            "odometerKm": "1000",
            "fuelQuantity": "25",
            "priceTotal": "50",
            "pricePerLiter": "1.999",
            "gstPaid": "6.52",
            "startMileage": "990",
        }
    )

    assert data.purchase_date == date(2024, 6, 1)
    assert data.price_per_unit == Decimal("1.999")
    assert data.tax_paid == Decimal("6.52")
    assert data.start_mileage == Decimal("990.0")
    assert data.vehicle == "Nissan Xtrail"


@pytest.mark.parametrize("vehicle", [None, "", "   "])
def test_blank_vehicle_falls_back_to_default(vehicle: object) -> None:
    assert normalize_fuel_purchase(_purchase(vehicle=vehicle)).vehicle == "Nissan Xtrail"
    assert normalize_vehicle(vehicle, default="Nissan Sentra") == "Nissan Sentra"


def test_unparseable_unit_price_counts_as_absent() -> None:
    data = normalize_fuel_purchase(_purchase(total_price=50, fuel_quantity=25, price_per_unit="n/a"))
    assert data.price_per_unit == Decimal("2.000")


@pytest.mark.parametrize(
    ("overrides", "field", "message"),
    [
        ({"date": "06/01/2024"}, "date", "Invalid date format"),
        ({"date": None}, "date", "Invalid date format"),
        ({"odometer_reading": -1}, "odometer_reading", "Odometer must be a positive number"),
        ({"odometer_reading": "abc"}, "odometer_reading", "Odometer must be a positive number"),
        ({"fuel_quantity": 0}, "fuel_quantity", "Fuel quantity must be greater than 0"),
        ({"fuel_quantity": 0.05}, "fuel_quantity", "Fuel quantity must be greater than 0"),
        ({"total_price": -0.01}, "total_price", "Price must be a positive number"),
        ({"total_price": None}, "total_price", "Price must be a positive number"),
        ({"price_per_unit": -2}, "price_per_unit", "Price per liter must be a positive number"),
        ({"tax_paid": -1}, "tax_paid", "GST must be a positive number"),
        ({"tax_paid": True}, "tax_paid", "GST must be a positive number"),
        ({"start_mileage": -5}, "start_mileage", "Start mileage must be a positive number"),
        ({"odometer_reading": "1e9"}, "odometer_reading", "Odometer must be a positive number"),
        ({"odometer_reading": 999999999.96}, "odometer_reading", "Odometer must be a positive number"),
        ({"fuel_quantity": "1e30"}, "fuel_quantity", "Fuel quantity must be greater than 0"),
        ({"total_price": 100000000}, "total_price", "Price must be a positive number"),
        ({"price_per_unit": "1e40"}, "price_per_unit", "Price per liter must be a positive number"),
        ({"tax_paid": "1e28"}, "tax_paid", "GST must be a positive number"),
        ({"start_mileage": "12345678901234.5"}, "start_mileage", "Start mileage must be a positive number"),
        ({"vehicle": "x" * 51}, "vehicle", "Vehicle name must not exceed 50 characters"),
    ],
)
def test_fuel_purchase_field_errors(overrides: dict[str, object], field: str, message: str) -> None:
    with pytest.raises(RecordValidationError) as exc:
        normalize_fuel_purchase(_purchase(**overrides))
    assert exc.value.field == field
    assert exc.value.message == message


def test_first_failure_wins() -> None:
    with pytest.raises(RecordValidationError) as exc:
        normalize_fuel_purchase(_purchase(odometer_reading=-1, fuel_quantity=0, total_price="abc"))
    assert exc.value.field == "odometer_reading"

    with pytest.raises(RecordValidationError) as exc:
        normalize_fuel_purchase(_purchase(date="nope", odometer_reading=-1))
    assert exc.value.field == "date"


def test_vehicle_name_at_limit_is_accepted() -> None:
    assert normalize_fuel_purchase(_purchase(vehicle="v" * 50)).vehicle == "v" * 50


def test_body_must_be_an_object() -> None:
    with pytest.raises(RecordValidationError) as exc:
        normalize_fuel_purchase(["not", "an", "object"])
    assert exc.value.message == "Request body must be a JSON object"


def test_mileage_session_open_and_closed() -> None:
    opened = normalize_mileage_session({"date": "2024-06-01", "startMileage": 1000})
    assert opened.session_date == date(2024, 6, 1)
    assert opened.start_mileage == Decimal("1000.0")
    assert opened.end_mileage is None
    assert opened.vehicle == "Nissan Xtrail"

    closed = normalize_mileage_session(
        {"date": "2024-06-01", "start_mileage": "1000", "end_mileage": "1000", "vehicle": "Nissan Sentra"}
    )
    assert closed.end_mileage == Decimal("1000.0")
    assert closed.vehicle == "Nissan Sentra"


def test_mileage_session_field_errors() -> None:
    with pytest.raises(RecordValidationError) as exc:
        normalize_mileage_session({"date": "2024-06-01"})
    assert exc.value.message == "Start mileage must be a positive number"

    with pytest.raises(RecordValidationError) as exc:
        normalize_mileage_session({"date": "2024-06-01", "start_mileage": 10, "end_mileage": -1})
    assert exc.value.field == "end_mileage"


def test_mileage_session_end_before_start_is_a_conflict() -> None:
    with pytest.raises(MileageConflictError, match="End mileage cannot be less than start mileage"):
        normalize_mileage_session({"date": "2024-06-01", "start_mileage": 1000, "end_mileage": 999.9})


@pytest.mark.parametrize("raw", [{}, {"endMileage": ""}, {"end_mileage": "abc"}, {"end_mileage": -3}])
def test_end_mileage_is_required(raw: dict[str, object]) -> None:
    with pytest.raises(RecordValidationError) as exc:
        normalize_end_mileage(raw)
    assert exc.value.message == "Valid endMileage is required"


def test_end_mileage_parses_legacy_name() -> None:
    assert normalize_end_mileage({"endMileage": "1050"}) == Decimal("1050.0")


def test_values_just_under_column_limits_are_accepted() -> None:
    data = normalize_fuel_purchase(
        _purchase(
            odometer_reading="999999999.9",
            fuel_quantity="9999999.999",
            total_price="99999999.99",
            price_per_unit="9999999.999",
        )
    )
    assert data.odometer_reading == Decimal("999999999.9")
    assert data.fuel_quantity == Decimal("9999999.999")
    assert data.total_price == Decimal("99999999.99")
    assert data.price_per_unit == Decimal("9999999.999")


def test_derived_unit_price_beyond_column_limit_is_rejected() -> None:
    with pytest.raises(RecordValidationError) as exc:
        normalize_fuel_purchase(_purchase(total_price="99999999", fuel_quantity="0.1"))
    assert exc.value.field == "price_per_unit"


@pytest.mark.parametrize("reading", [1e28, "1e30", "1000000000"])
def test_oversized_mileage_readings_are_rejected(reading: object) -> None:
    with pytest.raises(RecordValidationError) as exc:
        normalize_mileage_session({"date": "2024-06-01", "startMileage": reading})
    assert exc.value.message == "Start mileage must be a positive number"

    with pytest.raises(RecordValidationError) as exc:
        normalize_end_mileage({"endMileage": reading})
    assert exc.value.message == "Valid endMileage is required"
