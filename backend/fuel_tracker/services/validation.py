"""
Validation & normalization of raw submitted fields.

Fields are checked in declaration order and the first failure wins: a
`RecordValidationError` naming that field is raised and nothing after it is
looked at. Wire names are snake_case; the camelCase names sent by the legacy
browser client are accepted as aliases.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from fuel_tracker.core.config import get_settings
from fuel_tracker.core.errors import MileageConflictError, RecordValidationError
from fuel_tracker.services.derived import derive_price_per_unit
from fuel_tracker.services.money import (
    KM_LIMIT,
    MONEY_LIMIT,
    UNIT_PRICE_LIMIT,
    VOLUME_LIMIT,
    parse_decimal,
    quantize_km,
    quantize_money,
    quantize_unit_price,
    quantize_volume,
)


VEHICLE_MAX_LENGTH = 50
MIN_FUEL_QUANTITY = Decimal("0.1")

DATE_MESSAGE = "Invalid date format"
VEHICLE_MESSAGE = f"Vehicle name must not exceed {VEHICLE_MAX_LENGTH} characters"
END_BEFORE_START_MESSAGE = "End mileage cannot be less than start mileage"
UNIT_PRICE_MESSAGE = "Price per liter must be a positive number"


@dataclass(frozen=True)
class NumberField:
    name: str
    message: str
    aliases: tuple[str, ...] = ()
    minimum: Decimal = Decimal("0")
    # Exclusive; matches the column precision.
    limit: Decimal = KM_LIMIT
    required: bool = True
    # Unparseable input counts as "not supplied" instead of failing.
    lenient: bool = False
    quantize: Callable[[Decimal], Decimal] = quantize_km


@dataclass(frozen=True)
class FuelPurchaseInput:
    purchase_date: date
    odometer_reading: Decimal
    fuel_quantity: Decimal
    total_price: Decimal
    price_per_unit: Decimal
    tax_paid: Decimal
    start_mileage: Decimal | None
    vehicle: str


@dataclass(frozen=True)
class MileageSessionInput:
    session_date: date
    start_mileage: Decimal
    end_mileage: Decimal | None
    vehicle: str


FUEL_PURCHASE_FIELDS: tuple[NumberField, ...] = (
    NumberField(
        "odometer_reading",
        "Odometer must be a positive number",
        aliases=("odometerReading", "odometerKm"),
    ),
    NumberField(
        "fuel_quantity",
        "Fuel quantity must be greater than 0",
        aliases=("fuelQuantity",),
        minimum=MIN_FUEL_QUANTITY,
        limit=VOLUME_LIMIT,
        quantize=quantize_volume,
    ),
    NumberField(
        "total_price",
        "Price must be a positive number",
        aliases=("totalPrice", "priceTotal"),
        limit=MONEY_LIMIT,
        quantize=quantize_money,
    ),
    NumberField(
        "price_per_unit",
        "Price per liter must be a positive number",
        aliases=("pricePerUnit", "pricePerLiter"),
        required=False,
        lenient=True,
        limit=UNIT_PRICE_LIMIT,
        quantize=quantize_unit_price,
    ),
    NumberField(
        "tax_paid",
        "GST must be a positive number",
        aliases=("taxPaid", "gstPaid"),
        required=False,
        limit=MONEY_LIMIT,
        quantize=quantize_money,
    ),
    NumberField(
        "start_mileage",
        "Start mileage must be a positive number",
        aliases=("startMileage",),
        required=False,
    ),
)

MILEAGE_SESSION_FIELDS: tuple[NumberField, ...] = (
    NumberField(
        "start_mileage",
        "Start mileage must be a positive number",
        aliases=("startMileage",),
    ),
    NumberField(
        "end_mileage",
        "End mileage must be a positive number",
        aliases=("endMileage",),
        required=False,
    ),
)

END_MILEAGE_FIELD = NumberField("end_mileage", "Valid endMileage is required", aliases=("endMileage",))


def _pick(raw: Mapping[str, Any], name: str, aliases: tuple[str, ...]) -> Any:
    for key in (name, *aliases):
        if key in raw:
            return raw[key]
    return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _require_mapping(raw: object) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise RecordValidationError("body", "Request body must be a JSON object")
    return raw


def parse_day(value: Any) -> date:
    """Parse a calendar date; ISO datetimes are truncated to their date part."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("not a date")
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text).date()


def normalize_vehicle(value: Any, *, default: str | None = None) -> str:
    """Trimmed vehicle name; empty or missing falls back to the default vehicle."""
    fallback = default or get_settings().default_vehicle
    if value is None:
        return fallback
    name = str(value).strip()
    return name or fallback


def _date_field(raw: Mapping[str, Any], name: str, aliases: tuple[str, ...]) -> date:
    value = _pick(raw, name, aliases)
    try:
        return parse_day(value)
    except ValueError:
        raise RecordValidationError(name, DATE_MESSAGE) from None


def _number_field(raw: Mapping[str, Any], rule: NumberField) -> Decimal | None:
    value = _pick(raw, rule.name, rule.aliases)
    if _is_blank(value):
        if rule.required:
            raise RecordValidationError(rule.name, rule.message)
        return None
    try:
        number = parse_decimal(value)
    except ValueError:
        if rule.lenient:
            return None
        raise RecordValidationError(rule.name, rule.message) from None
    if number < rule.minimum or number >= rule.limit:
        raise RecordValidationError(rule.name, rule.message)
    try:
        quantized = rule.quantize(number)
    except InvalidOperation:
        raise RecordValidationError(rule.name, rule.message) from None
    # Rounding can carry a value just under the limit onto it.
    if quantized >= rule.limit:
        raise RecordValidationError(rule.name, rule.message)
    return quantized


def _vehicle_field(raw: Mapping[str, Any], default: str | None) -> str:
    name = normalize_vehicle(raw.get("vehicle"), default=default)
    if len(name) > VEHICLE_MAX_LENGTH:
        raise RecordValidationError("vehicle", VEHICLE_MESSAGE)
    return name


def normalize_fuel_purchase(raw: object, *, default_vehicle: str | None = None) -> FuelPurchaseInput:
    body = _require_mapping(raw)
    purchase_date = _date_field(body, "date", ("purchase_date",))
    # Dict comprehension evaluates in declaration order, so the first bad field raises.
    values = {rule.name: _number_field(body, rule) for rule in FUEL_PURCHASE_FIELDS}
    vehicle = _vehicle_field(body, default_vehicle)

    price_per_unit = derive_price_per_unit(
        total_price=values["total_price"],
        fuel_quantity=values["fuel_quantity"],
        explicit=values["price_per_unit"],
    )
    if price_per_unit >= UNIT_PRICE_LIMIT:
        raise RecordValidationError("price_per_unit", UNIT_PRICE_MESSAGE)
    tax_paid = values["tax_paid"]
    return FuelPurchaseInput(
        purchase_date=purchase_date,
        odometer_reading=values["odometer_reading"],
        fuel_quantity=values["fuel_quantity"],
        total_price=values["total_price"],
        price_per_unit=price_per_unit,
        tax_paid=tax_paid if tax_paid is not None else quantize_money(Decimal("0")),
        start_mileage=values["start_mileage"],
        vehicle=vehicle,
    )


def normalize_mileage_session(raw: object, *, default_vehicle: str | None = None) -> MileageSessionInput:
    body = _require_mapping(raw)
    session_date = _date_field(body, "date", ("session_date",))
    values = {rule.name: _number_field(body, rule) for rule in MILEAGE_SESSION_FIELDS}
    vehicle = _vehicle_field(body, default_vehicle)

    start, end = values["start_mileage"], values["end_mileage"]
    if end is not None and end < start:
        raise MileageConflictError(END_BEFORE_START_MESSAGE)
    return MileageSessionInput(session_date=session_date, start_mileage=start, end_mileage=end, vehicle=vehicle)


def normalize_end_mileage(raw: object) -> Decimal:
    body = _require_mapping(raw)
    end = _number_field(body, END_MILEAGE_FIELD)
    if end is None:
        raise RecordValidationError(END_MILEAGE_FIELD.name, END_MILEAGE_FIELD.message)
    return end
