from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


# Column precisions: odometer/distance NUMERIC(10,1), volume (10,3), money (10,2), unit price (10,3).
KM_STEP = Decimal("0.1")
VOLUME_STEP = Decimal("0.001")
MONEY_STEP = Decimal("0.01")
UNIT_PRICE_STEP = Decimal("0.001")

# Exclusive upper bounds implied by the precisions above.
KM_LIMIT = Decimal("1000000000")
VOLUME_LIMIT = Decimal("10000000")
MONEY_LIMIT = Decimal("100000000")
UNIT_PRICE_LIMIT = Decimal("10000000")


def _quantize(value: Decimal, step: Decimal) -> Decimal:
    return Decimal(value).quantize(step, rounding=ROUND_HALF_UP)


def quantize_km(value: Decimal) -> Decimal:
    return _quantize(value, KM_STEP)


def quantize_volume(value: Decimal) -> Decimal:
    return _quantize(value, VOLUME_STEP)


def quantize_money(value: Decimal) -> Decimal:
    return _quantize(value, MONEY_STEP)


def quantize_unit_price(value: Decimal) -> Decimal:
    return _quantize(value, UNIT_PRICE_STEP)


def parse_decimal(value: object) -> Decimal:
    """
    Parse user input (JSON number or numeric string) into a finite Decimal.

    Raises ValueError for blanks, booleans, non-numeric strings, NaN and infinities.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError("not a number")
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        # str() keeps the shortest repr, so 12.4 stays 12.4 instead of its binary expansion.
        number = Decimal(str(value))
    elif isinstance(value, str):
        s = value.strip().replace(" ", "")
        if not s:
            raise ValueError("not a number")
        try:
            number = Decimal(s)
        except InvalidOperation as e:
            raise ValueError("not a number") from e
    else:
        raise ValueError("not a number")

    if not number.is_finite():
        raise ValueError("not a number")
    return number
