from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from fuel_tracker.schemas.common import JsonDecimal


class FuelPurchaseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    purchase_date: date
    odometer_reading: JsonDecimal
    fuel_quantity: JsonDecimal
    total_price: JsonDecimal
    price_per_unit: JsonDecimal
    tax_paid: JsonDecimal
    start_mileage: JsonDecimal | None
    vehicle: str
    created_at: datetime
