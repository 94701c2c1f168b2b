from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from fuel_tracker.schemas.common import JsonDecimal


class SummaryTotalsOut(BaseModel):
    total_quantity: JsonDecimal
    total_cost: JsonDecimal
    total_tax: JsonDecimal
    total_distance: JsonDecimal
    transaction_count: int = Field(ge=0)
    average_price_per_unit: JsonDecimal


class VehicleSummaryOut(SummaryTotalsOut):
    vehicle: str


class FuelSummaryOut(BaseModel):
    start_date: date
    end_date: date
    vehicle: str | None
    rows: list[VehicleSummaryOut]
    totals: SummaryTotalsOut
