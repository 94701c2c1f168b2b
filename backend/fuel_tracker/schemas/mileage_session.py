from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from fuel_tracker.schemas.common import JsonDecimal


class MileageSessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_date: date
    start_mileage: JsonDecimal
    end_mileage: JsonDecimal | None
    total_distance: JsonDecimal | None
    vehicle: str
    created_at: datetime


class MileageCloseOut(BaseModel):
    message: str
    total_distance: JsonDecimal | None


class MileageTotalsOut(BaseModel):
    totals: dict[str, JsonDecimal]
