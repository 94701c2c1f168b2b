from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_tracker.core.config import get_settings
from fuel_tracker.core.db import get_session
from fuel_tracker.core.errors import RecordValidationError, storage_errors
from fuel_tracker.core.rate_limit import WRITE_LIMIT_MESSAGE, limiter, write_limit
from fuel_tracker.core.security import require_session_user
from fuel_tracker.schemas.common import MessageOut
from fuel_tracker.schemas.fuel_purchase import FuelPurchaseOut
from fuel_tracker.schemas.pagination import PageOut, page_out
from fuel_tracker.schemas.reports import FuelSummaryOut, SummaryTotalsOut, VehicleSummaryOut
from fuel_tracker.services.fuel_purchases import create_fuel_purchase, delete_fuel_purchase, list_fuel_purchases
from fuel_tracker.services.pagination import paginate
from fuel_tracker.services.reports import SummaryTotals, fuel_summary, month_range
from fuel_tracker.services.spreadsheet import FUEL_PURCHASE_FILENAME, XLSX_MEDIA_TYPE, fuel_purchases_workbook
from fuel_tracker.services.validation import DATE_MESSAGE, normalize_fuel_purchase, parse_day


router = APIRouter(dependencies=[Depends(require_session_user)])


def _totals_fields(totals: SummaryTotals) -> dict[str, Any]:
    return {
        "total_quantity": totals.total_quantity,
        "total_cost": totals.total_cost,
        "total_tax": totals.total_tax,
        "total_distance": totals.total_distance,
        "transaction_count": totals.transaction_count,
        "average_price_per_unit": totals.average_price_per_unit,
    }


def _summary_window(start_date: str | None, end_date: str | None) -> tuple[date, date]:
    if not start_date and not end_date:
        today = date.today()
        window = month_range(year=today.year, month=today.month)
        return window.start, window.end
    if not start_date or not end_date:
        raise HTTPException(status_code=400, detail="start_date and end_date must be given together")
    try:
        start, end = parse_day(start_date), parse_day(end_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=DATE_MESSAGE) from e
    if start > end:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    return start, end


@router.get("", response_model=list[FuelPurchaseOut])
async def list_trips(session: AsyncSession = Depends(get_session)) -> list[FuelPurchaseOut]:
    with storage_errors("Failed to fetch trips"):
        purchases = await list_fuel_purchases(session)
    return [FuelPurchaseOut.model_validate(p) for p in purchases]


@router.get("/paged", response_model=PageOut[FuelPurchaseOut])
async def list_trips_paged(
    page: int = Query(1),
    session: AsyncSession = Depends(get_session),
) -> PageOut[FuelPurchaseOut]:
    with storage_errors("Failed to fetch trips"):
        purchases = await list_fuel_purchases(session)
    return page_out(paginate(purchases, page_size=get_settings().page_size, page=page), FuelPurchaseOut)


@router.post("", response_model=FuelPurchaseOut, status_code=201)
@limiter.limit(write_limit, error_message=WRITE_LIMIT_MESSAGE)
async def create_trip(
    request: Request,
    payload: Any = Body(...),
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(require_session_user),
) -> FuelPurchaseOut:
    try:
        data = normalize_fuel_purchase(payload, default_vehicle=get_settings().default_vehicle)
    except RecordValidationError as e:
        raise HTTPException(status_code=400, detail=e.message) from e

    with storage_errors("Failed to add trip"):
        async with session.begin():
            purchase = await create_fuel_purchase(session, actor=actor, data=data)
    return FuelPurchaseOut.model_validate(purchase)


@router.delete("/{trip_id}", response_model=MessageOut)
@limiter.limit(write_limit, error_message=WRITE_LIMIT_MESSAGE)
async def delete_trip(
    request: Request,
    trip_id: int,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(require_session_user),
) -> MessageOut:
    with storage_errors("Failed to delete trip"):
        async with session.begin():
            deleted = await delete_fuel_purchase(session, actor=actor, purchase_id=trip_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Trip not found")
    return MessageOut(message="Trip deleted successfully")


@router.get("/export")
async def export_trips(session: AsyncSession = Depends(get_session)) -> Response:
    with storage_errors("Failed to export trips"):
        purchases = await list_fuel_purchases(session)
    return Response(
        content=fuel_purchases_workbook(purchases),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{FUEL_PURCHASE_FILENAME}"'},
    )


@router.get("/summary", response_model=FuelSummaryOut)
async def trips_summary(
    start_date: str | None = None,
    end_date: str | None = None,
    vehicle: str | None = None,
    session: AsyncSession = Depends(get_session),
) -> FuelSummaryOut:
    start, end = _summary_window(start_date, end_date)
    with storage_errors("Failed to build summary"):
        summary = await fuel_summary(
            session,
            start=start,
            end=end,
            vehicle=vehicle,
            default_vehicle=get_settings().default_vehicle,
        )
    return FuelSummaryOut(
        start_date=summary.period.start,
        end_date=summary.period.end,
        vehicle=summary.vehicle,
        rows=[VehicleSummaryOut(vehicle=row.vehicle, **_totals_fields(row)) for row in summary.rows],
        totals=SummaryTotalsOut(**_totals_fields(summary.totals)),
    )
