from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_tracker.core.config import get_settings
from fuel_tracker.core.db import get_session
from fuel_tracker.core.enums import SessionStatus
from fuel_tracker.core.errors import (
    MileageConflictError,
    MileageSessionNotFound,
    RecordValidationError,
    storage_errors,
)
from fuel_tracker.core.rate_limit import WRITE_LIMIT_MESSAGE, limiter, write_limit
from fuel_tracker.core.security import require_session_user
from fuel_tracker.schemas.common import MessageOut
from fuel_tracker.schemas.mileage_session import MileageCloseOut, MileageSessionOut, MileageTotalsOut
from fuel_tracker.schemas.pagination import PageOut, page_out
from fuel_tracker.services.mileage_sessions import (
    close_mileage_session,
    create_mileage_session,
    delete_mileage_session,
    list_mileage_sessions,
)
from fuel_tracker.services.pagination import paginate
from fuel_tracker.services.reports import mileage_totals_by_vehicle
from fuel_tracker.services.spreadsheet import MILEAGE_SESSION_FILENAME, XLSX_MEDIA_TYPE, mileage_sessions_workbook
from fuel_tracker.services.validation import normalize_end_mileage, normalize_mileage_session


router = APIRouter(dependencies=[Depends(require_session_user)])


@router.get("", response_model=list[MileageSessionOut])
async def list_daily_mileage(
    status: SessionStatus = Query(SessionStatus.ALL),
    session: AsyncSession = Depends(get_session),
) -> list[MileageSessionOut]:
    with storage_errors("Failed to fetch mileage records"):
        records = await list_mileage_sessions(session, status=status)
    return [MileageSessionOut.model_validate(r) for r in records]


@router.get("/paged", response_model=PageOut[MileageSessionOut])
async def list_daily_mileage_paged(
    page: int = Query(1),
    status: SessionStatus = Query(SessionStatus.ALL),
    session: AsyncSession = Depends(get_session),
) -> PageOut[MileageSessionOut]:
    with storage_errors("Failed to fetch mileage records"):
        records = await list_mileage_sessions(session, status=status)
    return page_out(paginate(records, page_size=get_settings().page_size, page=page), MileageSessionOut)


@router.get("/totals", response_model=MileageTotalsOut)
async def daily_mileage_totals(session: AsyncSession = Depends(get_session)) -> MileageTotalsOut:
    settings = get_settings()
    with storage_errors("Failed to fetch mileage totals"):
        records = await list_mileage_sessions(session, status=SessionStatus.CLOSED)
    totals = mileage_totals_by_vehicle(
        records,
        settings.canonical_vehicle_names,
        default_vehicle=settings.default_vehicle,
    )
    return MileageTotalsOut(totals=totals)


@router.post("", response_model=MileageSessionOut, status_code=201)
@limiter.limit(write_limit, error_message=WRITE_LIMIT_MESSAGE)
async def create_daily_mileage(
    request: Request,
    payload: Any = Body(...),
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(require_session_user),
) -> MileageSessionOut:
    try:
        data = normalize_mileage_session(payload, default_vehicle=get_settings().default_vehicle)
        with storage_errors("Failed to add mileage record"):
            async with session.begin():
                record = await create_mileage_session(session, actor=actor, data=data)
    except (RecordValidationError, MileageConflictError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return MileageSessionOut.model_validate(record)


@router.put("/{record_id}", response_model=MileageCloseOut)
@limiter.limit(write_limit, error_message=WRITE_LIMIT_MESSAGE)
async def close_daily_mileage(
    request: Request,
    record_id: int,
    payload: Any = Body(...),
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(require_session_user),
) -> MileageCloseOut:
    try:
        end_mileage = normalize_end_mileage(payload)
        with storage_errors("Failed to update mileage record"):
            async with session.begin():
                record = await close_mileage_session(
                    session,
                    actor=actor,
                    session_id=record_id,
                    end_mileage=end_mileage,
                )
    except MileageSessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except (RecordValidationError, MileageConflictError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return MileageCloseOut(message="Mileage record updated successfully", total_distance=record.total_distance)


@router.delete("/{record_id}", response_model=MessageOut)
@limiter.limit(write_limit, error_message=WRITE_LIMIT_MESSAGE)
async def delete_daily_mileage(
    request: Request,
    record_id: int,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(require_session_user),
) -> MessageOut:
    with storage_errors("Failed to delete mileage record"):
        async with session.begin():
            deleted = await delete_mileage_session(session, actor=actor, session_id=record_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Mileage record not found")
    return MessageOut(message="Mileage record deleted successfully")


@router.get("/export")
async def export_daily_mileage(session: AsyncSession = Depends(get_session)) -> Response:
    with storage_errors("Failed to export mileage records"):
        records = await list_mileage_sessions(session)
    return Response(
        content=mileage_sessions_workbook(records),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{MILEAGE_SESSION_FILENAME}"'},
    )
