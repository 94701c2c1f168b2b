from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_tracker.core.enums import EntityType, SessionStatus
from fuel_tracker.core.errors import MileageConflictError, MileageSessionNotFound
from fuel_tracker.models.mileage_session import MileageSession
from fuel_tracker.services.audit import audit_log
from fuel_tracker.services.validation import END_BEFORE_START_MESSAGE, MileageSessionInput


logger = logging.getLogger(__name__)


def _snapshot(record: MileageSession) -> dict:
    return {
        "session_date": record.session_date,
        "start_mileage": record.start_mileage,
        "end_mileage": record.end_mileage,
        "total_distance": record.total_distance,
        "vehicle": record.vehicle,
    }


async def create_mileage_session(
    session: AsyncSession, *, actor: str, data: MileageSessionInput
) -> MileageSession:
    if data.end_mileage is not None and data.end_mileage < data.start_mileage:
        raise MileageConflictError(END_BEFORE_START_MESSAGE)

    record = MileageSession(
        session_date=data.session_date,
        start_mileage=data.start_mileage,
        end_mileage=data.end_mileage,
        vehicle=data.vehicle,
    )
    session.add(record)
    await session.flush()
    await session.refresh(record)

    await audit_log(
        session,
        actor=actor,
        entity_type=EntityType.MILEAGE_SESSION,
        entity_id=record.id,
        action="create",
        after=_snapshot(record),
    )
    logger.info("Mileage session %s created by %s for %s", record.id, actor, record.vehicle)
    return record


async def list_mileage_sessions(
    session: AsyncSession,
    *,
    status: SessionStatus = SessionStatus.ALL,
    from_date: date | None = None,
    to_date: date | None = None,
) -> list[MileageSession]:
    stmt = select(MileageSession).order_by(MileageSession.session_date.desc(), MileageSession.id.desc())
    if status == SessionStatus.OPEN:
        stmt = stmt.where(MileageSession.end_mileage.is_(None))
    elif status == SessionStatus.CLOSED:
        stmt = stmt.where(MileageSession.end_mileage.is_not(None))
    if from_date:
        stmt = stmt.where(MileageSession.session_date >= from_date)
    if to_date:
        stmt = stmt.where(MileageSession.session_date <= to_date)
    return list((await session.execute(stmt)).scalars().all())


async def close_mileage_session(
    session: AsyncSession,
    *,
    actor: str,
    session_id: int,
    end_mileage: Decimal,
) -> MileageSession:
    """
    Set the end reading of a session.

    Already closed sessions may be closed again (corrects a mistaken reading).
    Nothing is written when the end reading is below the start reading.
    """
    record = await session.get(MileageSession, session_id)
    if record is None:
        raise MileageSessionNotFound("Mileage record not found")
    if end_mileage < record.start_mileage:
        raise MileageConflictError(END_BEFORE_START_MESSAGE)

    before = _snapshot(record)
    record.end_mileage = end_mileage
    await session.flush()

    await audit_log(
        session,
        actor=actor,
        entity_type=EntityType.MILEAGE_SESSION,
        entity_id=record.id,
        action="close",
        before=before,
        after=_snapshot(record),
    )
    logger.info("Mileage session %s closed by %s at %s", record.id, actor, end_mileage)
    return record


async def delete_mileage_session(session: AsyncSession, *, actor: str, session_id: int) -> bool:
    """Fuel purchases pointing at this session's start reading are left untouched."""
    record = await session.get(MileageSession, session_id)
    if record is None:
        return False

    before = _snapshot(record)
    await session.delete(record)
    await session.flush()

    await audit_log(
        session,
        actor=actor,
        entity_type=EntityType.MILEAGE_SESSION,
        entity_id=session_id,
        action="delete",
        before=before,
    )
    logger.info("Mileage session %s deleted by %s", session_id, actor)
    return True
