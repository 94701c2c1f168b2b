from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_tracker.core.enums import EntityType
from fuel_tracker.models.fuel_purchase import FuelPurchase
from fuel_tracker.services.audit import audit_log
from fuel_tracker.services.validation import FuelPurchaseInput


logger = logging.getLogger(__name__)


def _snapshot(purchase: FuelPurchase) -> dict:
    return {
        "purchase_date": purchase.purchase_date,
        "odometer_reading": purchase.odometer_reading,
        "fuel_quantity": purchase.fuel_quantity,
        "total_price": purchase.total_price,
        "price_per_unit": purchase.price_per_unit,
        "tax_paid": purchase.tax_paid,
        "start_mileage": purchase.start_mileage,
        "vehicle": purchase.vehicle,
    }


async def create_fuel_purchase(session: AsyncSession, *, actor: str, data: FuelPurchaseInput) -> FuelPurchase:
    purchase = FuelPurchase(
        purchase_date=data.purchase_date,
        odometer_reading=data.odometer_reading,
        fuel_quantity=data.fuel_quantity,
        total_price=data.total_price,
        price_per_unit=data.price_per_unit,
        tax_paid=data.tax_paid,
        start_mileage=data.start_mileage,
        vehicle=data.vehicle,
    )
    session.add(purchase)
    await session.flush()
    await session.refresh(purchase)

    await audit_log(
        session,
        actor=actor,
        entity_type=EntityType.FUEL_PURCHASE,
        entity_id=purchase.id,
        action="create",
        after=_snapshot(purchase),
    )
    logger.info("Fuel purchase %s created by %s for %s", purchase.id, actor, purchase.vehicle)
    return purchase


async def list_fuel_purchases(
    session: AsyncSession,
    *,
    from_date: date | None = None,
    to_date: date | None = None,
) -> list[FuelPurchase]:
    """Newest first; same-day entries ordered by id so the listing is deterministic."""
    stmt = select(FuelPurchase).order_by(FuelPurchase.purchase_date.desc(), FuelPurchase.id.desc())
    if from_date:
        stmt = stmt.where(FuelPurchase.purchase_date >= from_date)
    if to_date:
        stmt = stmt.where(FuelPurchase.purchase_date <= to_date)
    return list((await session.execute(stmt)).scalars().all())


async def delete_fuel_purchase(session: AsyncSession, *, actor: str, purchase_id: int) -> bool:
    """Returns False when no purchase has that id; repeated deletes keep returning False."""
    purchase = await session.get(FuelPurchase, purchase_id)
    if purchase is None:
        return False

    before = _snapshot(purchase)
    await session.delete(purchase)
    await session.flush()

    await audit_log(
        session,
        actor=actor,
        entity_type=EntityType.FUEL_PURCHASE,
        entity_id=purchase_id,
        action="delete",
        before=before,
    )
    logger.info("Fuel purchase %s deleted by %s", purchase_id, actor)
    return True
