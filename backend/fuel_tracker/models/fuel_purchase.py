from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from fuel_tracker.core.config import DEFAULT_VEHICLE
from fuel_tracker.models.base import Base, CreatedAtMixin, IntegerPrimaryKeyMixin


class FuelPurchase(IntegerPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "fuel_purchases"
    __table_args__ = (
        Index("ix_fuel_purchases_purchase_date", "purchase_date"),
        {"sqlite_autoincrement": True},
    )

    purchase_date: Mapped[date] = mapped_column(Date, nullable=False)
    odometer_reading: Mapped[Decimal] = mapped_column(Numeric(10, 1), nullable=False)
    fuel_quantity: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    price_per_unit: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    tax_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))

    # Informational link to a mileage session's start reading; no foreign key.
    start_mileage: Mapped[Decimal | None] = mapped_column(Numeric(10, 1), nullable=True)

    vehicle: Mapped[str] = mapped_column(String(50), nullable=False, server_default=DEFAULT_VEHICLE)
