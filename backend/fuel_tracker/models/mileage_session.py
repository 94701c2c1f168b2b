from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from fuel_tracker.core.config import DEFAULT_VEHICLE
from fuel_tracker.models.base import Base, CreatedAtMixin, IntegerPrimaryKeyMixin
from fuel_tracker.services.derived import session_distance


class MileageSession(IntegerPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "mileage_sessions"
    __table_args__ = (
        Index("ix_mileage_sessions_session_date", "session_date"),
        {"sqlite_autoincrement": True},
    )

    session_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_mileage: Mapped[Decimal] = mapped_column(Numeric(10, 1), nullable=False)
    # NULL while the session is still in progress.
    end_mileage: Mapped[Decimal | None] = mapped_column(Numeric(10, 1), nullable=True)

    vehicle: Mapped[str] = mapped_column(String(50), nullable=False, server_default=DEFAULT_VEHICLE)

    @property
    def total_distance(self) -> Decimal | None:
        """Recomputed from the two readings on every access; never stored."""
        return session_distance(self.start_mileage, self.end_mileage)

    @property
    def is_open(self) -> bool:
        return self.end_mileage is None
