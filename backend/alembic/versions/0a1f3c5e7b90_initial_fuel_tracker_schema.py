"""users, fuel purchases, mileage sessions and audit log

Revision ID: 0a1f3c5e7b90
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "0a1f3c5e7b90"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("password_hash", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )

    op.create_table(
        "fuel_purchases",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=False),
        sa.Column("odometer_reading", sa.Numeric(10, 1), nullable=False),
        sa.Column("fuel_quantity", sa.Numeric(10, 3), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("price_per_unit", sa.Numeric(10, 3), nullable=False),
        sa.Column("tax_paid", sa.Numeric(10, 2), nullable=False),
        sa.Column("start_mileage", sa.Numeric(10, 1), nullable=True),
        sa.Column("vehicle", sa.String(length=50), server_default="Nissan Xtrail", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_fuel_purchases_purchase_date", "fuel_purchases", ["purchase_date"])

    op.create_table(
        "mileage_sessions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("start_mileage", sa.Numeric(10, 1), nullable=False),
        sa.Column("end_mileage", sa.Numeric(10, 1), nullable=True),
        sa.Column("vehicle", sa.String(length=50), server_default="Nissan Xtrail", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_mileage_sessions_session_date", "mileage_sessions", ["session_date"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("actor", sa.String(length=200), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("before", sa.JSON(), nullable=True),
        sa.Column("after", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_index("ix_mileage_sessions_session_date", table_name="mileage_sessions")
    op.drop_table("mileage_sessions")
    op.drop_index("ix_fuel_purchases_purchase_date", table_name="fuel_purchases")
    op.drop_table("fuel_purchases")
    op.drop_table("users")
