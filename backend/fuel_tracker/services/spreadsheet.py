from __future__ import annotations

import io
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font

from fuel_tracker.models.fuel_purchase import FuelPurchase
from fuel_tracker.models.mileage_session import MileageSession


XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class ColumnSpec:
    header: str
    key: str
    width: int


FUEL_PURCHASE_SHEET = "Fuel Purchases"
FUEL_PURCHASE_FILENAME = "fuel-purchases.xlsx"
FUEL_PURCHASE_COLUMNS: tuple[ColumnSpec, ...] = (
    ColumnSpec("Date", "date", 12),
    ColumnSpec("Vehicle", "vehicle", 18),
    ColumnSpec("Odometer (km)", "odometer_reading", 14),
    ColumnSpec("Quantity (L)", "fuel_quantity", 14),
    ColumnSpec("Total", "total_price", 12),
    ColumnSpec("Price/L", "price_per_unit", 12),
    ColumnSpec("GST Paid", "tax_paid", 12),
    ColumnSpec("Start Mileage", "start_mileage", 14),
)

MILEAGE_SESSION_SHEET = "Daily Records"
MILEAGE_SESSION_FILENAME = "daily-records.xlsx"
MILEAGE_SESSION_COLUMNS: tuple[ColumnSpec, ...] = (
    ColumnSpec("Date", "date", 12),
    ColumnSpec("Vehicle", "vehicle", 18),
    ColumnSpec("Start (km)", "start_mileage", 14),
    ColumnSpec("End (km)", "end_mileage", 14),
    ColumnSpec("Total (km)", "total_distance", 12),
)


def _cell_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def build_workbook(sheet_name: str, columns: Iterable[ColumnSpec], rows: Iterable[Mapping[str, Any]]) -> bytes:
    """Single-sheet workbook: bold header row, fixed column widths, one row per mapping."""
    columns = list(columns)
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    bold = Font(bold=True)
    for col_idx, column in enumerate(columns, 1):
        cell = ws.cell(row=1, column=col_idx, value=column.header)
        cell.font = bold
        ws.column_dimensions[cell.column_letter].width = column.width

    for row_idx, row in enumerate(rows, 2):
        for col_idx, column in enumerate(columns, 1):
            ws.cell(row=row_idx, column=col_idx, value=_cell_value(row.get(column.key)))

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def fuel_purchase_row(purchase: FuelPurchase) -> dict[str, Any]:
    return {
        "date": purchase.purchase_date,
        "vehicle": purchase.vehicle,
        "odometer_reading": purchase.odometer_reading,
        "fuel_quantity": purchase.fuel_quantity,
        "total_price": purchase.total_price,
        "price_per_unit": purchase.price_per_unit,
        "tax_paid": purchase.tax_paid,
        "start_mileage": purchase.start_mileage,
    }


def mileage_session_row(record: MileageSession) -> dict[str, Any]:
    return {
        "date": record.session_date,
        "vehicle": record.vehicle,
        "start_mileage": record.start_mileage,
        "end_mileage": record.end_mileage,
        "total_distance": record.total_distance,
    }


def fuel_purchases_workbook(purchases: Iterable[FuelPurchase]) -> bytes:
    return build_workbook(FUEL_PURCHASE_SHEET, FUEL_PURCHASE_COLUMNS, (fuel_purchase_row(p) for p in purchases))


def mileage_sessions_workbook(sessions: Iterable[MileageSession]) -> bytes:
    return build_workbook(MILEAGE_SESSION_SHEET, MILEAGE_SESSION_COLUMNS, (mileage_session_row(s) for s in sessions))
