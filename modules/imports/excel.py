# File path: modules/imports/excel.py
"""Spreadsheet (XLSX) import for purchase orders and SAP operation exports."""

from __future__ import annotations

import logging
import zipfile
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from modules.backend import TableClient, parse_datetime, public_client
from modules.operations.reconcile import reconcile_operation, to_float

logger = logging.getLogger(__name__)

# Day 25569 is 1970-01-01 in the 1900 date system.
EXCEL_EPOCH_OFFSET_DAYS = 25569
MS_PER_DAY = 86400 * 1000

VENDOR_SEPARATOR = "     "

STATUS_CANCELLED = "Cancelled"
STATUS_OPEN = "Open"
STATUS_COMPLETED = "Completed"

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class SpreadsheetImportError(Exception):
    pass


def excel_serial_to_datetime(value) -> Optional[datetime]:
    """
    Excel serial day number -> aware UTC datetime, rounded to the millisecond.
    Date/datetime cells pass through, strings are parsed as ISO dates.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            ms = round((float(value) - EXCEL_EPOCH_OFFSET_DAYS) * MS_PER_DAY)
            return _UNIX_EPOCH + timedelta(milliseconds=ms)
        except (OverflowError, ValueError) as e:
            raise SpreadsheetImportError(f"Date serial out of range: {value!r}") from e

    text = str(value).strip()
    try:
        return excel_serial_to_datetime(float(text))
    except ValueError:
        pass
    try:
        parsed = parse_datetime(text)
    except ValueError as e:
        raise SpreadsheetImportError(f"Unrecognised date value: {value!r}") from e
    return parsed.replace(tzinfo=timezone.utc) if parsed else None


def to_iso_z(value: Optional[datetime]) -> Optional[str]:
    """2023-03-15T00:00:00.000Z style, always UTC."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def read_sheet_rows(path) -> List[Dict[str, Any]]:
    """First worksheet as header-keyed dicts. Blank rows are dropped."""
    path = Path(path)
    if not path.exists():
        raise SpreadsheetImportError(f"File not found: {path}")

    try:
        wb = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
        raise SpreadsheetImportError(f"Cannot read workbook {path}: {e}") from e

    try:
        ws = wb.worksheets[0]
        rows = list(ws.iter_rows(values_only=True))
    finally:
        wb.close()

    if not rows:
        return []

    header = [str(h).strip() if h is not None else "" for h in rows[0]]
    out = []
    for values in rows[1:]:
        if all(v is None or v == "" for v in values):
            continue
        row = {h: v for h, v in zip(header, values) if h}
        out.append(row)
    return out


def _text(value) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def split_vendor(value) -> Optional[str]:
    """'100234     ACME STEEL' -> 'ACME STEEL'; no separator keeps the whole value."""
    text = _text(value)
    if text is None:
        return None
    parts = str(value).split(VENDOR_SEPARATOR)
    if len(parts) > 1 and parts[1].strip():
        return parts[1].strip()
    return text


def purchase_order_status(row: Dict[str, Any]) -> str:
    if row.get("Deletion Indicator"):
        return STATUS_CANCELLED
    if to_float(row.get("Still to be delivered (qty)")) > 0:
        return STATUS_OPEN
    return STATUS_COMPLETED


def map_purchase_order_row(row: Dict[str, Any]) -> Dict[str, Any]:
    quantity = to_float(row.get("Order Quantity"))
    net_price = to_float(row.get("Net price"))
    short_text = _text(row.get("Short Text"))

    mapped = {
        "po_number": _text(row.get("Purchasing Document")),
        "req_tracking_number": _text(row.get("Req. Tracking Number")),
        "item": _text(row.get("Item")),
        "purchasing_group": _text(row.get("Purchasing Group")),
        "issue_date": to_iso_z(excel_serial_to_datetime(row.get("Document Date"))),
        "vendor": split_vendor(row.get("Vendor/supplying plant")),
        "short_text": short_text,
        "description": short_text,
        "order_quantity": quantity,
        "net_price": net_price,
        "remaining_quantity": to_float(row.get("Still to be delivered (qty)")),
        "remaining_value": to_float(row.get("Still to be delivered (value)")),
        "material": _text(row.get("Material")),
        "amount": quantity * net_price,
        "status": purchase_order_status(row),
    }
    if row.get("Delivery Date") not in (None, ""):
        mapped["expected_date"] = to_iso_z(excel_serial_to_datetime(row.get("Delivery Date")))
    return mapped


def map_sap_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """SAP export row -> canonical operation; 'List name' carries the customer."""
    cleaned = {k: (_text(v) if k not in ("Work", "Actual work") else v) for k, v in row.items()}
    op = reconcile_operation(cleaned)
    if cleaned.get("List name"):
        op["customer"] = cleaned["List name"]
    return op


def import_purchase_orders(
    path,
    replace: bool = True,
    client: Optional[TableClient] = None,
    batch_size: Optional[int] = None,
):
    """
    Load a purchase-order export. With replace=True the table is cleared first.
    Rows without a Purchasing Document are skipped.
    """
    from modules.logistics.services.purchase_orders import upsert_purchase_orders

    client = client or public_client()
    raw = read_sheet_rows(path)
    logger.info("Found %d purchase orders in %s", len(raw), path)

    rows = [map_purchase_order_row(r) for r in raw]
    skipped = sum(1 for r in rows if not r["po_number"])
    rows = [r for r in rows if r["po_number"]]
    if skipped:
        logger.warning("Skipped %d rows without a Purchasing Document", skipped)

    if replace:
        cleared = client.delete("purchase_orders", [("id", "neq", 0)])
        logger.info("Cleared %d existing purchase orders", cleared)

    return upsert_purchase_orders(rows, batch_size=batch_size, client=client)
