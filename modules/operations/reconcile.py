# File path: modules/operations/reconcile.py
# Two shapes of the same operation row:
#   sap_operations  -> order_number / operation_number / planned_work / actual_work
#   job_operations  -> "Order" / "Oper./Act." / "Work" / "Actual work" (SAP export headers)
# Everything downstream reads the SAP-named (canonical) shape.

import math
from typing import Any, Dict, Optional

STATUS_IN_PROGRESS = "In Progress"
STATUS_BACKLOG = "Backlog"
STATUS_COMPLETE = "Complete"

VENDOR_WORK_CENTER = "SR"


def to_float(value) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def round_half_up(value: float) -> int:
    """Percentages round .5 up, not to the nearest even integer."""
    return int(math.floor(value + 0.5))


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def reconcile_operation(row: Dict[str, Any], fallback_order: Optional[str] = None) -> Dict[str, Any]:
    """
    Canonical SAP-named row from either shape.

    "Order" and "Sales Document" always both carry a value: whichever one is
    present fills the other, else fallback_order, else "".
    """
    order = _text(row.get("Order")) or _text(row.get("order_number"))
    sales_doc = _text(row.get("Sales Document"))
    fallback = _text(fallback_order)

    out = dict(row)
    out["Order"] = order or sales_doc or fallback
    out["Sales Document"] = sales_doc or order or fallback
    out["Oper./Act."] = _text(row.get("Oper./Act.")) or _text(row.get("operation_number"))
    out["Oper.WorkCenter"] = _text(row.get("Oper.WorkCenter")) or _text(row.get("work_center"))
    out["Description"] = _text(row.get("Description")) or _text(row.get("description"))
    out["Opr. short text"] = _text(row.get("Opr. short text")) or _text(row.get("short_text"))

    work = row.get("Work") if row.get("Work") not in (None, "") else row.get("planned_work")
    actual = row.get("Actual work") if row.get("Actual work") not in (None, "") else row.get("actual_work")
    out["Work"] = to_float(work)
    out["Actual work"] = to_float(actual)
    return out


def to_sap_operation(row: Dict[str, Any]) -> Dict[str, Any]:
    op = reconcile_operation(row)
    return {
        "order_number": op["Order"],
        "operation_number": op["Oper./Act."],
        "work_center": op["Oper.WorkCenter"],
        "description": op["Description"],
        "short_text": op["Opr. short text"],
        "planned_work": op["Work"],
        "actual_work": op["Actual work"],
        "status": "Not Started",
    }


def to_job_operation(row: Dict[str, Any]) -> Dict[str, Any]:
    op = reconcile_operation(row)
    return {
        "Sales Document": op["Sales Document"],
        "Order": op["Order"],
        "Oper./Act.": op["Oper./Act."],
        "Oper.WorkCenter": op["Oper.WorkCenter"],
        "Description": op["Description"],
        "Opr. short text": op["Opr. short text"],
        "Work": op["Work"],
        "Actual work": op["Actual work"],
    }


def remaining_work(planned, actual) -> float:
    return max(0.0, to_float(planned) - to_float(actual))


def classify_operation(planned, actual) -> str:
    planned = to_float(planned)
    actual = to_float(actual)
    if 0 < actual < planned:
        return STATUS_IN_PROGRESS
    if actual == 0 and planned > 0:
        return STATUS_BACKLOG
    return STATUS_COMPLETE


def is_vendor_operation(row: Dict[str, Any]) -> bool:
    work_center = _text(row.get("Oper.WorkCenter") or row.get("work_center"))
    short_text = _text(row.get("Opr. short text") or row.get("short_text"))
    return work_center.upper() == VENDOR_WORK_CENTER or "vendor" in short_text.lower()
