# File path: modules/work_centers/services/metrics.py
# Pure aggregation over operation rows (either shape). No I/O here.

import math
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from modules.operations.reconcile import (
    STATUS_BACKLOG,
    STATUS_COMPLETE,
    STATUS_IN_PROGRESS,
    classify_operation,
    reconcile_operation,
    remaining_work,
    round_half_up,
)
from modules.shared.status import WORK_CENTER_IDLE, WORK_CENTER_RUNNING

HOURS_PER_OPERATOR = 40
MIN_CAPACITY = 100
PEAK_LOAD_EFFICIENCY = 90
LAST_MAINTENANCE_DAYS = 7
NEXT_MAINTENANCE_DAYS = 23
DEFAULT_TYPE = "Manufacturing"

BUCKET_AVAILABLE = "available"
BUCKET_BACKLOG = "backlog"
BUCKET_IN_PROGRESS = "in_progress"
BUCKETS = (BUCKET_AVAILABLE, BUCKET_BACKLOG, BUCKET_IN_PROGRESS)

_BUCKET_STATUS = {
    BUCKET_AVAILABLE: STATUS_COMPLETE,
    BUCKET_BACKLOG: STATUS_BACKLOG,
    BUCKET_IN_PROGRESS: STATUS_IN_PROGRESS,
}


def _canonical(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [reconcile_operation(r) for r in rows]


def group_by_work_center(rows: Iterable[Dict[str, Any]]) -> "OrderedDict[str, List[Dict[str, Any]]]":
    groups = OrderedDict()
    for op in sorted(_canonical(rows), key=lambda r: r["Oper.WorkCenter"]):
        if not op["Oper.WorkCenter"]:
            continue
        groups.setdefault(op["Oper.WorkCenter"], []).append(op)
    return groups


def efficiency(planned: float, actual: float) -> float:
    if planned == 0:
        return 0.0
    return actual / planned * 100


def work_center_metrics(rows: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    ops = _canonical(rows)

    planned = math.fsum(op["Work"] for op in ops)
    actual = math.fsum(op["Actual work"] for op in ops)
    in_progress = math.fsum(
        op["Work"] - op["Actual work"]
        for op in ops
        if classify_operation(op["Work"], op["Actual work"]) == STATUS_IN_PROGRESS
    )
    backlog = math.fsum(op["Work"] for op in ops if op["Actual work"] == 0)
    orders = {op["Order"] for op in ops if op["Order"]}
    eff = efficiency(planned, actual)

    return {
        "total_operations": len(ops),
        "total_orders": len(orders),
        "total_jobs": len(orders),
        "planned_hours": planned,
        "actual_hours": actual,
        "efficiency": eff,
        "utilization_rate": min(100, round_half_up(eff)),
        "in_progress_hours": in_progress,
        "backlog_hours": backlog,
        "available_work_hours": max(0.0, planned - in_progress - backlog),
        "remaining_hours": math.fsum(remaining_work(op["Work"], op["Actual work"]) for op in ops),
        "avg_hours_per_job": planned / len(orders) if orders else 0.0,
        "peak_load": eff >= PEAK_LOAD_EFFICIENCY,
    }


def active_orders(rows: Iterable[Dict[str, Any]]) -> set:
    return {
        op["Order"]
        for op in _canonical(rows)
        if op["Order"] and classify_operation(op["Work"], op["Actual work"]) == STATUS_IN_PROGRESS
    }


def summarize_work_center(name: str, rows: Iterable[Dict[str, Any]], now: Optional[datetime] = None) -> Dict[str, Any]:
    """work_centers row for one center."""
    now = now or datetime.utcnow()
    ops = _canonical(rows)
    metrics = work_center_metrics(ops)
    active = len(active_orders(ops))
    planned = metrics["planned_hours"]

    return {
        "name": name,
        "type": DEFAULT_TYPE,
        "status": WORK_CENTER_RUNNING if active > 0 else WORK_CENTER_IDLE,
        "utilization": min(100, round_half_up(metrics["efficiency"])),
        "active_jobs": active,
        "total_capacity": round_half_up(max(MIN_CAPACITY, planned)),
        "operator_count": max(1, math.ceil(planned / HOURS_PER_OPERATOR)),
        "last_maintenance": (now - timedelta(days=LAST_MAINTENANCE_DAYS)).isoformat(),
        "next_maintenance": (now + timedelta(days=NEXT_MAINTENANCE_DAYS)).isoformat(),
    }


def operation_status(planned, actual) -> str:
    """Available / In Progress / Backlog, the labels used on job cards."""
    status = classify_operation(planned, actual)
    if status == STATUS_COMPLETE:
        return "Available"
    return status


def in_bucket(op: Dict[str, Any], bucket: str) -> bool:
    if bucket not in _BUCKET_STATUS:
        raise ValueError(f"Unknown bucket '{bucket}', expected one of {', '.join(BUCKETS)}")
    return classify_operation(op["Work"], op["Actual work"]) == _BUCKET_STATUS[bucket]


def bucket_hours(op: Dict[str, Any], bucket: str) -> float:
    if bucket == BUCKET_IN_PROGRESS:
        return remaining_work(op["Work"], op["Actual work"])
    return op["Work"]
