# File path: modules/work_centers/services/work_center_service.py

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from modules.backend import BackendError, TableClient, handle_db_error, public_client
from modules.backend.settings import update_last_updated
from modules.operations.reconcile import classify_operation, reconcile_operation, remaining_work, round_half_up
from modules.operations.services import get_sap_operations
from modules.shared.status import WORK_CENTER_RUNNING
from modules.work_centers.services.metrics import (
    bucket_hours,
    group_by_work_center,
    in_bucket,
    operation_status,
    summarize_work_center,
    work_center_metrics,
)

logger = logging.getLogger(__name__)


def upsert_work_centers(rows: Iterable[Dict[str, Any]], client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    client = client or public_client()
    rows = [r for r in rows if r.get("name")]
    if not rows:
        return []
    saved = client.upsert("work_centers", rows, on_conflict="name")
    update_last_updated("work_centers", client)
    return saved


def update_work_centers_from_operations(
    client: Optional[TableClient] = None,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Rebuild the work_centers snapshot from sap_operations."""
    client = client or public_client()
    groups = group_by_work_center(get_sap_operations(client))
    if not groups:
        logger.info("No operations found; work centers left unchanged")
        return []

    rows = [summarize_work_center(name, ops, now) for name, ops in groups.items()]
    saved = upsert_work_centers(rows, client)
    logger.info("Refreshed %d work centers from operations", len(saved))
    return saved


def get_stored_work_centers(client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    client = client or public_client()
    try:
        return client.select("work_centers", order_by="name")
    except BackendError as e:
        handle_db_error(e, "get_stored_work_centers")
        return []


def get_work_centers(client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    """Derived snapshot when operations exist, otherwise whatever is stored."""
    client = client or public_client()
    try:
        derived = update_work_centers_from_operations(client)
    except BackendError as e:
        handle_db_error(e, "get_work_centers")
        derived = []
    if derived:
        return sorted(derived, key=lambda r: r["name"])
    return get_stored_work_centers(client)


def all_work_center_metrics(client: Optional[TableClient] = None) -> Dict[str, Dict[str, Any]]:
    groups = group_by_work_center(get_sap_operations(client))
    return {name: work_center_metrics(ops) for name, ops in groups.items()}


def _center_operations(name: str, client: Optional[TableClient]) -> List[Dict[str, Any]]:
    client = client or public_client()
    try:
        rows = client.select("sap_operations", {"work_center": name}, order_by="order_number")
    except BackendError as e:
        handle_db_error(e, "work center operations")
        return []
    return [reconcile_operation(r) for r in rows]


def get_work_center_metrics(name: str, client: Optional[TableClient] = None) -> Dict[str, Any]:
    metrics = work_center_metrics(_center_operations(name, client))
    metrics["work_center"] = name
    return metrics


def get_jobs_by_work_center(
    name: str,
    status: Optional[str] = None,
    client: Optional[TableClient] = None,
) -> List[Dict[str, Any]]:
    """
    One entry per job that has operations at the center (or is assigned to it),
    with planned/actual/remaining hours there and an operationStatus of
    Available / In Progress / Backlog.
    """
    client = client or public_client()
    ops = _center_operations(name, client)
    try:
        job_rows = client.select("jobs", order_by="job_number")
    except BackendError as e:
        handle_db_error(e, "get_jobs_by_work_center")
        job_rows = []

    by_number = {j["job_number"]: j for j in job_rows}
    per_order: Dict[str, List[Dict[str, Any]]] = {}
    for op in ops:
        per_order.setdefault(op["Order"], []).append(op)
    for job in job_rows:
        if job.get("work_center") == name:
            per_order.setdefault(job["job_number"], [])

    out = []
    for order in sorted(per_order):
        order_ops = per_order[order]
        planned = math.fsum(op["Work"] for op in order_ops)
        actual = math.fsum(op["Actual work"] for op in order_ops)
        entry = dict(by_number.get(order) or {"job_number": order})
        entry.update({
            "operationStatus": operation_status(planned, actual),
            "planned_hours": planned,
            "actual_hours": actual,
            "remaining_hours": remaining_work(planned, actual),
        })
        out.append(entry)

    if status:
        out = [j for j in out if j["operationStatus"] == status]
    return out


def work_center_details(name: str, bucket: str, client: Optional[TableClient] = None) -> Dict[str, Any]:
    """Jobs in one bucket (available / backlog / in_progress) of a center."""
    client = client or public_client()
    ops = [op for op in _center_operations(name, client) if in_bucket(op, bucket)]

    try:
        jobs = {j["job_number"]: j for j in client.select("jobs")}
    except BackendError as e:
        handle_db_error(e, "work_center_details")
        jobs = {}

    totals: Dict[str, float] = {}
    for op in ops:
        totals[op["Order"]] = totals.get(op["Order"], 0.0) + bucket_hours(op, bucket)

    rows = []
    for order in sorted(totals):
        job = jobs.get(order) or {}
        rows.append({
            "job_number": order,
            "customer": job.get("customer") or "",
            "reference": job.get("reference_name") or job.get("title") or "",
            "total_hours": totals[order],
        })
    return {"work_center": name, "type": bucket, "jobs": rows}


def job_operations_for(job_number: str, name: str, bucket: str, client: Optional[TableClient] = None) -> Dict[str, Any]:
    ops = [
        op for op in _center_operations(name, client)
        if op["Order"] == job_number and in_bucket(op, bucket)
    ]
    return {
        "job_number": job_number,
        "operations": [
            {
                "part_name": op["Description"],
                "work_order_number": op["Order"],
                "operation_number": op["Oper./Act."],
                "task_description": op["Opr. short text"],
                "remaining_work": remaining_work(op["Work"], op["Actual work"]),
                "planned_hours": op["Work"],
                "actual_hours": op["Actual work"],
                "status": classify_operation(op["Work"], op["Actual work"]),
            }
            for op in ops
        ],
    }


def utilization_overview(client: Optional[TableClient] = None) -> Dict[str, Any]:
    centers = get_stored_work_centers(client)
    running = [c for c in centers if c.get("status") == WORK_CENTER_RUNNING]
    avg = sum(c.get("utilization") or 0 for c in centers) / len(centers) if centers else 0
    return {
        "work_centers": centers,
        "average_utilization": round_half_up(avg),
        "running": len(running),
        "idle": len(centers) - len(running),
        "active_jobs": sum(c.get("active_jobs") or 0 for c in centers),
    }
