# File path: modules/jobs_management/services/job_service.py
# -V1 Jobs derived from sap_operations (one per order number)
# -V2 Job detail assembles operations, vendor ops, notes, reminders, timeline, NCRs, POs

from __future__ import annotations

import logging
import math
from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from modules.backend import BackendError, TableClient, handle_db_error, parse_datetime, public_client, service_client
from modules.backend.settings import update_last_updated
from modules.logistics.services.purchase_orders import get_purchase_orders_for_job
from modules.logistics.services.repair import get_job_timelines, get_vendor_operations
from modules.operations.reconcile import (
    classify_operation,
    is_vendor_operation,
    reconcile_operation,
    round_half_up,
)
from modules.operations.services import get_sap_operations
from modules.shared.status import (
    JOB_STATUS_COMPLETED,
    JOB_STATUS_IN_PROGRESS,
    JOB_STATUS_NEW,
    PRIORITIES,
    PRIORITY_MEDIUM,
)

logger = logging.getLogger(__name__)

# Embedded at read time, never stored on the jobs row.
EMBEDDED_KEYS = ("sap_data", "vendor_operations", "notes", "reminders", "timeline", "ncr", "purchase_orders")

# Derived from operations on every refresh. Everything else on an existing job is left alone.
DERIVED_FIELDS = ("title", "description", "status", "progress", "work_center")


class JobError(Exception):
    pass


def job_progress(planned: float, actual: float) -> int:
    if planned <= 0:
        return 0
    return round_half_up(actual / planned * 100)


def job_status_for_progress(progress: int) -> str:
    if progress >= 100:
        return JOB_STATUS_COMPLETED
    if progress > 0:
        return JOB_STATUS_IN_PROGRESS
    return JOB_STATUS_NEW


def derive_job(order_number: str, ops: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Job row for one order from its operations (either shape)."""
    canonical = [reconcile_operation(op, order_number) for op in ops]
    first = canonical[0]
    planned = math.fsum(op["Work"] for op in canonical)
    actual = math.fsum(op["Actual work"] for op in canonical)
    progress = job_progress(planned, actual)

    return {
        "job_number": order_number,
        "title": first["Description"] or first["Opr. short text"] or f"Job {order_number}",
        "description": first["Description"],
        "status": job_status_for_progress(progress),
        "progress": progress,
        "work_center": first["Oper.WorkCenter"] or None,
        "sap_data": canonical,
    }


def group_operations_by_order(rows: Iterable[Dict[str, Any]]) -> "OrderedDict[str, List[Dict[str, Any]]]":
    groups = OrderedDict()
    for row in rows:
        order = (row.get("order_number") or row.get("Order") or row.get("Sales Document") or "").strip()
        if order:
            groups.setdefault(order, []).append(row)
    return groups


def _storable(job: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in job.items() if k not in EMBEDDED_KEYS}


def upsert_jobs(jobs: Iterable[Dict[str, Any]], client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    client = client or public_client()
    rows = [_storable(j) for j in jobs if j.get("job_number")]
    if not rows:
        return []
    saved = client.upsert("jobs", rows, on_conflict="job_number")
    update_last_updated("jobs", client)
    return saved


def get_jobs(client: Optional[TableClient] = None, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    One job per order in sap_operations, upserted on job_number. New jobs get
    default priority and dates; existing jobs keep their user-managed fields.
    """
    client = client or public_client()
    now = now or datetime.utcnow()
    groups = group_operations_by_order(get_sap_operations(client))
    if not groups:
        return list_jobs(client)

    try:
        existing = {j["job_number"]: j for j in client.select("jobs")}
    except BackendError as e:
        handle_db_error(e, "get_jobs")
        return []

    derived = [derive_job(order, ops) for order, ops in groups.items()]
    rows = []
    for job in derived:
        current = existing.get(job["job_number"])
        if current:
            row = {"job_number": job["job_number"]}
            row.update({f: job[f] for f in DERIVED_FIELDS})
        else:
            row = _storable(job)
            row.update({
                "priority": PRIORITY_MEDIUM,
                "due_date": now.isoformat(),
                "scheduled_date": now.isoformat(),
            })
        rows.append(row)

    try:
        saved = {j["job_number"]: j for j in upsert_jobs(rows, client)}
    except BackendError as e:
        handle_db_error(e, "get_jobs")
        return []

    out = []
    for job in derived:
        merged = dict(saved.get(job["job_number"]) or {})
        merged["sap_data"] = job["sap_data"]
        out.append(merged)
    return out


def list_jobs(client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    client = client or public_client()
    try:
        return client.select("jobs", order_by="job_number")
    except BackendError as e:
        handle_db_error(e, "list_jobs")
        return []


def get_job_row(job_id: int, client: Optional[TableClient] = None) -> Optional[Dict[str, Any]]:
    client = client or public_client()
    try:
        rows = client.select("jobs", {"id": job_id}, limit=1)
    except BackendError as e:
        handle_db_error(e, "get_job_row")
        return None
    return rows[0] if rows else None


def _job_operations(job_number: str, client: TableClient) -> List[Dict[str, Any]]:
    rows = client.select(
        "job_operations",
        or_filters=[("Order", "eq", job_number), ("Sales Document", "eq", job_number)],
        order_by="Oper./Act.",
    )
    if not rows:
        rows = client.select("sap_operations", {"order_number": job_number}, order_by="operation_number")
    return [reconcile_operation(r, job_number) for r in rows]


def _vendor_rows_from_operations(ops: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "operation": op["Opr. short text"] or op["Description"],
            "vendor": "",
            "date_range": "",
            "status": classify_operation(op["Work"], op["Actual work"]),
            "notes": f"Operation {op['Oper./Act.']} at {op['Oper.WorkCenter']}",
            "source": "operations",
        }
        for op in ops
        if is_vendor_operation(op)
    ]


def _job_ncrs(job_number: str) -> List[Dict[str, Any]]:
    try:
        return service_client().select("ncrs", {"job_number": job_number}, order_by="created_at", desc=True)
    except BackendError as e:
        handle_db_error(e, "get_job_by_number (ncrs)")
        return []


def get_job_by_number(job_number: str, client: Optional[TableClient] = None) -> Optional[Dict[str, Any]]:
    client = client or public_client()
    job_number = (job_number or "").strip()
    if not job_number:
        return None

    try:
        rows = client.select("jobs", {"job_number": job_number}, limit=1)
        if not rows:
            return None
        job = dict(rows[0])
        job["sap_data"] = _job_operations(job_number, client)
        job["notes"] = client.select("job_notes", {"job_id": job["id"]}, order_by="created_at", desc=True)
        job["reminders"] = client.select("job_reminders", {"job_id": job["id"]}, order_by="date")
    except BackendError as e:
        handle_db_error(e, "get_job_by_number")
        return None

    job["vendor_operations"] = get_vendor_operations(job["id"], client) + _vendor_rows_from_operations(job["sap_data"])
    job["timeline"] = get_job_timelines(job["id"], client)
    job["ncr"] = _job_ncrs(job_number)
    job["purchase_orders"] = get_purchase_orders_for_job(job["id"], client)
    return job


def update_priority(job_id: int, priority: str, client: Optional[TableClient] = None) -> Dict[str, Any]:
    client = client or public_client()
    priority = (priority or "").strip().title()
    if priority not in PRIORITIES:
        raise JobError(f"Priority must be one of: {', '.join(PRIORITIES)}")
    rows = client.update("jobs", {"priority": priority}, {"id": job_id})
    if not rows:
        raise JobError(f"Job {job_id} not found")
    return rows[0]


def add_note(job_id: int, title: str, content: str, client: Optional[TableClient] = None) -> Dict[str, Any]:
    client = client or public_client()
    title = (title or "").strip()
    content = (content or "").strip()
    if not title or not content:
        raise JobError("Note title and content are required.")
    if not get_job_row(job_id, client):
        raise JobError(f"Job {job_id} not found")
    return client.insert("job_notes", {"job_id": job_id, "title": title, "content": content})[0]


def add_reminder(job_id: int, date, description: str, client: Optional[TableClient] = None) -> Dict[str, Any]:
    client = client or public_client()
    description = (description or "").strip()
    if not description:
        raise JobError("Reminder description is required.")
    try:
        when = parse_datetime(date)
    except ValueError:
        when = None
    if when is None:
        raise JobError("Reminder date is invalid.")
    if not get_job_row(job_id, client):
        raise JobError(f"Job {job_id} not found")
    return client.insert("job_reminders", {"job_id": job_id, "date": when, "description": description})[0]
