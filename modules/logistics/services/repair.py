# File path: modules/logistics/services/repair.py
# Fill the job-status tabs of the logistics page from linked purchase orders.
# Writes go through the service-role client (vendor_operations / job_timelines).

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from modules.backend import BackendError, TableClient, handle_db_error, parse_datetime, public_client, service_client
from modules.logistics.services.linking import link_purchase_orders_to_jobs
from modules.shared.status import PO_STATUS_IN_PROGRESS, TIMELINE_COMPLETED

logger = logging.getLogger(__name__)

DEFAULT_LEAD_DAYS = 14
UNKNOWN_VENDOR = "Unknown Vendor"


@dataclass
class RepairReport:
    linked: int = 0
    vendor_operations: int = 0
    timeline_entries: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def message(self) -> str:
        text = (
            f"Linked {self.linked} purchase orders, created {self.vendor_operations} vendor operations "
            f"and {self.timeline_entries} timeline entries"
        )
        if self.errors:
            text += f" ({len(self.errors)} errors: {'; '.join(self.errors)})"
        return text


def get_vendor_operations(job_id: Optional[int] = None, client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    client = client or public_client()
    filters = {"job_id": job_id} if job_id is not None else None
    try:
        return client.select("vendor_operations", filters, order_by="id")
    except BackendError as e:
        handle_db_error(e, "get_vendor_operations")
        return []


def get_job_timelines(job_id: int, client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    client = client or public_client()
    try:
        return client.select("job_timelines", {"job_id": job_id}, order_by="date")
    except BackendError as e:
        handle_db_error(e, "get_job_timelines")
        return []


def _day(value, default: datetime) -> datetime:
    try:
        parsed = parse_datetime(value)
    except ValueError:
        parsed = None
    return parsed or default


def build_vendor_operations(linked_pos: Iterable[Dict[str, Any]], today: Optional[datetime] = None) -> List[Dict[str, Any]]:
    today = today or datetime.utcnow()
    out = []
    for po in linked_pos:
        if not po.get("job_id"):
            continue
        start = _day(po.get("issue_date"), today)
        end = _day(po.get("expected_date"), today + timedelta(days=DEFAULT_LEAD_DAYS))
        out.append({
            "job_id": po["job_id"],
            "operation": po.get("description") or f"Vendor operation for {po['po_number']}",
            "vendor": po.get("vendor") or UNKNOWN_VENDOR,
            "date_range": f"{start.date().isoformat()} to {end.date().isoformat()}",
            "status": po.get("status") or PO_STATUS_IN_PROGRESS,
            "notes": f"Created from PO {po['po_number']}",
        })
    return out


def build_timeline_entries(
    linked_pos: Iterable[Dict[str, Any]],
    today: Optional[datetime] = None,
    skip_job_ids: Iterable[int] = (),
) -> List[Dict[str, Any]]:
    today = today or datetime.utcnow()
    skip = set(skip_job_ids)
    out = []
    for po in linked_pos:
        if not po.get("job_id") or po["job_id"] in skip:
            continue
        vendor = po.get("vendor") or UNKNOWN_VENDOR
        out.append({
            "job_id": po["job_id"],
            "title": "Purchase Order Created",
            "date": _day(po.get("issue_date"), today).isoformat(),
            "description": f"PO {po['po_number']} for {vendor} created",
            "status": TIMELINE_COMPLETED,
            "vendor": vendor,
        })
    return out


def fix_logistics_data(client: Optional[TableClient] = None, today: Optional[datetime] = None) -> RepairReport:
    """
    Link purchase orders, then create vendor operations (only when that table
    is empty) and "Purchase Order Created" timeline entries for jobs with none.
    Safe to run repeatedly.
    """
    client = client or service_client()
    today = today or datetime.utcnow()
    report = RepairReport()

    try:
        report.linked = link_purchase_orders_to_jobs(client)
    except BackendError as e:
        report.errors.append(f"linking: {e}")
        logger.error("Purchase order linking failed: %s", e)

    try:
        linked_pos = client.select("purchase_orders", [("job_id", "isnot", None)], order_by="id")
    except BackendError as e:
        report.errors.append(f"purchase_orders: {e}")
        handle_db_error(e, "fix_logistics_data")
        return report

    if not linked_pos:
        logger.info("No linked purchase orders; nothing to build")
        return report

    try:
        if client.count("vendor_operations") == 0:
            vendor_ops = build_vendor_operations(linked_pos, today)
            if vendor_ops:
                client.insert("vendor_operations", vendor_ops)
                report.vendor_operations = len(vendor_ops)
                logger.info("Created %d vendor operations", len(vendor_ops))
    except BackendError as e:
        report.errors.append(f"vendor_operations: {e}")
        logger.error("Vendor operation repair failed: %s", e)

    try:
        existing = client.select("job_timelines")
        entries = build_timeline_entries(linked_pos, today, skip_job_ids={t["job_id"] for t in existing})
        if entries:
            client.insert("job_timelines", entries)
            report.timeline_entries = len(entries)
            logger.info("Created %d timeline entries", len(entries))
    except BackendError as e:
        report.errors.append(f"job_timelines: {e}")
        logger.error("Timeline repair failed: %s", e)

    return report
