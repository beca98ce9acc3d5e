# File path: modules/logistics/services/purchase_orders.py

from __future__ import annotations

import logging
import math
import time
from collections import Counter, OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from flask import current_app

from modules.backend import BackendError, TableClient, handle_db_error, parse_datetime, public_client
from modules.backend.settings import update_last_updated
from modules.logistics.services.linking import load_jobs, match_job_id
from modules.shared.status import (
    PO_STATUS_CLOSED,
    PO_STATUS_DELAYED,
    PO_STATUS_IN_PROGRESS,
    PO_STATUS_OPEN,
    PO_STATUS_RECEIVED,
)

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50
TIMELINE_DAYS = 7
CHART_STATUSES = (PO_STATUS_OPEN, PO_STATUS_IN_PROGRESS, PO_STATUS_RECEIVED, PO_STATUS_DELAYED)


@dataclass
class BatchResult:
    batches: int = 0
    succeeded: int = 0
    failed: int = 0
    rows: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0


def get_purchase_orders(client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    client = client or public_client()
    try:
        return client.select("purchase_orders", order_by="issue_date", desc=True)
    except BackendError as e:
        handle_db_error(e, "get_purchase_orders")
        return []


def get_purchase_order_by_number(po_number: str, client: Optional[TableClient] = None) -> Optional[Dict[str, Any]]:
    client = client or public_client()
    try:
        rows = client.select("purchase_orders", {"po_number": (po_number or "").strip()}, limit=1)
    except BackendError as e:
        handle_db_error(e, "get_purchase_order_by_number")
        return None
    return rows[0] if rows else None


def get_purchase_orders_for_job(job_id: int, client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    client = client or public_client()
    try:
        return client.select("purchase_orders", {"job_id": job_id}, order_by="issue_date", desc=True)
    except BackendError as e:
        handle_db_error(e, "get_purchase_orders_for_job")
        return []


def dedupe_by_po_number(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Last occurrence of each po_number wins, kept at its own position."""
    seen = OrderedDict()
    for row in rows:
        key = (row.get("po_number") or "").strip()
        if not key:
            continue
        seen.pop(key, None)
        seen[key] = dict(row, po_number=key)
    return list(seen.values())


def _resolve_job_links(rows: List[Dict[str, Any]], client: TableClient) -> None:
    """
    Populate job_id at write time: an explicit job_number wins, otherwise the
    text match used by the linking repair. A PO already linked in the table
    is only re-linked by an explicit job_number.
    """
    numbers = [(row.pop("job_number", None) or "").strip() for row in rows]
    if all(r.get("job_id") for r in rows):
        return
    jobs = load_jobs(client)
    if not jobs:
        return

    stored = client.select(
        "purchase_orders",
        [("po_number", "in", [r["po_number"] for r in rows]), ("job_id", "isnot", None)],
    )
    linked = {po["po_number"] for po in stored}

    by_number = {j["job_number"]: j["id"] for j in jobs}
    for row, job_number in zip(rows, numbers):
        if row.get("job_id"):
            continue
        if job_number and job_number in by_number:
            row["job_id"] = by_number[job_number]
            continue
        if row["po_number"] in linked:
            continue
        matched = match_job_id(row, jobs)
        if matched:
            row["job_id"] = matched


def upsert_purchase_orders(
    rows: Iterable[Dict[str, Any]],
    batch_size: Optional[int] = None,
    client: Optional[TableClient] = None,
    delay: Optional[float] = None,
) -> BatchResult:
    """
    Upsert on po_number in ceil(N / batch_size) client calls, N counted after
    de-duplication. A failed batch is logged and counted; later batches still run.
    """
    client = client or public_client()
    batch_size = int(batch_size or current_app.config.get("PO_BATCH_SIZE") or DEFAULT_BATCH_SIZE)
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    if delay is None:
        delay = float(current_app.config.get("BATCH_DELAY_SECONDS", 0.1))

    unique = dedupe_by_po_number(rows)
    result = BatchResult(rows=len(unique))
    if not unique:
        return result

    try:
        _resolve_job_links(unique, client)
    except BackendError as e:
        handle_db_error(e, "upsert_purchase_orders (job links)")

    total = math.ceil(len(unique) / batch_size)
    for index in range(total):
        batch = unique[index * batch_size:(index + 1) * batch_size]
        logger.info("Upserting purchase orders batch %d of %d", index + 1, total)
        result.batches += 1
        try:
            client.upsert("purchase_orders", batch, on_conflict="po_number")
            result.succeeded += 1
        except BackendError as e:
            result.failed += 1
            result.errors.append(str(e))
            logger.error("Purchase order batch %d failed (first po %s): %s", index + 1, batch[0]["po_number"], e)

        if delay and index < total - 1:
            time.sleep(delay)

    if result.succeeded:
        update_last_updated("purchase_orders", client)
    return result


def update_purchase_order(po_id: int, values: Dict[str, Any], client: Optional[TableClient] = None) -> Optional[Dict[str, Any]]:
    client = client or public_client()
    rows = client.update("purchase_orders", values, {"id": po_id})
    return rows[0] if rows else None


def purchase_summary(pos: List[Dict[str, Any]], today: Optional[datetime] = None) -> Dict[str, Any]:
    """Cards and charts for the purchase page."""
    today = today or datetime.utcnow()

    def _date(value):
        try:
            return parse_datetime(value)
        except ValueError:
            return None

    open_count = sum(1 for po in pos if po.get("status") == PO_STATUS_OPEN)
    total_value = sum(float(po.get("amount") or 0) for po in pos)

    pending = 0
    late = 0
    for po in pos:
        received = _date(po.get("received_date"))
        expected = _date(po.get("expected_date"))
        if po.get("status") == PO_STATUS_IN_PROGRESS and (received is None or received > today):
            pending += 1
        if expected is not None and expected < today and po.get("status") != PO_STATUS_RECEIVED:
            late += 1

    counts = Counter(po.get("status") for po in pos)
    status_chart = [{"name": s, "value": counts.get(s, 0)} for s in CHART_STATUSES]

    per_day = Counter()
    for po in pos:
        expected = _date(po.get("expected_date"))
        if expected is not None:
            per_day[expected.date().isoformat()] += 1
    delivery_timeline = [
        {"date": day, "deliveries": per_day[day]}
        for day in sorted(per_day)[:TIMELINE_DAYS]
    ]

    return {
        "open_count": open_count,
        "total_value": total_value,
        "pending_deliveries": pending,
        "late_deliveries": late,
        "status_chart": status_chart,
        "delivery_timeline": delivery_timeline,
    }


def po_status_counts(pos: List[Dict[str, Any]]) -> Dict[str, int]:
    counts = Counter(po.get("status") for po in pos)
    return {
        "open": counts.get(PO_STATUS_OPEN, 0),
        "in_progress": counts.get(PO_STATUS_IN_PROGRESS, 0),
        "closed": counts.get(PO_STATUS_CLOSED, 0),
    }
