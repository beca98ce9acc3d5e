# File path: modules/admin/services/seeding.py
# Sample rows for empty tables. Only the admin page and `flask seed-sample-data`
# call into here; read paths never seed.

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from flask import current_app

from modules.backend import BackendError, TableClient, public_client, service_client
from modules.backend.client import SERVICE_ROLE_TABLES
from modules.backend.settings import update_last_updated
from modules.logistics.services.purchase_orders import upsert_purchase_orders
from modules.logistics.services.repair import build_timeline_entries, build_vendor_operations
from modules.operations.reconcile import to_job_operation
from modules.shared.status import (
    SHIPMENT_DELAYED,
    SHIPMENT_DELIVERED,
    SHIPMENT_INBOUND,
    SHIPMENT_IN_TRANSIT,
    SHIPMENT_OUTBOUND,
    SHIPMENT_SCHEDULED,
)
from modules.work_centers.services.metrics import group_by_work_center, summarize_work_center

logger = logging.getLogger(__name__)

SAMPLE_ORDERS = ("100575804", "100575126")

CARRIERS = ("FedEx", "UPS", "DHL", "USPS", "Freight Line A", "Freight Line B")
PENDING_SHIPMENT_STATUSES = (SHIPMENT_SCHEDULED, SHIPMENT_IN_TRANSIT, SHIPMENT_DELAYED)
SHIPMENT_TYPES = (SHIPMENT_INBOUND, SHIPMENT_OUTBOUND)
DELIVERED_SHARE = 0.7


def sample_sap_operations() -> List[Dict[str, Any]]:
    rows = []
    for order in SAMPLE_ORDERS:
        rows.extend([
            {"order_number": order, "operation_number": "0010", "work_center": "MILL",
             "description": "Milling Operation", "short_text": "Mill part",
             "planned_work": 5.0, "actual_work": 2.5, "status": "Not Started"},
            {"order_number": order, "operation_number": "0020", "work_center": "LATHE",
             "description": "Turning Operation", "short_text": "Turn part",
             "planned_work": 3.0, "actual_work": 1.0, "status": "Not Started"},
            {"order_number": order, "operation_number": "0030", "work_center": "SR",
             "description": "Vendor Operation", "short_text": "Send to vendor for coating",
             "planned_work": 8.0, "actual_work": 0.0, "status": "Not Started"},
        ])
    return rows


def sample_job_operations() -> List[Dict[str, Any]]:
    return [to_job_operation(r) for r in sample_sap_operations()]


def sample_jobs(now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    now = now or datetime.utcnow()
    return [
        {"job_number": SAMPLE_ORDERS[0], "title": "Milling Operation", "description": "Milling Operation",
         "status": "In Progress", "progress": 22, "priority": "High", "work_center": "MILL",
         "customer": "Acme Manufacturing", "reference_name": "Pump housing",
         "due_date": (now + timedelta(days=2)).isoformat(), "scheduled_date": now.isoformat()},
        {"job_number": SAMPLE_ORDERS[1], "title": "Milling Operation", "description": "Milling Operation",
         "status": "In Progress", "progress": 22, "priority": "Medium", "work_center": "MILL",
         "customer": "Globex Industrial", "reference_name": "Valve body",
         "due_date": (now + timedelta(days=14)).isoformat(), "scheduled_date": now.isoformat()},
    ]


def sample_purchase_orders(now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    now = now or datetime.utcnow()
    return [
        {"po_number": "4500012001", "vendor": "Coating Specialists Inc", "amount": 1250.0,
         "status": "In Progress", "issue_date": (now - timedelta(days=5)).isoformat(),
         "expected_date": (now + timedelta(days=9)).isoformat(),
         "description": "Coating for order 100575804", "notes": f"For job {SAMPLE_ORDERS[0]}"},
        {"po_number": "4500012002", "vendor": "Precision Heat Treat", "amount": 860.0,
         "status": "Open", "issue_date": (now - timedelta(days=2)).isoformat(),
         "expected_date": (now + timedelta(days=12)).isoformat(),
         "description": "Heat treat", "notes": f"Ref {SAMPLE_ORDERS[1]}"},
        {"po_number": "4500012003", "vendor": "Metals Supply Co", "amount": 3400.0,
         "status": "Received", "issue_date": (now - timedelta(days=20)).isoformat(),
         "expected_date": (now - timedelta(days=6)).isoformat(),
         "received_date": (now - timedelta(days=7)).isoformat(),
         "description": "Bar stock 4140", "notes": "Stock replenishment"},
    ]


def sample_shipment_logs(
    count: Optional[int] = None,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> List[Dict[str, Any]]:
    """
    Shipments over the last 30 days: delivery 1-7 days after shipping, about
    70% delivered (within a day of the expected date).
    """
    if count is None:
        count = int(current_app.config.get("SHIPMENT_SAMPLE_SIZE", 50))
    now = now or datetime.utcnow()
    rng = rng or random.Random()

    logs = []
    for i in range(1, count + 1):
        shipped = now - timedelta(days=rng.randrange(30))
        expected = shipped + timedelta(days=rng.randrange(7) + 1)
        delivered = None
        if rng.random() > 1 - DELIVERED_SHARE:
            delivered = expected + timedelta(days=rng.randrange(3) - 1)

        if delivered:
            status = SHIPMENT_DELIVERED
        else:
            status = PENDING_SHIPMENT_STATUSES[rng.randrange(len(PENDING_SHIPMENT_STATUSES))]
        shipment_type = SHIPMENT_TYPES[rng.randrange(len(SHIPMENT_TYPES))]
        inbound = shipment_type == SHIPMENT_INBOUND

        logs.append({
            "tracking_number": f"TRACK{i:05d}",
            "carrier": CARRIERS[rng.randrange(len(CARRIERS))],
            "shipment_date": shipped.isoformat(),
            "expected_delivery": expected.isoformat(),
            "received_date": delivered.isoformat() if delivered else None,
            "status": status,
            "shipment_type": shipment_type,
            "origin": "Vendor Warehouse" if inbound else "Main Facility",
            "destination": "Main Facility" if inbound else "Customer Location",
            "notes": "Shipment experiencing delays" if status == SHIPMENT_DELAYED else "",
        })
    return logs


def sample_ncrs(now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    now = now or datetime.utcnow()
    return [{
        "ncr_number": f"NCR-{now.year}-0001",
        "job_number": SAMPLE_ORDERS[0],
        "work_order": SAMPLE_ORDERS[0],
        "operation_number": "0010",
        "part_name": "Pump housing",
        "customer_name": "Acme Manufacturing",
        "equipment_type": "CNC Mill",
        "issue_category": "Dimensional Issue",
        "issue_description": "Bore diameter out of tolerance",
        "root_cause": "Worn boring bar insert",
        "corrective_action": "Replace insert, add in-process check",
        "financial_impact": 450.0,
        "planned_hours": 5.0,
        "actual_hours": 7.5,
        "status": "Submitted",
    }]


def sample_work_centers(now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    groups = group_by_work_center(sample_sap_operations())
    return [summarize_work_center(name, ops, now) for name, ops in groups.items()]


def _sample_vendor_operations(client: TableClient, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    return build_vendor_operations(client.select("purchase_orders", [("job_id", "isnot", None)]), now)


def _sample_job_timelines(client: TableClient, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    return build_timeline_entries(client.select("purchase_orders", [("job_id", "isnot", None)]), now)


# Order matters: POs are linked to jobs on write, vendor ops and timelines need linked POs.
SAMPLE_BUILDERS: "Dict[str, Callable[[TableClient], List[Dict[str, Any]]]]" = {
    "jobs": lambda client: sample_jobs(),
    "sap_operations": lambda client: sample_sap_operations(),
    "job_operations": lambda client: sample_job_operations(),
    "purchase_orders": lambda client: sample_purchase_orders(),
    "shipmentlogs": lambda client: sample_shipment_logs(),
    "vendor_operations": _sample_vendor_operations,
    "job_timelines": _sample_job_timelines,
    "ncrs": lambda client: sample_ncrs(),
    "work_centers": lambda client: sample_work_centers(),
}


def _client_for(table: str) -> TableClient:
    if table in SERVICE_ROLE_TABLES or table == "ncrs":
        return service_client()
    return public_client()


def seed_table(table: str, client: Optional[TableClient] = None) -> int:
    """Insert sample rows when the table is empty. Returns rows inserted."""
    if table not in SAMPLE_BUILDERS:
        raise ValueError(f"No sample data for table '{table}'")
    client = client or _client_for(table)

    if client.count(table) > 0:
        logger.info("Table %s already has data; not seeding", table)
        return 0

    rows = SAMPLE_BUILDERS[table](client)
    if not rows:
        return 0

    if table == "purchase_orders":
        result = upsert_purchase_orders(rows, client=client, delay=0)
        inserted = result.rows if result.ok else 0
    else:
        inserted = len(client.insert(table, rows))
        update_last_updated(table, client)

    logger.info("Seeded %d sample rows into %s", inserted, table)
    return inserted


def insert_test_data(tables: Optional[List[str]] = None) -> Dict[str, Any]:
    """Seed every empty table (or the given ones). Errors are collected per table."""
    unknown = sorted(set(tables or ()) - set(SAMPLE_BUILDERS))
    if unknown:
        raise ValueError(f"No sample data for table(s): {', '.join(unknown)}")
    results: Dict[str, Any] = {}
    for table in SAMPLE_BUILDERS:
        if tables is not None and table not in tables:
            continue
        try:
            results[table] = seed_table(table)
        except BackendError as e:
            logger.error("Seeding %s failed: %s", table, e)
            results[table] = f"error: {e}"
    return results
