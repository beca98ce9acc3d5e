# File path: modules/admin/services/diagnostics.py
# -V1 Table existence / row counts / sample rows
# -V2 Per-page diagnose + fix (logistics, purchase, work-centers, ncr)

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from modules.backend import BackendError, ConfigError, TableClient, public_client, service_client
from modules.admin.services.seeding import seed_table
from modules.logistics.services.linking import link_purchase_orders_to_jobs
from modules.logistics.services.repair import fix_logistics_data
from modules.work_centers.services.work_center_service import update_work_centers_from_operations

logger = logging.getLogger(__name__)

TABLES = (
    "jobs",
    "job_operations",
    "sap_operations",
    "purchase_orders",
    "shipmentlogs",
    "vendor_operations",
    "job_timelines",
    "ncrs",
    "work_centers",
    "system_settings",
)

PAGE_TABLES = {
    "logistics": ("jobs", "purchase_orders", "shipmentlogs", "vendor_operations", "job_timelines"),
    "purchase": ("jobs", "purchase_orders"),
    "work-centers": ("sap_operations", "job_operations", "work_centers"),
    "ncr": ("ncrs",),
}
PAGES = tuple(PAGE_TABLES)

STATUS_OK = "ok"
STATUS_ISSUES = "issues"


def _diagnostic_client() -> TableClient:
    """Service role when configured (it can see ncrs), otherwise public."""
    try:
        return service_client()
    except ConfigError:
        logger.warning("Service-role key missing; diagnostics run with the public role")
        return public_client()


def check_tables_exist(client: Optional[TableClient] = None) -> Dict[str, Dict[str, Any]]:
    client = client or _diagnostic_client()
    try:
        present = set(client.list_tables())
    except BackendError as e:
        logger.error("Database error in check_tables_exist: %s", e)
        return {table: {"exists": False, "count": None, "error": str(e)} for table in TABLES}

    out = {}
    for table in TABLES:
        entry = {"exists": table in present, "count": None}
        if entry["exists"]:
            try:
                entry["count"] = client.count(table)
            except BackendError as e:
                logger.error("Database error in check_tables_exist(%s): %s", table, e)
                entry["error"] = str(e)
        out[table] = entry
    return out


def debug_table_data(table: str, limit: int = 5, client: Optional[TableClient] = None) -> Dict[str, Any]:
    client = client or _diagnostic_client()
    try:
        rows = client.select(table, limit=limit)
        count = client.count(table)
    except BackendError as e:
        logger.error("Database error in debug_table_data(%s): %s", table, e)
        return {"table": table, "count": 0, "rows": [], "error": str(e)}
    return {"table": table, "count": count, "rows": rows}


def _require_page(page: str) -> None:
    if page not in PAGE_TABLES:
        raise ValueError(f"Unknown page '{page}', expected one of: {', '.join(PAGES)}")


def diagnose_page_data(page: str, client: Optional[TableClient] = None) -> Dict[str, Any]:
    """Read-only: which of the page's tables are missing or empty."""
    _require_page(page)
    client = client or _diagnostic_client()
    status = check_tables_exist(client)

    tables = {t: status[t] for t in PAGE_TABLES[page]}
    problems: List[str] = []
    for table, entry in tables.items():
        if entry.get("error"):
            problems.append(f"{table}: {entry['error']}")
        elif not entry["exists"]:
            problems.append(f"{table} is missing")
        elif not entry["count"]:
            problems.append(f"{table} is empty")

    if page in ("logistics", "purchase") and not problems:
        try:
            unlinked = client.count("purchase_orders", [("job_id", "is", None)])
        except BackendError as e:
            unlinked = 0
            problems.append(f"purchase_orders: {e}")
        if unlinked:
            problems.append(f"{unlinked} purchase orders are not linked to a job")

    if problems:
        return {"status": STATUS_ISSUES, "message": "; ".join(problems), "tables": tables}
    return {"status": STATUS_OK, "message": f"All {page} data looks good", "tables": tables}


def fix_page_data(page: str) -> Dict[str, Any]:
    """Seed the page's empty tables, then run its repair step."""
    _require_page(page)
    seeded = {}
    errors = []

    for table in PAGE_TABLES[page]:
        try:
            seeded[table] = seed_table(table)
        except BackendError as e:
            logger.error("Seeding %s for %s failed: %s", table, page, e)
            errors.append(f"{table}: {e}")

    details = [f"seeded {n} rows into {t}" for t, n in seeded.items() if n]
    try:
        if page == "logistics":
            report = fix_logistics_data()
            details.append(report.message())
            errors.extend(report.errors)
        elif page == "purchase":
            linked = link_purchase_orders_to_jobs()
            details.append(f"linked {linked} purchase orders")
        elif page == "work-centers":
            rows = update_work_centers_from_operations()
            details.append(f"refreshed {len(rows)} work centers")
    except BackendError as e:
        logger.error("Repair for %s failed: %s", page, e)
        errors.append(str(e))

    message = "; ".join(details) or "Nothing to fix"
    if errors:
        message += " (errors: " + "; ".join(errors) + ")"
    return {"success": not errors, "message": message}
