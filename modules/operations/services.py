# File path: modules/operations/services.py

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from modules.backend import BackendError, TableClient, handle_db_error, public_client
from modules.backend.settings import update_last_updated
from modules.operations.reconcile import reconcile_operation, to_job_operation, to_sap_operation

logger = logging.getLogger(__name__)

SAP_CONFLICT = "order_number,operation_number"
JOB_OP_CONFLICT = "Order,Oper./Act."


def get_sap_operations(client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    client = client or public_client()
    try:
        return client.select("sap_operations", order_by="order_number")
    except BackendError as e:
        handle_db_error(e, "get_sap_operations")
        return []


def get_order_operations(order_number: str, client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    """
    Canonical operations for one order: sap_operations first, job_operations
    (matched on Order or Sales Document) when the first table has none.
    """
    client = client or public_client()
    order_number = (order_number or "").strip()
    if not order_number:
        return []

    try:
        rows = client.select(
            "sap_operations",
            {"order_number": order_number},
            order_by="operation_number",
        )
        if rows:
            return [reconcile_operation(r, order_number) for r in rows]

        rows = client.select(
            "job_operations",
            or_filters=[("Order", "eq", order_number), ("Sales Document", "eq", order_number)],
            order_by="Oper./Act.",
        )
    except BackendError as e:
        handle_db_error(e, "get_order_operations")
        return []

    return [reconcile_operation(r, order_number) for r in rows]


def upsert_sap_operations(rows: Iterable[Dict[str, Any]], client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    """Either row shape in; rows without an order or operation number are skipped."""
    client = client or public_client()
    mapped = [to_sap_operation(r) for r in rows]
    mapped = [r for r in mapped if r["order_number"] and r["operation_number"]]
    if not mapped:
        return []

    saved = client.upsert("sap_operations", mapped, on_conflict=SAP_CONFLICT)
    update_last_updated("sap_operations", client)
    logger.info("Upserted %d sap operations", len(saved))
    return saved


def upsert_job_operations(rows: Iterable[Dict[str, Any]], client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    client = client or public_client()
    mapped = [to_job_operation(r) for r in rows]
    mapped = [r for r in mapped if r["Order"] and r["Oper./Act."]]
    if not mapped:
        return []

    saved = client.upsert("job_operations", mapped, on_conflict=JOB_OP_CONFLICT)
    update_last_updated("job_operations", client)
    logger.info("Upserted %d job operations", len(saved))
    return saved


def import_operations_workbook(path: str, client: Optional[TableClient] = None) -> Dict[str, int]:
    """Load an SAP operations export into both operation tables."""
    from modules.imports.excel import map_sap_row, read_sheet_rows

    client = client or public_client()
    rows = [map_sap_row(r) for r in read_sheet_rows(path)]
    rows = [r for r in rows if r["Order"] and r["Oper./Act."]]

    sap = upsert_sap_operations(rows, client)
    job_ops = upsert_job_operations(rows, client)
    logger.info("Imported %d operation rows from %s", len(rows), path)
    return {"rows": len(rows), "sap_operations": len(sap), "job_operations": len(job_ops)}
