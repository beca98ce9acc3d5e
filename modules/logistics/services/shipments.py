# File path: modules/logistics/services/shipments.py

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from modules.backend import BackendError, TableClient, handle_db_error, parse_datetime, public_client
from modules.backend.settings import update_last_updated
from modules.shared.status import SHIPMENT_OUTBOUND

logger = logging.getLogger(__name__)

RECENT_SHIPMENTS = 3


def get_shipment_logs(client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    client = client or public_client()
    try:
        return client.select("shipmentlogs", order_by="shipment_date", desc=True)
    except BackendError as e:
        handle_db_error(e, "get_shipment_logs")
        return []


def upsert_shipment_logs(rows: Iterable[Dict[str, Any]], client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    """Rows with a tracking number update the existing log; others are inserted."""
    client = client or public_client()
    rows = list(rows)
    if not rows:
        return []
    tracked = [r for r in rows if r.get("tracking_number")]
    untracked = [r for r in rows if not r.get("tracking_number")]

    saved = []
    if tracked:
        saved.extend(client.upsert("shipmentlogs", tracked, on_conflict="tracking_number"))
    if untracked:
        saved.extend(client.insert("shipmentlogs", untracked))
    update_last_updated("shipmentlogs", client)
    logger.info("Saved %d shipment logs", len(saved))
    return saved


def _date(value):
    try:
        return parse_datetime(value)
    except ValueError:
        return None


def inbound_shipments(logs: List[Dict[str, Any]], today: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Shipments not yet received: no received date, or one in the future."""
    today = today or datetime.utcnow()
    out = []
    for log in logs:
        received = _date(log.get("received_date"))
        if received is None or received > today:
            out.append(log)
    return out


def outbound_shipments(logs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [log for log in logs if log.get("shipment_type") == SHIPMENT_OUTBOUND]


def recent_shipments(logs: List[Dict[str, Any]], n: int = RECENT_SHIPMENTS) -> List[Dict[str, Any]]:
    dated = sorted(
        logs,
        key=lambda log: _date(log.get("shipment_date")) or datetime.min,
        reverse=True,
    )
    return dated[:n]
