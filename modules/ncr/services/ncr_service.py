# File path: modules/ncr/services/ncr_service.py
# NCRs sit behind row-level security: every call uses the service-role client.

from __future__ import annotations

import logging
import re
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from modules.backend import BackendError, TableClient, handle_db_error, parse_datetime, service_client
from modules.backend.settings import update_last_updated
from modules.ncr.constants import (
    NCR_CATEGORIES,
    NCR_NUMBER_FIELDS,
    NCR_SEARCH_FIELDS,
    NCR_STATUS,
    NCR_STATUS_SUBMITTED,
    NCR_TEXT_FIELDS,
)

logger = logging.getLogger(__name__)

NCR_NUMBER_RE = re.compile(r"^NCR-(\d{4})-(\d+)$")


class NCRValidationError(Exception):
    pass


def normalize_ncr(row: Dict[str, Any]) -> Dict[str, Any]:
    """Every field present: missing text -> "", missing numbers -> 0."""
    out = dict(row)
    for f in NCR_TEXT_FIELDS:
        out[f] = "" if out.get(f) is None else str(out[f])
    for f in NCR_NUMBER_FIELDS:
        try:
            out[f] = float(out.get(f) or 0)
        except (TypeError, ValueError):
            out[f] = 0.0
    if not out["status"]:
        out["status"] = NCR_STATUS_SUBMITTED
    return out


def get_ncrs(client: Optional[TableClient] = None) -> List[Dict[str, Any]]:
    try:
        client = client or service_client()
        rows = client.select("ncrs", order_by="created_at", desc=True)
    except BackendError as e:
        handle_db_error(e, "get_ncrs")
        return []
    return [normalize_ncr(r) for r in rows]


def get_ncr(ncr_id: int, client: Optional[TableClient] = None) -> Optional[Dict[str, Any]]:
    try:
        client = client or service_client()
        rows = client.select("ncrs", {"id": ncr_id}, limit=1)
    except BackendError as e:
        handle_db_error(e, "get_ncr")
        return None
    return normalize_ncr(rows[0]) if rows else None


def validate_ncr(ncr: Dict[str, Any]) -> None:
    if not (ncr.get("job_number") or "").strip():
        raise NCRValidationError("Job number is required.")

    category = (ncr.get("issue_category") or "").strip()
    if category and category not in NCR_CATEGORIES:
        raise NCRValidationError(f"Issue category must be one of: {', '.join(NCR_CATEGORIES)}")

    status = (ncr.get("status") or "").strip()
    if status and status not in NCR_STATUS:
        raise NCRValidationError(f"Status must be one of: {', '.join(NCR_STATUS)}")

    for f in NCR_NUMBER_FIELDS:
        raw = ncr.get(f)
        if raw in (None, ""):
            continue
        try:
            value = float(raw)
        except (TypeError, ValueError):
            raise NCRValidationError(f"{f.replace('_', ' ').capitalize()} must be a number.")
        if value < 0:
            raise NCRValidationError(f"{f.replace('_', ' ').capitalize()} cannot be negative.")


def _max_sequence(client: TableClient, year: int) -> int:
    rows = client.select("ncrs", [("ncr_number", "ilike", f"NCR-{year}-%")])
    seq = 0
    for r in rows:
        m = NCR_NUMBER_RE.match(r.get("ncr_number") or "")
        if m and int(m.group(1)) == year:
            seq = max(seq, int(m.group(2)))
    return seq


def format_ncr_number(year: int, seq: int) -> str:
    return f"NCR-{year}-{seq:04d}"


def next_ncr_number(client: Optional[TableClient] = None, year: Optional[int] = None) -> str:
    client = client or service_client()
    year = year or datetime.utcnow().year
    return format_ncr_number(year, _max_sequence(client, year) + 1)


def _clean(ncr: Dict[str, Any]) -> Dict[str, Any]:
    row = {}
    for f in NCR_TEXT_FIELDS:
        if f in ncr:
            value = ncr[f]
            row[f] = value.strip() if isinstance(value, str) else value
    for f in NCR_NUMBER_FIELDS:
        if ncr.get(f) not in (None, ""):
            row[f] = float(ncr[f])
    if ncr.get("created_at"):
        row["created_at"] = ncr["created_at"]
    return row


def upsert_ncrs(
    ncr_or_list: Union[Dict[str, Any], List[Dict[str, Any]]],
    client: Optional[TableClient] = None,
) -> List[Dict[str, Any]]:
    """
    Create or update on ncr_number. A missing number becomes NCR-<year>-<seq>;
    an existing created_at is kept.
    """
    client = client or service_client()
    items = [ncr_or_list] if isinstance(ncr_or_list, dict) else list(ncr_or_list)
    for ncr in items:
        validate_ncr(ncr)

    year = datetime.utcnow().year
    seq = None
    rows = []
    for ncr in items:
        row = _clean(ncr)
        if not row.get("ncr_number"):
            if seq is None:
                seq = _max_sequence(client, year)
            seq += 1
            row["ncr_number"] = format_ncr_number(year, seq)
            row.setdefault("status", NCR_STATUS_SUBMITTED)
        if "status" in row and not row["status"]:
            row["status"] = NCR_STATUS_SUBMITTED
        rows.append(row)

    saved = client.upsert("ncrs", rows, on_conflict="ncr_number")
    update_last_updated("ncrs", client)
    logger.info("Saved %d NCRs", len(saved))
    return [normalize_ncr(r) for r in saved]


def update_ncr(ncr_id: int, values: Dict[str, Any], client: Optional[TableClient] = None) -> Optional[Dict[str, Any]]:
    client = client or service_client()
    current = get_ncr(ncr_id, client)
    if not current:
        return None
    merged = dict(current, **values)
    validate_ncr(merged)
    rows = client.update("ncrs", _clean(values), {"id": ncr_id})
    return normalize_ncr(rows[0]) if rows else None


def filter_ncrs(ncrs: List[Dict[str, Any]], query: str = "") -> List[Dict[str, Any]]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(ncrs)
    return [
        n for n in ncrs
        if any(needle in str(n.get(f) or "").lower() for f in NCR_SEARCH_FIELDS)
    ]


def ncr_metrics(ncrs: List[Dict[str, Any]], today: Optional[datetime] = None) -> Dict[str, Any]:
    today = today or datetime.utcnow()
    parts = Counter(n.get("part_name") for n in ncrs if n.get("part_name"))

    ytd = 0
    for n in ncrs:
        try:
            created = parse_datetime(n.get("created_at"))
        except ValueError:
            created = None
        if created is not None and created.year == today.year:
            ytd += 1

    return {
        "total_submitted": len(ncrs),
        "total_ncr_cost": sum(float(n.get("financial_impact") or 0) for n in ncrs),
        "most_affected_part": parts.most_common(1)[0][0] if parts else "None",
        "ncr_ytd": ytd,
    }
