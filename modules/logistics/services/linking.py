# File path: modules/logistics/services/linking.py
# Purchase order -> job linking by text match.
#   - PO text = po_number, notes, description, vendor (lower-cased, space joined)
#   - a job matches when its number, or its last "-" segment of 4+ chars, is in that text
#   - jobs are tried in ascending id order; first match wins
#   - POs that already carry a job_id are never touched

import logging
from typing import Any, Dict, List, Optional

from modules.backend import BackendError, TableClient, handle_db_error, public_client

logger = logging.getLogger(__name__)

MIN_SUFFIX_LENGTH = 4
PO_TEXT_FIELDS = ("po_number", "notes", "description", "vendor")


def load_jobs(client: TableClient) -> List[Dict[str, Any]]:
    return client.select("jobs", order_by="id")


def po_search_text(po: Dict[str, Any]) -> str:
    parts = [str(po.get(f)) for f in PO_TEXT_FIELDS if po.get(f)]
    return " ".join(parts).lower()


def job_match_tokens(job_number: str) -> List[str]:
    job_number = (job_number or "").strip().lower()
    if not job_number:
        return []
    tokens = [job_number]
    suffix = job_number.split("-")[-1]
    if suffix != job_number and len(suffix) >= MIN_SUFFIX_LENGTH:
        tokens.append(suffix)
    return tokens


def match_job_id(po: Dict[str, Any], jobs: List[Dict[str, Any]]) -> Optional[int]:
    text = po_search_text(po)
    if not text:
        return None
    for job in jobs:
        for token in job_match_tokens(job.get("job_number")):
            if token in text:
                return job["id"]
    return None


def link_purchase_orders_to_jobs(client: Optional[TableClient] = None) -> int:
    """Link every unlinked PO that matches a job. Returns how many were linked."""
    client = client or public_client()
    try:
        jobs = load_jobs(client)
        unlinked = client.select("purchase_orders", [("job_id", "is", None)], order_by="id")
    except BackendError as e:
        handle_db_error(e, "link_purchase_orders_to_jobs")
        return 0

    if not jobs or not unlinked:
        logger.info("Nothing to link (%d jobs, %d unlinked purchase orders)", len(jobs), len(unlinked))
        return 0

    updates = []
    for po in unlinked:
        job_id = match_job_id(po, jobs)
        if job_id:
            updates.append({"id": po["id"], "job_id": job_id})

    if not updates:
        logger.info("No purchase orders matched a job number")
        return 0

    client.upsert("purchase_orders", updates, on_conflict="id")
    logger.info("Linked %d purchase orders to jobs", len(updates))
    return len(updates)
