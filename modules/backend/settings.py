# File path: modules/backend/settings.py

import logging
from datetime import datetime
from typing import Optional

from modules.backend.client import BackendError, TableClient, public_client

logger = logging.getLogger(__name__)


def last_updated_key(table: str) -> str:
    return f"{table}_last_updated"


def update_last_updated(table: str, client: Optional[TableClient] = None) -> bool:
    """Stamp system_settings['<table>_last_updated'] with the current UTC time."""
    client = client or public_client()
    try:
        client.upsert(
            "system_settings",
            {"key": last_updated_key(table), "value": datetime.utcnow().isoformat()},
            on_conflict="key",
        )
        return True
    except BackendError as e:
        logger.error("Database error in update_last_updated(%s): %s", table, e)
        return False


def get_last_updated(table: str, client: Optional[TableClient] = None) -> Optional[str]:
    client = client or public_client()
    try:
        rows = client.select("system_settings", {"key": last_updated_key(table)}, limit=1)
    except BackendError as e:
        logger.error("Database error in get_last_updated(%s): %s", table, e)
        return None
    return rows[0]["value"] if rows else None
