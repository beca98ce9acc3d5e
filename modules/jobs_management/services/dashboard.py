# File path: modules/jobs_management/services/dashboard.py
# Manager dashboard cards, search and tabs over job dicts.

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from modules.backend import parse_datetime
from modules.operations.reconcile import round_half_up
from modules.shared.status import (
    JOB_STATUS_COMPLETED,
    JOB_STATUS_IN_PROGRESS,
    JOB_STATUS_NEW,
    PRIORITY_HIGH,
    TERMINAL_JOB_STATUSES,
)

TAB_ALL = "all"
TAB_OVERDUE = "overdue"
TAB_CRITICAL = "critical"
TABS = (TAB_ALL, TAB_OVERDUE, TAB_CRITICAL)

CRITICAL_PROGRESS = 30
CRITICAL_DUE_DAYS = 3


def _due(job) -> Optional[datetime]:
    try:
        return parse_datetime(job.get("due_date"))
    except ValueError:
        return None


def _percent(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return max(0, round_half_up(part / total * 100))


def is_delayed(job: Dict[str, Any], today: datetime) -> bool:
    due = _due(job)
    return due is not None and due < today and job.get("status") != JOB_STATUS_COMPLETED


def is_critical(job: Dict[str, Any], today: datetime) -> bool:
    due = _due(job)
    return (
        job.get("priority") == PRIORITY_HIGH
        or (job.get("progress") or 0) < CRITICAL_PROGRESS
        or (due is not None and due < today + timedelta(days=CRITICAL_DUE_DAYS)
            and job.get("status") != JOB_STATUS_COMPLETED)
    )


def calculate_metrics(jobs: List[Dict[str, Any]], today: Optional[datetime] = None) -> Dict[str, int]:
    today = today or datetime.utcnow()
    total = len(jobs)
    completed = sum(1 for j in jobs if j.get("status") == JOB_STATUS_COMPLETED)
    delayed = sum(1 for j in jobs if is_delayed(j, today))
    had_issues = sum(1 for j in jobs if j.get("had_issues"))

    return {
        "total_jobs": total,
        "completed_jobs": completed,
        "in_progress_jobs": sum(1 for j in jobs if j.get("status") == JOB_STATUS_IN_PROGRESS),
        "scheduled_jobs": sum(1 for j in jobs if j.get("status") == JOB_STATUS_NEW),
        "delayed_jobs": delayed,
        "on_time_delivery": _percent(completed - delayed, total),
        "quality_rating": _percent(total - had_issues, total),
    }


def filter_jobs(
    jobs: List[Dict[str, Any]],
    query: str = "",
    tab: str = TAB_ALL,
    today: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Active jobs matching the search text, narrowed by tab."""
    today = today or datetime.utcnow()
    needle = (query or "").strip().lower()

    out = []
    for job in jobs:
        if job.get("status") in TERMINAL_JOB_STATUSES:
            continue
        if needle:
            haystack = " ".join(str(job.get(k) or "") for k in ("job_number", "title", "customer")).lower()
            if needle not in haystack:
                continue
        if tab == TAB_OVERDUE and not is_delayed(job, today):
            continue
        if tab == TAB_CRITICAL and not is_critical(job, today):
            continue
        out.append(job)
    return out


def sort_jobs(jobs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """High priority or low progress first, then by due date (undated last)."""
    def key(job):
        urgent = job.get("priority") == PRIORITY_HIGH or (job.get("progress") or 0) < CRITICAL_PROGRESS
        due = _due(job)
        return (0 if urgent else 1, due is None, due or datetime.max)

    return sorted(jobs, key=key)
