from datetime import datetime

from flask import Blueprint, render_template, request, session

from modules.jobs_management.services.dashboard import (
    TAB_ALL,
    TABS,
    calculate_metrics,
    filter_jobs,
    sort_jobs,
)
from modules.jobs_management.services.job_service import list_jobs
from modules.user.decorators import login_required

dashboard_bp = Blueprint("dashboard_bp", __name__, url_prefix="/dashboard")

@dashboard_bp.route("/")
@login_required
def dashboard():
    q = (request.args.get("q") or "").strip()
    tab = (request.args.get("tab") or TAB_ALL).strip()
    if tab not in TABS:
        tab = TAB_ALL

    today = datetime.utcnow()
    jobs = list_jobs()
    visible = sort_jobs(filter_jobs(jobs, q, tab, today))

    return render_template(
        "dashboard.html",
        username=session.get("username"),
        metrics=calculate_metrics(jobs, today),
        jobs=visible,
        q=q,
        tab=tab,
        tabs=TABS,
    )
