# File path: modules/jobs_management/routes/index.py

from flask import flash, redirect, render_template, request, url_for

from modules.jobs_management import jobs_bp
from modules.jobs_management.services.dashboard import sort_jobs
from modules.jobs_management.services.job_service import get_jobs, list_jobs
from modules.user.decorators import login_required, manager_required


@jobs_bp.route("/")
@login_required
def jobs_index():
    q = (request.args.get("q") or "").strip().lower()
    jobs = list_jobs()
    if q:
        jobs = [
            j for j in jobs
            if q in " ".join(str(j.get(k) or "") for k in ("job_number", "title", "customer", "work_center")).lower()
        ]
    return render_template(
        "jobs_management/index.html",
        jobs=sort_jobs(jobs),
        q=q,
    )


@jobs_bp.route("/refresh", methods=["POST"])
@manager_required
def jobs_refresh():
    jobs = get_jobs()
    if jobs:
        flash(f"Refreshed {len(jobs)} jobs from operations.", "success")
    else:
        flash("No operations found; nothing to refresh.", "warning")
    return redirect(url_for("jobs_bp.jobs_index"))
