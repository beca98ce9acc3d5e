# File path: modules/work_centers/routes/index.py

from flask import flash, redirect, render_template, request, url_for

from modules.backend import BackendError
from modules.user.decorators import login_required, manager_required
from modules.work_centers import work_centers_bp
from modules.work_centers.services.metrics import BUCKETS
from modules.work_centers.services.work_center_service import (
    all_work_center_metrics,
    get_jobs_by_work_center,
    get_work_center_metrics,
    update_work_centers_from_operations,
    utilization_overview,
)


@work_centers_bp.route("/")
@login_required
def work_centers_index():
    overview = utilization_overview()
    metrics = all_work_center_metrics()
    return render_template(
        "work_centers/index.html",
        overview=overview,
        metrics=metrics,
        buckets=BUCKETS,
    )


@work_centers_bp.route("/<name>")
@login_required
def work_center_detail(name):
    status = (request.args.get("status") or "").strip() or None
    return render_template(
        "work_centers/detail.html",
        name=name,
        metrics=get_work_center_metrics(name),
        jobs=get_jobs_by_work_center(name, status=status),
        status=status,
    )


@work_centers_bp.route("/refresh", methods=["POST"])
@manager_required
def work_centers_refresh():
    try:
        rows = update_work_centers_from_operations()
    except BackendError as e:
        flash(str(e), "error")
        return redirect(url_for("work_centers_bp.work_centers_index"))

    if rows:
        flash(f"Refreshed {len(rows)} work centers.", "success")
    else:
        flash("No operations found to derive work centers from.", "warning")
    return redirect(url_for("work_centers_bp.work_centers_index"))
