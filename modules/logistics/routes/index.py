# File path: modules/logistics/routes/index.py

from datetime import datetime

from flask import flash, redirect, render_template, request, url_for

from modules.backend import BackendError, ConfigError, public_client
from modules.logistics import logistics_bp
from modules.logistics.services.linking import load_jobs
from modules.logistics.services.purchase_orders import (
    get_purchase_orders,
    get_purchase_orders_for_job,
    po_status_counts,
)
from modules.logistics.services.repair import fix_logistics_data, get_job_timelines, get_vendor_operations
from modules.logistics.services.shipments import (
    get_shipment_logs,
    inbound_shipments,
    outbound_shipments,
    recent_shipments,
    upsert_shipment_logs,
)
from modules.shared.status import JOB_STATUS_COMPLETED, SHIPMENT_STATUSES
from modules.user.decorators import login_required, manager_required

TABS = ("dashboard", "po-tracking", "shipment-log", "job-status", "inbound", "outbound")
JOB_TABS = ("vendor-operations", "timeline", "related-pos")
ACTIVE_JOBS_ON_DASHBOARD = 3


def _active_jobs():
    try:
        jobs = load_jobs(public_client())
    except BackendError as e:
        flash(f"Could not load jobs: {e}", "error")
        return []
    return [j for j in jobs if j.get("status") != JOB_STATUS_COMPLETED]


@logistics_bp.route("/")
@login_required
def logistics_index():
    tab = (request.args.get("tab") or "dashboard").strip()
    if tab not in TABS:
        tab = "dashboard"
    job_tab = (request.args.get("job_tab") or "vendor-operations").strip()
    if job_tab not in JOB_TABS:
        job_tab = "vendor-operations"

    pos = get_purchase_orders()
    logs = get_shipment_logs()
    active_jobs = _active_jobs()

    selected_job = None
    job_detail = {}
    job_id = request.args.get("job", type=int)
    if job_id:
        selected_job = next((j for j in active_jobs if j["id"] == job_id), None)
        if selected_job:
            job_detail = {
                "vendor_operations": get_vendor_operations(job_id),
                "timeline": get_job_timelines(job_id),
                "related_pos": get_purchase_orders_for_job(job_id),
            }

    today = datetime.utcnow()
    return render_template(
        "logistics/index.html",
        tab=tab,
        job_tab=job_tab,
        purchase_orders=pos,
        po_counts=po_status_counts(pos),
        shipment_logs=logs,
        recent=recent_shipments(logs),
        inbound=inbound_shipments(logs, today),
        outbound=outbound_shipments(logs),
        active_jobs=active_jobs,
        dashboard_jobs=active_jobs[:ACTIVE_JOBS_ON_DASHBOARD],
        selected_job=selected_job,
        job_detail=job_detail,
        shipment_statuses=SHIPMENT_STATUSES,
    )


@logistics_bp.route("/shipments", methods=["POST"])
@login_required
def logistics_add_shipment():
    row = {
        f: (request.form.get(f) or "").strip() or None
        for f in ("po_number", "vendor", "tracking_number", "carrier", "shipment_type",
                  "shipment_date", "expected_delivery", "status", "origin", "destination", "notes")
    }
    if not row["vendor"] and not row["po_number"]:
        flash("A vendor or PO number is required.", "error")
        return redirect(url_for("logistics_bp.logistics_index", tab="shipment-log"))

    try:
        upsert_shipment_logs([row])
        flash("Shipment saved.", "success")
    except (BackendError, ValueError) as e:
        flash(str(e), "error")
    return redirect(url_for("logistics_bp.logistics_index", tab="shipment-log"))


@logistics_bp.route("/fix", methods=["POST"])
@manager_required
def logistics_fix():
    try:
        report = fix_logistics_data()
    except ConfigError as e:
        flash(str(e), "error")
        return redirect(url_for("logistics_bp.logistics_index"))

    flash(report.message(), "success" if report.success else "warning")
    return redirect(url_for("logistics_bp.logistics_index", tab="job-status"))
