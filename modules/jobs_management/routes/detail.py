# File path: modules/jobs_management/routes/detail.py

from flask import abort, flash, redirect, render_template, request, url_for

from modules.backend import BackendError
from modules.jobs_management import jobs_bp
from modules.jobs_management.services.job_service import (
    JobError,
    add_note,
    add_reminder,
    get_job_by_number,
    get_job_row,
    update_priority,
)
from modules.shared.status import PRIORITIES
from modules.user.decorators import login_required


def _back_to_job(job_id):
    job = get_job_row(job_id)
    if not job:
        abort(404)
    return redirect(url_for("jobs_bp.job_detail", job_number=job["job_number"]))


@jobs_bp.route("/<job_number>")
@login_required
def job_detail(job_number):
    job = get_job_by_number(job_number)
    if not job:
        abort(404)
    return render_template("jobs_management/detail.html", job=job, priorities=PRIORITIES)


@jobs_bp.route("/<int:job_id>/priority", methods=["POST"])
@login_required
def job_priority(job_id):
    priority = (request.form.get("priority") or "").strip()
    try:
        update_priority(job_id, priority)
        flash(f"Priority set to {priority.title()}.", "success")
    except (JobError, BackendError) as e:
        flash(str(e), "error")
    return _back_to_job(job_id)


@jobs_bp.route("/<int:job_id>/notes", methods=["POST"])
@login_required
def job_add_note(job_id):
    title = (request.form.get("title") or "").strip()
    content = (request.form.get("content") or "").strip()
    try:
        add_note(job_id, title, content)
        flash("Note added.", "success")
    except (JobError, BackendError) as e:
        flash(str(e), "error")
    return _back_to_job(job_id)


@jobs_bp.route("/<int:job_id>/reminders", methods=["POST"])
@login_required
def job_add_reminder(job_id):
    date_raw = (request.form.get("date") or "").strip()
    description = (request.form.get("description") or "").strip()
    try:
        add_reminder(job_id, date_raw, description)
        flash("Reminder added.", "success")
    except (JobError, BackendError) as e:
        flash(str(e), "error")
    return _back_to_job(job_id)
