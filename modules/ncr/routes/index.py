# File path: modules/ncr/routes/index.py

from flask import abort, flash, redirect, render_template, request, url_for

from modules.backend import BackendError
from modules.ncr import ncr_bp
from modules.ncr.constants import NCR_CATEGORIES, NCR_NUMBER_FIELDS, NCR_STATUS, NCR_TEXT_FIELDS
from modules.ncr.services.ncr_service import (
    NCRValidationError,
    filter_ncrs,
    get_ncr,
    get_ncrs,
    ncr_metrics,
    normalize_ncr,
    update_ncr,
    upsert_ncrs,
)
from modules.user.decorators import login_required

FORM_FIELDS = tuple(f for f in NCR_TEXT_FIELDS if f not in ("pdf_report_url", "drawing_url")) + NCR_NUMBER_FIELDS


def _form_values():
    return {f: (request.form.get(f) or "").strip() for f in FORM_FIELDS}


def _render_form(form, ncr_id=None):
    return render_template(
        "ncr/form.html",
        form=form,
        ncr_id=ncr_id,
        categories=NCR_CATEGORIES,
        statuses=NCR_STATUS,
    )


@ncr_bp.route("/")
@login_required
def ncr_index():
    q = (request.args.get("q") or "").strip()
    ncrs = get_ncrs()
    return render_template(
        "ncr/index.html",
        ncrs=filter_ncrs(ncrs, q),
        metrics=ncr_metrics(ncrs),
        q=q,
    )


@ncr_bp.route("/new", methods=["GET", "POST"])
@login_required
def ncr_new():
    form = normalize_ncr({"job_number": (request.args.get("job") or "").strip()})

    if request.method == "POST":
        form.update(_form_values())
        try:
            saved = upsert_ncrs(form)
        except (NCRValidationError, BackendError) as e:
            flash(str(e), "error")
            return _render_form(form)

        flash(f"NCR {saved[0]['ncr_number']} created.", "success")
        return redirect(url_for("ncr_bp.ncr_index"))

    return _render_form(form)


@ncr_bp.route("/<int:ncr_id>/edit", methods=["GET", "POST"])
@login_required
def ncr_edit(ncr_id):
    ncr = get_ncr(ncr_id)
    if not ncr:
        abort(404)

    if request.method == "POST":
        values = _form_values()
        values.pop("ncr_number", None)
        form = dict(ncr, **values)
        try:
            update_ncr(ncr_id, values)
        except (NCRValidationError, BackendError) as e:
            flash(str(e), "error")
            return _render_form(form, ncr_id)

        flash(f"NCR {ncr['ncr_number']} updated.", "success")
        return redirect(url_for("ncr_bp.ncr_index"))

    return _render_form(ncr, ncr_id)
