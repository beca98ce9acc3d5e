# File path: modules/logistics/routes/purchase.py

from datetime import datetime

from flask import abort, flash, redirect, render_template, request, url_for

from modules.backend import BackendError
from modules.logistics import purchase_bp
from modules.logistics.services.purchase_orders import (
    get_purchase_order_by_number,
    get_purchase_orders,
    purchase_summary,
    update_purchase_order,
    upsert_purchase_orders,
)
from modules.shared.status import PO_STATUSES
from modules.user.decorators import login_required


@purchase_bp.route("/")
@login_required
def purchase_index():
    q = (request.args.get("q") or "").strip().lower()
    pos = get_purchase_orders()
    shown = pos
    if q:
        shown = [
            po for po in pos
            if q in " ".join(str(po.get(k) or "") for k in ("po_number", "vendor", "description", "material")).lower()
        ]
    return render_template(
        "logistics/purchase.html",
        purchase_orders=shown,
        summary=purchase_summary(pos, datetime.utcnow()),
        statuses=PO_STATUSES,
        q=q,
    )


@purchase_bp.route("/new", methods=["POST"])
@login_required
def purchase_new():
    po_number = (request.form.get("po_number") or "").strip()
    if not po_number:
        flash("PO number is required.", "error")
        return redirect(url_for("purchase_bp.purchase_index"))

    try:
        amount = float(request.form.get("amount") or 0)
    except ValueError:
        flash("Amount must be a number.", "error")
        return redirect(url_for("purchase_bp.purchase_index"))

    row = {
        "po_number": po_number,
        "job_number": (request.form.get("job_number") or "").strip() or None,
        "vendor": (request.form.get("vendor") or "").strip() or None,
        "description": (request.form.get("description") or "").strip() or None,
        "status": (request.form.get("status") or "Open").strip(),
        "issue_date": (request.form.get("issue_date") or "").strip() or datetime.utcnow().isoformat(),
        "expected_date": (request.form.get("expected_date") or "").strip() or None,
        "amount": amount,
    }
    result = upsert_purchase_orders([row])
    if result.ok:
        flash(f"Purchase order {po_number} saved.", "success")
    else:
        flash(f"Could not save purchase order {po_number}: {'; '.join(result.errors)}", "error")
    return redirect(url_for("purchase_bp.purchase_index"))


@purchase_bp.route("/<po_number>/status", methods=["POST"])
@login_required
def purchase_status(po_number):
    po = get_purchase_order_by_number(po_number)
    if not po:
        abort(404)

    status = (request.form.get("status") or "").strip()
    if status not in PO_STATUSES:
        flash(f"Status must be one of: {', '.join(PO_STATUSES)}", "error")
        return redirect(url_for("purchase_bp.purchase_index"))

    values = {"status": status}
    received = (request.form.get("received_date") or "").strip()
    if received:
        values["received_date"] = received
    try:
        update_purchase_order(po["id"], values)
        flash(f"Purchase order {po_number} set to {status}.", "success")
    except (BackendError, ValueError) as e:
        flash(str(e), "error")
    return redirect(url_for("purchase_bp.purchase_index"))
