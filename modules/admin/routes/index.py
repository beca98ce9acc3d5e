# File path: modules/admin/routes/index.py
# Data tools: table status, per-page diagnose / fix, explicit test-data seeding.

from flask import abort, flash, redirect, render_template, request, url_for

from modules.admin import admin_bp
from modules.admin.services.diagnostics import (
    PAGES,
    STATUS_OK,
    TABLES,
    check_tables_exist,
    debug_table_data,
    diagnose_page_data,
    fix_page_data,
)
from modules.admin.services.seeding import insert_test_data
from modules.user.decorators import manager_required


@admin_bp.get("/")
@manager_required
def admin_index():
    page = (request.args.get("page") or "").strip()
    table = (request.args.get("table") or "").strip()

    diagnosis = diagnose_page_data(page) if page in PAGES else None
    sample = debug_table_data(table) if table in TABLES else None

    return render_template(
        "admin/index.html",
        tables=check_tables_exist(),
        pages=PAGES,
        page=page,
        diagnosis=diagnosis,
        sample=sample,
    )


@admin_bp.post("/diagnose/<page>")
@manager_required
def admin_diagnose(page):
    if page not in PAGES:
        abort(404)
    result = diagnose_page_data(page)
    flash(result["message"], "success" if result["status"] == STATUS_OK else "warning")
    return redirect(url_for("admin_bp.admin_index", page=page))


@admin_bp.post("/fix/<page>")
@manager_required
def admin_fix(page):
    if page not in PAGES:
        abort(404)
    result = fix_page_data(page)
    flash(result["message"], "success" if result["success"] else "error")
    return redirect(url_for("admin_bp.admin_index", page=page))


@admin_bp.post("/test-data")
@manager_required
def admin_test_data():
    results = insert_test_data()
    failed = {t: r for t, r in results.items() if isinstance(r, str)}
    seeded = sum(r for r in results.values() if isinstance(r, int))
    if failed:
        flash(f"Seeded {seeded} rows; failed: {', '.join(failed)}", "warning")
    else:
        flash(f"Seeded {seeded} sample rows into empty tables.", "success")
    return redirect(url_for("admin_bp.admin_index"))
