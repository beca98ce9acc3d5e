from functools import wraps
from flask import current_app, flash, jsonify, redirect, request, session, url_for

from database.models import ROLE_ADMIN, ROLE_MANAGER


def login_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        if "user_id" not in session:
            flash("Please log in to access this page.", "warning")
            return redirect(url_for("auth_bp.login"))
        return f(*args, **kwargs)
    return wrapped


def admin_required(view_func):
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        if "user_id" not in session or session.get("role") != ROLE_ADMIN:
            flash("Admin access required", "danger")
            return redirect(url_for("auth_bp.login"))
        return view_func(*args, **kwargs)
    return wrapper


def manager_required(view_func):
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        if "user_id" not in session or session.get("role") not in (ROLE_ADMIN, ROLE_MANAGER):
            flash("Manager access required", "danger")
            return redirect(url_for("auth_bp.login"))
        return view_func(*args, **kwargs)
    return wrapper


def api_auth_required(view_func):
    """Logged-in session, or an `apikey` header matching one of the backend keys."""
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        if "user_id" in session:
            return view_func(*args, **kwargs)
        key = (request.headers.get("apikey") or "").strip()
        allowed = {
            current_app.config.get("BACKEND_ANON_KEY"),
            current_app.config.get("BACKEND_SERVICE_ROLE_KEY"),
        } - {None, ""}
        if key and key in allowed:
            return view_func(*args, **kwargs)
        return jsonify({"error": "authentication required"}), 401
    return wrapper
