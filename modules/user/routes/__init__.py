# /modules/user/routes/__init__.py

from flask import Blueprint, render_template, request, redirect, url_for, flash
from database.models import db, User, USER_ROLES
from modules.user.decorators import admin_required
from modules.user.services import UserError, create_user

admin_users_bp = Blueprint("admin_users_bp", __name__)


@admin_users_bp.route("/")
@admin_required
def user_index():
    users = User.query.order_by(User.id).all()
    return render_template("user/index.html", users=users, roles=USER_ROLES)


@admin_users_bp.route("/add_user", methods=["POST"])
@admin_required
def add_user():
    username = (request.form.get("username") or "").strip()
    password = request.form.get("password") or ""
    role = (request.form.get("role") or "").strip()

    try:
        create_user(username, password, role)
        flash(f"User '{username}' added successfully.", "success")
    except UserError as e:
        flash(str(e), "danger")
    return redirect(url_for("admin_users_bp.user_index"))


@admin_users_bp.route("/users/edit/<int:user_id>", methods=["POST"])
@admin_required
def edit_user(user_id):
    user = User.query.get_or_404(user_id)
    new_role = (request.form.get("role") or "").strip()
    new_password = request.form.get("password")

    if new_role:
        if new_role not in USER_ROLES:
            flash(f"Role must be one of: {', '.join(USER_ROLES)}", "danger")
            return redirect(url_for("admin_users_bp.user_index"))
        user.role = new_role
    if new_password:
        user.set_password(new_password)

    db.session.commit()
    flash(f"Updated user '{user.username}'", "success")
    return redirect(url_for("admin_users_bp.user_index"))


@admin_users_bp.route("/users/delete/<int:user_id>", methods=["POST"])
@admin_required
def delete_user(user_id):
    user = User.query.get_or_404(user_id)
    db.session.delete(user)
    db.session.commit()
    flash(f"Deleted user '{user.username}'", "info")
    return redirect(url_for("admin_users_bp.user_index"))
