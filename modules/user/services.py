# File path: modules/user/services.py

from database.models import USER_ROLES, User, db


class UserError(Exception):
    pass


def create_user(username: str, password: str, role: str) -> User:
    username = (username or "").strip()
    role = (role or "").strip()
    if not username or not password or not role:
        raise UserError("Username, password and role are required.")
    if role not in USER_ROLES:
        raise UserError(f"Role must be one of: {', '.join(USER_ROLES)}")
    if User.query.filter_by(username=username).first():
        raise UserError(f"Username '{username}' already exists.")

    user = User(username=username, role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user
