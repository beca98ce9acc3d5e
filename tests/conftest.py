import pytest

from app import create_app
from config import TestConfig
from database.models import ROLE_MANAGER, db
from modules.backend import public_client, service_client
from modules.user.services import create_user


@pytest.fixture
def app():
    app = create_app(TestConfig())
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(app, client):
    user = create_user("manager", "secret", ROLE_MANAGER)
    with client.session_transaction() as sess:
        sess["user_id"] = user.id
        sess["username"] = user.username
        sess["role"] = user.role
    return client


@pytest.fixture
def public(app):
    return public_client()


@pytest.fixture
def service(app):
    return service_client()


@pytest.fixture
def sap_rows():
    return [
        {"order_number": "1001", "operation_number": "0010", "work_center": "MILL",
         "description": "Housing", "short_text": "Mill face", "planned_work": 10, "actual_work": 4},
        {"order_number": "1001", "operation_number": "0020", "work_center": "SR",
         "description": "Housing", "short_text": "Send to vendor", "planned_work": 6, "actual_work": 0},
        {"order_number": "1002", "operation_number": "0010", "work_center": "MILL",
         "description": "Bracket", "short_text": "Mill slot", "planned_work": 5, "actual_work": 5},
    ]
