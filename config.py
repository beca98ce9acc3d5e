# File path: config.py
# Environment-driven settings for the dashboard and its CLI commands.
import logging
import os
import secrets

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _env_float(name, default):
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using %s", name, raw, default)
        return default


def _env_int(name, default):
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using %s", name, raw, default)
        return default


def _default_database_uri():
    db_path = os.path.join(BASE_DIR, "instance", "database.db")
    return f"sqlite:///{db_path}"


class Config:
    """Settings read once at process start.

    Missing backend values are reported as warnings. The credential keys never
    fall back to literals: a missing service-role key disables the elevated
    client instead.
    """

    def __init__(self):
        self.SQLALCHEMY_DATABASE_URI = (os.getenv("DATABASE_URL") or "").strip()
        if not self.SQLALCHEMY_DATABASE_URI:
            logger.warning("Missing DATABASE_URL, using local SQLite database")
            self.SQLALCHEMY_DATABASE_URI = _default_database_uri()
        self.SQLALCHEMY_TRACK_MODIFICATIONS = False

        self.BACKEND_ANON_KEY = (os.getenv("BACKEND_ANON_KEY") or "").strip()
        self.BACKEND_SERVICE_ROLE_KEY = (os.getenv("BACKEND_SERVICE_ROLE_KEY") or "").strip()
        if not self.BACKEND_ANON_KEY:
            logger.warning("Missing BACKEND_ANON_KEY")
        if not self.BACKEND_SERVICE_ROLE_KEY:
            logger.warning("Missing BACKEND_SERVICE_ROLE_KEY, service-role operations are disabled")

        self.SECRET_KEY = (os.getenv("SECRET_KEY") or "").strip()
        if not self.SECRET_KEY:
            logger.warning("Missing SECRET_KEY, sessions will not survive a restart")
            self.SECRET_KEY = secrets.token_hex(32)

        self.LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip()

        self.PO_BATCH_SIZE = _env_int("PO_BATCH_SIZE", 50)
        self.BATCH_DELAY_SECONDS = _env_float("BATCH_DELAY_SECONDS", 0.1)
        self.SHIPMENT_SAMPLE_SIZE = _env_int("SHIPMENT_SAMPLE_SIZE", 50)


class TestConfig(Config):
    def __init__(self):
        super().__init__()
        self.TESTING = True
        self.SQLALCHEMY_DATABASE_URI = "sqlite://"
        self.BACKEND_ANON_KEY = "test-anon-key"
        self.BACKEND_SERVICE_ROLE_KEY = "test-service-role-key"
        self.SECRET_KEY = "test-secret"
        self.BATCH_DELAY_SECONDS = 0.0
        self.SHIPMENT_SAMPLE_SIZE = 10
