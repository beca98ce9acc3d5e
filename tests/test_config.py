import logging

from config import Config, TestConfig

ENV_VARS = ("DATABASE_URL", "BACKEND_ANON_KEY", "BACKEND_SERVICE_ROLE_KEY", "SECRET_KEY", "PO_BATCH_SIZE")


def _clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_missing_values_warn(monkeypatch, caplog):
    _clear_env(monkeypatch)

    with caplog.at_level(logging.WARNING, logger="config"):
        cfg = Config()

    messages = [r.getMessage() for r in caplog.records]
    assert "Missing DATABASE_URL, using local SQLite database" in messages
    assert "Missing BACKEND_ANON_KEY" in messages
    assert "Missing BACKEND_SERVICE_ROLE_KEY, service-role operations are disabled" in messages
    assert cfg.SQLALCHEMY_DATABASE_URI.startswith("sqlite:///")
    assert cfg.BACKEND_SERVICE_ROLE_KEY == ""
    assert len(cfg.SECRET_KEY) == 64


def test_values_from_environment(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("DATABASE_URL", "postgresql://db/ops")
    monkeypatch.setenv("BACKEND_SERVICE_ROLE_KEY", "svc")
    monkeypatch.setenv("PO_BATCH_SIZE", "25")

    cfg = Config()

    assert cfg.SQLALCHEMY_DATABASE_URI == "postgresql://db/ops"
    assert cfg.BACKEND_SERVICE_ROLE_KEY == "svc"
    assert cfg.PO_BATCH_SIZE == 25


def test_invalid_number_falls_back(monkeypatch, caplog):
    _clear_env(monkeypatch)
    monkeypatch.setenv("PO_BATCH_SIZE", "lots")

    with caplog.at_level(logging.WARNING, logger="config"):
        cfg = Config()

    assert cfg.PO_BATCH_SIZE == 50
    assert any("Invalid PO_BATCH_SIZE" in r.getMessage() for r in caplog.records)


def test_test_config():
    cfg = TestConfig()
    assert cfg.TESTING
    assert cfg.SQLALCHEMY_DATABASE_URI == "sqlite://"
    assert cfg.BATCH_DELAY_SECONDS == 0.0
