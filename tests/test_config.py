import logging

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import DEFAULT_DATABASE_URL, Settings


@pytest.fixture
def root_level():
    root = logging.getLogger()
    level = root.level
    yield root
    root.setLevel(level)


def test_database_url_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./from-env.db")
    assert Settings().database_url == "sqlite:///./from-env.db"


def test_explicit_database_url_wins(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./from-env.db")
    assert Settings(database_url="sqlite:///./other.db").database_url == "sqlite:///./other.db"


def test_default_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert Settings().database_url == DEFAULT_DATABASE_URL


def test_startup_configures_log_level(settings, root_level):
    settings.log_level = "DEBUG"
    with TestClient(create_app(settings)):
        assert root_level.level == logging.DEBUG


def test_startup_logs_backfill_at_info(settings, root_level, caplog):
    with TestClient(create_app(settings)):
        pass
    assert root_level.level == logging.INFO
    assert any(
        r.name == "backfill" and r.levelno == logging.INFO and "Backfill done" in r.getMessage()
        for r in caplog.records
    )
