import json
import pytest

from studentperf_backend import database
from studentperf_backend.permissions.handlers import PolicyOptions
from studentperf_backend.settings import (
    DEFAULT_ROLE_NAME_ALIASES,
    BackendSettings,
    _env_flag,
    _role_name_aliases,
    settings,
)


def test_settings_is_singleton():
    assert BackendSettings() is settings


@pytest.mark.parametrize("raw,expected", [
    ("true", True), ("1", True), ("YES", True), ("on", True),
    ("false", False), ("0", False), ("", False),
])
def test_env_flag(monkeypatch, raw, expected):
    monkeypatch.setenv("OPEN_UNGROUPED_ASSIGNMENTS", raw)
    assert _env_flag("OPEN_UNGROUPED_ASSIGNMENTS", "false") is expected


def test_env_flag_default(monkeypatch):
    monkeypatch.delenv("OPEN_UNGROUPED_ASSIGNMENTS", raising=False)
    assert _env_flag("OPEN_UNGROUPED_ASSIGNMENTS", "false") is False


def test_role_name_aliases_default(monkeypatch):
    monkeypatch.delenv("ROLE_NAME_ALIASES", raising=False)
    assert _role_name_aliases() == DEFAULT_ROLE_NAME_ALIASES


def test_role_name_aliases_override(monkeypatch):
    monkeypatch.setenv("ROLE_NAME_ALIASES", json.dumps({"Dozent": "Teacher"}))
    aliases = _role_name_aliases()
    assert aliases["dozent"] == "teacher"
    assert aliases["студент"] == "student"


def test_policy_options_follow_settings(monkeypatch):
    monkeypatch.setattr(settings, "OPEN_UNGROUPED_ASSIGNMENTS", True)
    assert PolicyOptions.from_settings() == PolicyOptions(open_ungrouped_assignments=True)


def test_database_url_prefers_explicit_url(monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_URL", "sqlite:///records.db")
    assert database.database_url() == "sqlite:///records.db"


def test_database_url_from_parts(monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_URL", None)
    monkeypatch.setattr(database, "POSTGRES_USER", "records")
    monkeypatch.setattr(database, "POSTGRES_PASSWORD", "secret")
    monkeypatch.setattr(database, "POSTGRES_URL", "db:5432")
    monkeypatch.setattr(database, "POSTGRES_DB", "studentperf")
    assert database.database_url() == "postgresql://records:secret@db:5432/studentperf"
