"""Tests for environment-based configuration."""

from pathlib import Path

from boldsql.config import get_db_path, get_log_level, is_sql_trace_enabled


def test_db_path_default(monkeypatch):
    monkeypatch.delenv("BOLD_DB_PATH", raising=False)
    assert get_db_path() == ":memory:"


def test_db_path_expands_user(monkeypatch):
    monkeypatch.setenv("BOLD_DB_PATH", "~/data/app.db")
    assert get_db_path() == str(Path("~/data/app.db").expanduser())


def test_db_path_uri_untouched(monkeypatch):
    monkeypatch.setenv("BOLD_DB_PATH", "file:shared?mode=memory&cache=shared")
    assert get_db_path() == "file:shared?mode=memory&cache=shared"


def test_log_level(monkeypatch):
    monkeypatch.delenv("BOLD_LOG_LEVEL", raising=False)
    assert get_log_level() == "WARNING"
    monkeypatch.setenv("BOLD_LOG_LEVEL", "debug")
    assert get_log_level() == "DEBUG"


def test_sql_trace(monkeypatch):
    monkeypatch.delenv("BOLD_TRACE_SQL", raising=False)
    assert is_sql_trace_enabled() is False
    monkeypatch.setenv("BOLD_TRACE_SQL", "true")
    assert is_sql_trace_enabled() is True
    monkeypatch.setenv("BOLD_TRACE_SQL", "1")
    assert is_sql_trace_enabled() is False
