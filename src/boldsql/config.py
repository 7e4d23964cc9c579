"""Environment-variable-based configuration."""

import os
from pathlib import Path


def get_db_path() -> str:
    """Return the default database target from BOLD_DB_PATH."""
    raw = os.environ.get("BOLD_DB_PATH", ":memory:")
    if raw == ":memory:" or raw.startswith("file:"):
        return raw
    return str(Path(raw).expanduser())


def get_log_level() -> str:
    """Return the logging level from BOLD_LOG_LEVEL."""
    return os.environ.get("BOLD_LOG_LEVEL", "WARNING").upper()


def is_sql_trace_enabled() -> bool:
    """Return True if BOLD_TRACE_SQL is set to TRUE."""
    return os.environ.get("BOLD_TRACE_SQL", "").upper() == "TRUE"
