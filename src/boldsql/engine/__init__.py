"""Embedded SQL engine surface and its SQLite implementation."""

from boldsql.engine.backend import (
    ColumnType,
    EngineConnection,
    EngineError,
    EngineStatement,
    StepStatus,
)
from boldsql.engine.sqlite_backend import SQLiteConnection, SQLiteStatement

__all__ = [
    "ColumnType",
    "EngineConnection",
    "EngineError",
    "EngineStatement",
    "SQLiteConnection",
    "SQLiteStatement",
    "StepStatus",
]
