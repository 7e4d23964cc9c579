"""SQLite implementation of the engine backend protocol.

Thin wrapper around the ``sqlite3`` driver. The driver has no separate
prepare/step calls, so a statement is compiled with ``EXPLAIN`` when it is
prepared (invalid SQL fails there, without running anything) and executed on
its first step. Text holding only whitespace and comments has no statement
to compile and fails to prepare with ``SQLITE_MISUSE``; text holding more than
one statement fails to prepare as well. Placeholders are rewritten to numbered
``?NNN`` form so every value is bound by position.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from collections.abc import Callable
from pathlib import Path

from boldsql.engine.backend import (
    SQLITE_ERROR,
    SQLITE_MISMATCH,
    SQLITE_MISUSE,
    SQLITE_OK,
    SQLITE_RANGE,
    ColumnType,
    EngineError,
    StepStatus,
)
from boldsql.engine.placeholders import PlaceholderPlan, scan_placeholders

logger = logging.getLogger(__name__)

# sqlite3.Warning is not an Error subclass on every supported Python
_SQLITE_ERRORS = (sqlite3.Error, sqlite3.Warning)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_EXPLAIN_RE = re.compile(r"^\s*(?:(?:--[^\n]*(?:\n|$)|/\*.*?\*/)\s*)*EXPLAIN\b", re.I | re.S)

# Whitespace, semicolons and comments only: the engine compiles no statement from it
_BLANK_RE = re.compile(r"(?:\s|;|--[^\n]*|/\*.*?(?:\*/|\Z))*", re.S)

_COLUMN_TYPES: dict[type, ColumnType] = {
    int: ColumnType.INTEGER,
    float: ColumnType.FLOAT,
    str: ColumnType.TEXT,
    bytes: ColumnType.BLOB,
    type(None): ColumnType.NULL,
}


def _to_engine_error(exc: Exception) -> EngineError:
    """Translate a driver exception into an EngineError with a primary code."""
    code = getattr(exc, "sqlite_errorcode", None)
    if code is None:
        if isinstance(exc, sqlite3.InterfaceError):
            code = SQLITE_MISMATCH
        elif isinstance(exc, sqlite3.ProgrammingError | sqlite3.Warning):
            code = SQLITE_MISUSE
        else:
            code = SQLITE_ERROR
    return EngineError(code & 0xFF, str(exc))


class SQLiteStatement:
    """One prepared statement on a SQLiteConnection."""

    def __init__(self, connection: SQLiteConnection, sql: str, plan: PlaceholderPlan) -> None:
        """Initialize with the owning connection, original SQL and placeholder plan."""
        self._connection = connection
        self._sql = sql
        self._plan = plan
        self._params: list[object] = [None] * plan.parameter_count
        self._cursor: sqlite3.Cursor | None = None
        self._row: tuple[object, ...] | None = None
        self._done = False
        self._finalized = False

    @property
    def sql(self) -> str:
        """The SQL text the statement was prepared from."""
        return self._sql

    @property
    def parameter_count(self) -> int:
        """Largest parameter index used by the statement."""
        return self._plan.parameter_count

    def bind_parameter_index(self, name: str) -> int:
        """Return the 1-based index of a named parameter, or 0 if unknown."""
        return self._plan.index_of(name)

    # -- Binding --

    def bind_int(self, index: int, value: int) -> None:
        """Bind a 64-bit signed integer."""
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise self._fail(SQLITE_MISMATCH, "integer does not fit in 64 bits")
        self._bind(index, int(value))

    def bind_double(self, index: int, value: float) -> None:
        """Bind a double."""
        self._bind(index, float(value))

    def bind_text(self, index: int, value: str) -> None:
        """Bind UTF-8 text."""
        self._bind(index, str(value))

    def bind_blob(self, index: int, value: bytes) -> None:
        """Bind a blob. A private copy is taken."""
        self._bind(index, bytes(value))

    def bind_null(self, index: int) -> None:
        """Bind SQL NULL."""
        self._bind(index, None)

    def clear_bindings(self) -> None:
        """Reset every parameter to NULL."""
        self._check_idle()
        self._params = [None] * self._plan.parameter_count

    def _bind(self, index: int, value: object) -> None:
        self._check_idle()
        if not 1 <= index <= self._plan.parameter_count:
            raise self._fail(SQLITE_RANGE, "column index out of range")
        self._params[index - 1] = value

    def _check_idle(self) -> None:
        self._check_live()
        if self._cursor is not None:
            raise self._fail(SQLITE_MISUSE, "statement is executing; reset it before binding")

    # -- Execution --

    def step(self) -> StepStatus:
        """Advance execution by one row. Raises EngineError on failure."""
        self._check_live()
        if self._done:
            return StepStatus.DONE
        try:
            if self._cursor is None:
                self._cursor = self._connection.raw.execute(self._plan.sql, tuple(self._params))
            row = self._cursor.fetchone()
        except _SQLITE_ERRORS as exc:
            self._row = None
            self._done = True
            raise self._connection.record_error(exc) from exc
        if row is None:
            self._row = None
            self._done = True
            return StepStatus.DONE
        self._row = tuple(row)
        return StepStatus.ROW

    def reset(self) -> None:
        """Return to the pre-execution state, keeping bindings."""
        self._check_live()
        self._close_cursor()
        self._row = None
        self._done = False

    def finalize(self) -> None:
        """Release the statement. Raises EngineError if already finalized."""
        self._check_live()
        self._close_cursor()
        self._row = None
        self._finalized = True

    def _close_cursor(self) -> None:
        if self._cursor is None:
            return
        try:
            self._cursor.close()
        except _SQLITE_ERRORS:
            # Closing a cursor of an already closed connection
            logger.debug("Cursor for %r was already unusable", self._sql)
        self._cursor = None

    def _check_live(self) -> None:
        if self._finalized:
            raise self._fail(SQLITE_MISUSE, "statement has been finalized")
        if self._connection.is_closed:
            raise self._fail(SQLITE_MISUSE, "database connection has been closed")

    # -- Columns --

    def column_count(self) -> int:
        """Number of result columns; known once the statement has been stepped."""
        self._check_live()
        if self._cursor is None or self._cursor.description is None:
            return 0
        return len(self._cursor.description)

    def column_name(self, index: int) -> str:
        """Name of a result column, verbatim."""
        self._check_column(index)
        assert self._cursor is not None and self._cursor.description is not None
        return str(self._cursor.description[index][0])

    def column_type(self, index: int) -> ColumnType:
        """Storage class of a column in the current row."""
        value = self._column(index)
        return _COLUMN_TYPES.get(type(value), ColumnType.BLOB)

    def column_int(self, index: int) -> int:
        """Integer value of a column in the current row."""
        return self._column_as(index, ColumnType.INTEGER)  # type: ignore[return-value]

    def column_double(self, index: int) -> float:
        """Float value of a column in the current row."""
        return self._column_as(index, ColumnType.FLOAT)  # type: ignore[return-value]

    def column_text(self, index: int) -> str:
        """Text value of a column in the current row."""
        return self._column_as(index, ColumnType.TEXT)  # type: ignore[return-value]

    def column_blob(self, index: int) -> bytes:
        """Blob value of a column in the current row."""
        return self._column_as(index, ColumnType.BLOB)  # type: ignore[return-value]

    def _column_as(self, index: int, expected: ColumnType) -> object:
        value = self._column(index)
        if _COLUMN_TYPES.get(type(value)) is not expected:
            raise self._fail(SQLITE_MISMATCH, f"column {index} is not {expected.name}")
        return value

    def _column(self, index: int) -> object:
        self._check_column(index)
        if self._row is None:
            raise self._fail(SQLITE_MISUSE, "no row is available")
        return self._row[index]

    def _check_column(self, index: int) -> None:
        if not 0 <= index < self.column_count():
            raise self._fail(SQLITE_RANGE, "column index out of range")

    def _fail(self, code: int, message: str) -> EngineError:
        return self._connection.record_error(EngineError(code, message))


class SQLiteConnection:
    """SQLite implementation of the EngineConnection protocol.

    Opened in autocommit mode so that ``BEGIN``/``COMMIT``/``ROLLBACK`` issued
    as statements are the only transaction control, and without the
    same-thread check so a background worker can use it.
    """

    def __init__(self, raw: sqlite3.Connection) -> None:
        """Initialize with an open sqlite3 connection."""
        self.raw = raw
        self._errcode = SQLITE_OK
        self._errmsg = "not an error"
        self._closed = False

    @classmethod
    def open(
        cls, path: Path | str, *, trace: Callable[[str], None] | None = None
    ) -> SQLiteConnection:
        """Open a connection. ``":memory:"`` gives a private in-memory database."""
        target = str(path)
        try:
            raw = sqlite3.connect(
                target,
                isolation_level=None,
                check_same_thread=False,
                uri=target.startswith("file:"),
            )
        except _SQLITE_ERRORS as exc:
            raise _to_engine_error(exc) from exc
        if trace is not None:
            raw.set_trace_callback(trace)
        return cls(raw)

    @property
    def errcode(self) -> int:
        """Result code of the most recent failed call, SQLITE_OK if none."""
        return self._errcode

    @property
    def errmsg(self) -> str:
        """Message of the most recent failed call."""
        return self._errmsg

    @property
    def is_closed(self) -> bool:
        """True once ``close()`` has succeeded."""
        return self._closed

    @property
    def in_transaction(self) -> bool:
        """True while an explicit transaction is open."""
        try:
            return self.raw.in_transaction
        except _SQLITE_ERRORS:
            return False

    def record_error(self, exc: Exception) -> EngineError:
        """Remember a failure as this connection's last error and return it."""
        error = exc if isinstance(exc, EngineError) else _to_engine_error(exc)
        self._errcode = error.code
        self._errmsg = error.message
        return error

    def prepare(self, sql: str) -> SQLiteStatement:
        """Compile one SQL statement without executing it."""
        if _BLANK_RE.fullmatch(sql):
            raise self.record_error(EngineError(SQLITE_MISUSE, "SQL text contains no statement"))
        plan = scan_placeholders(sql)
        probe = plan.sql if _EXPLAIN_RE.match(plan.sql) else f"EXPLAIN {plan.sql}"
        try:
            cursor = self.raw.execute(probe, (None,) * plan.parameter_count)
            cursor.close()
        except _SQLITE_ERRORS as exc:
            raise self.record_error(exc) from exc
        return SQLiteStatement(self, sql, plan)

    def close(self) -> None:
        """Close the connection."""
        try:
            self.raw.close()
        except _SQLITE_ERRORS as exc:
            raise self.record_error(exc) from exc
        self._closed = True
