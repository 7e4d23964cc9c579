"""Engine backend protocol: thin abstraction over an embedded SQL engine.

The typed layer programs against these protocols. A backend exposes the
C-style statement surface (prepare, bind by index, step, column reads,
reset, finalize) and reports failures as ``EngineError`` carrying the
engine's numeric result code.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Protocol, runtime_checkable

# Primary result codes, numbered as the engine numbers them.
SQLITE_OK = 0
SQLITE_ERROR = 1
SQLITE_BUSY = 5
SQLITE_NOMEM = 7
SQLITE_CANTOPEN = 14
SQLITE_MISMATCH = 20
SQLITE_MISUSE = 21
SQLITE_RANGE = 25


class EngineError(Exception):
    """A failed engine call with its result code and message."""

    def __init__(self, code: int, message: str) -> None:
        """Initialize with the engine result code and error text."""
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"EngineError(code={self.code}, message={self.message!r})"


class StepStatus(IntEnum):
    """Outcome of a single step of statement execution."""

    ROW = 100
    DONE = 101
    ERROR = SQLITE_ERROR


class ColumnType(IntEnum):
    """Storage class of a column value in the current row."""

    INTEGER = 1
    FLOAT = 2
    TEXT = 3
    BLOB = 4
    NULL = 5


@runtime_checkable
class EngineStatement(Protocol):
    """A compiled statement owned by an EngineConnection."""

    @property
    def sql(self) -> str:
        """The SQL text the statement was prepared from."""
        ...

    @property
    def parameter_count(self) -> int:
        """Largest parameter index used by the statement."""
        ...

    def bind_parameter_index(self, name: str) -> int:
        """Return the 1-based index of a named parameter, or 0 if unknown."""
        ...

    def bind_int(self, index: int, value: int) -> None:
        """Bind a 64-bit signed integer."""
        ...

    def bind_double(self, index: int, value: float) -> None:
        """Bind a double."""
        ...

    def bind_text(self, index: int, value: str) -> None:
        """Bind UTF-8 text."""
        ...

    def bind_blob(self, index: int, value: bytes) -> None:
        """Bind a blob. The engine keeps its own copy."""
        ...

    def bind_null(self, index: int) -> None:
        """Bind SQL NULL."""
        ...

    def clear_bindings(self) -> None:
        """Reset every parameter to NULL."""
        ...

    def step(self) -> StepStatus:
        """Advance execution by one row. Raises EngineError on failure."""
        ...

    def column_count(self) -> int:
        """Number of result columns."""
        ...

    def column_name(self, index: int) -> str:
        """Name of a result column, verbatim."""
        ...

    def column_type(self, index: int) -> ColumnType:
        """Storage class of a column in the current row."""
        ...

    def column_int(self, index: int) -> int:
        """Integer value of a column in the current row."""
        ...

    def column_double(self, index: int) -> float:
        """Float value of a column in the current row."""
        ...

    def column_text(self, index: int) -> str:
        """Text value of a column in the current row."""
        ...

    def column_blob(self, index: int) -> bytes:
        """Blob value of a column in the current row."""
        ...

    def reset(self) -> None:
        """Return to the pre-execution state, keeping bindings."""
        ...

    def finalize(self) -> None:
        """Release the statement. Raises EngineError if already finalized."""
        ...


@runtime_checkable
class EngineConnection(Protocol):
    """An open connection to the engine."""

    @property
    def errcode(self) -> int:
        """Result code of the most recent failed call, SQLITE_OK if none."""
        ...

    @property
    def errmsg(self) -> str:
        """Message of the most recent failed call."""
        ...

    @property
    def is_closed(self) -> bool:
        """True once the connection has been closed."""
        ...

    @property
    def in_transaction(self) -> bool:
        """True while an explicit transaction is open."""
        ...

    def prepare(self, sql: str) -> EngineStatement:
        """Compile one SQL statement."""
        ...

    def close(self) -> None:
        """Close the connection."""
        ...
