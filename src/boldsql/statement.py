"""Prepared statements and the outcome of preparing one."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from boldsql.engine.backend import ColumnType, EngineError, EngineStatement, StepStatus
from boldsql.exceptions import CursorStateError
from boldsql.models.error import Error
from boldsql.models.value import NULL, Blob, Integer, Null, Real, Text, Value

if TYPE_CHECKING:
    from boldsql.database import Database

logger = logging.getLogger(__name__)


class Statement:
    """Owns one prepared engine statement.

    Lifecycle: prepared, then any number of bind and step rounds (separated
    by ``reset()``), then ``finalize()``. A statement belongs to at most one
    ResultSet once execution begins.
    """

    def __init__(self, handle: EngineStatement, database: Database) -> None:
        """Initialize with an engine statement and the database that prepared it."""
        self._handle = handle
        self.database = database
        self.last_error: EngineError | None = None
        self._finalized = False
        self._owner: object | None = None

    def __repr__(self) -> str:
        state = "finalized" if self._finalized else "prepared"
        return f"<Statement {state} sql={self.sql!r}>"

    @property
    def handle(self) -> EngineStatement:
        """The raw engine statement, for custom binding."""
        return self._handle

    @property
    def sql(self) -> str:
        """The SQL text this statement was prepared from."""
        return self._handle.sql

    @property
    def parameter_count(self) -> int:
        """Number of parameter slots; the largest placeholder index."""
        return self._handle.parameter_count

    @property
    def is_finalized(self) -> bool:
        """True once the statement has been released."""
        return self._finalized

    def claim(self, owner: object) -> None:
        """Record the ResultSet that exclusively owns this statement."""
        if self._owner is not None and self._owner is not owner:
            raise CursorStateError("statement already belongs to another result set")
        self._owner = owner

    # -- Binding --

    def bind_parameter_index(self, name: str) -> int:
        """Return the 1-based index of a named parameter (with sigil), or 0."""
        return self._handle.bind_parameter_index(name)

    def bind(self, index: int, value: Value | None) -> bool:
        """Bind one value at a 1-based index. ``None`` binds SQL NULL.

        Returns False when the engine rejects the bind; the statement should
        then be abandoned.
        """
        try:
            match value:
                case None | Null():
                    self._handle.bind_null(index)
                case Text(value=text):
                    self._handle.bind_text(index, text)
                case Integer(value=number):
                    self._handle.bind_int(index, number)
                case Real(value=number):
                    self._handle.bind_double(index, number)
                case Blob(value=data):
                    self._handle.bind_blob(index, data)
        except EngineError as exc:
            self.last_error = exc
            logger.debug("Bind at index %d failed for %r: %s", index, self.sql, exc.message)
            return False
        return True

    def clear_bindings(self) -> bool:
        """Set every parameter back to NULL."""
        return self._call(self._handle.clear_bindings)

    # -- Execution --

    def step(self) -> StepStatus:
        """Advance execution: ROW, DONE or ERROR."""
        try:
            return self._handle.step()
        except EngineError as exc:
            self.last_error = exc
            logger.debug("Step failed for %r: %s", self.sql, exc.message)
            return StepStatus.ERROR

    def reset(self) -> bool:
        """Return to the pre-execution state so it can be re-bound and re-stepped."""
        return self._call(self._handle.reset)

    def finalize(self) -> bool:
        """Release the engine statement. Returns False if already released."""
        if self._finalized:
            return False
        self._finalized = True
        released = self._call(self._handle.finalize)
        if released:
            logger.debug("Finalized statement %r", self.sql)
        return released

    def _call(self, operation: Callable[[], None]) -> bool:
        try:
            operation()
        except EngineError as exc:
            self.last_error = exc
            return False
        return True

    # -- Columns --

    def column_count(self) -> int:
        """Number of result columns, known once the statement has been stepped."""
        return self._handle.column_count()

    def column_name(self, index: int) -> str:
        """Name of the column at a 0-based position."""
        return self._handle.column_name(index)

    def column_type(self, index: int) -> ColumnType:
        """Storage class of the column at a 0-based position in the current row."""
        return self._handle.column_type(index)

    def column_value(self, index: int) -> Value:
        """Read a column of the current row as the variant its storage class names."""
        match self._handle.column_type(index):
            case ColumnType.INTEGER:
                return Integer(value=self._handle.column_int(index))
            case ColumnType.FLOAT:
                return Real(value=self._handle.column_double(index))
            case ColumnType.TEXT:
                return Text(value=self._handle.column_text(index))
            case ColumnType.BLOB:
                return Blob(value=self._handle.column_blob(index))
            case _:
                return NULL


@dataclass(frozen=True)
class PreparationResult:
    """Either a prepared Statement or the Error that prevented it."""

    statement: Statement | None = None
    error: Error | None = None

    @classmethod
    def success(cls, statement: Statement) -> PreparationResult:
        """Wrap a prepared statement."""
        return cls(statement=statement)

    @classmethod
    def failure(cls, error: Error) -> PreparationResult:
        """Wrap a preparation error."""
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        """True if a statement was prepared."""
        return self.statement is not None
