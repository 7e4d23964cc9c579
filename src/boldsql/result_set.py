"""Cursor over the rows produced by a statement."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from enum import Enum
from types import TracebackType

from boldsql.engine.backend import StepStatus
from boldsql.exceptions import CursorStateError
from boldsql.models.error import Error, ErrorCode
from boldsql.models.value import Blob, Integer, Real, Text, Value
from boldsql.row import Row
from boldsql.statement import Statement

logger = logging.getLogger(__name__)


class CursorState(Enum):
    """Position of a ResultSet cursor."""

    BEFORE_FIRST = "before_first"
    ON_ROW = "on_row"
    EXHAUSTED = "exhausted"
    CLOSED = "closed"


class ResultSet:
    """Wraps exactly one Statement and walks its rows.

    Call ``next()`` before reading anything. Column readers are valid only
    while the cursor is on a row; using a closed result set raises
    CursorStateError.
    """

    def __init__(self, statement: Statement) -> None:
        """Take exclusive ownership of a prepared statement."""
        statement.claim(self)
        self._statement = statement
        self._state = CursorState.BEFORE_FIRST
        self.step_error: Error | None = None

    def __repr__(self) -> str:
        return f"<ResultSet {self._state.value} sql={self._statement.sql!r}>"

    def __enter__(self) -> ResultSet:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __iter__(self) -> Iterator[Row]:
        """Yield each remaining row; close the result set once exhausted.

        Stopping early leaves the result set open.
        """
        if self._state is CursorState.CLOSED:
            return
        while self.next():
            yield self.row
        self.close()

    @property
    def state(self) -> CursorState:
        """Current cursor position."""
        return self._state

    @property
    def is_closed(self) -> bool:
        """True once the backing statement has been finalized."""
        return self._state is CursorState.CLOSED

    @property
    def statement(self) -> Statement:
        """The statement this result set owns."""
        return self._statement

    # -- Cursor --

    def next(self) -> bool:
        """Move to the next row.

        Returns False when there are no more rows. An engine error while
        stepping also returns False; it is kept in ``step_error``.
        """
        self._require_open()
        if self._state is CursorState.EXHAUSTED:
            return False
        if self.step() is StepStatus.ROW:
            self._state = CursorState.ON_ROW
            return True
        self._state = CursorState.EXHAUSTED
        return False

    def step(self) -> StepStatus:
        """Step the backing statement once and report the raw status."""
        self._require_open()
        status = self._statement.step()
        if status is StepStatus.ERROR:
            engine_error = self._statement.last_error
            self.step_error = Error(
                code=ErrorCode.STEP_FAILED,
                message=engine_error.message if engine_error else "step failed",
                engine_code=engine_error.code if engine_error else None,
            )
            logger.debug("Cursor stopped on error: %s", self.step_error)
        return status

    def close(self) -> bool:
        """Finalize the backing statement. Returns False if already closed."""
        if self._state is CursorState.CLOSED:
            return False
        self._state = CursorState.CLOSED
        return self._statement.finalize()

    # -- Columns --

    @property
    def column_count(self) -> int:
        """Number of columns in the result."""
        self._require_open()
        return self._statement.column_count()

    @property
    def column_names(self) -> list[str]:
        """Column names in result order, duplicates included."""
        return [self._statement.column_name(i) for i in range(self.column_count)]

    @property
    def row(self) -> Row:
        """Snapshot of every column at the current position."""
        self._require_row()
        statement = self._statement
        return Row(
            (statement.column_name(i), statement.column_value(i))
            for i in range(statement.column_count())
        )

    def value(self, column_index: int) -> Value:
        """The value of one column of the current row by 0-based position."""
        self._require_row()
        if not 0 <= column_index < self._statement.column_count():
            raise IndexError(f"column index {column_index} out of range")
        return self._statement.column_value(column_index)

    def string_value(self, column_index: int) -> str | None:
        """Text in a column of the current row, None for NULL or another type."""
        value = self.value(column_index)
        return value.value if isinstance(value, Text) else None

    def int_value(self, column_index: int) -> int | None:
        """Integer in a column of the current row, None for NULL or another type."""
        value = self.value(column_index)
        return value.value if isinstance(value, Integer) else None

    def double_value(self, column_index: int) -> float | None:
        """Float in a column of the current row, None for NULL or another type."""
        value = self.value(column_index)
        return value.value if isinstance(value, Real) else None

    def data_value(self, column_index: int) -> bytes | None:
        """Bytes in a column of the current row, None for NULL or another type."""
        value = self.value(column_index)
        return value.value if isinstance(value, Blob) else None

    def _require_open(self) -> None:
        if self._state is CursorState.CLOSED:
            raise CursorStateError("result set is closed")

    def _require_row(self) -> None:
        self._require_open()
        if self._state is not CursorState.ON_ROW:
            raise CursorStateError(f"no current row (cursor is {self._state.value})")
