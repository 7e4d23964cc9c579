"""Outcome types returned by Database.query() and Database.update()."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from types import TracebackType

from boldsql.models.error import Error
from boldsql.result_set import ResultSet
from boldsql.row import Row


class QueryResult:
    """Either a ResultSet (success) or an Error (failure).

    Iterating a QueryResult yields Rows lazily, once. A failure yields
    nothing. Running to the end closes the result set automatically;
    breaking out early leaves it open, so close it yourself with
    ``close_result_set()`` or use the result as a context manager::

        with db.query("SELECT name FROM person") as result:
            for row in result:
                ...
    """

    __slots__ = ("_error", "_result_set")

    def __init__(self, result_set: ResultSet | None = None, error: Error | None = None) -> None:
        """Initialize with exactly one of a result set or an error."""
        if (result_set is None) == (error is None):
            raise ValueError("QueryResult needs exactly one of result_set or error")
        self._result_set = result_set
        self._error = error

    @classmethod
    def success(cls, result_set: ResultSet) -> QueryResult:
        """A successful query with its result set."""
        return cls(result_set=result_set)

    @classmethod
    def failure(cls, error: Error) -> QueryResult:
        """A failed query with its error."""
        return cls(error=error)

    def __repr__(self) -> str:
        if self._error is not None:
            return f"QueryResult.failure({self._error})"
        return f"QueryResult.success({self._result_set!r})"

    def __iter__(self) -> Iterator[Row]:
        if self._result_set is None:
            return iter(())
        return iter(self._result_set)

    def __enter__(self) -> QueryResult:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close_result_set()

    @property
    def is_success(self) -> bool:
        """True if the query produced a result set."""
        return self._result_set is not None

    @property
    def is_failure(self) -> bool:
        """True if the query failed; ``error`` is then set."""
        return not self.is_success

    @property
    def result_set(self) -> ResultSet | None:
        """The result set of a successful query."""
        return self._result_set

    @property
    def error(self) -> Error | None:
        """The error of a failed query."""
        return self._error

    def close_result_set(self) -> bool:
        """Close the result set if there is one.

        Returns True only if an open result set was closed here; safe to call
        on failures and on already closed results.
        """
        if self._result_set is None:
            return False
        return self._result_set.close()

    def consume(self, consumer: Callable[[Row], None]) -> None:
        """Pass every row to ``consumer``, then close the result set."""
        if self._result_set is not None and not self._result_set.is_closed:
            while self._result_set.next():
                consumer(self._result_set.row)
        self.close_result_set()

    def consume_result_set(self, consumer: Callable[[ResultSet], None]) -> None:
        """Pass the result set to ``consumer`` if the query succeeded."""
        if self._result_set is not None:
            consumer(self._result_set)

    def consume_result_set_and_close(self, consumer: Callable[[ResultSet], None]) -> None:
        """Pass the result set to ``consumer`` and close it afterwards."""
        if self._result_set is None:
            return
        try:
            consumer(self._result_set)
        finally:
            self._result_set.close()


class UpdateResult:
    """Success, or failure with an Error."""

    __slots__ = ("_error",)

    def __init__(self, error: Error | None = None) -> None:
        """Initialize a success, or a failure when ``error`` is given."""
        self._error = error

    @classmethod
    def success(cls) -> UpdateResult:
        """A successful update."""
        return cls()

    @classmethod
    def failure(cls, error: Error) -> UpdateResult:
        """A failed update with its error."""
        return cls(error)

    def __repr__(self) -> str:
        if self._error is not None:
            return f"UpdateResult.failure({self._error})"
        return "UpdateResult.success()"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UpdateResult):
            return NotImplemented
        return self._error == other._error

    __hash__ = None  # type: ignore[assignment]

    @property
    def is_success(self) -> bool:
        """True if the update completed."""
        return self._error is None

    @property
    def is_failure(self) -> bool:
        """True if the update failed; ``error`` is then set."""
        return self._error is not None

    @property
    def error(self) -> Error | None:
        """The error of a failed update."""
        return self._error
