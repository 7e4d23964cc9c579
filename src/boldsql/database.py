"""Database connection with query/update entry points and transactions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from concurrent.futures import Future
from contextlib import contextmanager
from pathlib import Path
from typing import TypeVar

from boldsql.config import get_db_path, is_sql_trace_enabled
from boldsql.engine.backend import (
    SQLITE_MISMATCH,
    SQLITE_MISUSE,
    SQLITE_RANGE,
    EngineError,
    StepStatus,
)
from boldsql.engine.sqlite_backend import SQLiteConnection
from boldsql.exceptions import TransactionError
from boldsql.models.error import Error, ErrorCode
from boldsql.models.value import to_value
from boldsql.result_set import ResultSet
from boldsql.results import QueryResult, UpdateResult
from boldsql.statement import PreparationResult, Statement
from boldsql.transaction import Transaction
from boldsql.worker import SerialExecutor

logger = logging.getLogger(__name__)

T = TypeVar("T")

Arguments = Sequence[object] | Mapping[str, object]

_NOT_OPEN = "database is not open"


def _trace_sql(sql: str) -> None:
    logger.debug("SQL: %s", sql)


def _not_open_future() -> Future[T]:
    future: Future[T] = Future()
    future.set_exception(
        TransactionError(
            Error(
                code=ErrorCode.EXECUTE_QUERY_FAILED,
                message=_NOT_OPEN,
                engine_code=SQLITE_MISUSE,
            )
        )
    )
    return future


class Database:
    """A single connection to an embedded SQLite database.

    - Call ``open()`` before use and ``close()`` when done.
    - ``query()`` runs statements that return rows and gives a QueryResult.
    - ``update()`` runs everything else (INSERT, UPDATE, DELETE, DDL, ...)
      and gives an UpdateResult.
    - Arguments are either a sequence bound to ``?`` placeholders in order,
      or a mapping bound to ``:name`` placeholders by name.

    Use ``":memory:"`` as the path for a private in-memory database.

    ``async_transaction()`` queues work onto a background worker owned by
    this database; queued units run one at a time in submission order, each
    in its own transaction. Only work that goes through the queue is
    serialized: do not call the database directly from other threads while
    units are queued.
    """

    def __init__(self, path: Path | str | None = None, *, trace_sql: bool | None = None) -> None:
        """Create a database for ``path``; nothing is opened yet.

        ``path`` defaults to BOLD_DB_PATH. ``trace_sql`` logs every executed
        SQL text at DEBUG level and defaults to BOLD_TRACE_SQL.
        """
        self._path = str(path) if path is not None else get_db_path()
        self._trace_sql = is_sql_trace_enabled() if trace_sql is None else trace_sql
        self._connection: SQLiteConnection | None = None
        self._executor: SerialExecutor | None = None

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<Database {self._path!r} {state}>"

    @property
    def path(self) -> str:
        """The connection target."""
        return self._path

    @property
    def is_open(self) -> bool:
        """True between a successful ``open()`` and ``close()``."""
        return self._connection is not None

    @property
    def in_transaction(self) -> bool:
        """True while an explicit transaction is open."""
        return self._connection is not None and self._connection.in_transaction

    @property
    def last_error_code(self) -> int:
        """The engine's most recent error code on this connection."""
        if self._connection is None:
            return SQLITE_MISUSE
        return self._connection.errcode

    @property
    def last_error_message(self) -> str:
        """The engine's most recent error message on this connection."""
        if self._connection is None:
            return _NOT_OPEN
        return self._connection.errmsg

    # -- Lifecycle --

    def open(self) -> bool:
        """Open the connection. Returns False (and logs) if it cannot be opened."""
        if self._connection is not None:
            return True
        try:
            self._connection = SQLiteConnection.open(
                self._path, trace=_trace_sql if self._trace_sql else None
            )
        except EngineError as exc:
            logger.warning("Could not open database %s: %s", self._path, exc.message)
            return False
        self._executor = SerialExecutor(name=f"boldsql-worker:{self._path}")
        logger.info("Opened database %s", self._path)
        return True

    def close(self) -> bool:
        """Close the connection after queued work has finished.

        Statements and result sets still open become unusable. Returns False
        if the database was not open or could not be closed.
        """
        connection = self._connection
        if connection is None:
            return False
        executor = self._executor
        self._executor = None
        if executor is not None:
            executor.shutdown(wait=not executor.in_worker_thread())
        self._connection = None
        try:
            connection.close()
        except EngineError as exc:
            logger.warning("Could not close database %s: %s", self._path, exc.message)
            return False
        logger.info("Closed database %s", self._path)
        return True

    # -- Statements --

    def prepare(self, sql: str) -> PreparationResult:
        """Compile SQL text into a Statement."""
        if self._connection is None:
            return PreparationResult.failure(self._error(ErrorCode.PREPARE_FAILED))
        try:
            handle = self._connection.prepare(sql)
        except EngineError as exc:
            logger.debug("Prepare failed for %r: %s", sql, exc.message)
            return PreparationResult.failure(self._error(ErrorCode.PREPARE_FAILED))
        return PreparationResult.success(Statement(handle, self))

    def query(self, sql: str, args: Arguments | None = None) -> QueryResult:
        """Prepare ``sql``, bind ``args`` and return a cursor over its rows.

        A sequence binds to positions 1..N and must match the placeholder
        count exactly. A mapping binds each key to ``:key``; a key with no
        matching placeholder fails the whole call with BIND_FAILED.
        """
        if isinstance(args, str | bytes):
            raise TypeError("args must be a sequence or a mapping of values, not a string")
        prepared = self.prepare(sql)
        if prepared.statement is None:
            assert prepared.error is not None
            return QueryResult.failure(prepared.error)

        statement = prepared.statement
        if isinstance(args, Mapping):
            error = self._bind_named(statement, args)
        else:
            error = self._bind_indexed(statement, args or ())
        if error is not None:
            statement.finalize()
            return QueryResult.failure(error)
        return QueryResult.success(ResultSet(statement))

    def update(self, sql: str, args: Arguments | None = None) -> UpdateResult:
        """Run a statement to completion and report success or failure.

        Fails with EXECUTE_QUERY_FAILED if the statement cannot be prepared
        or bound, and with STEP_FAILED if it does not complete in one step
        (including when it produces a row). The cursor is always closed.
        """
        result = self.query(sql, args)
        if result.error is not None:
            return UpdateResult.failure(
                Error(
                    code=ErrorCode.EXECUTE_QUERY_FAILED,
                    message=result.error.message,
                    engine_code=result.error.engine_code,
                )
            )

        result_set = result.result_set
        assert result_set is not None
        try:
            status = result_set.step()
        finally:
            result_set.close()

        if status is StepStatus.DONE:
            return UpdateResult.success()
        if result_set.step_error is not None:
            return UpdateResult.failure(result_set.step_error)
        return UpdateResult.failure(
            Error(
                code=ErrorCode.STEP_FAILED,
                message="statement produced a row; use query() to read results",
                engine_code=int(StepStatus.ROW),
            )
        )

    def _bind_indexed(self, statement: Statement, args: Sequence[object]) -> Error | None:
        values = list(args)
        if len(values) != statement.parameter_count:
            return Error(
                code=ErrorCode.BIND_FAILED,
                message=(
                    f"{len(values)} arguments supplied for "
                    f"{statement.parameter_count} placeholders"
                ),
                engine_code=SQLITE_RANGE,
            )
        for index, arg in enumerate(values, start=1):
            error = self._bind_one(statement, index, arg)
            if error is not None:
                return error
        return None

    def _bind_named(self, statement: Statement, args: Mapping[str, object]) -> Error | None:
        for name, arg in args.items():
            index = statement.bind_parameter_index(f":{name}")
            if index == 0:
                logger.warning("Failed to bind parameter named '%s'", name)
                return Error(
                    code=ErrorCode.BIND_FAILED,
                    message=f"no parameter named ':{name}'",
                    engine_code=SQLITE_RANGE,
                )
            error = self._bind_one(statement, index, arg)
            if error is not None:
                return error
        return None

    def _bind_one(self, statement: Statement, index: int, arg: object) -> Error | None:
        try:
            value = to_value(arg)
        except (TypeError, OverflowError) as exc:
            return Error(code=ErrorCode.BIND_FAILED, message=str(exc), engine_code=SQLITE_MISMATCH)
        if not statement.bind(index, value):
            return self._error(ErrorCode.BIND_FAILED)
        return None

    def _error(self, code: ErrorCode) -> Error:
        return Error(code=code, message=self.last_error_message, engine_code=self.last_error_code)

    # -- Transactions --

    def begin_transaction(self) -> UpdateResult:
        """Issue BEGIN. Nested transactions are not supported."""
        return self.update("BEGIN")

    def commit(self) -> UpdateResult:
        """Issue COMMIT."""
        return self.update("COMMIT")

    def rollback(self) -> UpdateResult:
        """Issue ROLLBACK."""
        return self.update("ROLLBACK")

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Run a block in a transaction.

        Commits when the block exits normally, rolls back when it raises or
        after ``Transaction.rollback()``. Raises TransactionError if BEGIN or
        COMMIT fails.
        """
        begun = self.begin_transaction()
        if begun.error is not None:
            raise TransactionError(begun.error)

        transaction = Transaction(self)
        try:
            yield transaction
        except BaseException:
            if not transaction.rolled_back:
                rolled_back = self.rollback()
                if rolled_back.error is not None:
                    logger.warning("Rollback after failed body failed: %s", rolled_back.error)
            raise

        if transaction.rolled_back:
            return
        committed = self.commit()
        if committed.error is not None:
            if self.in_transaction:
                self.rollback()
            raise TransactionError(committed.error)

    def run_transaction(self, work: Callable[[Transaction], T]) -> T:
        """Call ``work`` inside ``transaction()`` and return its result."""
        with self.transaction() as transaction:
            return work(transaction)

    def async_transaction(self, work: Callable[[Transaction], T]) -> Future[T]:
        """Queue ``work`` to run in its own transaction on the background worker.

        Units run strictly one at a time in FIFO order. The returned future
        holds ``work``'s result or exception; it cannot be cancelled and has
        no timeout. Do not wait on it from inside another queued unit.
        """
        executor = self._executor
        if executor is None:
            return _not_open_future()
        try:
            return executor.submit(self._run_queued, work)
        except RuntimeError:
            # close() shut the worker down after we read it
            return _not_open_future()

    async def transaction_async(self, work: Callable[[Transaction], T]) -> T:
        """Await a queued transaction from asyncio code."""
        return await asyncio.wrap_future(self.async_transaction(work))

    def _run_queued(self, work: Callable[[Transaction], T]) -> T:
        try:
            return self.run_transaction(work)
        except Exception as exc:
            logger.warning("Queued transaction failed: %s", exc)
            raise
