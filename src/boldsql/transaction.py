"""Transaction-scoped handle given to transaction bodies."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from boldsql.results import QueryResult, UpdateResult

if TYPE_CHECKING:
    from boldsql.database import Database


class Transaction:
    """Runs statements inside one open transaction on its Database.

    The transaction commits when the body finishes normally and rolls back
    when it raises. Call ``rollback()`` to abandon it without raising.
    """

    def __init__(self, database: Database) -> None:
        """Initialize for a database whose transaction has just begun."""
        self.database = database
        self._rolled_back = False

    def __repr__(self) -> str:
        return f"<Transaction on {self.database.path!r} rolled_back={self._rolled_back}>"

    @property
    def rolled_back(self) -> bool:
        """True once ``rollback()`` has succeeded."""
        return self._rolled_back

    def query(
        self, sql: str, args: Sequence[object] | Mapping[str, object] | None = None
    ) -> QueryResult:
        """Run a query inside the transaction."""
        return self.database.query(sql, args)

    def update(
        self, sql: str, args: Sequence[object] | Mapping[str, object] | None = None
    ) -> UpdateResult:
        """Run an update inside the transaction."""
        return self.database.update(sql, args)

    def rollback(self) -> UpdateResult:
        """Roll the transaction back now; nothing is committed afterwards."""
        result = self.database.rollback()
        if result.is_success:
            self._rolled_back = True
        return result
