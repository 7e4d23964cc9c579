"""Exceptions for misuse of the API and failed transaction units.

Ordinary engine failures are reported through QueryResult and UpdateResult,
not raised.
"""

from boldsql.models.error import Error


class CursorStateError(RuntimeError):
    """A statement or result set was used outside its valid state."""


class TransactionError(Exception):
    """Beginning or committing a transaction failed."""

    def __init__(self, error: Error) -> None:
        """Initialize with the failure reported by the engine."""
        super().__init__(str(error))
        self.error = error
