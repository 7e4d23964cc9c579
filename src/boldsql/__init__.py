"""Typed access layer over SQLite prepared statements."""

from boldsql.database import Database
from boldsql.exceptions import CursorStateError, TransactionError
from boldsql.models import (
    NULL,
    Bindable,
    Blob,
    Error,
    ErrorCode,
    Integer,
    Null,
    Real,
    Text,
    Value,
    ValueKind,
    to_value,
)
from boldsql.result_set import CursorState, ResultSet
from boldsql.results import QueryResult, UpdateResult
from boldsql.row import ColumnValue, Row
from boldsql.statement import PreparationResult, Statement
from boldsql.transaction import Transaction

__all__ = [
    "NULL",
    "Bindable",
    "Blob",
    "ColumnValue",
    "CursorState",
    "CursorStateError",
    "Database",
    "Error",
    "ErrorCode",
    "Integer",
    "Null",
    "PreparationResult",
    "QueryResult",
    "Real",
    "ResultSet",
    "Row",
    "Statement",
    "Text",
    "Transaction",
    "TransactionError",
    "UpdateResult",
    "Value",
    "ValueKind",
    "to_value",
]
