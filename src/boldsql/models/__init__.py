"""Value and error models."""

from boldsql.models.error import Error, ErrorCode
from boldsql.models.value import (
    NULL,
    Bindable,
    Blob,
    Integer,
    Null,
    Real,
    Text,
    Value,
    ValueKind,
    to_value,
)

__all__ = [
    "NULL",
    "Bindable",
    "Blob",
    "Error",
    "ErrorCode",
    "Integer",
    "Null",
    "Real",
    "Text",
    "Value",
    "ValueKind",
    "to_value",
]
