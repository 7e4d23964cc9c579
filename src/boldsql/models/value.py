"""Value model: the closed set of values that can be bound and extracted."""

from enum import StrEnum
from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class ValueKind(StrEnum):
    """The variant a value belongs to."""

    TEXT = "text"
    INTEGER = "integer"
    REAL = "real"
    BLOB = "blob"
    NULL = "null"


class _Variant(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)


class Text(_Variant):
    """UTF-8 text."""

    kind: Literal[ValueKind.TEXT] = ValueKind.TEXT
    value: str


class Integer(_Variant):
    """A 64-bit signed integer. Booleans travel as 0 and 1."""

    kind: Literal[ValueKind.INTEGER] = ValueKind.INTEGER
    value: int


class Real(_Variant):
    """A double precision float."""

    kind: Literal[ValueKind.REAL] = ValueKind.REAL
    value: float


class Blob(_Variant):
    """A byte sequence."""

    kind: Literal[ValueKind.BLOB] = ValueKind.BLOB
    value: bytes


class Null(_Variant):
    """SQL NULL."""

    kind: Literal[ValueKind.NULL] = ValueKind.NULL
    value: None = None


Value = Text | Integer | Real | Blob | Null

NULL = Null()


@runtime_checkable
class Bindable(Protocol):
    """A custom type that reduces itself to one of the closed variants.

    Implement this to pass your own types as query arguments, e.g. an
    identifier type that binds as ``Text``.
    """

    def to_sql_value(self) -> Value:
        """Return the variant this object binds as."""
        ...


def to_value(obj: object) -> Value:
    """Convert a Python object into a Value.

    Raises TypeError for unsupported types and OverflowError for integers
    outside the signed 64-bit range.
    """
    if obj is None:
        return NULL
    if isinstance(obj, Text | Integer | Real | Blob | Null):
        return obj
    # bool before int: bool is an int subclass
    if isinstance(obj, bool):
        return Integer(value=int(obj))
    if isinstance(obj, int):
        if not _INT64_MIN <= obj <= _INT64_MAX:
            raise OverflowError(f"integer {obj} does not fit in 64 bits")
        return Integer(value=obj)
    if isinstance(obj, float):
        return Real(value=obj)
    if isinstance(obj, str):
        return Text(value=obj)
    if isinstance(obj, bytes | bytearray | memoryview):
        return Blob(value=bytes(obj))
    if isinstance(obj, Bindable):
        reduced = obj.to_sql_value()
        if not isinstance(reduced, Text | Integer | Real | Blob | Null):
            raise TypeError(
                f"{type(obj).__name__}.to_sql_value() returned {type(reduced).__name__}"
            )
        return reduced
    raise TypeError(f"cannot bind value of type {type(obj).__name__}")
