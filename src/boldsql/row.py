"""Row snapshots and typed access to their column values."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from types import MappingProxyType

from boldsql.models.value import Blob, Integer, Null, Real, Text, Value


@dataclass(frozen=True)
class ColumnValue:
    """Typed views of one column value. Every view is None unless the
    value holds exactly that variant."""

    raw: Value | None

    @property
    def string(self) -> str | None:
        """The text, if the value is Text."""
        return self.raw.value if isinstance(self.raw, Text) else None

    @property
    def int(self) -> int | None:
        """The integer, if the value is Integer."""
        return self.raw.value if isinstance(self.raw, Integer) else None

    @property
    def double(self) -> float | None:
        """The float, if the value is Real."""
        return self.raw.value if isinstance(self.raw, Real) else None

    @property
    def data(self) -> bytes | None:
        """The bytes, if the value is Blob."""
        return self.raw.value if isinstance(self.raw, Blob) else None

    @property
    def bool(self) -> bool | None:
        """True or False for Integer 1 or 0; None for anything else."""
        number = self.int
        if number == 1:
            return True
        if number == 0:
            return False
        return None

    @property
    def is_null(self) -> bool:
        """True for SQL NULL and for a missing column."""
        return self.raw is None or isinstance(self.raw, Null)

    def get(self) -> str | int | float | bytes | None:
        """The plain Python value, None for NULL or a missing column."""
        return None if self.raw is None else self.raw.value


class Row:
    """An immutable snapshot of one result row, keyed by column name.

    Names are matched exactly (case-sensitive, no normalization). When a
    result has two columns with the same name the later one wins.
    """

    __slots__ = ("_values",)

    def __init__(self, columns: Iterable[tuple[str, Value]]) -> None:
        """Initialize from (column name, value) pairs in column order."""
        values: dict[str, Value] = {}
        for name, value in columns:
            values[name] = value
        self._values = MappingProxyType(values)

    def __repr__(self) -> str:
        return f"Row({self.as_dict()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return dict(self._values) == dict(other._values)

    __hash__ = None  # type: ignore[assignment]

    def __getitem__(self, column_name: str) -> ColumnValue:
        return ColumnValue(self._values.get(column_name))

    def __contains__(self, column_name: object) -> bool:
        return column_name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    @property
    def all_column_names(self) -> list[str]:
        """Column names in column order, duplicates removed."""
        return list(self._values)

    def value(self, column_name: str) -> Value | None:
        """The value of a column, or None if the row has no such column."""
        return self._values.get(column_name)

    def string_value(self, column_name: str) -> str | None:
        """Text stored in a column."""
        return self[column_name].string

    def int_value(self, column_name: str) -> int | None:
        """Integer stored in a column."""
        return self[column_name].int

    def double_value(self, column_name: str) -> float | None:
        """Float stored in a column."""
        return self[column_name].double

    def data_value(self, column_name: str) -> bytes | None:
        """Bytes stored in a column."""
        return self[column_name].data

    def bool_value(self, column_name: str) -> bool | None:
        """Boolean stored as Integer 0 or 1; any other value gives None."""
        return self[column_name].bool

    def as_dict(self) -> dict[str, str | int | float | bytes | None]:
        """Plain Python values keyed by column name."""
        return {name: value.value for name, value in self._values.items()}
