"""Built-in time-indexed dataframe."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Sequence, Tuple

import pandas as pd

from .exceptions import DataFrameError, EmptyColumnError
from .types import Instant, Value, ValueKind, format_instant, to_utc


@dataclass(frozen=True)
class Column:
    """A homogeneous column of native values."""

    kind: ValueKind
    values: Tuple[Any, ...]

    @classmethod
    def from_values(cls, values: Sequence[Value]) -> Column:
        """Build a column typed after its first element.

        Every element is narrowed to the kind of the first one, so a
        mismatching element raises :class:`~influxdb_frames.exceptions.ValueKindError`.
        """
        if not values:
            raise EmptyColumnError("Empty column")
        kind = values[0].kind
        return cls(kind, tuple(value.as_kind(kind) for value in values))

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __getitem__(self, position: int) -> Any:
        return self.values[position]

    def display(self, position: int) -> str:
        value = self.values[position]
        if self.kind is ValueKind.TIMESTAMP:
            return format_instant(value)
        if self.kind is ValueKind.BOOLEAN:
            return "true" if value else "false"
        return str(value)


class DataFrame:
    """A named collection of columns sharing one time index.

    Instances are immutable. Rows keep the order in which the server
    returned them; the index is not sorted.
    """

    __slots__ = ("_name", "_index", "_columns")

    def __init__(self, name: str, index: Sequence[Instant], columns: Mapping[str, Column]) -> None:
        index = tuple(to_utc(instant) for instant in index)
        for column_name, column in columns.items():
            if len(column) != len(index):
                raise DataFrameError(
                    f"Column {column_name!r} has {len(column)} elements, index has {len(index)}"
                )
        self._name = name
        self._index = index
        self._columns = MappingProxyType(dict(columns))

    @classmethod
    def from_columns(
        cls,
        name: str,
        index: Sequence[Instant],
        columns: Mapping[str, Sequence[Value]],
    ) -> DataFrame:
        """Dataframe factory accepted by the response parsers."""
        return cls(
            name,
            index,
            {column_name: Column.from_values(values) for column_name, values in columns.items()},
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def index(self) -> Tuple[pd.Timestamp, ...]:
        return self._index

    @property
    def columns(self) -> Mapping[str, Column]:
        return self._columns

    @property
    def column_names(self) -> List[str]:
        return list(self._columns)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, column_name: object) -> bool:
        return column_name in self._columns

    def __getitem__(self, column_name: str) -> Column:
        return self._columns[column_name]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataFrame):
            return NotImplemented
        return (
            self._name == other._name
            and self._index == other._index
            and dict(self._columns) == dict(other._columns)
        )

    __hash__ = None

    def to_dict(self) -> Dict[str, List[Any]]:
        data: Dict[str, List[Any]] = {"time": list(self._index)}
        for column_name, column in self._columns.items():
            data[column_name] = list(column.values)
        return data

    def __repr__(self) -> str:
        return f"DataFrame(name={self._name!r}, rows={len(self)}, columns={self.column_names})"

    def __str__(self) -> str:
        names = self.column_names
        lines = ["  ".join([f"{'datetime':>30}"] + [f"{n:>16}" for n in names])]
        lines.append("  ".join(["-" * 30] + ["-" * 16 for _ in names]))
        for position, instant in enumerate(self._index):
            cells = [f"{format_instant(instant):>30}"]
            cells += [f"{self._columns[n].display(position):>16}" for n in names]
            lines.append("  ".join(cells))
        return "\n".join(lines)
