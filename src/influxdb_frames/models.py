"""Data models for influxdb_frames."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

import pandas as pd

from .exceptions import DataFrameError, ResponseError, ValueKindError
from .types import Value

DF = TypeVar("DF")

TagsMap = Dict[str, str]
TaggedDataFrame = Tuple[DF, Optional[TagsMap]]

# Anything constructible from (name, index, columns) can be the output type.
DataFrameFactory = Callable[[str, List[pd.Timestamp], Dict[str, List[Value]]], DF]


@dataclass(frozen=True)
class StatementResult(Generic[DF]):
    """Outcome of one statement of a query.

    Either ``dataframes`` holds the tagged dataframes the statement
    produced, or ``error`` holds why the statement failed.
    """

    dataframes: List[TaggedDataFrame] = field(default_factory=list)
    error: Optional[ResponseError] = None
    statement_id: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> List[TaggedDataFrame]:
        if self.error is not None:
            raise self.error
        return self.dataframes


@dataclass(frozen=True)
class WriteResult:
    """Result of a write operation."""

    success: bool
    message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


def build_dataframe(
    factory: DataFrameFactory,
    name: str,
    index: List[pd.Timestamp],
    columns: Dict[str, List[Value]],
) -> Any:
    """Invoke a dataframe factory, wrapping its failures as response errors."""
    try:
        return factory(name, index, columns)
    except (ResponseError, ValueKindError):
        raise
    except Exception as exc:
        raise DataFrameError(f"could not create dataframe {name!r}: {exc}") from exc
