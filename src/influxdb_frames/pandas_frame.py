"""pandas dataframe backend.

:func:`to_pandas` can be passed as ``factory`` to any parser or client
method to obtain :class:`pandas.DataFrame` objects instead of the built-in
:class:`~influxdb_frames.dataframe.DataFrame`.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from .exceptions import EmptyColumnError
from .types import Instant, Value, ValueKind

_DTYPES = {
    ValueKind.FLOAT: np.float64,
    ValueKind.INTEGER: np.int64,
    ValueKind.UNSIGNED_INTEGER: np.uint64,
    ValueKind.BOOLEAN: np.bool_,
    ValueKind.STRING: object,
}


def to_pandas(
    name: str,
    index: Sequence[Instant],
    columns: Dict[str, List[Value]],
) -> pd.DataFrame:
    """Build a pandas dataframe indexed by a UTC ``DatetimeIndex`` named ``time``.

    Column dtypes follow the kind of the first element of each column.
    """
    time_index = pd.DatetimeIndex(pd.to_datetime(list(index), utc=True), name="time")
    data: Dict[str, object] = {}
    for column_name, values in columns.items():
        if not values:
            raise EmptyColumnError(f"Empty column {column_name!r}")
        kind = values[0].kind
        native = [value.as_kind(kind) for value in values]
        if kind is ValueKind.TIMESTAMP:
            data[column_name] = pd.DatetimeIndex(pd.to_datetime(native, utc=True))
        else:
            data[column_name] = np.array(native, dtype=_DTYPES[kind])

    df = pd.DataFrame(data, index=time_index)
    df.attrs["name"] = name
    return df
