"""Parse InfluxQL JSON responses into tagged dataframes.

A response looks like::

    {
        "results": [
            {
                "statement_id": 0,
                "series": [
                    {
                        "name": "environment",
                        "columns": ["time", "temperature", "humidity"],
                        "values": [
                            ["2021-03-04T17:00:00Z", 28.4, 41.0],
                            ["2021-03-04T18:00:00Z", 29.2, 37.0]
                        ],
                        "tags": {"room": "bedroom"}
                    }
                ]
            }
        ]
    }

A single query can consist of multiple semicolon-separated statements and
the server returns one result per statement. A result holds zero or more
series (one per tag combination when grouping by tags), or an error
message when that statement failed. The whole request can also fail, in
which case the response is ``{"error": "..."}``.

For instance ``CREATE DATABASE other; SELECT temperature FROM indoor GROUP
BY room`` returns an empty result for the first statement and one
dataframe per room for the second one.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union
import json
import logging

import pandas as pd

from ..dataframe import DataFrame
from ..exceptions import (
    InvalidJsonError,
    ResponseError,
    ServerResponseError,
    StatementError,
    ValueDecodeError,
)
from ..models import DataFrameFactory, StatementResult, TaggedDataFrame, build_dataframe
from ..types import Value, parse_instant

logger = logging.getLogger(__name__)


def parse_json(
    payload: Union[str, bytes],
    factory: DataFrameFactory = DataFrame.from_columns,
) -> List[StatementResult]:
    """Parse a JSON response to a list of statement results.

    ``factory`` builds the output dataframe from ``(name, index, columns)``;
    it defaults to :meth:`DataFrame.from_columns`, and
    :func:`influxdb_frames.pandas_frame.to_pandas` builds pandas dataframes
    instead.

    Raises :class:`InvalidJsonError` when the payload is not a response
    envelope and :class:`ServerResponseError` when the whole request failed.
    Statements that failed are returned as results carrying an error.
    """
    outcomes = _decode_envelope(payload)
    results = [_parse_outcome(outcome, factory) for outcome in outcomes]
    logger.debug("Parsed %d statement results", len(results))
    return results


def _decode_envelope(payload: Union[str, bytes]) -> List[Dict[str, Any]]:
    try:
        response = json.loads(payload)
    except (ValueError, TypeError) as exc:
        raise InvalidJsonError(f"invalid JSON: {exc}") from exc

    if not isinstance(response, dict):
        raise InvalidJsonError("invalid JSON: response is not an object")
    if "error" in response:
        raise ServerResponseError(str(response["error"]))
    results = response.get("results")
    if not isinstance(results, list):
        raise InvalidJsonError("invalid JSON: missing results")
    for outcome in results:
        if not isinstance(outcome, dict):
            raise InvalidJsonError("invalid JSON: statement result is not an object")
    return results


def _parse_outcome(outcome: Dict[str, Any], factory: DataFrameFactory) -> StatementResult:
    statement_id = outcome.get("statement_id")
    error = outcome.get("error")
    if error is not None:
        return StatementResult(error=StatementError(str(error)), statement_id=statement_id)

    try:
        dataframes = [_parse_series(series, factory) for series in outcome.get("series") or []]
    except ResponseError as exc:
        logger.debug("Statement %s failed to parse: %s", statement_id, exc)
        return StatementResult(error=exc, statement_id=statement_id)
    return StatementResult(dataframes=dataframes, statement_id=statement_id)


def _parse_series(series: Any, factory: DataFrameFactory) -> TaggedDataFrame:
    if not isinstance(series, dict):
        raise ValueDecodeError("series is not a JSON object")
    name = series.get("name", "")
    columns = series.get("columns") or []
    rows = series.get("values") or []
    tags: Optional[Dict[str, str]] = series.get("tags")
    if tags is not None and not isinstance(tags, dict):
        raise ValueDecodeError("tags is not a JSON object")
    if not isinstance(columns, list) or not all(isinstance(column, str) for column in columns):
        raise ValueDecodeError("columns is not a JSON array of strings")

    value_columns = columns[1:]
    index: List[pd.Timestamp] = []
    data: Dict[str, List[Value]] = {column: [] for column in value_columns}

    for row in rows:
        if not isinstance(row, list) or not row:
            raise ValueDecodeError("row is not a non-empty JSON array")
        instant = row[0]
        if not isinstance(instant, str):
            raise ValueDecodeError("index is not encoded as string")
        index.append(parse_instant(instant))
        for column, cell in zip(value_columns, row[1:]):
            data[column].append(Value.from_json(cell))

    dataframe = build_dataframe(factory, name, index, data)
    return dataframe, (dict(tags) if tags is not None else None)
