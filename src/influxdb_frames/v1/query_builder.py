"""InfluxQL query builder."""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..types import Instant, format_instant


def build_influxql_query(
    measurement: str,
    fields: Optional[Iterable[str]] = None,
    database: Optional[str] = None,
    retention_policy: Optional[str] = None,
    start: Optional[Instant] = None,
    stop: Optional[Instant] = None,
    group_by: Optional[Iterable[str]] = None,
) -> str:
    """Build a ``SELECT`` statement.

    >>> build_influxql_query("indoor_environment", ["temperature", "humidity"], database="house")
    'SELECT temperature, humidity FROM house..indoor_environment'
    """
    field_list = list(fields or [])
    query = f"SELECT {', '.join(field_list) if field_list else '*'}"
    query += f" FROM {_source(measurement, database, retention_policy)}"
    conditions = _time_conditions(start, stop)
    if conditions:
        query += f" WHERE {' AND '.join(conditions)}"
    groups = list(group_by or [])
    if groups:
        query += f" GROUP BY {', '.join(groups)}"
    return query


def _source(measurement: str, database: Optional[str], retention_policy: Optional[str]) -> str:
    if database is None and retention_policy is None:
        return measurement
    return f"{database or ''}.{retention_policy or ''}.{measurement}"


def _time_conditions(start: Optional[Instant], stop: Optional[Instant]) -> List[str]:
    conditions = []
    if start is not None:
        conditions.append(f"time > '{format_instant(start)}'")
    if stop is not None:
        conditions.append(f"time < '{format_instant(stop)}'")
    return conditions
