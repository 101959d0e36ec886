"""Flux query builder."""

from __future__ import annotations

from datetime import timedelta
from typing import List, Union

from ..types import Duration, Instant, format_duration, format_instant

InstantOrDuration = Union[Instant, Duration, timedelta, str]


class FluxQueryBuilder:
    """Build a Flux pipeline reading from a bucket.

    >>> print(FluxQueryBuilder("telegraf/autogen").range_start(Duration(-15, "m")).build())
    from(bucket: "telegraf/autogen")
      |> range(start: -15m)
      |> yield()

    Durations are relative to now; instants are written as RFC 3339.
    """

    def __init__(self, bucket: str) -> None:
        self.bucket = bucket
        self._statements: List[str] = []

    def range(self, start: InstantOrDuration, stop: InstantOrDuration) -> FluxQueryBuilder:
        return self._add(f"range(start: {fmt_time(start)}, stop: {fmt_time(stop)})")

    def range_start(self, start: InstantOrDuration) -> FluxQueryBuilder:
        return self._add(f"range(start: {fmt_time(start)})")

    def range_stop(self, stop: InstantOrDuration) -> FluxQueryBuilder:
        return self._add(f"range(stop: {fmt_time(stop)})")

    def filter(self, predicate: str) -> FluxQueryBuilder:
        lines = ["filter(fn: (r) =>"]
        lines += [f"    {line.lstrip()}" for line in predicate.splitlines()]
        lines.append("  )")
        return self._add("\n".join(lines))

    def window(self, every: Union[Duration, timedelta, str]) -> FluxQueryBuilder:
        return self._add(f"window(every: {format_duration(every)})")

    def aggregate(self, fn: str) -> FluxQueryBuilder:
        return self._add(f"{fn}()")

    def mean(self) -> FluxQueryBuilder:
        return self.aggregate("mean")

    def duplicate(self, column: str, as_: str) -> FluxQueryBuilder:
        return self._add(f'duplicate(column: "{column}", as: "{as_}")')

    def aggregate_window(self, fn: str, every: Union[Duration, timedelta, str]) -> FluxQueryBuilder:
        return self._add(f"aggregateWindow(every: {format_duration(every)}, fn: {fn})")

    def build(self) -> str:
        query = [f'from(bucket: "{self.bucket}")']
        query += [f"  |> {statement}" for statement in self._statements]
        query.append("  |> yield()")
        return "\n".join(query)

    def _add(self, statement: str) -> FluxQueryBuilder:
        self._statements.append(statement)
        return self


def fmt_time(value: InstantOrDuration) -> str:
    if isinstance(value, (Duration, timedelta, str)):
        return format_duration(value)
    return format_instant(value)
