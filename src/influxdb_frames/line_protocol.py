"""Influx line protocol records.

A line looks like::

    location,city=Odense latitude=55.383333,longitude=10.383333 1404810611000000000

i.e. measurement, comma-separated tags, space, comma-separated fields and
an optional timestamp in nanoseconds since the epoch.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import pandas as pd

from .types import Instant, Value, to_utc, to_value


def escape_measurement(name: str) -> str:
    return name.replace(",", "\\,").replace(" ", "\\ ")


def escape_key(name: str) -> str:
    """Escape a tag key, tag value or field key."""
    return name.replace(",", "\\,").replace("=", "\\=").replace(" ", "\\ ")


class Line:
    """A single line protocol record."""

    def __init__(self, measurement: str) -> None:
        self.measurement = measurement
        self.fields: Dict[str, Value] = {}
        self.tags: Dict[str, str] = {}
        self.timestamp: Optional[pd.Timestamp] = None

    def insert_field(self, name: str, value: Any) -> None:
        self.fields[name] = to_value(value)

    def field(self, name: str) -> Optional[Value]:
        return self.fields.get(name)

    def insert_tag(self, name: str, value: str) -> None:
        self.tags[name] = str(value)

    def tag(self, name: str) -> Optional[str]:
        return self.tags.get(name)

    def set_timestamp(self, timestamp: Instant) -> None:
        self.timestamp = to_utc(timestamp)

    def to_line_protocol(self) -> str:
        if not self.fields:
            raise ValueError(f"Line for measurement {self.measurement!r} has no fields")
        line = escape_measurement(self.measurement)
        for name, value in sorted(self.tags.items()):
            line += f",{escape_key(name)}={escape_key(value)}"
        fields = ",".join(
            f"{escape_key(name)}={value.to_line_protocol()}"
            for name, value in sorted(self.fields.items())
        )
        line += f" {fields}"
        if self.timestamp is not None:
            line += f" {self.timestamp.value}"
        return line

    def __str__(self) -> str:
        return self.to_line_protocol()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Line):
            return NotImplemented
        return (
            self.measurement == other.measurement
            and self.fields == other.fields
            and self.tags == other.tags
            and self.timestamp == other.timestamp
        )

    def __repr__(self) -> str:
        return f"Line({self.measurement!r}, tags={self.tags}, fields={self.fields})"


class LineBuilder:
    """Fluent construction of a :class:`Line`.

    >>> str(LineBuilder("location").insert_tag("city", "Odense").insert_field("latitude", 55.38).build())
    'location,city=Odense latitude=55.38'
    """

    def __init__(self, measurement: str) -> None:
        self._line = Line(measurement)

    def insert_field(self, name: str, value: Any) -> LineBuilder:
        self._line.insert_field(name, value)
        return self

    def insert_tag(self, name: str, value: str) -> LineBuilder:
        self._line.insert_tag(name, value)
        return self

    def set_timestamp(self, timestamp: Instant) -> LineBuilder:
        self._line.set_timestamp(timestamp)
        return self

    def build(self) -> Line:
        return self._line
