"""Value types shared by the response parsers, the query builders and the
line protocol.

InfluxDB stores six kinds of values. The wire formats only carry
dynamically-typed cells, so every cell is decoded into a :class:`Value`
first and narrowed to a native Python value when a column is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Union
import logging
import math
import re

import pandas as pd

from .exceptions import DatetimeError, ValueDecodeError, ValueKindError

logger = logging.getLogger(__name__)

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
U64_MAX = 2**64 - 1

_RFC3339 = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d{1,9})?([Zz]|[+-]\d{2}:\d{2})$"
)

Instant = Union[datetime, pd.Timestamp]


class ValueKind(Enum):
    FLOAT = "float"
    INTEGER = "integer"
    UNSIGNED_INTEGER = "unsigned_integer"
    STRING = "string"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"


@dataclass(frozen=True)
class Value:
    """A single InfluxDB value.

    Build instances through the ``from_*`` constructors, which validate the
    payload against the kind. Narrow them back with the ``as_*`` accessors;
    asking for a kind the value does not hold raises :class:`ValueKindError`,
    except for the numeric kinds, which convert into each other.
    """

    kind: ValueKind
    data: Any

    # -------------------- Constructors --------------------

    @classmethod
    def from_float(cls, value: float) -> Value:
        return cls(ValueKind.FLOAT, float(value))

    @classmethod
    def from_int(cls, value: int) -> Value:
        if not I64_MIN <= value <= I64_MAX:
            raise ValueDecodeError(f"integer out of range: {value}")
        return cls(ValueKind.INTEGER, int(value))

    @classmethod
    def from_uint(cls, value: int) -> Value:
        if not 0 <= value <= U64_MAX:
            raise ValueDecodeError(f"unsigned integer out of range: {value}")
        return cls(ValueKind.UNSIGNED_INTEGER, int(value))

    @classmethod
    def from_str(cls, value: str) -> Value:
        return cls(ValueKind.STRING, str(value))

    @classmethod
    def from_bool(cls, value: bool) -> Value:
        return cls(ValueKind.BOOLEAN, bool(value))

    @classmethod
    def from_timestamp(cls, value: Instant) -> Value:
        return cls(ValueKind.TIMESTAMP, to_utc(value))

    @classmethod
    def from_json(cls, cell: Any) -> Value:
        """Decode a scalar produced by ``json.loads``.

        Integral numbers become INTEGER when they fit in 64 signed bits,
        UNSIGNED_INTEGER when they only fit in 64 unsigned bits and FLOAT
        otherwise. Numbers written with a fraction or exponent are FLOAT.
        """
        if cell is None:
            raise ValueDecodeError("value is null")
        if isinstance(cell, bool):
            return cls.from_bool(cell)
        if isinstance(cell, int):
            if I64_MIN <= cell <= I64_MAX:
                return cls(ValueKind.INTEGER, cell)
            if 0 <= cell <= U64_MAX:
                return cls(ValueKind.UNSIGNED_INTEGER, cell)
            return cls(ValueKind.FLOAT, float(cell))
        if isinstance(cell, float):
            return cls(ValueKind.FLOAT, cell)
        if isinstance(cell, str):
            return cls(ValueKind.STRING, cell)
        if isinstance(cell, list):
            raise ValueDecodeError("value is a JSON array")
        if isinstance(cell, dict):
            raise ValueDecodeError("value is a JSON object")
        raise ValueDecodeError(f"value has unsupported type {type(cell).__name__}")

    # -------------------- Narrowing --------------------

    def as_float(self) -> float:
        if self.kind in (ValueKind.FLOAT, ValueKind.INTEGER, ValueKind.UNSIGNED_INTEGER):
            return float(self.data)
        raise ValueKindError(f"Not a float: {self!r}")

    def as_integer(self) -> int:
        if self.kind is ValueKind.INTEGER:
            return self.data
        if self.kind is ValueKind.UNSIGNED_INTEGER:
            if self.data > I64_MAX:
                logger.warning("Casting unsigned integer %d to integer wraps around", self.data)
                return self.data - 2**64
            return self.data
        if self.kind is ValueKind.FLOAT:
            logger.warning("Casting float to integer")
            return _float_to_int(self)
        raise ValueKindError(f"Not an integer: {self!r}")

    def as_unsigned_integer(self) -> int:
        if self.kind is ValueKind.UNSIGNED_INTEGER:
            return self.data
        if self.kind is ValueKind.INTEGER:
            if self.data < 0:
                logger.warning("Casting negative integer %d to unsigned integer wraps around", self.data)
                return self.data + 2**64
            return self.data
        if self.kind is ValueKind.FLOAT:
            logger.warning("Casting float to unsigned integer")
            return _float_to_int(self) % 2**64
        raise ValueKindError(f"Not an unsigned integer: {self!r}")

    def as_boolean(self) -> bool:
        if self.kind is ValueKind.BOOLEAN:
            return self.data
        raise ValueKindError(f"Not a boolean: {self!r}")

    def as_string(self) -> str:
        if self.kind is ValueKind.STRING:
            return self.data
        raise ValueKindError(f"Not a string: {self!r}")

    def as_timestamp(self) -> pd.Timestamp:
        if self.kind is ValueKind.TIMESTAMP:
            return self.data
        raise ValueKindError(f"Not a timestamp: {self!r}")

    def as_kind(self, kind: ValueKind) -> Any:
        """Narrow to the native representation of ``kind``."""
        return _NARROWERS[kind](self)

    # -------------------- Rendering --------------------

    def to_line_protocol(self) -> str:
        """Render as a line protocol field value."""
        if self.kind is ValueKind.FLOAT:
            return repr(self.data)
        if self.kind is ValueKind.INTEGER:
            return f"{self.data}i"
        if self.kind is ValueKind.UNSIGNED_INTEGER:
            return f"{self.data}u"
        if self.kind is ValueKind.STRING:
            escaped = self.data.replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        if self.kind is ValueKind.BOOLEAN:
            return "true" if self.data else "false"
        return f"{self.data.value}i"

    def __str__(self) -> str:
        if self.kind is ValueKind.BOOLEAN:
            return "true" if self.data else "false"
        if self.kind is ValueKind.TIMESTAMP:
            return format_instant(self.data)
        return str(self.data)


def _float_to_int(value: Value) -> int:
    if not math.isfinite(value.data):
        raise ValueKindError(f"Cannot cast non-finite float to integer: {value!r}")
    return int(value.data)


_NARROWERS = {
    ValueKind.FLOAT: Value.as_float,
    ValueKind.INTEGER: Value.as_integer,
    ValueKind.UNSIGNED_INTEGER: Value.as_unsigned_integer,
    ValueKind.STRING: Value.as_string,
    ValueKind.BOOLEAN: Value.as_boolean,
    ValueKind.TIMESTAMP: Value.as_timestamp,
}


def to_value(value: Any) -> Value:
    """Wrap a native Python value, passing :class:`Value` through."""
    if isinstance(value, Value):
        return value
    if isinstance(value, bool):
        return Value.from_bool(value)
    if isinstance(value, int):
        return Value.from_int(value)
    if isinstance(value, float):
        return Value.from_float(value)
    if isinstance(value, str):
        return Value.from_str(value)
    if isinstance(value, datetime):
        return Value.from_timestamp(value)
    raise ValueKindError(f"Unsupported value type: {type(value).__name__}")


# -------------------- Instants --------------------

def to_utc(value: Instant) -> pd.Timestamp:
    """Convert an instant to a UTC timestamp; naive instants are taken as UTC."""
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def parse_instant(text: str) -> pd.Timestamp:
    """Parse an RFC 3339 instant into a UTC timestamp with nanosecond precision."""
    if not isinstance(text, str) or not _RFC3339.match(text):
        raise DatetimeError(f"could not parse datetime: {text!r}")
    try:
        ts = pd.Timestamp(text.upper().replace(" ", "T"))
    except (ValueError, OverflowError) as exc:
        raise DatetimeError(f"could not parse datetime: {text!r}") from exc
    return ts.tz_convert("UTC")


def format_instant(value: Instant) -> str:
    """Format an instant as RFC 3339 in UTC, e.g. ``2021-03-07T21:00:00Z``.

    Sub-second digits are only written when needed, in groups of three.
    """
    ts = to_utc(value)
    nanos = ts.microsecond * 1000 + ts.nanosecond
    text = ts.strftime("%Y-%m-%dT%H:%M:%S")
    if nanos == 0:
        fraction = ""
    elif nanos % 1_000_000 == 0:
        fraction = f".{nanos // 1_000_000:03d}"
    elif nanos % 1000 == 0:
        fraction = f".{nanos // 1000:06d}"
    else:
        fraction = f".{nanos:09d}"
    return f"{text}{fraction}Z"


# -------------------- Durations --------------------

_DURATION_UNITS = ("ns", "us", "ms", "s", "m", "h", "d")


@dataclass(frozen=True)
class Duration:
    """A duration as written in queries, e.g. ``-15m``; may also be infinite."""

    amount: int
    unit: str = "s"

    def __post_init__(self) -> None:
        if self.unit != "inf" and self.unit not in _DURATION_UNITS:
            raise ValueError(f"Unsupported duration unit: {self.unit}")

    @classmethod
    def infinity(cls) -> Duration:
        return cls(0, "inf")

    @classmethod
    def from_timedelta(cls, value: timedelta) -> Duration:
        return cls(int(value.total_seconds()), "s")

    def __str__(self) -> str:
        if self.unit == "inf":
            return "inf"
        return f"{self.amount}{self.unit}"


def format_duration(value: Union[Duration, timedelta, str]) -> str:
    if isinstance(value, timedelta):
        value = Duration.from_timedelta(value)
    return str(value)
