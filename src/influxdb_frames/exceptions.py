"""Exceptions for influxdb_frames."""

class InfluxDBError(Exception):
    """Base exception for influxdb_frames."""


class InfluxDBConnectionError(InfluxDBError):
    """Connection to InfluxDB failed."""


class InfluxDBQueryError(InfluxDBError):
    """Query execution failed."""


class InfluxDBAuthenticationError(InfluxDBError):
    """Authentication failed."""


class UnsafeOperationError(InfluxDBError):
    """Raised when a write operation is blocked by safety rules."""


# -------------------- Response parsing --------------------

class ResponseError(InfluxDBError):
    """Base exception for errors while parsing a query response."""


class InvalidJsonError(ResponseError):
    """Input is not a valid JSON response envelope."""


class InvalidCsvError(ResponseError):
    """Input is not a valid annotated CSV response."""

    def __init__(self, message: str, row: str | None = None) -> None:
        super().__init__(message)
        self.row = row


class ServerResponseError(ResponseError):
    """The entire request failed on the server."""


class StatementError(ResponseError):
    """The request succeeded, but one of its statements failed."""


class ValueDecodeError(ResponseError, ValueError):
    """A wire value could not be decoded."""


class DatetimeError(ValueDecodeError):
    """Input is not a valid RFC 3339 datetime."""


class EmptyColumnError(ValueDecodeError):
    """A column without elements cannot be typed."""


class DataFrameError(ResponseError):
    """The destination dataframe could not be created."""


class ValueKindError(InfluxDBError, TypeError):
    """A value was narrowed to a kind it does not hold."""


# -------------------- Client helpers --------------------

class EmptyResultError(InfluxDBError):
    """The server returned no statement or no dataframe."""


class MissingTagsError(InfluxDBError):
    """A dataframe without tags was returned when tags were expected."""

    def __init__(self) -> None:
        super().__init__("Missing tags")


class MissingTagError(InfluxDBError):
    """An expected tag was missing from a tagged dataframe."""

    def __init__(self, tag: str) -> None:
        super().__init__(f'Missing tag "{tag}"')
        self.tag = tag


# -------------------- Writes --------------------

class InfluxDBWriteError(InfluxDBError):
    """Writing line protocol data failed."""


class FieldTypeConflictError(InfluxDBWriteError):
    """A field was written with a type different from the stored one."""


class DatabaseNotFoundError(InfluxDBWriteError):
    """The target database does not exist."""
