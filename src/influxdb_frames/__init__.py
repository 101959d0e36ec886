"""influxdb_frames package."""

from .client import InfluxDBClientFactory
from .config import V1Config, V2Config, load_env
from .dataframe import Column, DataFrame
from .exceptions import (
    DataFrameError,
    DatabaseNotFoundError,
    DatetimeError,
    EmptyColumnError,
    EmptyResultError,
    FieldTypeConflictError,
    InfluxDBAuthenticationError,
    InfluxDBConnectionError,
    InfluxDBError,
    InfluxDBQueryError,
    InfluxDBWriteError,
    InvalidCsvError,
    InvalidJsonError,
    MissingTagError,
    MissingTagsError,
    ResponseError,
    ServerResponseError,
    StatementError,
    UnsafeOperationError,
    ValueDecodeError,
    ValueKindError,
)
from .grouping import dataframes_by_tag, first_dataframe, group_by_tag
from .line_protocol import Line, LineBuilder
from .models import StatementResult, WriteResult
from .pandas_frame import to_pandas
from .types import Duration, Value, ValueKind
from .v1.async_client import AsyncInfluxQLClient
from .v1.client import InfluxQLClient
from .v1.query_builder import build_influxql_query
from .v1.response import parse_json
from .v2.async_client import AsyncFluxClient
from .v2.client import FluxClient
from .v2.query_builder import FluxQueryBuilder
from .v2.response import parse_annotated_csv
from .write_client import AsyncLineProtocolClient, LineProtocolClient

__all__ = [
    "InfluxDBClientFactory",
    "InfluxQLClient",
    "AsyncFluxClient",
    "AsyncInfluxQLClient",
    "FluxClient",
    "LineProtocolClient",
    "AsyncLineProtocolClient",
    "V1Config",
    "V2Config",
    "load_env",
    "Column",
    "DataFrame",
    "DataFrameError",
    "DatabaseNotFoundError",
    "DatetimeError",
    "EmptyColumnError",
    "EmptyResultError",
    "FieldTypeConflictError",
    "InfluxDBAuthenticationError",
    "InfluxDBConnectionError",
    "InfluxDBError",
    "InfluxDBQueryError",
    "InfluxDBWriteError",
    "InvalidCsvError",
    "InvalidJsonError",
    "MissingTagError",
    "MissingTagsError",
    "ResponseError",
    "ServerResponseError",
    "StatementError",
    "UnsafeOperationError",
    "ValueDecodeError",
    "ValueKindError",
    "dataframes_by_tag",
    "first_dataframe",
    "group_by_tag",
    "Line",
    "LineBuilder",
    "StatementResult",
    "WriteResult",
    "to_pandas",
    "Duration",
    "Value",
    "ValueKind",
    "build_influxql_query",
    "parse_json",
    "FluxQueryBuilder",
    "parse_annotated_csv",
]
