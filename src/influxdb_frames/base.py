"""Base classes shared by the influxdb_frames HTTP clients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple
import logging

from .config import DEFAULT_TIMEOUT
from .dataframe import DataFrame
from .exceptions import InfluxDBAuthenticationError, InfluxDBQueryError, UnsafeOperationError
from .grouping import dataframes_by_tag, first_dataframe
from .models import DataFrameFactory, StatementResult


class HTTPClientBase:
    """Connection state common to blocking and async clients."""

    def __init__(
        self,
        version: int,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        allow_write: bool = False,
    ) -> None:
        if not url:
            raise ValueError("url is required")
        self.version = version
        self.url = url.rstrip("/")
        self.timeout = timeout
        self._username = username
        self._password = password
        self._token = token
        self._allow_write = allow_write
        self.logger = logging.getLogger(f"{__name__}.v{version}")

    def _basic_auth(self) -> Optional[Tuple[str, str]]:
        if self._username is None:
            return None
        return self._username, self._password or ""

    def _auth_headers(self) -> Dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Token {self._token}"}

    def _check_status(self, status_code: int, text: str) -> None:
        if status_code in (401, 403):
            raise InfluxDBAuthenticationError(f"Authentication failed: {status_code} - {text}")
        if not 200 <= status_code < 300:
            raise InfluxDBQueryError(f"Request failed: {status_code} - {text}")

    def _ensure_writes_allowed(self, op: str) -> None:
        if not self._allow_write:
            raise UnsafeOperationError(
                f"{op} blocked. Set INFLUXDB_ALLOW_WRITE=true or allow_write=True in config."
            )

    def __repr__(self) -> str:
        writes = "writes_enabled" if self._allow_write else "read_only"
        return f"{type(self).__name__}(v{self.version}, {self.url}, {writes})"


class QueryClientBase(HTTPClientBase, ABC):
    """Abstract base class for blocking query clients."""

    # -------------------- Connection management --------------------

    @abstractmethod
    def close(self) -> None:
        """Close underlying HTTP connections."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    # -------------------- Query methods --------------------

    @abstractmethod
    def fetch_readings(
        self,
        query: str,
        factory: DataFrameFactory = DataFrame.from_columns,
        **kwargs: Any,
    ) -> List[StatementResult]:
        """Execute a query and return one result per statement."""

    def fetch_dataframe(
        self,
        query: str,
        factory: DataFrameFactory = DataFrame.from_columns,
        **kwargs: Any,
    ) -> Any:
        """Fetch the first dataframe of the first statement.

        Everything else in the response is ignored.
        """
        return first_dataframe(self.fetch_readings(query, factory=factory, **kwargs))

    def fetch_dataframes_by_tag(
        self,
        query: str,
        tag: str,
        factory: DataFrameFactory = DataFrame.from_columns,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Fetch the dataframes of the first statement keyed by the value of ``tag``."""
        return dataframes_by_tag(self.fetch_readings(query, factory=factory, **kwargs), tag)
