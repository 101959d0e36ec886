"""InfluxDB v1 implementation (InfluxQL)."""

from __future__ import annotations

from typing import List, Optional
import logging

import requests

from ..base import QueryClientBase
from ..config import DEFAULT_TIMEOUT
from ..dataframe import DataFrame
from ..exceptions import InfluxDBConnectionError
from ..models import DataFrameFactory, StatementResult
from .response import parse_json

logger = logging.getLogger(__name__)


class InfluxQLClient(QueryClientBase):
    """Blocking InfluxDB v1 client using InfluxQL.

    Example::

        client = InfluxQLClient("https://example.com", username="user", password="secret")
        query = build_influxql_query("indoor_environment", ["temperature"], database="house")
        dataframe = client.fetch_dataframe(query)
    """

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        database: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(
            version=1,
            url=url,
            username=username,
            password=password,
            timeout=timeout,
        )
        self.database = database
        self._session = session if session is not None else requests.Session()

    def close(self) -> None:
        self._session.close()

    def ping(self) -> bool:
        try:
            response = self._session.get(f"{self.url}/ping", timeout=self.timeout)
        except requests.RequestException:
            return False
        return 200 <= response.status_code < 300

    def fetch_readings(
        self,
        query: str,
        factory: DataFrameFactory = DataFrame.from_columns,
        database: Optional[str] = None,
    ) -> List[StatementResult]:
        database = database or self.database
        params = {"db": database} if database else {}
        logger.debug("Sending InfluxQL query to %s: %s", self.url, query)
        try:
            response = self._session.post(
                f"{self.url}/query",
                params=params,
                data={"q": query},
                headers={"Accept": "application/json"},
                auth=self._basic_auth(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise InfluxDBConnectionError(str(exc)) from exc

        self._check_status(response.status_code, response.text)
        results = parse_json(response.content, factory)
        self.logger.debug("Fetched %d statement results", len(results))
        return results
