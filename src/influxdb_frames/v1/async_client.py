"""InfluxDB v1 implementation (InfluxQL) for asyncio."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
import logging

import httpx

from ..base import HTTPClientBase
from ..config import DEFAULT_TIMEOUT
from ..dataframe import DataFrame
from ..exceptions import InfluxDBConnectionError
from ..grouping import dataframes_by_tag, first_dataframe
from ..models import DataFrameFactory, StatementResult
from .response import parse_json

logger = logging.getLogger(__name__)


class AsyncInfluxQLClient(HTTPClientBase):
    """Async InfluxDB v1 client using InfluxQL.

    Responses are parsed by the same :func:`parse_json` as the blocking
    client; only the HTTP exchange is awaited.
    """

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        database: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(
            version=1,
            url=url,
            username=username,
            password=password,
            timeout=timeout,
        )
        self.database = database
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.close()
        return False

    async def fetch_readings(
        self,
        query: str,
        factory: DataFrameFactory = DataFrame.from_columns,
        database: Optional[str] = None,
    ) -> List[StatementResult]:
        client = await self._get_client()
        database = database or self.database
        request: Dict[str, Any] = {
            "params": {"db": database} if database else {},
            "data": {"q": query},
            "headers": {"Accept": "application/json"},
        }
        auth = self._basic_auth()
        if auth is not None:
            request["auth"] = auth

        logger.debug("Sending InfluxQL query to %s: %s", self.url, query)
        try:
            response = await client.post(f"{self.url}/query", **request)
        except httpx.TransportError as exc:
            raise InfluxDBConnectionError(str(exc)) from exc

        self._check_status(response.status_code, response.text)
        results = parse_json(response.content, factory)
        self.logger.debug("Fetched %d statement results", len(results))
        return results

    async def fetch_dataframe(
        self,
        query: str,
        factory: DataFrameFactory = DataFrame.from_columns,
        database: Optional[str] = None,
    ) -> Any:
        return first_dataframe(await self.fetch_readings(query, factory=factory, database=database))

    async def fetch_dataframes_by_tag(
        self,
        query: str,
        tag: str,
        factory: DataFrameFactory = DataFrame.from_columns,
        database: Optional[str] = None,
    ) -> Dict[str, Any]:
        results = await self.fetch_readings(query, factory=factory, database=database)
        return dataframes_by_tag(results, tag)
