"""InfluxDB v2 implementation (Flux) for asyncio."""

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
from .client import DIALECT
from .response import parse_annotated_csv

logger = logging.getLogger(__name__)


class AsyncFluxClient(HTTPClientBase):
    """Async InfluxDB v2 client using Flux."""

    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        org: Optional[str] = None,
        bucket: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(
            version=2,
            url=url,
            username=username,
            password=password,
            token=token,
            timeout=timeout,
        )
        self.org = org
        self.bucket = bucket
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
        **kwargs: Any,
    ) -> List[StatementResult]:
        client = await self._get_client()
        headers = {"Accept": "application/csv", "Content-Type": "application/json"}
        headers.update(self._auth_headers())
        request: Dict[str, Any] = {
            "params": {"org": self.org} if self.org else {},
            "json": {"query": query, "type": "flux", "dialect": DIALECT},
            "headers": headers,
        }
        auth = self._basic_auth()
        if auth is not None:
            request["auth"] = auth

        logger.debug("Sending Flux query to %s:\n%s", self.url, query)
        try:
            response = await client.post(f"{self.url}/api/v2/query", **request)
        except httpx.TransportError as exc:
            raise InfluxDBConnectionError(str(exc)) from exc

        self._check_status(response.status_code, response.text)
        results = parse_annotated_csv(response.text, factory)
        self.logger.debug("Fetched %d statement results", len(results))
        return results

    async def fetch_dataframe(
        self,
        query: str,
        factory: DataFrameFactory = DataFrame.from_columns,
        **kwargs: Any,
    ) -> Any:
        return first_dataframe(await self.fetch_readings(query, factory=factory, **kwargs))

    async def fetch_dataframes_by_tag(
        self,
        query: str,
        tag: str,
        factory: DataFrameFactory = DataFrame.from_columns,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        results = await self.fetch_readings(query, factory=factory, **kwargs)
        return dataframes_by_tag(results, tag)
