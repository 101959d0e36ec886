"""InfluxDB v2 implementation (Flux)."""

from __future__ import annotations

from typing import Any, List, Optional
import logging

import requests

from ..base import QueryClientBase
from ..config import DEFAULT_TIMEOUT
from ..dataframe import DataFrame
from ..exceptions import InfluxDBConnectionError
from ..models import DataFrameFactory, StatementResult
from .response import parse_annotated_csv

logger = logging.getLogger(__name__)

DIALECT = {
    "header": True,
    "delimiter": ",",
    "annotations": ["datatype", "group", "default"],
}


class FluxClient(QueryClientBase):
    """Blocking InfluxDB v2 client using Flux.

    Queries are answered in annotated CSV and parsed with
    :func:`parse_annotated_csv`, one statement result per CSV block.
    """

    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        org: Optional[str] = None,
        bucket: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
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
        self._session = session if session is not None else requests.Session()

    def close(self) -> None:
        self._session.close()

    def fetch_readings(
        self,
        query: str,
        factory: DataFrameFactory = DataFrame.from_columns,
        **kwargs: Any,
    ) -> List[StatementResult]:
        """Execute a Flux query.

        Extra keywords such as ``database`` are accepted for compatibility
        with the InfluxQL client and ignored; Flux names its bucket in the query.
        """
        headers = {"Accept": "application/csv", "Content-Type": "application/json"}
        headers.update(self._auth_headers())
        params = {"org": self.org} if self.org else {}
        logger.debug("Sending Flux query to %s:\n%s", self.url, query)
        try:
            response = self._session.post(
                f"{self.url}/api/v2/query",
                params=params,
                json={"query": query, "type": "flux", "dialect": DIALECT},
                headers=headers,
                auth=self._basic_auth(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise InfluxDBConnectionError(str(exc)) from exc

        self._check_status(response.status_code, response.text)
        results = parse_annotated_csv(response.text, factory)
        self.logger.debug("Fetched %d statement results", len(results))
        return results
