"""Write line protocol data to InfluxDB."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
import json
import logging

import httpx
import requests

from .base import HTTPClientBase
from .config import DEFAULT_TIMEOUT
from .exceptions import (
    DatabaseNotFoundError,
    FieldTypeConflictError,
    InfluxDBAuthenticationError,
    InfluxDBConnectionError,
    InfluxDBWriteError,
)
from .line_protocol import Line
from .models import WriteResult

logger = logging.getLogger(__name__)


class LineProtocolClient(HTTPClientBase):
    """Blocking writer posting line protocol to ``/write``.

    Writes are refused unless the client was created with ``allow_write=True``.
    """

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        allow_write: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(
            version=1,
            url=url,
            username=username,
            password=password,
            timeout=timeout,
            allow_write=allow_write,
        )
        self._session = session if session is not None else requests.Session()

    def close(self) -> None:
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def send(self, database: str, lines: Iterable[Line], batch_size: Optional[int] = None) -> WriteResult:
        self._ensure_writes_allowed("send")
        chunks = _chunk_lines(list(lines), batch_size)
        total = sum(len(chunk) for chunk in chunks)
        for chunk in chunks:
            logger.debug("Sending %d lines to %s", len(chunk), self.url)
            try:
                response = self._session.post(
                    f"{self.url}/write",
                    params={"db": database},
                    data=_payload(chunk).encode("utf-8"),
                    auth=self._basic_auth(),
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                raise InfluxDBConnectionError(str(exc)) from exc
            _check_write_response(response.status_code, response.text)
        return WriteResult(
            success=True,
            details={"lines": total, "batch_size": batch_size, "batches": len(chunks)},
        )


class AsyncLineProtocolClient(HTTPClientBase):
    """Async writer posting line protocol to ``/write``."""

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        allow_write: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(
            version=1,
            url=url,
            username=username,
            password=password,
            timeout=timeout,
            allow_write=allow_write,
        )
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
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

    async def send(self, database: str, lines: Iterable[Line], batch_size: Optional[int] = None) -> WriteResult:
        self._ensure_writes_allowed("send")
        client = await self._get_client()
        chunks = _chunk_lines(list(lines), batch_size)
        request: Dict[str, Any] = {"params": {"db": database}}
        auth = self._basic_auth()
        if auth is not None:
            request["auth"] = auth
        for chunk in chunks:
            logger.debug("Sending %d lines to %s", len(chunk), self.url)
            try:
                response = await client.post(
                    f"{self.url}/write",
                    content=_payload(chunk).encode("utf-8"),
                    **request,
                )
            except httpx.TransportError as exc:
                raise InfluxDBConnectionError(str(exc)) from exc
            _check_write_response(response.status_code, response.text)
        return WriteResult(
            success=True,
            details={"lines": sum(len(c) for c in chunks), "batch_size": batch_size, "batches": len(chunks)},
        )


def _payload(lines: List[Line]) -> str:
    return "\n".join(line.to_line_protocol() for line in lines)


def _chunk_lines(lines: List[Line], batch_size: Optional[int]) -> List[List[Line]]:
    if batch_size is not None and batch_size <= 0:
        raise ValueError("batch_size must be greater than zero")
    if not batch_size:
        return [lines]
    return [lines[i : i + batch_size] for i in range(0, len(lines), batch_size)]


def _check_write_response(status_code: int, text: str) -> None:
    if 200 <= status_code < 300:
        return
    logger.debug("Write response %d: %r", status_code, text)
    if status_code in (401, 403):
        raise InfluxDBAuthenticationError(f"Authentication failed: {status_code} - {text}")
    raise parse_write_error(text)


def parse_write_error(text: str) -> InfluxDBWriteError:
    """Map the body of a failed write to an exception."""
    try:
        message = str(json.loads(text).get("error", ""))
    except (ValueError, AttributeError):
        message = ""
    if message.startswith("field type conflict"):
        return FieldTypeConflictError(message)
    if message.startswith("database not found"):
        return DatabaseNotFoundError(message)
    return InfluxDBWriteError(message or text or "Unknown error")
