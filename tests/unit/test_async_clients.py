from __future__ import annotations

import json

import httpx
import pytest

from influxdb_frames.exceptions import (
    DatabaseNotFoundError,
    InfluxDBAuthenticationError,
    InfluxDBConnectionError,
    UnsafeOperationError,
)
from influxdb_frames.line_protocol import LineBuilder
from influxdb_frames.v1.async_client import AsyncInfluxQLClient
from influxdb_frames.v2.async_client import AsyncFluxClient
from influxdb_frames.write_client import AsyncLineProtocolClient

PAYLOAD = {
    "results": [
        {
            "statement_id": 0,
            "series": [
                {
                    "name": "indoor_environment",
                    "columns": ["time", "temperature"],
                    "values": [["2021-03-04T17:00:00Z", 21.5]],
                    "tags": {"room": "bedroom"},
                }
            ],
        }
    ]
}


def _client(handler, **kwargs) -> AsyncInfluxQLClient:
    transport = httpx.MockTransport(handler)
    return AsyncInfluxQLClient(
        "http://localhost:8086",
        database="house",
        client=httpx.AsyncClient(transport=transport),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_async_fetch_readings() -> None:
    requests_seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        return httpx.Response(200, json=PAYLOAD)

    async with _client(handler, username="u", password="p") as client:
        frames = await client.fetch_dataframes_by_tag("SELECT temperature FROM indoor_environment", "room")

    request = requests_seen[0]
    assert request.method == "POST"
    assert request.url.path == "/query"
    assert request.url.params["db"] == "house"
    assert b"q=SELECT" in request.content
    assert request.headers["Authorization"].startswith("Basic ")
    assert frames["bedroom"]["temperature"].values == (21.5,)


@pytest.mark.asyncio
async def test_async_fetch_dataframe_without_auth() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "Authorization" not in request.headers
        return httpx.Response(200, json=PAYLOAD)

    client = _client(handler)
    try:
        df = await client.fetch_dataframe("SELECT temperature FROM indoor_environment")
    finally:
        await client.close()
    assert df.name == "indoor_environment"


@pytest.mark.asyncio
async def test_async_status_mapping() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="unauthorized")

    client = _client(handler)
    with pytest.raises(InfluxDBAuthenticationError):
        await client.fetch_readings("SELECT 1")
    await client.close()


@pytest.mark.asyncio
async def test_async_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = _client(handler)
    with pytest.raises(InfluxDBConnectionError, match="refused"):
        await client.fetch_readings("SELECT 1")
    await client.close()


def _writer(handler, allow_write=True) -> AsyncLineProtocolClient:
    return AsyncLineProtocolClient(
        "http://localhost:8086",
        allow_write=allow_write,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_async_send_batches() -> None:
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(request.content.decode("utf-8"))
        return httpx.Response(204)

    lines = [LineBuilder("m").insert_field("v", i).build() for i in range(3)]
    async with _writer(handler) as writer:
        result = await writer.send("house", lines, batch_size=2)

    assert result.success is True
    assert result.details["batches"] == 2
    assert bodies == ["m v=0i\nm v=1i", "m v=2i"]


@pytest.mark.asyncio
async def test_async_send_maps_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text=json.dumps({"error": "database not found: \"house\""}))

    writer = _writer(handler)
    with pytest.raises(DatabaseNotFoundError):
        await writer.send("house", [LineBuilder("m").insert_field("v", 1).build()])
    await writer.close()


@pytest.mark.asyncio
async def test_async_send_requires_allow_write() -> None:
    writer = _writer(lambda request: httpx.Response(204), allow_write=False)
    with pytest.raises(UnsafeOperationError):
        await writer.send("house", [LineBuilder("m").insert_field("v", 1).build()])
    await writer.close()


ROOMS_CSV = "\r\n".join(
    [
        "#datatype,string,long,dateTime:RFC3339,double,string,string,string",
        "#group,false,false,false,false,true,true,true",
        "#default,_result,,,,,,",
        ",result,table,_time,_value,_field,_measurement,room",
        ",,0,2021-03-04T17:00:00Z,21.5,temperature,indoor_environment,bedroom",
        ",,1,2021-03-04T17:00:00Z,18.0,temperature,indoor_environment,entrance",
        "",
    ]
)


def _flux_client(handler, **kwargs) -> AsyncFluxClient:
    transport = httpx.MockTransport(handler)
    return AsyncFluxClient(
        "http://localhost:8086",
        client=httpx.AsyncClient(transport=transport),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_async_flux_fetch_readings() -> None:
    requests_seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        return httpx.Response(200, text=ROOMS_CSV)

    async with _flux_client(handler, token="tok", org="home") as client:
        frames = await client.fetch_dataframes_by_tag('from(bucket: "house") |> range(start: -1h)', "room")

    request = requests_seen[0]
    body = json.loads(request.content)
    assert request.method == "POST"
    assert request.url.path == "/api/v2/query"
    assert request.url.params["org"] == "home"
    assert request.headers["Authorization"] == "Token tok"
    assert request.headers["Accept"] == "application/csv"
    assert body["type"] == "flux"
    assert body["dialect"]["annotations"] == ["datatype", "group", "default"]
    assert sorted(frames) == ["bedroom", "entrance"]
    assert frames["entrance"]["temperature"].values == (18.0,)


@pytest.mark.asyncio
async def test_async_flux_basic_auth_and_ignored_database() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "org" not in request.url.params
        assert request.headers["Authorization"].startswith("Basic ")
        return httpx.Response(200, text=ROOMS_CSV)

    client = _flux_client(handler, username="u", password="p")
    try:
        df = await client.fetch_dataframe('from(bucket: "house")', database="ignored")
    finally:
        await client.close()
    assert df.name == "indoor_environment"


@pytest.mark.asyncio
async def test_async_flux_errors() -> None:
    def unauthorized(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="unauthorized")

    def refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = _flux_client(unauthorized, token="bad")
    with pytest.raises(InfluxDBAuthenticationError):
        await client.fetch_readings('from(bucket: "house")')
    await client.close()

    client = _flux_client(refused)
    with pytest.raises(InfluxDBConnectionError, match="refused"):
        await client.fetch_readings('from(bucket: "house")')
    await client.close()
