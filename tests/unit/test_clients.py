from __future__ import annotations

import json

import pytest
import requests

from influxdb_frames.exceptions import (
    InfluxDBAuthenticationError,
    InfluxDBConnectionError,
    InfluxDBQueryError,
    ServerResponseError,
)
from influxdb_frames.pandas_frame import to_pandas
from influxdb_frames.v1.client import InfluxQLClient
from influxdb_frames.v2.client import FluxClient


class FakeResponse:
    def __init__(self, status_code: int, text: str) -> None:
        self.status_code = status_code
        self.text = text
        self.content = text.encode("utf-8")


class FakeSession:
    def __init__(self, response=None, error=None) -> None:
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def get(self, url, **kwargs):
        return self.post(url, **kwargs)

    def close(self):
        self.closed = True


ROOMS_JSON = json.dumps(
    {
        "results": [
            {
                "statement_id": 0,
                "series": [
                    {
                        "name": "indoor_environment",
                        "columns": ["time", "temperature"],
                        "values": [["2021-03-04T17:00:00Z", 21.5]],
                        "tags": {"room": "bedroom"},
                    },
                    {
                        "name": "indoor_environment",
                        "columns": ["time", "temperature"],
                        "values": [["2021-03-04T17:00:00Z", 18.0]],
                        "tags": {"room": "entrance"},
                    },
                ],
            }
        ]
    }
)

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


def _influxql_client(session, **kwargs) -> InfluxQLClient:
    return InfluxQLClient("http://localhost:8086/", username="u", password="p", database="house", session=session, **kwargs)


def test_influxql_request_shape() -> None:
    session = FakeSession(FakeResponse(200, ROOMS_JSON))
    client = _influxql_client(session, timeout=5)

    results = client.fetch_readings("SELECT temperature FROM indoor_environment GROUP BY room")

    url, kwargs = session.calls[0]
    assert url == "http://localhost:8086/query"
    assert kwargs["params"] == {"db": "house"}
    assert kwargs["data"] == {"q": "SELECT temperature FROM indoor_environment GROUP BY room"}
    assert kwargs["headers"] == {"Accept": "application/json"}
    assert kwargs["auth"] == ("u", "p")
    assert kwargs["timeout"] == 5
    assert len(results[0].dataframes) == 2


def test_influxql_database_override() -> None:
    session = FakeSession(FakeResponse(200, '{"results": []}'))
    _influxql_client(session).fetch_readings("SHOW MEASUREMENTS", database="other")
    assert session.calls[0][1]["params"] == {"db": "other"}


def test_influxql_fetch_dataframes_by_tag() -> None:
    session = FakeSession(FakeResponse(200, ROOMS_JSON))
    frames = _influxql_client(session).fetch_dataframes_by_tag("SELECT ...", "room")
    assert frames["entrance"]["temperature"].values == (18.0,)


def test_influxql_fetch_dataframe_with_pandas_factory() -> None:
    session = FakeSession(FakeResponse(200, ROOMS_JSON))
    df = _influxql_client(session).fetch_dataframe("SELECT ...", factory=to_pandas)
    assert list(df["temperature"]) == [21.5]
    assert df.attrs["name"] == "indoor_environment"


def test_server_error_envelope_is_raised() -> None:
    session = FakeSession(FakeResponse(200, '{"error": "error parsing query"}'))
    with pytest.raises(ServerResponseError, match="error parsing query"):
        _influxql_client(session).fetch_readings("SELEC")


@pytest.mark.parametrize(
    "status, error",
    [(401, InfluxDBAuthenticationError), (403, InfluxDBAuthenticationError), (500, InfluxDBQueryError)],
)
def test_http_status_mapping(status, error) -> None:
    session = FakeSession(FakeResponse(status, "nope"))
    with pytest.raises(error, match=f"{status} - nope"):
        _influxql_client(session).fetch_readings("SELECT 1")


def test_connection_failure_is_wrapped() -> None:
    session = FakeSession(error=requests.ConnectionError("refused"))
    with pytest.raises(InfluxDBConnectionError, match="refused") as excinfo:
        _influxql_client(session).fetch_readings("SELECT 1")
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_ping() -> None:
    assert _influxql_client(FakeSession(FakeResponse(204, ""))).ping() is True
    assert _influxql_client(FakeSession(FakeResponse(500, ""))).ping() is False
    assert _influxql_client(FakeSession(error=requests.Timeout("slow"))).ping() is False


def test_context_manager_closes_session() -> None:
    session = FakeSession()
    with _influxql_client(session) as client:
        assert repr(client) == "InfluxQLClient(v1, http://localhost:8086, read_only)"
    assert session.closed is True


def test_flux_request_shape() -> None:
    session = FakeSession(FakeResponse(200, ROOMS_CSV))
    client = FluxClient("http://localhost:8086", token="tok", org="home", session=session)

    frames = client.fetch_dataframes_by_tag('from(bucket: "house") |> range(start: -1h)', "room")

    url, kwargs = session.calls[0]
    assert url == "http://localhost:8086/api/v2/query"
    assert kwargs["params"] == {"org": "home"}
    assert kwargs["headers"]["Authorization"] == "Token tok"
    assert kwargs["headers"]["Accept"] == "application/csv"
    assert kwargs["json"]["type"] == "flux"
    assert kwargs["json"]["dialect"]["annotations"] == ["datatype", "group", "default"]
    assert kwargs["auth"] is None
    assert sorted(frames) == ["bedroom", "entrance"]
    assert frames["bedroom"].name == "indoor_environment"


def test_flux_basic_auth_without_token() -> None:
    session = FakeSession(FakeResponse(200, ROOMS_CSV))
    client = FluxClient("http://localhost:8086", username="u", password="p", session=session)

    client.fetch_readings('from(bucket: "house")')

    url, kwargs = session.calls[0]
    assert kwargs["params"] == {}
    assert "Authorization" not in kwargs["headers"]
    assert kwargs["auth"] == ("u", "p")


def test_flux_ignores_database_keyword() -> None:
    session = FakeSession(FakeResponse(200, ROOMS_CSV))
    client = FluxClient("http://localhost:8086", token="tok", session=session)

    df = client.fetch_dataframe('from(bucket: "house")', database="ignored")

    assert df.name == "indoor_environment"
    assert df["temperature"].values == (21.5,)
    _, kwargs = session.calls[0]
    assert "db" not in kwargs["params"]
