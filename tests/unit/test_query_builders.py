from datetime import datetime, timedelta, timezone

from influxdb_frames.types import Duration
from influxdb_frames.v1.query_builder import build_influxql_query
from influxdb_frames.v2.query_builder import FluxQueryBuilder


def test_influxql_query_builder():
    q = build_influxql_query(
        measurement="indoor_environment",
        fields=["temperature", "humidity"],
        database="house",
        start=datetime(2021, 3, 7, 21, 0, tzinfo=timezone.utc),
        stop=datetime(2021, 3, 7, 22, 0, tzinfo=timezone.utc),
        group_by=["room"],
    )
    assert q == (
        "SELECT temperature, humidity FROM house..indoor_environment"
        " WHERE time > '2021-03-07T21:00:00Z' AND time < '2021-03-07T22:00:00Z'"
        " GROUP BY room"
    )


def test_influxql_query_builder_defaults():
    assert build_influxql_query("m") == "SELECT * FROM m"


def test_influxql_query_builder_sources():
    assert build_influxql_query("m", retention_policy="autogen") == "SELECT * FROM .autogen.m"
    assert build_influxql_query("m", database="db", retention_policy="rp") == "SELECT * FROM db.rp.m"


def test_influxql_query_builder_open_ranges():
    start = datetime(2021, 3, 7, 21, 0, tzinfo=timezone.utc)
    assert build_influxql_query("m", start=start) == "SELECT * FROM m WHERE time > '2021-03-07T21:00:00Z'"
    assert build_influxql_query("m", stop=start) == "SELECT * FROM m WHERE time < '2021-03-07T21:00:00Z'"


def test_flux_query_builder():
    q = (
        FluxQueryBuilder("telegraf/autogen")
        .range_start(Duration(-15, "m"))
        .filter('r._measurement == "cpu" and\nr._field == "usage_system"')
        .aggregate_window("mean", Duration(1, "m"))
        .build()
    )
    assert q == "\n".join(
        [
            'from(bucket: "telegraf/autogen")',
            "  |> range(start: -15m)",
            "  |> filter(fn: (r) =>",
            '    r._measurement == "cpu" and',
            '    r._field == "usage_system"',
            "  )",
            "  |> aggregateWindow(every: 1m, fn: mean)",
            "  |> yield()",
        ]
    )


def test_flux_query_builder_instants_and_windows():
    q = (
        FluxQueryBuilder("house")
        .range(datetime(2021, 3, 7, 21, 0, tzinfo=timezone.utc), datetime(2021, 3, 7, 22, 0, tzinfo=timezone.utc))
        .window(timedelta(minutes=5))
        .mean()
        .duplicate("_stop", "_time")
        .window(Duration.infinity())
        .build()
    )
    assert 'from(bucket: "house")' in q
    assert "range(start: 2021-03-07T21:00:00Z, stop: 2021-03-07T22:00:00Z)" in q
    assert "window(every: 300s)" in q
    assert "  |> mean()" in q
    assert 'duplicate(column: "_stop", as: "_time")' in q
    assert "window(every: inf)" in q
    assert q.endswith("  |> yield()")


def test_flux_query_builder_range_stop():
    q = FluxQueryBuilder("b").range_stop("-1h").build()
    assert "  |> range(stop: -1h)" in q
