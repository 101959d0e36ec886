"""Run a read query and print the resulting dataframes.

Usage:
    py scripts/fetch_readings.py --version 1 --database house "SELECT * FROM indoor_environment"
    py scripts/fetch_readings.py --version 2 'from(bucket: "house") |> range(start: -1h)'
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from influxdb_frames import InfluxDBClientFactory
from influxdb_frames.config import v1_from_env, v2_from_env


def _v1_config_from_env(database: Optional[str] = None) -> dict:
    cfg = v1_from_env()
    if not cfg.url:
        raise ValueError("INFLUXDB_V1_URL (or INFLUXDB_URL) is required for v1 queries")
    return {
        "url": cfg.url,
        "username": cfg.username,
        "password": cfg.password,
        "database": database or cfg.database,
        "timeout": cfg.timeout,
    }


def _v2_config_from_env() -> dict:
    cfg = v2_from_env()
    if not cfg.url:
        raise ValueError("INFLUXDB_V2_URL (or INFLUXDB_URL) is required for v2 queries")
    return {
        "url": cfg.url,
        "token": cfg.token,
        "org": cfg.org,
        "bucket": cfg.bucket,
        "username": cfg.username,
        "password": cfg.password,
        "timeout": cfg.timeout,
    }


def run(version: int, query: str, database: Optional[str] = None) -> int:
    config = _v1_config_from_env(database) if version == 1 else _v2_config_from_env()
    client = InfluxDBClientFactory.get_client(version=version, config=config)
    try:
        results = client.fetch_readings(query)
        for position, result in enumerate(results):
            if result.error is not None:
                print(f"statement {position}: error: {result.error}")
                continue
            print(f"statement {position}: {len(result.dataframes)} dataframes")
            for dataframe, tags in result.dataframes:
                print(f"tags: {tags}")
                print(dataframe)
    finally:
        client.close()

    return 0


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Fetch readings from InfluxDB and print them")
    parser.add_argument("--version", type=int, choices=[1, 2], default=1, help="InfluxDB query language version")
    parser.add_argument("--database", type=str, help="Database for InfluxQL queries")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")
    parser.add_argument("query", type=str, help="InfluxQL or Flux query")
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return run(args.version, args.query, args.database)
    except Exception as exc:
        print(f"Query failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
