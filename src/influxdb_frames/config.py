"""Configuration loading for influxdb_frames."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional
import os

from dotenv import load_dotenv

DEFAULT_TIMEOUT = 30.0


def load_env() -> None:
    """Load environment variables from a .env file if present."""
    load_dotenv()


def _get_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class V1Config:
    """Connection settings for an InfluxQL (v1) server."""

    url: str
    username: Optional[str] = None
    password: Optional[str] = None
    database: Optional[str] = None
    allow_write: bool = False
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class V2Config:
    """Connection settings for a Flux (v2) server.

    Authenticate either with ``token`` or with ``username``/``password``
    (v1.8 servers accept Flux queries with basic authentication).
    """

    url: str
    token: Optional[str] = None
    org: Optional[str] = None
    bucket: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    allow_write: bool = False
    timeout: float = DEFAULT_TIMEOUT


def v1_from_env() -> V1Config:
    load_env()
    return V1Config(
        url=os.getenv("INFLUXDB_V1_URL", os.getenv("INFLUXDB_URL", "")),
        username=os.getenv("INFLUXDB_V1_USER", os.getenv("INFLUXDB_USER")),
        password=os.getenv("INFLUXDB_V1_PASSWORD", os.getenv("INFLUXDB_PWD")),
        database=os.getenv("INFLUXDB_V1_DATABASE", os.getenv("INFLUXDB_DB")),
        allow_write=_get_bool(os.getenv("INFLUXDB_ALLOW_WRITE"), False),
        timeout=float(os.getenv("INFLUXDB_TIMEOUT", str(DEFAULT_TIMEOUT))),
    )


def v2_from_env() -> V2Config:
    load_env()
    return V2Config(
        url=os.getenv("INFLUXDB_V2_URL", os.getenv("INFLUXDB_URL", "")),
        token=os.getenv("INFLUXDB_V2_TOKEN", os.getenv("INFLUXDB_TOKEN")),
        org=os.getenv("INFLUXDB_V2_ORG", os.getenv("INFLUXDB_ORG")),
        bucket=os.getenv("INFLUXDB_V2_BUCKET", os.getenv("INFLUXDB_BUCKET")),
        username=os.getenv("INFLUXDB_V2_USER", os.getenv("INFLUXDB_USER")),
        password=os.getenv("INFLUXDB_V2_PASSWORD", os.getenv("INFLUXDB_PWD")),
        allow_write=_get_bool(os.getenv("INFLUXDB_ALLOW_WRITE"), False),
        timeout=float(os.getenv("INFLUXDB_TIMEOUT", str(DEFAULT_TIMEOUT))),
    )


def _dict_get(d: Mapping[str, Any], key: str, fallback: Any = None) -> Any:
    if key in d:
        return d[key]
    return fallback


def resolve_v1_config(config: V1Config | Mapping[str, Any]) -> V1Config:
    if isinstance(config, V1Config):
        return config
    return V1Config(
        url=_dict_get(config, "url", _dict_get(config, "host")),
        username=_dict_get(config, "username", _dict_get(config, "user")),
        password=_dict_get(config, "password", _dict_get(config, "pwd")),
        database=_dict_get(config, "database"),
        allow_write=bool(_dict_get(config, "allow_write", False)),
        timeout=float(_dict_get(config, "timeout", DEFAULT_TIMEOUT)),
    )


def resolve_v2_config(config: V2Config | Mapping[str, Any]) -> V2Config:
    if isinstance(config, V2Config):
        return config
    return V2Config(
        url=_dict_get(config, "url"),
        token=_dict_get(config, "token"),
        org=_dict_get(config, "org"),
        bucket=_dict_get(config, "bucket"),
        username=_dict_get(config, "username", _dict_get(config, "user")),
        password=_dict_get(config, "password", _dict_get(config, "pwd")),
        allow_write=bool(_dict_get(config, "allow_write", False)),
        timeout=float(_dict_get(config, "timeout", DEFAULT_TIMEOUT)),
    )
