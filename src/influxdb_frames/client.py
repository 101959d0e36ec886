"""Factory and entry point for influxdb_frames clients."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .base import QueryClientBase
from .config import resolve_v1_config, resolve_v2_config
from .v1.client import InfluxQLClient
from .v2.client import FluxClient
from .write_client import LineProtocolClient


class InfluxDBClientFactory:
    """Factory for selecting the correct client implementation."""

    @staticmethod
    def _detect_version(config: Mapping[str, Any]) -> int:
        """Infer the query language from config keys.

        v2 indicators: token/org/bucket
        v1 indicators: database
        """
        v2_keys = ("token", "org", "bucket")
        v1_keys = ("database",)

        has_v2 = any(config.get(k) not in (None, "") for k in v2_keys)
        has_v1 = any(config.get(k) not in (None, "") for k in v1_keys)

        if has_v2 and has_v1:
            raise ValueError(
                "Ambiguous config: contains both v1 and v2 keys. "
                "Pass a clean config for one version, or set version explicitly."
            )
        if has_v2:
            return 2
        if has_v1:
            return 1
        raise ValueError(
            "Could not infer InfluxDB version from config. "
            "Provide a v1 key (database) or v2 keys (token/org/bucket), "
            "or pass version explicitly."
        )

    @staticmethod
    def get_client(
        version: Optional[int] = None,
        config: Optional[Mapping[str, Any]] = None,
    ) -> QueryClientBase:
        if config is None:
            raise ValueError("config is required")
        session = config.get("session") if isinstance(config, Mapping) else None

        if version is None:
            version = InfluxDBClientFactory._detect_version(config)

        if version == 1:
            cfg = resolve_v1_config(config)
            return InfluxQLClient(
                url=cfg.url,
                username=cfg.username,
                password=cfg.password,
                database=cfg.database,
                timeout=cfg.timeout,
                session=session,
            )
        if version == 2:
            cfg = resolve_v2_config(config)
            return FluxClient(
                url=cfg.url,
                token=cfg.token,
                org=cfg.org,
                bucket=cfg.bucket,
                username=cfg.username,
                password=cfg.password,
                timeout=cfg.timeout,
                session=session,
            )

        raise ValueError(f"Unsupported InfluxDB version: {version}")

    @staticmethod
    def get_writer(config: Mapping[str, Any]) -> LineProtocolClient:
        """Create a line protocol writer; writes stay blocked unless ``allow_write`` is set."""
        session = config.get("session") if isinstance(config, Mapping) else None
        cfg = resolve_v1_config(config)
        return LineProtocolClient(
            url=cfg.url,
            username=cfg.username,
            password=cfg.password,
            allow_write=cfg.allow_write,
            timeout=cfg.timeout,
            session=session,
        )
