"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from aztopology.models.config import (
    APIConfig,
    AzTopologyConfig,
    CacheConfig,
    FetchConfig,
    LogConfig,
    MCPConfig,
)

_SUBSCRIPTION_ID_RE = re.compile(r"^[A-Za-z0-9-]+$")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"AZTOPO_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _parse_subscription_ids(value: str) -> list[str]:
    ids: list[str] = []
    for raw in value.split(","):
        sub_id = raw.strip()
        if not sub_id:
            continue
        if not _SUBSCRIPTION_ID_RE.match(sub_id):
            raise ValueError(f"Invalid subscription id: {sub_id!r}")
        if sub_id not in ids:
            ids.append(sub_id)
    return ids


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> AzTopologyConfig:
    """Load configuration from AZTOPO_* environment variables.

    Raises:
        ValueError: a value is malformed, or no subscription ids are configured
            while no local resources file is set either.
    """
    subscription_ids = _parse_subscription_ids(_env("SUBSCRIPTION_IDS", ""))
    resources_file = _env("RESOURCES_FILE", "")
    if not subscription_ids and not resources_file:
        raise ValueError("AZTOPO_SUBSCRIPTION_IDS must list at least one subscription id")

    return AzTopologyConfig(
        fetch=FetchConfig(
            subscription_ids=subscription_ids,
            resources_file=resources_file,
            page_size=_env_int("FETCH_PAGE_SIZE", 1000, min_val=1, max_val=1000),
        ),
        cache=CacheConfig(
            ttl_seconds=_env_int("CACHE_TTL", 300, min_val=0, max_val=86400),
        ),
        mcp=MCPConfig(
            enabled=_env_bool("MCP_ENABLED", True),
        ),
        api=APIConfig(
            enabled=_env_bool("API_ENABLED", False),
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
