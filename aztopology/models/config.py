"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class FetchConfig:
    """Resource fetcher configuration."""

    subscription_ids: list[str] = field(default_factory=list)
    resources_file: str = ""
    page_size: int = 1000


@dataclass
class CacheConfig:
    """Topology cache configuration."""

    ttl_seconds: int = 300


@dataclass
class MCPConfig:
    """MCP stdio server configuration."""

    enabled: bool = True


@dataclass
class APIConfig:
    """REST API configuration."""

    enabled: bool = False
    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class AzTopologyConfig:
    """Top-level aztopology configuration."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    mcp: MCPConfig = field(default_factory=MCPConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
