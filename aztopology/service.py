"""Topology service: the six named operations exposed to every surface.

Each operation obtains the current graph from the TopologyCache (which may
trigger a rebuild) and then runs a synchronous query over it. Surfaces (MCP,
REST, CLI) only format what this module returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

import structlog

from aztopology.cache.topology_cache import CacheState, TopologyCache
from aztopology.graph import queries
from aztopology.graph.models import GraphNode
from aztopology.graph.queries import NeighborResult, TopologySummary

_log = structlog.get_logger(component="service")


class ExportFormat(StrEnum):
    """Output format of export_topology."""

    JSON = "json"
    SUMMARY = "summary"

    @classmethod
    def parse(cls, value: str | ExportFormat) -> ExportFormat:
        """Accept ``raw`` as an alias of ``json``."""
        normalized = str(value).strip().lower()
        if normalized == "raw":
            return cls.JSON
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown export format: {value!r} (expected 'json' or 'summary')") from None


@dataclass(frozen=True)
class RefreshResult:
    """Counts of the graph produced by an explicit refresh."""

    node_count: int
    edge_count: int
    built_at: datetime


class TopologyService:
    """Query facade over a TopologyCache."""

    def __init__(self, cache: TopologyCache) -> None:
        self._cache = cache

    @property
    def cache(self) -> TopologyCache:
        return self._cache

    async def search(self, query: str, resource_type: str | None = None) -> list[GraphNode]:
        graph = await self._cache.get()
        results = queries.search(graph, query, resource_type)
        _log.debug("search", query=query, resource_type=resource_type, matches=len(results))
        return results

    async def get_resource(self, resource_id: str) -> GraphNode:
        graph = await self._cache.get()
        return queries.get_resource(graph, resource_id)

    async def get_neighbors(self, resource_id: str) -> NeighborResult:
        graph = await self._cache.get()
        return queries.neighbors(graph, resource_id)

    async def find_path(self, source_id: str, target_id: str) -> list[GraphNode]:
        graph = await self._cache.get()
        path = queries.find_path(graph, source_id, target_id)
        _log.debug("find path", source_id=source_id, target_id=target_id, hops=len(path))
        return path

    async def export_topology(self, format: str | ExportFormat = ExportFormat.SUMMARY) -> dict[str, Any] | TopologySummary:
        """Full serialised graph for ``json``/``raw``, a TopologySummary for ``summary``.

        Raises:
            ValueError: unknown format. Checked before the graph is fetched.
        """
        fmt = ExportFormat.parse(format)
        graph = await self._cache.get()
        if fmt is ExportFormat.JSON:
            return graph.to_dict()
        return queries.summarize(graph)

    async def refresh_topology(self) -> RefreshResult:
        graph = await self._cache.refresh()
        return RefreshResult(node_count=graph.node_count, edge_count=graph.edge_count, built_at=graph.built_at)

    def status(self) -> CacheState:
        """Cache state without triggering a rebuild."""
        return self._cache.state()
