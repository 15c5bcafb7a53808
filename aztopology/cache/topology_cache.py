"""TTL cache owning the current topology graph.

The cache holds at most one graph. ``get()`` serves it while it is younger
than the TTL and otherwise rebuilds it from the fetcher. Rebuilds are
single-flight: callers that arrive while one is running await the same task
instead of issuing their own fetch. A failed rebuild leaves the previous
graph and timestamp exactly as they were.

Every ``invalidate()`` starts a new generation. A rebuild still running from
an earlier generation is left to finish for the callers already waiting on
it, but its graph is never stored, and the next ``get()`` fetches again.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog

from aztopology.collector.fetcher import ResourceFetcher
from aztopology.errors import FetchError
from aztopology.graph.builder import build_graph
from aztopology.graph.models import TopologyGraph

_log = structlog.get_logger(component="cache.topology")

DEFAULT_TTL = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class CacheState:
    """Point-in-time view of the cache for status reporting."""

    has_graph: bool
    built_at: datetime | None
    age_seconds: float | None
    ttl_seconds: float
    stale: bool
    rebuilding: bool
    build_count: int
    node_count: int
    edge_count: int
    last_error: str | None


class TopologyCache:
    """Single owner of the current TopologyGraph.

    Args:
        fetcher:           Source of raw resources.
        subscription_ids:  Subscriptions passed to every fetch.
        ttl:               Lifetime of a built graph. Defaults to 5 minutes.
        clock:             Returns the current aware datetime; injectable for tests.
    """

    def __init__(
        self,
        fetcher: ResourceFetcher,
        subscription_ids: Sequence[str],
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._fetcher = fetcher
        self._subscription_ids = tuple(subscription_ids)
        self._ttl = ttl
        self._clock = clock

        self._graph: TopologyGraph | None = None
        self._built_at: datetime | None = None
        self._inflight: asyncio.Task[TopologyGraph] | None = None
        self._generation = 0
        self._build_count = 0
        self._last_error: str | None = None

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def build_count(self) -> int:
        """Number of successful rebuilds since construction."""
        return self._build_count

    def _is_fresh(self, now: datetime) -> bool:
        return self._graph is not None and self._built_at is not None and now - self._built_at < self._ttl

    async def get(self) -> TopologyGraph:
        """Return the current graph, rebuilding it first if absent or expired.

        Raises:
            FetchError: the rebuild's fetch failed. Nothing is cached.
        """
        if self._is_fresh(self._clock()):
            assert self._graph is not None
            return self._graph

        if self._inflight is None:
            self._inflight = asyncio.create_task(self._rebuild(self._generation), name="topology-rebuild")
        # shield: a cancelled waiter must not cancel the rebuild other callers share
        return await asyncio.shield(self._inflight)

    def invalidate(self) -> None:
        """Drop the cached graph without fetching; the next get() rebuilds.

        A rebuild already in flight is not cancelled. Its current waiters still
        receive its graph, but the graph is not cached and the next get()
        starts a fresh fetch.
        """
        self._generation += 1
        self._graph = None
        self._built_at = None
        superseded = self._inflight is not None
        self._inflight = None
        _log.info("topology cache invalidated", superseded_rebuild=superseded)

    async def refresh(self) -> TopologyGraph:
        """Invalidate, then rebuild."""
        self.invalidate()
        return await self.get()

    def state(self) -> CacheState:
        now = self._clock()
        graph = self._graph
        age = (now - self._built_at).total_seconds() if self._built_at is not None else None
        return CacheState(
            has_graph=graph is not None,
            built_at=self._built_at,
            age_seconds=age,
            ttl_seconds=self._ttl.total_seconds(),
            stale=not self._is_fresh(now),
            rebuilding=self._inflight is not None,
            build_count=self._build_count,
            node_count=graph.node_count if graph is not None else 0,
            edge_count=graph.edge_count if graph is not None else 0,
            last_error=self._last_error,
        )

    async def _rebuild(self, generation: int) -> TopologyGraph:
        started = time.monotonic()
        _log.info("building topology", subscriptions=len(self._subscription_ids), generation=generation)
        try:
            try:
                resources = await self._fetcher.fetch_all(self._subscription_ids)
            except FetchError as exc:
                self._record_failure(generation, exc)
                raise
            except Exception as exc:
                self._record_failure(generation, exc)
                raise FetchError(str(exc)) from exc

            built_at = self._clock()
            graph = build_graph(resources, built_at=built_at)

            if generation != self._generation:
                _log.info("discarding superseded topology build", generation=generation, nodes=graph.node_count)
                return graph

            # Swap both fields together; nothing awaits between here and return.
            self._graph = graph
            self._built_at = built_at
            self._build_count += 1
            self._last_error = None
            _log.info(
                "topology built",
                nodes=graph.node_count,
                edges=graph.edge_count,
                duration_ms=int((time.monotonic() - started) * 1000),
            )
            return graph
        finally:
            # A superseded rebuild no longer owns the in-flight slot.
            if generation == self._generation:
                self._inflight = None

    def _record_failure(self, generation: int, exc: Exception) -> None:
        if generation != self._generation:
            _log.warning("superseded topology fetch failed", error=str(exc), generation=generation)
            return
        self._last_error = str(exc)
        _log.error("topology fetch failed", error=str(exc), error_type=type(exc).__name__)
