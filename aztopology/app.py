"""Application bootstrap for aztopology.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config → logging → fetcher → cache → service → MCP → REST

Shutdown runs in reverse startup order: surfaces are cancelled first, then
the fetcher's Azure client and credential are closed. Stop errors are logged
and never raised.
"""

from __future__ import annotations

import asyncio
import signal
from datetime import timedelta
from typing import TYPE_CHECKING

from aztopology.config import load_config
from aztopology.models.config import AzTopologyConfig
from aztopology.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

    from aztopology.cache import TopologyCache
    from aztopology.collector import ResourceFetcher
    from aztopology.service import TopologyService

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class AzTopologyApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    The topology graph is not built at startup: the first tool call (or
    explicit refresh) triggers the initial fetch.
    """

    def __init__(self) -> None:
        self.config: AzTopologyConfig | None = None

        self._fetcher: ResourceFetcher | None = None
        self._cache: TopologyCache | None = None
        self._service: TopologyService | None = None
        self._mcp_server: object | None = None
        self._rest_server: object | None = None

        # Background tasks that must be cancelled on shutdown
        self._background_tasks: list[asyncio.Task[None]] = []

        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        # --- 1. Configuration -------------------------------------------
        try:
            self.config = load_config()
        except ValueError as exc:
            raise _ComponentError("config", exc) from exc

        # --- 2. Logging -------------------------------------------------
        setup_logging(self.config.log.level)
        self._log = get_logger("app")
        self._log.info("aztopology starting", version=_aztopology_version())

        # --- 3. Resource fetcher ----------------------------------------
        self._start_fetcher()

        # --- 4. Topology cache + service --------------------------------
        self._start_cache()

        # --- 5. MCP server ----------------------------------------------
        await self._start_mcp()

        # --- 6. REST API ------------------------------------------------
        await self._start_rest()

        if not self._background_tasks:
            raise _ComponentError("surfaces", RuntimeError("both MCP and REST API are disabled"))

        self._running = True
        self._log.info("aztopology started")

    # ------------------------------------------------------------------
    # Component startup helpers
    # ------------------------------------------------------------------

    def _start_fetcher(self) -> None:
        """Pick the local file fetcher when configured, otherwise Azure Resource Graph."""
        assert self._log is not None
        assert self.config is not None
        try:
            from aztopology.collector import AzureResourceGraphFetcher, JsonFileFetcher

            fetch_cfg = self.config.fetch
            if fetch_cfg.resources_file:
                self._fetcher = JsonFileFetcher(fetch_cfg.resources_file)
                self._log.info("resource fetcher configured", source="file", path=fetch_cfg.resources_file)
            else:
                self._fetcher = AzureResourceGraphFetcher(page_size=fetch_cfg.page_size)
                self._log.info(
                    "resource fetcher configured",
                    source="resource_graph",
                    subscriptions=len(fetch_cfg.subscription_ids),
                )
        except Exception as exc:
            raise _ComponentError("fetcher", exc) from exc

    def _start_cache(self) -> None:
        assert self._log is not None
        assert self.config is not None
        assert self._fetcher is not None
        from aztopology.cache import TopologyCache
        from aztopology.service import TopologyService

        self._cache = TopologyCache(
            fetcher=self._fetcher,
            subscription_ids=self.config.fetch.subscription_ids,
            ttl=timedelta(seconds=self.config.cache.ttl_seconds),
        )
        self._service = TopologyService(self._cache)
        self._log.info("topology cache ready", ttl_seconds=self.config.cache.ttl_seconds)

    async def _start_mcp(self) -> None:
        """Start the MCP stdio server."""
        assert self._log is not None
        assert self.config is not None
        assert self._service is not None
        if not self.config.mcp.enabled:
            self._log.info("mcp server disabled (mcp.enabled=false)")
            return

        self._log.debug("starting mcp server")
        try:
            from aztopology.mcp import MCPServer

            mcp = MCPServer(service=self._service)
            task = asyncio.create_task(mcp.start(), name="mcp-server")
            task.add_done_callback(self._on_surface_exit)
            self._background_tasks.append(task)
            self._mcp_server = mcp
            self._log.info("mcp server started")
        except Exception as exc:
            raise _ComponentError("mcp", exc) from exc

    async def _start_rest(self) -> None:
        """Start the uvicorn REST server when enabled."""
        assert self._log is not None
        assert self.config is not None
        assert self._service is not None
        if not self.config.api.enabled:
            self._log.info("rest api disabled (api.enabled=false)")
            return

        self._log.debug("starting rest api")
        try:
            import uvicorn

            from aztopology.api import build_app

            fastapi_app = build_app(service=self._service, config=self.config)
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host="0.0.0.0",
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(server.serve(), name="rest-server")
            task.add_done_callback(self._on_surface_exit)
            self._background_tasks.append(task)
            self._rest_server = server
            self._log.info("rest api started", port=self.config.api.port)
        except Exception as exc:
            raise _ComponentError("rest", exc) from exc

    def _on_surface_exit(self, task: asyncio.Task[None]) -> None:
        """A surface ending on its own (stdin closed, server crash) shuts the app down."""
        if task.cancelled() or not self._running:
            return
        exc = task.exception()
        log = self._log or get_logger("app")
        if exc is not None:
            log.error("surface stopped with error", task=task.get_name(), error=str(exc))
        else:
            log.info("surface stopped", task=task.get_name())
        self._running = False

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Gracefully stop all components in reverse startup order."""
        if self._log is None:
            # Never started; nothing to do
            return

        log = self._log
        log.info("aztopology shutting down")

        self._running = False

        if self._rest_server is not None:
            self._rest_server.should_exit = True  # type: ignore[attr-defined]

        for task in reversed(self._background_tasks):
            if not task.done():
                task.cancel()

        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()

        self._rest_server = None
        self._mcp_server = None
        self._service = None
        self._cache = None
        await self._stop_component("fetcher", self._fetcher)
        self._fetcher = None

        log.info("aztopology stopped")

    async def _stop_component(self, name: str, component: object | None) -> None:
        """Call stop()/close() on a component if it has one, catching all errors."""
        if component is None:
            return
        log = self._log or get_logger("app")
        stop_fn = getattr(component, "stop", None) or getattr(component, "close", None)
        if stop_fn is None:
            return
        try:
            result = stop_fn()
            if asyncio.iscoroutine(result):
                await asyncio.wait_for(result, timeout=_SHUTDOWN_GRACE_SECONDS)
        except TimeoutError:
            log.warning("component stop timed out", component=name, timeout=_SHUTDOWN_GRACE_SECONDS)
        except Exception as exc:
            log.error("component stop raised an error", component=name, error=str(exc))


def _aztopology_version() -> str:
    from aztopology import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main() -> None:
    """Create the app, register OS signals, run until shutdown is requested."""
    app = AzTopologyApp()
    loop = asyncio.get_running_loop()

    def _request_shutdown() -> None:
        app._running = False

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _request_shutdown)

    try:
        await app.start()
        while app._running:
            await asyncio.sleep(0.5)
    except _ComponentError as exc:
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        raise SystemExit(1) from exc
    finally:
        await app.stop()
