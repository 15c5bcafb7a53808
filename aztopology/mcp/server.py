"""MCP stdio server exposing the topology tools.

Tools:
    search_resources  -- substring search over name/type/group/location/tags
    get_resource      -- full details of one resource
    get_neighbors     -- resources directly connected to one resource
    find_path         -- shortest connection path between two resources
    export_topology   -- full graph as JSON, or a summary
    refresh_topology  -- drop the cache and rebuild from Azure

Every handler returns plain text. Not-found, fetch and argument errors are
raised as MCP tool errors so the calling agent sees ``isError`` results.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Annotated, Literal, TypeVar

import structlog
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from aztopology.errors import FetchError, ResourceNotFoundError
from aztopology.mcp import formatting
from aztopology.service import TopologyService

_log = structlog.get_logger(component="mcp.server")

SERVER_NAME = "azure-topology-graph"

_T = TypeVar("_T")


class MCPServer:
    """Wraps a FastMCP instance bound to a TopologyService."""

    def __init__(self, service: TopologyService) -> None:
        self._service = service
        self._mcp = FastMCP(SERVER_NAME)
        self._register_tools()

    @property
    def app(self) -> FastMCP:
        return self._mcp

    def _register_tools(self) -> None:
        # Tool arguments keep the camelCase names MCP clients already send.

        async def search_resources(
            query: Annotated[
                str, Field(description="Search query (searches name, type, resource group, location, tags)")
            ],
            resourceType: Annotated[str | None, Field(description="Optional filter by resource type")] = None,  # noqa: N803
        ) -> str:
            return await self.search_resources(query, resourceType)

        async def get_resource(
            resourceId: Annotated[str, Field(description="Full Azure resource ID")],  # noqa: N803
        ) -> str:
            return await self.get_resource(resourceId)

        async def get_neighbors(
            resourceId: Annotated[str, Field(description="Full Azure resource ID")],  # noqa: N803
        ) -> str:
            return await self.get_neighbors(resourceId)

        async def find_path(
            sourceId: Annotated[str, Field(description="Source resource ID")],  # noqa: N803
            targetId: Annotated[str, Field(description="Target resource ID")],  # noqa: N803
        ) -> str:
            return await self.find_path(sourceId, targetId)

        async def export_topology(
            format: Annotated[Literal["json", "summary"], Field(description="Export format")] = "summary",
        ) -> str:
            return await self.export_topology(format)

        async def refresh_topology() -> str:
            return await self.refresh_topology()

        self._mcp.add_tool(
            search_resources,
            name="search_resources",
            description="Search Azure resources by name, type, or other properties",
        )
        self._mcp.add_tool(
            get_resource,
            name="get_resource",
            description="Get detailed information about a specific Azure resource",
        )
        self._mcp.add_tool(
            get_neighbors,
            name="get_neighbors",
            description="Get resources connected to a specific resource",
        )
        self._mcp.add_tool(
            find_path,
            name="find_path",
            description="Find connection path between two Azure resources",
        )
        self._mcp.add_tool(
            export_topology,
            name="export_topology",
            description="Export the complete topology graph",
        )
        self._mcp.add_tool(
            refresh_topology,
            name="refresh_topology",
            description="Refresh the topology cache by re-querying Azure",
        )

    # ------------------------------------------------------------------
    # Tool handlers
    # ------------------------------------------------------------------

    async def search_resources(self, query: str, resource_type: str | None = None) -> str:
        """Search by name, type, resource group, location or tag value."""
        results = await self._call(self._service.search(query, resource_type))
        return formatting.format_search(query, results)

    async def get_resource(self, resource_id: str) -> str:
        """Show one resource by its full Azure resource id."""
        resource = await self._call(self._service.get_resource(resource_id))
        return formatting.format_resource(resource)

    async def get_neighbors(self, resource_id: str) -> str:
        """List the resources connected to a resource."""
        result = await self._call(self._service.get_neighbors(resource_id))
        return formatting.format_neighbors(result)

    async def find_path(self, source_id: str, target_id: str) -> str:
        """Shortest connection path between two resource ids."""
        path = await self._call(self._service.find_path(source_id, target_id))
        return formatting.format_path(path)

    async def export_topology(self, format: Literal["json", "summary"] = "summary") -> str:
        """Export the graph as JSON or as a summary."""
        export = await self._call(self._service.export_topology(format))
        return formatting.format_export(export)

    async def refresh_topology(self) -> str:
        """Re-query Azure and rebuild the graph."""
        result = await self._call(self._service.refresh_topology())
        return formatting.format_refresh(result)

    async def _call(self, awaitable: Awaitable[_T]) -> _T:
        try:
            return await awaitable
        except ResourceNotFoundError as exc:
            raise ToolError(str(exc)) from exc
        except FetchError as exc:
            _log.warning("tool failed: fetch error", error=str(exc))
            raise ToolError(f"Tool execution failed: {exc}") from exc
        except ValueError as exc:
            raise ToolError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Serve over stdio until the stream closes or the task is cancelled."""
        _log.info("mcp server listening on stdio", server=SERVER_NAME)
        await self._mcp.run_stdio_async()
