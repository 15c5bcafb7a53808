"""MCP (Model Context Protocol) server for aztopology.

Exposes:
    MCPServer -- stdio transport server with the six topology tools.
"""

from aztopology.mcp.server import MCPServer

__all__ = ["MCPServer"]
