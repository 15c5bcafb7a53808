"""Plain-text rendering of service results for MCP tool responses."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from aztopology.graph.models import GraphNode
from aztopology.graph.queries import NeighborResult, TopologySummary
from aztopology.service import RefreshResult


def _bullets(values: Sequence[str]) -> str:
    return "\n".join(f"• {v}" for v in values)


def format_search(query: str, results: Sequence[GraphNode]) -> str:
    body = "\n\n".join(
        f"• {r.name} ({r.type})\n  Resource Group: {r.resource_group}\n  Location: {r.location}\n  ID: {r.id}"
        for r in results
    )
    return f'Found {len(results)} resources matching "{query}":\n\n{body}'


def format_resource(resource: GraphNode) -> str:
    text = (
        "Resource Details:\n\n"
        f"Name: {resource.name}\n"
        f"Type: {resource.type}\n"
        f"Resource Group: {resource.resource_group}\n"
        f"Location: {resource.location}\n"
        f"Subscription: {resource.subscription_id}\n"
        f"ID: {resource.id}\n\n"
    )
    if resource.tags:
        text += f"Tags: {json.dumps(resource.tags, indent=2)}\n\n"
    if resource.properties:
        text += f"Properties: {json.dumps(resource.properties, indent=2, default=str)}"
    return text


def format_neighbors(result: NeighborResult) -> str:
    node = result.node
    body = "\n\n".join(
        f"• {n.name} ({n.type})\n  Resource Group: {n.resource_group}\n  Location: {n.location}"
        for n in result.neighbors
    )
    return f"Resource: {node.name} ({node.type})\n\nConnected Resources ({len(result.neighbors)}):\n\n{body}"


def format_path(path: Sequence[GraphNode]) -> str:
    if not path:
        return "No connection path found between the specified resources."
    body = "\n\n".join(f"{i}. {n.name} ({n.type})\n   {n.id}" for i, n in enumerate(path, start=1))
    return f"Connection Path ({len(path)} hops):\n\n{body}"


def format_summary(summary: TopologySummary) -> str:
    return (
        "Azure Topology Summary:\n\n"
        f"Total Resources: {summary.node_count}\n"
        f"Total Connections: {summary.edge_count}\n\n"
        f"Subscriptions ({len(summary.subscriptions)}):\n{_bullets(summary.subscriptions)}\n\n"
        f"Resource Groups ({len(summary.resource_groups)}):\n{_bullets(summary.resource_groups)}\n\n"
        f"Resource Types ({len(summary.resource_types)}):\n{_bullets(summary.resource_types)}"
    )


def format_export(export: dict[str, Any] | TopologySummary) -> str:
    if isinstance(export, TopologySummary):
        return format_summary(export)
    return json.dumps(export, indent=2, default=str)


def format_refresh(result: RefreshResult) -> str:
    return (
        "Topology refreshed successfully.\n\n"
        f"Resources: {result.node_count}\n"
        f"Connections: {result.edge_count}"
    )
