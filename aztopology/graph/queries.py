"""Structural queries over a materialised TopologyGraph.

All functions are synchronous and read-only; they never mutate the graph.
Edges are stored directed but traversed as undirected here.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from aztopology.errors import ResourceNotFoundError
from aztopology.graph.models import GraphNode, TopologyGraph


@dataclass(frozen=True)
class NeighborResult:
    """A node and the nodes directly connected to it."""

    node: GraphNode
    neighbors: list[GraphNode] = field(default_factory=list)


@dataclass(frozen=True)
class TopologySummary:
    """Derived counts and distinct values of a graph."""

    node_count: int
    edge_count: int
    resource_types: list[str] = field(default_factory=list)
    subscriptions: list[str] = field(default_factory=list)
    resource_groups: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "nodeCount": self.node_count,
            "edgeCount": self.edge_count,
            "resourceTypes": list(self.resource_types),
            "subscriptions": list(self.subscriptions),
            "resourceGroups": list(self.resource_groups),
        }


def _matches(node: GraphNode, needle: str) -> bool:
    fields = (node.name, node.type, node.resource_group, node.location)
    if any(needle in value.lower() for value in fields):
        return True
    if node.tags:
        return any(needle in str(value).lower() for value in node.tags.values())
    return False


def search(graph: TopologyGraph, query: str, resource_type: str | None = None) -> list[GraphNode]:
    """Case-insensitive substring search across name, type, group, location and tag values.

    Results keep graph order. An empty *query* matches every node.
    """
    needle = query.lower()
    type_filter = resource_type.lower() if resource_type else None
    return [
        node
        for node in graph.nodes
        if _matches(node, needle) and (type_filter is None or type_filter in node.type.lower())
    ]


def get_resource(graph: TopologyGraph, resource_id: str) -> GraphNode:
    node = graph.get_node(resource_id)
    if node is None:
        raise ResourceNotFoundError(resource_id)
    return node


def neighbors(graph: TopologyGraph, resource_id: str) -> NeighborResult:
    """Return *resource_id*'s node and its distinct neighbours in graph order."""
    node = get_resource(graph, resource_id)
    connected = set(graph.adjacent_ids(resource_id))
    return NeighborResult(node=node, neighbors=[n for n in graph.nodes if n.id in connected])


def find_path(graph: TopologyGraph, source_id: str, target_id: str) -> list[GraphNode]:
    """Shortest undirected path from *source_id* to *target_id*, both inclusive.

    Breadth-first search; among equal-length paths the one whose hops come
    first in edge insertion order wins. Returns an empty list when the two
    nodes are not connected.

    Raises:
        ResourceNotFoundError: either endpoint is not in the graph.
    """
    if not graph.has_node(source_id):
        raise ResourceNotFoundError(source_id, role="Source resource")
    if not graph.has_node(target_id):
        raise ResourceNotFoundError(target_id, role="Target resource")

    queue: deque[list[str]] = deque([[source_id]])
    visited = {source_id}
    while queue:
        path = queue.popleft()
        current = path[-1]
        if current == target_id:
            return [graph.get_node(node_id) for node_id in path]  # type: ignore[misc]
        for next_id in graph.adjacent_ids(current):
            if next_id in visited:
                continue
            visited.add(next_id)
            queue.append([*path, next_id])
    return []


def summarize(graph: TopologyGraph) -> TopologySummary:
    return TopologySummary(
        node_count=graph.node_count,
        edge_count=graph.edge_count,
        resource_types=sorted({n.type for n in graph.nodes}),
        subscriptions=sorted({n.subscription_id for n in graph.nodes}),
        resource_groups=sorted({n.resource_group for n in graph.nodes}),
    )
