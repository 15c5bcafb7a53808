"""Data structures for the resource topology graph."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from aztopology.models.resources import RawResource


class EdgeType(StrEnum):
    """Types of inferred relationships between Azure resources."""

    RESOURCE_GROUP = "resource-group"
    NETWORK_INTERFACE = "network-interface"
    SUBNET = "subnet"


@dataclass(frozen=True)
class GraphNode:
    """A node in the topology graph representing one Azure resource."""

    id: str
    type: str
    name: str
    subscription_id: str
    resource_group: str
    location: str
    tags: dict[str, str] | None = None
    properties: Any = None

    @classmethod
    def from_raw(cls, raw: RawResource) -> GraphNode:
        return cls(
            id=raw.id,
            type=raw.type,
            name=raw.name,
            subscription_id=raw.subscription_id,
            resource_group=raw.resource_group,
            location=raw.location,
            tags=dict(raw.tags) if raw.tags is not None else None,
            properties=raw.properties,
        )

    def is_type(self, resource_type: str) -> bool:
        """Case-insensitive type comparison; provider APIs mix case."""
        return self.type.lower() == resource_type.lower()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "subscriptionId": self.subscription_id,
            "resourceGroup": self.resource_group,
            "location": self.location,
        }
        if self.tags is not None:
            data["tags"] = dict(self.tags)
        if self.properties is not None:
            data["properties"] = self.properties
        return data


@dataclass(frozen=True)
class GraphEdge:
    """A typed, directed edge between two node ids."""

    source: str
    target: str
    edge_type: EdgeType

    @property
    def key(self) -> tuple[str, str, EdgeType]:
        return (self.source, self.target, self.edge_type)

    def other(self, node_id: str) -> str | None:
        """Return the opposite endpoint of *node_id*, or None if not touching it."""
        if self.source == node_id:
            return self.target
        if self.target == node_id:
            return self.source
        return None

    def to_dict(self) -> dict[str, str]:
        return {"source": self.source, "target": self.target, "type": str(self.edge_type)}


@dataclass(frozen=True)
class TopologyGraph:
    """Immutable snapshot of nodes and edges produced by one build pass.

    A refresh never mutates a graph; it produces a new one that replaces the
    previous snapshot in the cache.
    """

    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()
    built_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    _index: dict[str, GraphNode] = field(init=False, repr=False, compare=False)
    _adjacency: dict[str, list[str]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index = {node.id: node for node in self.nodes}
        if len(index) != len(self.nodes):
            raise ValueError("node ids must be unique within a graph")

        # Undirected adjacency in edge insertion order; path search relies on it.
        adjacency: dict[str, list[str]] = {}
        for edge in self.edges:
            adjacency.setdefault(edge.source, []).append(edge.target)
            adjacency.setdefault(edge.target, []).append(edge.source)

        object.__setattr__(self, "_index", index)
        object.__setattr__(self, "_adjacency", adjacency)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def get_node(self, node_id: str) -> GraphNode | None:
        return self._index.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._index

    def edges_for(self, node_id: str) -> list[GraphEdge]:
        """All edges whose source or target is *node_id*, in insertion order."""
        return [e for e in self.edges if e.source == node_id or e.target == node_id]

    def adjacent_ids(self, node_id: str) -> Iterator[str]:
        """Yield the other endpoint of every edge touching *node_id* (may repeat)."""
        yield from self._adjacency.get(node_id, ())

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }
