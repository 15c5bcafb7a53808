"""Resource topology graph.

Provides the immutable graph snapshot built from an Azure resource inventory,
the relationship-inference rules (resource-group co-membership, VM->NIC
attachment, VNet->subnet containment) and the read-only query functions.
"""

from aztopology.graph.builder import build_graph
from aztopology.graph.inference import infer_relationships
from aztopology.graph.models import EdgeType, GraphEdge, GraphNode, TopologyGraph
from aztopology.graph.queries import NeighborResult, TopologySummary, find_path, neighbors, search, summarize

__all__ = [
    "EdgeType",
    "GraphEdge",
    "GraphNode",
    "NeighborResult",
    "TopologyGraph",
    "TopologySummary",
    "build_graph",
    "find_path",
    "infer_relationships",
    "neighbors",
    "search",
    "summarize",
]
