"""Assemble a TopologyGraph from one fetch pass."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

import structlog

from aztopology.graph.inference import infer_relationships
from aztopology.graph.models import GraphNode, TopologyGraph
from aztopology.models.resources import RawResource

_log = structlog.get_logger(component="graph.builder")


def build_graph(resources: Iterable[RawResource], built_at: datetime) -> TopologyGraph:
    """Convert raw resources into nodes, infer edges and freeze the result.

    Node order follows fetch order. When the same id is fetched twice the
    first record wins.
    """
    nodes: list[GraphNode] = []
    seen: set[str] = set()
    for raw in resources:
        if raw.id in seen:
            _log.warning("duplicate resource id ignored", resource_id=raw.id)
            continue
        seen.add(raw.id)
        nodes.append(GraphNode.from_raw(raw))

    edges = infer_relationships(nodes)
    return TopologyGraph(nodes=tuple(nodes), edges=tuple(edges), built_at=built_at)
