"""Relationship inference: derive topology edges from resource metadata.

Three rules are applied per node, in node order:

    resource-group     -- every pair of resources sharing a resource group,
                          one edge per direction (A->B and B->A).
    network-interface  -- VM -> NIC for each NIC referenced from the VM's
                          ``properties.networkProfile.networkInterfaces``.
    subnet             -- VNet -> subnet for each subnet resource whose id is
                          a path extension of the VNet id.

The resource-group rule is a coarse "same blast radius" signal, not a real
network or dependency relationship.

A failure inside one node's type-specific rules is logged and discarded with
that node's partial edges; the build carries on with the remaining nodes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from aztopology.errors import RelationshipInferenceError
from aztopology.graph.models import EdgeType, GraphEdge, GraphNode

_log = structlog.get_logger(component="graph.inference")

VIRTUAL_MACHINE_TYPE = "microsoft.compute/virtualmachines"
VIRTUAL_NETWORK_TYPE = "microsoft.network/virtualnetworks"
SUBNET_TYPE = "microsoft.network/virtualnetworks/subnets"


def network_interface_ids(properties: Any) -> list[str]:
    """Return the NIC ids referenced by a VM ``properties`` document.

    Anything missing or of the wrong shape yields no ids rather than an error.
    """
    if not isinstance(properties, dict):
        return []
    profile = properties.get("networkProfile")
    if not isinstance(profile, dict):
        return []
    refs = profile.get("networkInterfaces")
    if not isinstance(refs, list):
        return []
    ids: list[str] = []
    for ref in refs:
        if isinstance(ref, dict) and isinstance(ref.get("id"), str):
            ids.append(ref["id"])
    return ids


def is_subnet_of(candidate: GraphNode, vnet: GraphNode) -> bool:
    """True if *candidate* is a subnet resource contained in *vnet*.

    Subnet ids are always ``<vnet id>/subnets/<name>``, so containment is a
    path-prefix check on whole segments.
    """
    return (
        candidate.is_type(SUBNET_TYPE)
        and candidate.resource_group == vnet.resource_group
        and candidate.id.startswith(vnet.id + "/")
    )


class _RelationshipBuilder:
    """Accumulates edges for one build pass."""

    def __init__(self, nodes: Sequence[GraphNode]) -> None:
        self._nodes = nodes
        self._by_id = {n.id: n for n in nodes}
        self._by_group: dict[str, list[GraphNode]] = {}
        for node in nodes:
            self._by_group.setdefault(node.resource_group, []).append(node)
        self.edges: list[GraphEdge] = []
        self._seen_group_edges: set[tuple[str, str, EdgeType]] = set()

    def build(self) -> list[GraphEdge]:
        failures = 0
        for node in self._nodes:
            self._add_resource_group_edges(node)
            try:
                self.edges.extend(self._type_specific_edges(node))
            except RelationshipInferenceError as exc:
                failures += 1
                _log.warning(
                    "relationship inference failed for node",
                    resource_id=exc.resource_id,
                    resource_name=node.name,
                    error=str(exc.cause),
                )
        if failures:
            _log.info("relationship inference completed with failures", failed_nodes=failures)
        return self.edges

    def _add_resource_group_edges(self, node: GraphNode) -> None:
        for member in self._by_group.get(node.resource_group, ()):
            if member.id == node.id:
                continue
            edge = GraphEdge(source=node.id, target=member.id, edge_type=EdgeType.RESOURCE_GROUP)
            if edge.key in self._seen_group_edges:
                continue
            self._seen_group_edges.add(edge.key)
            self.edges.append(edge)

    def _type_specific_edges(self, node: GraphNode) -> list[GraphEdge]:
        """Edges from the VM and VNet rules; all or nothing per node."""
        try:
            if node.is_type(VIRTUAL_MACHINE_TYPE):
                return self._vm_edges(node)
            if node.is_type(VIRTUAL_NETWORK_TYPE):
                return self._vnet_edges(node)
        except Exception as exc:
            raise RelationshipInferenceError(node.id, exc) from exc
        return []

    def _vm_edges(self, vm: GraphNode) -> list[GraphEdge]:
        edges = []
        for nic_id in network_interface_ids(vm.properties):
            if nic_id in self._by_id:
                edges.append(GraphEdge(source=vm.id, target=nic_id, edge_type=EdgeType.NETWORK_INTERFACE))
        return edges

    def _vnet_edges(self, vnet: GraphNode) -> list[GraphEdge]:
        return [
            GraphEdge(source=vnet.id, target=member.id, edge_type=EdgeType.SUBNET)
            for member in self._by_group.get(vnet.resource_group, ())
            if is_subnet_of(member, vnet)
        ]


def infer_relationships(nodes: Sequence[GraphNode]) -> list[GraphEdge]:
    """Derive the edge list for *nodes*.

    Edge order is deterministic: for each node in input order, its
    resource-group edges (in member order) followed by its type-specific
    edges. Path search tie-breaks depend on this order.
    """
    return _RelationshipBuilder(nodes).build()
