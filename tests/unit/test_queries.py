"""Unit tests for search, neighbour lookup, shortest path and summary."""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from aztopology.errors import ResourceNotFoundError
from aztopology.graph.models import EdgeType, GraphEdge, GraphNode, TopologyGraph
from aztopology.graph.queries import find_path, get_resource, neighbors, search, summarize


def _node(
    id: str,
    type: str = "microsoft.storage/storageaccounts",
    rg: str = "rg-a",
    sub: str = "sub-1",
    location: str = "westeurope",
    tags: dict[str, str] | None = None,
) -> GraphNode:
    return GraphNode(
        id=id,
        type=type,
        name=id,
        subscription_id=sub,
        resource_group=rg,
        location=location,
        tags=tags,
    )


def _edge(source: str, target: str, kind: EdgeType = EdgeType.RESOURCE_GROUP) -> GraphEdge:
    return GraphEdge(source=source, target=target, edge_type=kind)


def _graph(nodes: list[GraphNode], edges: list[GraphEdge] | None = None) -> TopologyGraph:
    return TopologyGraph(nodes=tuple(nodes), edges=tuple(edges or []))


def _ids(nodes) -> list[str]:
    return [n.id for n in nodes]


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class TestSearch:
    @pytest.fixture
    def graph(self) -> TopologyGraph:
        return _graph(
            [
                _node("web-vm", type="Microsoft.Compute/virtualMachines", rg="rg-web"),
                _node("db-server", type="Microsoft.Sql/servers", rg="rg-data", location="northeurope"),
                _node("logs", tags={"team": "Platform", "env": "prod"}),
                _node("web-nic", type="Microsoft.Network/networkInterfaces", rg="rg-web"),
            ]
        )

    def test_empty_query_returns_every_node(self, graph: TopologyGraph) -> None:
        assert _ids(search(graph, "")) == ["web-vm", "db-server", "logs", "web-nic"]

    def test_matches_name_case_insensitively(self, graph: TopologyGraph) -> None:
        assert _ids(search(graph, "WEB")) == ["web-vm", "web-nic"]

    def test_matches_type(self, graph: TopologyGraph) -> None:
        assert _ids(search(graph, "sql/servers")) == ["db-server"]

    def test_matches_location(self, graph: TopologyGraph) -> None:
        assert _ids(search(graph, "north")) == ["db-server"]

    def test_matches_resource_group(self, graph: TopologyGraph) -> None:
        assert _ids(search(graph, "rg-data")) == ["db-server"]

    def test_matches_tag_values_not_keys(self, graph: TopologyGraph) -> None:
        assert _ids(search(graph, "platform")) == ["logs"]
        assert search(graph, "team") == []

    def test_type_filter_applies_on_top_of_query(self, graph: TopologyGraph) -> None:
        assert _ids(search(graph, "web", "networkinterfaces")) == ["web-nic"]
        assert _ids(search(graph, "", "microsoft.compute")) == ["web-vm"]

    def test_no_match(self, graph: TopologyGraph) -> None:
        assert search(graph, "does-not-exist") == []


# ---------------------------------------------------------------------------
# Lookup and neighbours
# ---------------------------------------------------------------------------


class TestNeighbors:
    def test_unknown_id_raises_not_found(self) -> None:
        with pytest.raises(ResourceNotFoundError) as exc_info:
            neighbors(_graph([_node("a")]), "missing")
        assert exc_info.value.resource_id == "missing"

    def test_get_resource_unknown_raises(self) -> None:
        with pytest.raises(ResourceNotFoundError):
            get_resource(_graph([]), "x")

    def test_edges_traversed_in_both_directions(self) -> None:
        graph = _graph(
            [_node("a"), _node("b"), _node("c")],
            [_edge("a", "b"), _edge("c", "a", EdgeType.SUBNET)],
        )
        result = neighbors(graph, "a")
        assert result.node.id == "a"
        assert _ids(result.neighbors) == ["b", "c"]

    def test_neighbors_deduplicated_and_in_node_order(self) -> None:
        graph = _graph(
            [_node("a"), _node("b"), _node("c")],
            [_edge("a", "c"), _edge("c", "a"), _edge("a", "c", EdgeType.NETWORK_INTERFACE), _edge("b", "a")],
        )
        assert _ids(neighbors(graph, "a").neighbors) == ["b", "c"]

    def test_isolated_node_has_no_neighbors(self) -> None:
        assert neighbors(_graph([_node("a")]), "a").neighbors == []


# ---------------------------------------------------------------------------
# Shortest path
# ---------------------------------------------------------------------------


class TestFindPath:
    def test_path_to_self_is_single_node(self) -> None:
        assert _ids(find_path(_graph([_node("x")]), "x", "x")) == ["x"]

    def test_missing_source_raises(self) -> None:
        with pytest.raises(ResourceNotFoundError) as exc_info:
            find_path(_graph([_node("b")]), "a", "b")
        assert "Source" in str(exc_info.value)

    def test_missing_target_raises(self) -> None:
        with pytest.raises(ResourceNotFoundError) as exc_info:
            find_path(_graph([_node("a")]), "a", "b")
        assert "Target" in str(exc_info.value)

    def test_disconnected_returns_empty(self) -> None:
        graph = _graph([_node("a"), _node("b")])
        assert find_path(graph, "a", "b") == []

    def test_follows_edges_against_direction(self) -> None:
        graph = _graph(
            [_node("vm"), _node("nic"), _node("subnet"), _node("vnet")],
            [
                _edge("vm", "nic", EdgeType.NETWORK_INTERFACE),
                _edge("vnet", "subnet", EdgeType.SUBNET),
                _edge("subnet", "nic"),
            ],
        )
        assert _ids(find_path(graph, "vm", "vnet")) == ["vm", "nic", "subnet", "vnet"]
        assert _ids(find_path(graph, "vnet", "vm")) == ["vnet", "subnet", "nic", "vm"]

    def test_shortest_path_wins_over_longer(self) -> None:
        graph = _graph(
            [_node(i) for i in "abcd"],
            [_edge("a", "b"), _edge("b", "c"), _edge("c", "d"), _edge("a", "d")],
        )
        assert _ids(find_path(graph, "a", "d")) == ["a", "d"]

    def test_tie_break_follows_edge_insertion_order(self) -> None:
        graph = _graph(
            [_node(i) for i in ("s", "x", "y", "t")],
            [_edge("s", "y"), _edge("s", "x"), _edge("x", "t"), _edge("y", "t")],
        )
        assert _ids(find_path(graph, "s", "t")) == ["s", "y", "t"]

    @settings(max_examples=60)
    @given(
        pairs=st.lists(
            st.tuples(st.integers(0, 7), st.integers(0, 7)).filter(lambda p: p[0] != p[1]),
            max_size=12,
        ),
        a=st.integers(0, 7),
        b=st.integers(0, 7),
    )
    def test_reachability_is_symmetric(self, pairs: list[tuple[int, int]], a: int, b: int) -> None:
        nodes = [_node(f"n{i}") for i in range(8)]
        graph = _graph(nodes, [_edge(f"n{s}", f"n{t}") for s, t in pairs])
        forward = find_path(graph, f"n{a}", f"n{b}")
        backward = find_path(graph, f"n{b}", f"n{a}")
        assert bool(forward) == bool(backward)
        assert len(forward) == len(backward)
        if forward:
            assert forward[0].id == f"n{a}"
            assert forward[-1].id == f"n{b}"


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


class TestSummarize:
    def test_sorted_distinct_values_and_counts(self) -> None:
        graph = _graph(
            [
                _node("a", type="t2", rg="rg-b", sub="sub-2"),
                _node("b", type="t1", rg="rg-a", sub="sub-1"),
                _node("c", type="t2", rg="rg-a", sub="sub-2"),
            ],
            [_edge("b", "c"), _edge("c", "b")],
        )
        summary = summarize(graph)
        assert summary.node_count == 3
        assert summary.edge_count == 2
        assert summary.resource_types == ["t1", "t2"]
        assert summary.subscriptions == ["sub-1", "sub-2"]
        assert summary.resource_groups == ["rg-a", "rg-b"]

    def test_summary_of_empty_graph(self) -> None:
        summary = summarize(_graph([]))
        assert summary.node_count == 0
        assert summary.resource_types == []

    def test_summary_does_not_mutate_graph(self) -> None:
        graph = _graph([_node("a"), _node("b")], [_edge("a", "b")])
        before = graph.to_dict()
        summarize(graph)
        assert graph.to_dict() == before
