"""Unit tests for the connection graph. Path identity among equal-length paths is unspecified, so only lengths are asserted there."""

import itertools

import pytest

from orbit.domain import ConnectionEdge, Contact, PathFound, TargetNotFound, TargetPerson
from orbit.domain.graph import (
    NOT_IN_NETWORK_MESSAGE,
    build_graph,
    calculate_network_stats,
    find_all_paths,
    find_path,
    find_path_to_target,
    match_contact,
    neighbors_within,
)

CHAIN = ["A", "B", "C", "D", "E", "F", "G"]


def _edges(*pairs: tuple[str, str]) -> list[ConnectionEdge]:
    return [ConnectionEdge(source_id=a, target_id=b) for a, b in pairs]


def _chain_graph():
    return build_graph(_edges(*zip(CHAIN, CHAIN[1:])))


def _complete_graph(nodes: str):
    return build_graph(_edges(*itertools.combinations(nodes, 2)))


def _assert_simple(path: list[str]) -> None:
    assert len(path) == len(set(path))


def test_build_graph_is_symmetric() -> None:
    edges = _edges(("a", "b"), ("b", "c"), ("d", "a"))
    graph = build_graph(edges)
    for edge in edges:
        assert edge.target_id in graph[edge.source_id]
        assert edge.source_id in graph[edge.target_id]


def test_duplicate_edges_are_idempotent() -> None:
    graph = build_graph(_edges(("a", "b"), ("a", "b"), ("b", "a")))
    assert graph == {"a": {"b"}, "b": {"a"}}


def test_self_loops_are_kept() -> None:
    graph = build_graph(_edges(("a", "a")))
    assert graph == {"a": {"a"}}


def test_build_graph_accepts_mappings() -> None:
    graph = build_graph([{"source_id": "a", "target_id": "b", "strength": 5}])
    assert graph == {"a": {"b"}, "b": {"a"}}


def test_malformed_edges_degrade_to_empty_graph() -> None:
    assert build_graph(None) == {}
    assert build_graph([None, {"source_id": "a"}, "junk"]) == {}


@pytest.mark.parametrize("node", ["A", "missing"])
def test_find_path_to_self(node) -> None:
    assert find_path(_chain_graph(), node, node) == [node]


def test_find_path_unknown_start_is_no_path() -> None:
    assert find_path(_chain_graph(), "Z", "A") is None
    assert find_path({}, "A", "B") is None
    assert find_path(None, "A", "B") is None


def test_find_path_unknown_end_is_no_path() -> None:
    assert find_path(_chain_graph(), "A", "Z") is None


def test_chain_within_six_degrees() -> None:
    assert find_path(_chain_graph(), "A", "G", max_depth=6) == CHAIN


def test_chain_beyond_depth_bound() -> None:
    assert find_path(_chain_graph(), "A", "G", max_depth=5) is None


def test_default_depth_is_six() -> None:
    graph = build_graph(_edges(*zip(CHAIN + ["H"], CHAIN[1:] + ["H"])))
    assert find_path(graph, "A", "G") == CHAIN
    assert find_path(graph, "A", "H") is None


def test_find_path_returns_shortest() -> None:
    # Long way round A-B-C-D-E and a shortcut A-X-E.
    graph = build_graph(
        _edges(("A", "B"), ("B", "C"), ("C", "D"), ("D", "E"), ("A", "X"), ("X", "E"))
    )
    path = find_path(graph, "A", "E")
    assert len(path) == 3
    assert path[0] == "A" and path[-1] == "E"


def test_find_path_between_equal_length_routes() -> None:
    graph = build_graph(_edges(("A", "B"), ("B", "D"), ("A", "C"), ("C", "D")))
    path = find_path(graph, "A", "D")
    assert len(path) == 3
    assert path[1] in {"B", "C"}


def test_find_all_paths_square() -> None:
    graph = build_graph(_edges(("A", "B"), ("B", "D"), ("A", "C"), ("C", "D")))
    paths = find_all_paths(graph, "A", "D")
    assert sorted(paths) == [["A", "B", "D"], ["A", "C", "D"]]


def test_find_all_paths_sorted_by_length() -> None:
    graph = build_graph(
        _edges(("A", "B"), ("B", "C"), ("C", "D"), ("A", "D"), ("B", "D"))
    )
    paths = find_all_paths(graph, "A", "D", max_paths=10)
    lengths = [len(p) for p in paths]
    assert lengths == sorted(lengths)
    assert lengths[0] == 2
    assert len(paths) == 3


def test_find_all_paths_respects_max_paths_on_dense_graph() -> None:
    graph = _complete_graph("ABCDEFGH")
    paths = find_all_paths(graph, "A", "H", max_paths=4)
    assert len(paths) == 4
    for path in paths:
        _assert_simple(path)
        assert path[0] == "A" and path[-1] == "H"
        assert len(path) - 1 <= 6


def test_find_all_paths_respects_depth_in_edges() -> None:
    graph = _chain_graph()
    assert find_all_paths(graph, "A", "G", max_depth=6) == [CHAIN]
    assert find_all_paths(graph, "A", "G", max_depth=5) == []


def test_find_all_paths_depth_bound_on_dense_graph() -> None:
    graph = _complete_graph("ABCDEF")
    paths = find_all_paths(graph, "A", "F", max_paths=1000, max_depth=2)
    # Direct edge plus one path through each of the 4 other nodes.
    assert len(paths) == 5
    assert all(len(p) <= 3 for p in paths)


def test_find_all_paths_edge_cases() -> None:
    graph = _chain_graph()
    assert find_all_paths(graph, "Z", "A") == []
    assert find_all_paths(graph, "A", "B", max_paths=0) == []
    assert find_all_paths(graph, "C", "C") == [["C"]]
    assert find_all_paths(None, "A", "B") == []


def test_neighbors_within() -> None:
    graph = _chain_graph()
    assert neighbors_within(graph, "C", 1) == {"B", "D"}
    assert neighbors_within(graph, "C", 2) == {"A", "B", "D", "E"}
    assert neighbors_within(graph, "C", 0) == set()
    assert neighbors_within(graph, "Z", 3) == set()


def test_triangle_stats() -> None:
    stats = calculate_network_stats(_complete_graph("ABC"))
    assert stats.node_count == 3
    assert stats.edge_count == 3
    assert stats.max_degree == 2
    assert stats.avg_degree == 2.0
    assert stats.density == 1.0


def test_star_stats() -> None:
    graph = build_graph(_edges(("hub", "a"), ("hub", "b"), ("hub", "c")))
    stats = calculate_network_stats(graph)
    assert stats.node_count == 4
    assert stats.edge_count == 3
    assert stats.max_degree == 3
    assert stats.avg_degree == 1.5
    assert stats.density == pytest.approx(0.5)


def test_average_degree_rounds_half_up() -> None:
    # Two 4-cycles joined by a bridge: 8 nodes, 9 edges, average degree 2.25.
    graph = build_graph(
        _edges(
            ("a", "b"), ("b", "c"), ("c", "d"), ("d", "a"),
            ("e", "f"), ("f", "g"), ("g", "h"), ("h", "e"),
            ("d", "e"),
        )
    )
    stats = calculate_network_stats(graph)
    assert stats.node_count == 8
    assert stats.edge_count == 9
    assert stats.avg_degree == 2.3


def test_self_loop_counts_as_one_edge() -> None:
    stats = calculate_network_stats(build_graph(_edges(("a", "a"), ("a", "b"))))
    assert stats.node_count == 2
    assert stats.edge_count == 2
    assert stats.max_degree == 2


def test_empty_and_single_node_stats() -> None:
    empty = calculate_network_stats({})
    assert (empty.node_count, empty.edge_count, empty.max_degree) == (0, 0, 0)
    assert empty.avg_degree == 0.0
    assert empty.density == 0.0
    assert calculate_network_stats(None).node_count == 0
    assert calculate_network_stats({"a": set()}).density == 0.0


def test_match_contact_case_insensitive_substring() -> None:
    contacts = [Contact("c1", "Alice Smith"), Contact("c2", "Bob Jones")]
    assert match_contact(contacts, "smith") == contacts[0]
    assert match_contact(contacts, "BOB") == contacts[1]
    assert match_contact(contacts, "carol") is None
    assert match_contact(contacts, "  ") is None


def test_path_to_target_found() -> None:
    graph = build_graph(_edges(("me", "alice"), ("alice", "bob")))
    contacts = [Contact("bob", "Bob Builder")]
    result = find_path_to_target("me", TargetPerson(name="bob"), contacts, graph)
    assert isinstance(result, PathFound)
    assert result.path == ["me", "alice", "bob"]
    assert result.degrees == 2
    assert result.target_contact == contacts[0]


def test_path_to_target_not_in_contacts() -> None:
    graph = build_graph(_edges(("me", "alice")))
    result = find_path_to_target("me", TargetPerson(name="Zed"), [], graph)
    assert isinstance(result, TargetNotFound)
    assert result.message == NOT_IN_NETWORK_MESSAGE
    assert result.candidates == ()


def test_path_to_target_contact_without_path() -> None:
    graph = build_graph(_edges(("me", "alice")))
    contacts = [Contact("bob", "Bob")]
    result = find_path_to_target("me", TargetPerson(name="Bob"), contacts, graph)
    assert isinstance(result, TargetNotFound)
