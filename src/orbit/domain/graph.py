"""
Connection graph: undirected adjacency built from edge snapshots, plus
bounded path search (six degrees of separation).

A graph is a plain dict of node id -> set of neighbor ids. It is built
fresh for every query and never cached.
"""

from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from orbit.domain.entities import (
    Contact,
    ConnectionEdge,
    NetworkStats,
    TargetPerson,
    round_half_up,
)

Graph = dict[str, set[str]]

DEFAULT_MAX_DEPTH = 6
DEFAULT_MAX_PATHS = 5

NOT_IN_NETWORK_MESSAGE = (
    "Target not found in your network. Try adding mutual connections."
)


@dataclass(frozen=True)
class PathFound:
    """A path from the user to a contact matching the target."""

    path: list[str]
    target_contact: Contact
    degrees: int


@dataclass(frozen=True)
class TargetNotFound:
    """No matching contact, or no path to it within the depth bound."""

    message: str = NOT_IN_NETWORK_MESSAGE
    candidates: tuple[Contact, ...] = field(default_factory=tuple)


def _endpoints(edge: ConnectionEdge | Mapping | None) -> tuple[str | None, str | None]:
    if isinstance(edge, ConnectionEdge):
        return edge.source_id, edge.target_id
    if isinstance(edge, Mapping):
        return edge.get("source_id"), edge.get("target_id")
    return None, None


def build_graph(edges: Iterable[ConnectionEdge | Mapping] | None) -> Graph:
    """
    Insert every edge in both directions. Duplicate edges have no extra
    effect; self-loops are kept. Entries missing an endpoint are skipped.
    """
    graph: Graph = {}
    for edge in edges or ():
        source_id, target_id = _endpoints(edge)
        if source_id is None or target_id is None:
            continue
        graph.setdefault(source_id, set()).add(target_id)
        graph.setdefault(target_id, set()).add(source_id)
    return graph


def find_path(
    graph: Graph | None,
    start_id: str,
    end_id: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[str] | None:
    """
    Shortest path by edge count (BFS), start and end inclusive, or None.
    Which of several equally short paths is returned is unspecified.
    """
    if start_id == end_id:
        return [start_id]
    if not graph or start_id not in graph:
        return None

    queue = deque([(start_id, [start_id])])
    visited = {start_id}
    while queue:
        current, path = queue.popleft()
        # Extending this path would exceed max_depth edges.
        if len(path) > max_depth:
            continue
        for neighbor in graph.get(current, ()):
            if neighbor == end_id:
                return path + [neighbor]
            if neighbor not in visited:
                visited.add(neighbor)
                queue.append((neighbor, path + [neighbor]))
    return None


def find_all_paths(
    graph: Graph | None,
    start_id: str,
    end_id: str,
    max_paths: int = DEFAULT_MAX_PATHS,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[list[str]]:
    """
    Up to max_paths simple paths of at most max_depth edges, shortest first.
    The search stops as soon as max_paths paths have been collected.
    """
    paths: list[list[str]] = []
    if max_paths <= 0:
        return paths
    if start_id != end_id and (not graph or start_id not in graph):
        return paths

    path = [start_id]
    visited = {start_id}

    def dfs(current: str) -> None:
        if len(paths) >= max_paths:
            return
        if current == end_id:
            paths.append(list(path))
            return
        if len(path) - 1 >= max_depth:
            return
        for neighbor in graph.get(current, ()):
            if len(paths) >= max_paths:
                return
            if neighbor in visited:
                continue
            visited.add(neighbor)
            path.append(neighbor)
            dfs(neighbor)
            path.pop()
            visited.discard(neighbor)

    dfs(start_id)
    return sorted(paths, key=len)


def neighbors_within(graph: Graph | None, start_id: str, depth: int) -> set[str]:
    """Node ids reachable from start_id in 1..depth hops (start excluded)."""
    if not graph or start_id not in graph or depth <= 0:
        return set()
    seen = {start_id}
    frontier = [start_id]
    for _ in range(depth):
        next_frontier = []
        for node in frontier:
            for neighbor in graph.get(node, ()):
                if neighbor not in seen:
                    seen.add(neighbor)
                    next_frontier.append(neighbor)
        if not next_frontier:
            break
        frontier = next_frontier
    seen.discard(start_id)
    return seen


def calculate_network_stats(graph: Graph | None) -> NetworkStats:
    """
    Edge count counts a self-loop once; every other edge appears in both
    endpoint sets. Average degree is rounded half up to one decimal.
    """
    graph = graph or {}
    node_count = len(graph)
    total_degree = 0
    max_degree = 0
    self_loops = 0
    for node_id, neighbors in graph.items():
        degree = len(neighbors)
        total_degree += degree
        max_degree = max(max_degree, degree)
        if node_id in neighbors:
            self_loops += 1

    edge_count = (total_degree - self_loops) // 2 + self_loops
    avg_degree = round_half_up(total_degree * 10 / node_count) / 10 if node_count else 0.0
    density = (
        (2 * edge_count) / (node_count * (node_count - 1)) if node_count > 1 else 0.0
    )
    return NetworkStats(
        node_count=node_count,
        edge_count=edge_count,
        max_degree=max_degree,
        avg_degree=avg_degree,
        density=density,
    )


def match_contact(contacts: Iterable[Contact], name: str | None) -> Contact | None:
    """First contact whose name contains name (case-insensitive)."""
    needle = (name or "").strip().lower()
    if not needle:
        return None
    for contact in contacts:
        if needle in (contact.name or "").lower():
            return contact
    return None


def find_path_to_target(
    user_id: str,
    target: TargetPerson,
    contacts: Iterable[Contact],
    graph: Graph | None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> PathFound | TargetNotFound:
    """
    Look for the target among the user's own contacts, then search the graph
    from the user to that contact. Discovering people outside the network is
    left to a people-search collaborator.
    """
    contact = match_contact(contacts, target.name)
    if contact is None:
        return TargetNotFound()
    path = find_path(graph, user_id, contact.id, max_depth)
    if path is None:
        return TargetNotFound()
    return PathFound(path=path, target_contact=contact, degrees=len(path) - 1)
