"""Introduction paths and network statistics over the user's connection graph."""

import dataclasses
import logging

from orbit.application.dto import Invalid
from orbit.application.errors import StoreError
from orbit.application.ports import ConnectionStore, ContactDirectory, PeopleSearch
from orbit.domain import Contact, Graph, NetworkStats, PathFound, TargetNotFound, TargetPerson
from orbit.domain.graph import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_PATHS,
    build_graph,
    calculate_network_stats,
    find_all_paths,
    find_path_to_target,
)

logger = logging.getLogger(__name__)

# Stored strengths are on a 1..10 scale.
STRENGTH_SCALE = 10


class ConnectionService:
    """Loads edge snapshots from the store and runs graph queries on them. No caching."""

    def __init__(
        self,
        connections: ConnectionStore,
        directory: ContactDirectory,
        *,
        people_search: PeopleSearch | None = None,
    ) -> None:
        self._connections = connections
        self._directory = directory
        self._people_search = people_search

    async def load_user_graph(self, user_id: str) -> Graph:
        """Graph of the user's direct connections. Empty when the store fails."""
        try:
            edges = await self._connections.fetch_edges([user_id])
        except StoreError as exc:
            logger.error("Failed to load graph for user %s: %s", user_id, exc.message)
            return {}
        return build_graph(edges)

    async def load_extended_graph(self, user_id: str) -> Graph:
        """Direct connections plus the connections of each direct connection."""
        try:
            direct = await self._connections.fetch_edges([user_id])
            direct_ids = {edge.source_id for edge in direct} | {
                edge.target_id for edge in direct
            }
            direct_ids.discard(user_id)
            if not direct_ids:
                return build_graph(direct)
            second_degree = await self._connections.fetch_edges(sorted(direct_ids))
        except StoreError as exc:
            logger.error(
                "Failed to load extended graph for user %s: %s", user_id, exc.message
            )
            return {}
        return build_graph([*direct, *second_degree])

    async def find_path_to_target(
        self,
        user_id: str,
        target: TargetPerson,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> PathFound | TargetNotFound | Invalid:
        if not (user_id or "").strip():
            return Invalid(reason="Missing user_id.")
        if target is None or not (target.name or "").strip():
            return Invalid(reason="Target name is required.")

        try:
            contacts = await self._directory.list_contacts(user_id)
        except StoreError as exc:
            logger.error("Failed to list contacts for user %s: %s", user_id, exc.message)
            contacts = []
        graph = await self.load_extended_graph(user_id)

        result = find_path_to_target(user_id, target, contacts, graph, max_depth)
        if isinstance(result, PathFound):
            logger.info(
                "Found path to %s in %d degrees", result.target_contact.id, result.degrees
            )
            return result

        candidates = await self._find_candidates(target)
        return dataclasses.replace(result, candidates=tuple(candidates))

    async def find_paths(
        self,
        user_id: str,
        start_id: str,
        end_id: str,
        max_paths: int = DEFAULT_MAX_PATHS,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> list[list[str]]:
        graph = await self.load_extended_graph(user_id)
        return find_all_paths(graph, start_id, end_id, max_paths, max_depth)

    async def network_stats(self, user_id: str) -> NetworkStats:
        return calculate_network_stats(await self.load_extended_graph(user_id))

    async def get_connection_strength(self, node_a: str, node_b: str) -> float:
        """Strength normalised to 0..1; 0 when there is no edge."""
        try:
            edge = await self._connections.get_edge(node_a, node_b)
        except StoreError as exc:
            logger.warning("Failed to read connection strength: %s", exc.message)
            return 0.0
        if edge is None:
            return 0.0
        return (edge.strength or 1) / STRENGTH_SCALE

    async def _find_candidates(self, target: TargetPerson) -> list[Contact]:
        if self._people_search is None:
            return []
        try:
            return list(await self._people_search.find_candidates(target))
        except Exception:
            logger.warning("People search failed for %s", target.name, exc_info=True)
            return []
