"""In-memory implementations of the store ports (no DB)."""

from orbit.domain import (
    CircleMembership,
    ConnectionEdge,
    Contact,
    ContactHealthRecord,
)


class InMemoryHealthStore:
    """Health records keyed on (user_id, contact_id), circle membership and alert history."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], ContactHealthRecord] = {}
        self._memberships: dict[str, list[CircleMembership]] = {}
        self._alerts: dict[tuple[str, str], int] = {}

    def add_membership(self, user_id: str, contact_id: str, tier: int | None) -> None:
        self._memberships.setdefault(user_id, []).append(
            CircleMembership(contact_id=contact_id, tier=tier)
        )

    def raise_alert(self, user_id: str, contact_id: str) -> None:
        key = (user_id, contact_id)
        self._alerts[key] = self._alerts.get(key, 0) + 1

    def alert_count(self, user_id: str, contact_id: str) -> int:
        return self._alerts.get((user_id, contact_id), 0)

    async def fetch_memberships(self, user_id: str) -> list[CircleMembership]:
        return list(self._memberships.get(user_id, []))

    async def fetch_records(
        self, user_id: str, contact_ids: list[str]
    ) -> list[ContactHealthRecord]:
        return [
            self._records[(user_id, cid)]
            for cid in contact_ids
            if (user_id, cid) in self._records
        ]

    async def list_records(self, user_id: str) -> list[ContactHealthRecord]:
        records = [r for (uid, _), r in self._records.items() if uid == user_id]
        return sorted(records, key=lambda r: r.health_score)

    async def get_record(
        self, user_id: str, contact_id: str
    ) -> ContactHealthRecord | None:
        return self._records.get((user_id, contact_id))

    async def upsert_records(self, records: list[ContactHealthRecord]) -> int:
        for record in records:
            self._records[(record.user_id, record.contact_id)] = record
        return len(records)

    async def clear_alerts(self, user_id: str, contact_id: str) -> int:
        return self._alerts.pop((user_id, contact_id), 0)


class InMemoryNetwork:
    """Connection edges and per-user contact lists. Order preserved by insertion."""

    def __init__(self) -> None:
        self._edges: list[ConnectionEdge] = []
        self._contacts: dict[str, list[Contact]] = {}

    def connect(
        self,
        source_id: str,
        target_id: str,
        *,
        connection_type: str | None = None,
        strength: int | None = None,
    ) -> None:
        self._edges.append(
            ConnectionEdge(
                source_id=source_id,
                target_id=target_id,
                connection_type=connection_type,
                strength=strength,
            )
        )

    def add_contact(self, user_id: str, contact_id: str, name: str) -> None:
        self._contacts.setdefault(user_id, []).append(Contact(id=contact_id, name=name))

    async def fetch_edges(self, node_ids: list[str]) -> list[ConnectionEdge]:
        wanted = set(node_ids)
        return [
            edge
            for edge in self._edges
            if edge.source_id in wanted or edge.target_id in wanted
        ]

    async def get_edge(self, node_a: str, node_b: str) -> ConnectionEdge | None:
        for edge in self._edges:
            if {edge.source_id, edge.target_id} == {node_a, node_b}:
                return edge
        return None

    async def list_contacts(self, user_id: str) -> list[Contact]:
        return list(self._contacts.get(user_id, []))
