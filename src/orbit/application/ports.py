"""Application ports (interfaces). Implemented by infrastructure adapters.

All calls are awaitable and may raise StoreError; adapters classify their
backend's errors before raising.
"""

from typing import Protocol

from orbit.domain import (
    CircleMembership,
    ConnectionEdge,
    Contact,
    ContactHealthRecord,
    TargetPerson,
)


class HealthRecordStore(Protocol):
    """Persists health records keyed on (user_id, contact_id) and reads circle membership."""

    async def fetch_memberships(self, user_id: str) -> list[CircleMembership]:
        """Return one entry per (circle, contact); a contact may appear more than once."""
        ...

    async def fetch_records(
        self, user_id: str, contact_ids: list[str]
    ) -> list[ContactHealthRecord]:
        """Return the stored records of the given contacts."""
        ...

    async def list_records(self, user_id: str) -> list[ContactHealthRecord]:
        """Return all records of the user, lowest score first."""
        ...

    async def get_record(
        self, user_id: str, contact_id: str
    ) -> ContactHealthRecord | None:
        ...

    async def upsert_records(self, records: list[ContactHealthRecord]) -> int:
        """Insert or replace by (user_id, contact_id). Returns the number written."""
        ...


class AlertHistory(Protocol):
    """History of "relationship cooling" alerts raised for contacts."""

    async def clear_alerts(self, user_id: str, contact_id: str) -> int:
        """Delete alerts for the contact. Clearing nothing is not an error."""
        ...


class ConnectionStore(Protocol):
    async def fetch_edges(self, node_ids: list[str]) -> list[ConnectionEdge]:
        """Return edges with either endpoint in node_ids."""
        ...

    async def get_edge(self, node_a: str, node_b: str) -> ConnectionEdge | None:
        """Return the edge between two nodes in either direction, or None."""
        ...


class ContactDirectory(Protocol):
    async def list_contacts(self, user_id: str) -> list[Contact]:
        ...


class PeopleSearch(Protocol):
    """Discovers possible intermediaries for people outside the user's network."""

    async def find_candidates(self, target: TargetPerson) -> list[Contact]:
        ...
