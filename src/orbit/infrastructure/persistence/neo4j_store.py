"""Neo4j implementations of the store ports (async driver).

Graph shape, scoped by the owner Person (registered: true):
(owner)-[:OWNS]->(c:Circle {id, tier})-[:HAS_MEMBER]->(contact:Person)
(owner)-[:KNOWS {health_score, status, days_since_contact, last_contact_at, ...}]->(contact)
(owner)-[:ALERTED {created_at}]->(contact)
(a:Person)-[:CONNECTED {connection_type, strength}]->(b:Person), read as undirected.
"""

from datetime import datetime

from neo4j.exceptions import DriverError, Neo4jError

from orbit.application.errors import StoreError, StoreErrorKind
from orbit.domain import CircleMembership, ConnectionEdge, Contact, ContactHealthRecord
from orbit.domain.entities import utcnow

# Status codes meaning the database or schema has not been deployed yet.
_SCHEMA_NOT_READY_CODES = frozenset(
    {
        "Neo.ClientError.Database.DatabaseNotFound",
        "Neo.ClientError.Schema.ConstraintNotFound",
        "Neo.ClientError.Schema.IndexNotFound",
    }
)

_CONSTRAINT_QUERY = """
CREATE CONSTRAINT circle_id_unique IF NOT EXISTS
FOR (c:Circle) REQUIRE c.id IS UNIQUE
"""

_MEMBERSHIPS_QUERY = """
MATCH (owner:Person {id: $user_id, registered: true})-[:OWNS]->(c:Circle)
      -[:HAS_MEMBER]->(p:Person)
RETURN p.id AS contact_id, c.tier AS tier
"""

_RECORD_COLUMNS = """
RETURN p.id AS contact_id,
       k.tier AS tier,
       k.health_score AS health_score,
       k.days_since_contact AS days_since_contact,
       k.last_contact_at AS last_contact_at,
       k.last_calculated_at AS last_calculated_at
"""

_FETCH_RECORDS_QUERY = (
    """
MATCH (owner:Person {id: $user_id, registered: true})-[k:KNOWS]->(p:Person)
WHERE p.id IN $contact_ids AND k.health_score IS NOT NULL
"""
    + _RECORD_COLUMNS
)

_LIST_RECORDS_QUERY = (
    """
MATCH (owner:Person {id: $user_id, registered: true})-[k:KNOWS]->(p:Person)
WHERE k.health_score IS NOT NULL
"""
    + _RECORD_COLUMNS
    + "ORDER BY k.health_score ASC"
)

_GET_RECORD_QUERY = (
    """
MATCH (owner:Person {id: $user_id, registered: true})-[k:KNOWS]->(p:Person {id: $contact_id})
WHERE k.health_score IS NOT NULL
"""
    + _RECORD_COLUMNS
)

_UPSERT_RECORDS_QUERY = """
UNWIND $rows AS row
MERGE (owner:Person {id: row.user_id, registered: true})
MERGE (p:Person {id: row.contact_id})
ON CREATE SET p.registered = false, p.created_at = row.updated_at
MERGE (owner)-[k:KNOWS]->(p)
SET k.tier = row.tier,
    k.health_score = row.health_score,
    k.status = row.status,
    k.days_since_contact = row.days_since_contact,
    k.last_contact_at = row.last_contact_at,
    k.last_calculated_at = row.last_calculated_at,
    k.updated_at = row.updated_at
RETURN count(k) AS written
"""

_CLEAR_ALERTS_QUERY = """
MATCH (owner:Person {id: $user_id, registered: true})-[a:ALERTED]->(p:Person {id: $contact_id})
DELETE a
RETURN count(a) AS cleared
"""

_FETCH_EDGES_QUERY = """
MATCH (a:Person)-[c:CONNECTED]->(b:Person)
WHERE a.id IN $node_ids OR b.id IN $node_ids
RETURN a.id AS source_id, b.id AS target_id,
       c.connection_type AS connection_type, c.strength AS strength
"""

_GET_EDGE_QUERY = """
MATCH (a:Person {id: $node_a})-[c:CONNECTED]-(b:Person {id: $node_b})
RETURN startNode(c).id AS source_id, endNode(c).id AS target_id,
       c.connection_type AS connection_type, c.strength AS strength
LIMIT 1
"""

_LIST_CONTACTS_QUERY = """
MATCH (owner:Person {id: $user_id, registered: true})-[k:KNOWS]->(p:Person)
RETURN p.id AS id, k.contact_name AS contact_name, p.name AS name
ORDER BY p.created_at
"""


def _datetime_to_iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


def _iso_to_datetime(s: str | None) -> datetime | None:
    if not s:
        return None
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def classify_neo4j_error(exc: Exception) -> StoreError:
    """
    Map a driver error to a StoreError. Status codes decide; the message is
    only inspected for errors that carry no code at all.
    """
    code = getattr(exc, "code", None) or ""
    message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
    if code in _SCHEMA_NOT_READY_CODES:
        return StoreError(message, StoreErrorKind.SCHEMA_NOT_READY)
    if not code and "does not exist" in message.lower():
        return StoreError(message, StoreErrorKind.SCHEMA_NOT_READY)
    return StoreError(message, StoreErrorKind.FAILURE)


async def _run(driver, database: str | None, query: str, **params) -> list:
    try:
        async with driver.session(database=database) as session:
            result = await session.run(query, **params)
            return [record async for record in result]
    except (Neo4jError, DriverError) as exc:
        raise classify_neo4j_error(exc) from exc


async def ensure_health_constraints(driver, database: str | None = None) -> None:
    """Create unique constraint on Circle(id) if missing."""
    await _run(driver, database, _CONSTRAINT_QUERY)


def _record_to_health(user_id: str, record) -> ContactHealthRecord:
    return ContactHealthRecord(
        user_id=user_id,
        contact_id=record["contact_id"],
        tier=record["tier"],
        health_score=int(record["health_score"]),
        days_since_contact=int(record["days_since_contact"] or 0),
        last_contact_at=_iso_to_datetime(record["last_contact_at"]),
        last_calculated_at=_iso_to_datetime(record["last_calculated_at"]),
    )


def _health_to_row(record: ContactHealthRecord, updated_at: str) -> dict:
    return {
        "user_id": record.user_id,
        "contact_id": record.contact_id,
        "tier": record.tier,
        "health_score": record.health_score,
        "status": record.status.value,
        "days_since_contact": record.days_since_contact,
        "last_contact_at": _datetime_to_iso(record.last_contact_at),
        "last_calculated_at": _datetime_to_iso(record.last_calculated_at),
        "updated_at": updated_at,
    }


def _record_to_edge(record) -> ConnectionEdge:
    strength = record["strength"]
    return ConnectionEdge(
        source_id=record["source_id"],
        target_id=record["target_id"],
        connection_type=record["connection_type"],
        strength=int(strength) if strength is not None else None,
    )


class Neo4jHealthStore:
    """Health records on KNOWS relationships, circles as Circle nodes, alerts as ALERTED."""

    def __init__(self, driver: object, database: str | None = None) -> None:
        self._driver = driver
        self._database = database

    async def fetch_memberships(self, user_id: str) -> list[CircleMembership]:
        rows = await _run(self._driver, self._database, _MEMBERSHIPS_QUERY, user_id=user_id)
        return [CircleMembership(contact_id=r["contact_id"], tier=r["tier"]) for r in rows]

    async def fetch_records(
        self, user_id: str, contact_ids: list[str]
    ) -> list[ContactHealthRecord]:
        if not contact_ids:
            return []
        rows = await _run(
            self._driver,
            self._database,
            _FETCH_RECORDS_QUERY,
            user_id=user_id,
            contact_ids=list(contact_ids),
        )
        return [_record_to_health(user_id, r) for r in rows]

    async def list_records(self, user_id: str) -> list[ContactHealthRecord]:
        rows = await _run(self._driver, self._database, _LIST_RECORDS_QUERY, user_id=user_id)
        return [_record_to_health(user_id, r) for r in rows]

    async def get_record(
        self, user_id: str, contact_id: str
    ) -> ContactHealthRecord | None:
        rows = await _run(
            self._driver,
            self._database,
            _GET_RECORD_QUERY,
            user_id=user_id,
            contact_id=contact_id,
        )
        if not rows:
            return None
        return _record_to_health(user_id, rows[0])

    async def upsert_records(self, records: list[ContactHealthRecord]) -> int:
        if not records:
            return 0
        updated_at = _datetime_to_iso(utcnow())
        rows = await _run(
            self._driver,
            self._database,
            _UPSERT_RECORDS_QUERY,
            rows=[_health_to_row(r, updated_at) for r in records],
        )
        return rows[0]["written"] if rows else 0

    async def clear_alerts(self, user_id: str, contact_id: str) -> int:
        rows = await _run(
            self._driver,
            self._database,
            _CLEAR_ALERTS_QUERY,
            user_id=user_id,
            contact_id=contact_id,
        )
        return rows[0]["cleared"] if rows else 0


class Neo4jNetworkStore:
    """CONNECTED edges between Person nodes and the owner's KNOWS contact list."""

    def __init__(self, driver: object, database: str | None = None) -> None:
        self._driver = driver
        self._database = database

    async def fetch_edges(self, node_ids: list[str]) -> list[ConnectionEdge]:
        if not node_ids:
            return []
        rows = await _run(
            self._driver, self._database, _FETCH_EDGES_QUERY, node_ids=list(node_ids)
        )
        return [_record_to_edge(r) for r in rows]

    async def get_edge(self, node_a: str, node_b: str) -> ConnectionEdge | None:
        rows = await _run(
            self._driver, self._database, _GET_EDGE_QUERY, node_a=node_a, node_b=node_b
        )
        return _record_to_edge(rows[0]) if rows else None

    async def list_contacts(self, user_id: str) -> list[Contact]:
        rows = await _run(self._driver, self._database, _LIST_CONTACTS_QUERY, user_id=user_id)
        # Display name is the name the owner saved for the contact; fallback to node name.
        return [
            Contact(
                id=r["id"],
                name=(r["contact_name"] or "").strip() or (r["name"] or "").strip(),
            )
            for r in rows
        ]
