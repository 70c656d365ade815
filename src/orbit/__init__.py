"""
Orbit core: clean-architecture layout.

- domain: entities, health scoring and connection graph search. No outer dependencies.
- application: use cases (HealthService, ConnectionService), ports (stores), DTOs.
- infrastructure: adapters (in-memory stores, Neo4j stores).
"""

from orbit.application import (
    ConnectionService,
    HealthService,
    Invalid,
    PathFound,
    RefreshCompleted,
    StoreError,
    StoreErrorKind,
    StoreFailed,
    TargetNotFound,
)
from orbit.domain import (
    CircleMembership,
    ConnectionEdge,
    Contact,
    ContactHealthRecord,
    HealthStatus,
    TargetPerson,
)
from orbit.infrastructure import (
    InMemoryHealthStore,
    InMemoryNetwork,
    Neo4jHealthStore,
    Neo4jNetworkStore,
)

__all__ = [
    "CircleMembership",
    "ConnectionEdge",
    "ConnectionService",
    "Contact",
    "ContactHealthRecord",
    "HealthService",
    "HealthStatus",
    "InMemoryHealthStore",
    "InMemoryNetwork",
    "Invalid",
    "Neo4jHealthStore",
    "Neo4jNetworkStore",
    "PathFound",
    "RefreshCompleted",
    "StoreError",
    "StoreErrorKind",
    "StoreFailed",
    "TargetNotFound",
    "TargetPerson",
]
