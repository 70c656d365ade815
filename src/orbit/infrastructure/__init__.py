"""Infrastructure layer: concrete implementations of application ports."""

from orbit.infrastructure.memory_store import InMemoryHealthStore, InMemoryNetwork
from orbit.infrastructure.persistence.neo4j_store import (
    Neo4jHealthStore,
    Neo4jNetworkStore,
    classify_neo4j_error,
    ensure_health_constraints,
)

__all__ = [
    "InMemoryHealthStore",
    "InMemoryNetwork",
    "Neo4jHealthStore",
    "Neo4jNetworkStore",
    "classify_neo4j_error",
    "ensure_health_constraints",
]
