"""Domain layer: entities, health scoring and graph search. No dependencies on outer layers."""

from orbit.domain.entities import (
    CircleMembership,
    ConnectionEdge,
    Contact,
    ContactHealthRecord,
    HealthStatus,
    NetworkStats,
    TargetPerson,
)
from orbit.domain.graph import Graph, PathFound, TargetNotFound
from orbit.domain.health import HealthSummary

__all__ = [
    "CircleMembership",
    "ConnectionEdge",
    "Contact",
    "ContactHealthRecord",
    "Graph",
    "HealthStatus",
    "HealthSummary",
    "NetworkStats",
    "PathFound",
    "TargetNotFound",
    "TargetPerson",
]
