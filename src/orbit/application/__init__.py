"""Application layer: use cases, ports, errors and DTOs. Depends only on domain."""

from orbit.application.connection_service import ConnectionService
from orbit.application.dto import (
    ContactHealth,
    HealthScores,
    HealthStats,
    HealthUpdated,
    InteractionLogged,
    Invalid,
    PathFound,
    RefreshCompleted,
    StoreFailed,
    TargetNotFound,
)
from orbit.application.errors import StoreError, StoreErrorKind
from orbit.application.health_service import HealthService
from orbit.application.ports import (
    AlertHistory,
    ConnectionStore,
    ContactDirectory,
    HealthRecordStore,
    PeopleSearch,
)

__all__ = [
    "AlertHistory",
    "ConnectionService",
    "ConnectionStore",
    "ContactDirectory",
    "ContactHealth",
    "HealthRecordStore",
    "HealthScores",
    "HealthService",
    "HealthStats",
    "HealthUpdated",
    "InteractionLogged",
    "Invalid",
    "PathFound",
    "PeopleSearch",
    "RefreshCompleted",
    "StoreError",
    "StoreErrorKind",
    "StoreFailed",
    "TargetNotFound",
]
