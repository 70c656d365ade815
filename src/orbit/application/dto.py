"""Result types for health and connection use cases."""

from dataclasses import dataclass, field

from orbit.domain import ContactHealthRecord, HealthSummary, PathFound, TargetNotFound

# --- shared failures ---


@dataclass(frozen=True)
class Invalid:
    """Missing identifier or malformed input. The operation was not attempted."""

    reason: str


@dataclass(frozen=True)
class StoreFailed:
    """The record store reported an error other than a missing schema."""

    message: str


# --- health results ---


@dataclass(frozen=True)
class RefreshCompleted:
    """Batch recompute finished. schema_ready is False when the store has no schema yet."""

    updated: int
    records: tuple[ContactHealthRecord, ...] = field(default_factory=tuple)
    schema_ready: bool = True


@dataclass(frozen=True)
class InteractionLogged:
    record: ContactHealthRecord | None


@dataclass(frozen=True)
class HealthUpdated:
    """Manual override stored. record is None when the schema is not ready."""

    record: ContactHealthRecord | None


@dataclass(frozen=True)
class HealthScores:
    records: tuple[ContactHealthRecord, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ContactHealth:
    record: ContactHealthRecord | None


@dataclass(frozen=True)
class HealthStats:
    summary: HealthSummary


__all__ = [
    "ContactHealth",
    "HealthScores",
    "HealthStats",
    "HealthUpdated",
    "InteractionLogged",
    "Invalid",
    "PathFound",
    "RefreshCompleted",
    "StoreFailed",
    "TargetNotFound",
]
