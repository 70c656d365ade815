"""Domain entities: health records, circle memberships, connection edges, contacts."""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

MIN_SCORE = 0
MAX_SCORE = 100


class HealthStatus(str, Enum):
    """Coarse freshness bucket derived from a health score."""

    HEALTHY = "healthy"
    COOLING = "cooling"
    AT_RISK = "at_risk"
    COLD = "cold"


@dataclass(frozen=True)
class ContactHealthRecord:
    """
    Freshness of the relationship between a user and one contact.
    Status is not stored: it is always derived from health_score.
    """

    user_id: str
    contact_id: str
    health_score: int
    days_since_contact: int
    last_calculated_at: datetime
    last_contact_at: datetime | None = None
    tier: int | None = None

    def __post_init__(self):
        if not self.user_id or not str(self.user_id).strip():
            raise ValueError("ContactHealthRecord user_id must be non-empty.")
        if not self.contact_id or not str(self.contact_id).strip():
            raise ValueError("ContactHealthRecord contact_id must be non-empty.")
        if isinstance(self.health_score, bool) or not isinstance(self.health_score, int):
            raise ValueError("ContactHealthRecord health_score must be an integer.")
        if not MIN_SCORE <= self.health_score <= MAX_SCORE:
            raise ValueError(
                f"ContactHealthRecord health_score must be in [{MIN_SCORE}, {MAX_SCORE}]."
            )
        if self.days_since_contact < 0:
            raise ValueError("ContactHealthRecord days_since_contact must be >= 0.")

    @property
    def status(self) -> HealthStatus:
        # Imported lazily: health depends on this module.
        from orbit.domain.health import status_from_score

        return status_from_score(self.health_score)


@dataclass(frozen=True)
class CircleMembership:
    """A contact placed in one of the user's circles. tier None means the circle has no tier."""

    contact_id: str
    tier: int | None = None


@dataclass(frozen=True)
class ConnectionEdge:
    """Undirected link between two people. Metadata is not used by traversal."""

    source_id: str
    target_id: str
    connection_type: str | None = None
    strength: int | None = None


@dataclass(frozen=True)
class Contact:
    """An entry of the user's own contact list."""

    id: str
    name: str


@dataclass(frozen=True)
class TargetPerson:
    """
    Description of someone the user wants an introduction to.
    Only name is used for matching; the rest is passed to people search.
    """

    name: str
    company: str | None = None
    title: str | None = None
    linkedin_url: str | None = None


@dataclass(frozen=True)
class NetworkStats:
    """Aggregate statistics of an undirected graph."""

    node_count: int
    edge_count: int
    max_degree: int
    avg_degree: float
    density: float


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (Python's round() rounds ties to even)."""
    return int(math.floor(value + 0.5))
