"""
Relationship health scoring.

A contact's health score decays linearly from 100 (just contacted) to 0 at
twice the target cadence of the contact's tier. Status buckets are derived
from the score and nowhere else.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import MappingProxyType

from orbit.domain.entities import (
    MAX_SCORE,
    MIN_SCORE,
    CircleMembership,
    ContactHealthRecord,
    HealthStatus,
    round_half_up,
    utcnow,
)

# Expected days between contacts, per tier (1 = inner circle).
TIER_TARGET_DAYS: Mapping[int, int] = MappingProxyType(
    {
        1: 7,
        2: 14,
        3: 21,
        4: 30,
        5: 45,
    }
)
DEFAULT_TARGET_DAYS = 30
DEFAULT_TIER = 5

# Sentinel for "never contacted": sorts as maximally stale.
NEVER_CONTACTED_DAYS = 999

HEALTHY_THRESHOLD = 80
COOLING_THRESHOLD = 60
AT_RISK_THRESHOLD = 40

# Manual overrides are inverted on a fixed 60-day curve, whatever the tier.
OVERRIDE_REFERENCE_DAYS = 60

STATUS_COLORS: Mapping[str, str] = MappingProxyType(
    {
        HealthStatus.HEALTHY.value: "#4FFFB0",
        HealthStatus.COOLING.value: "#FFD93D",
        HealthStatus.AT_RISK.value: "#FF8C42",
        HealthStatus.COLD.value: "#FF6B6B",
    }
)
UNKNOWN_STATUS_COLOR = "#999999"

_ONE_DAY = timedelta(days=1)


def _as_aware(value: datetime | str) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_since(timestamp: datetime | str | None, now: datetime | None = None) -> int:
    """Whole days elapsed since timestamp (floored). None means never contacted (999)."""
    if timestamp is None or timestamp == "":
        return NEVER_CONTACTED_DAYS
    now = _as_aware(now) if now is not None else utcnow()
    return (now - _as_aware(timestamp)) // _ONE_DAY


def tier_target_days(tier: int | None) -> int:
    """Target days between contacts for a tier; unknown tiers get the monthly default."""
    if isinstance(tier, bool):
        return DEFAULT_TARGET_DAYS
    return TIER_TARGET_DAYS.get(tier, DEFAULT_TARGET_DAYS)


def calculate_health_score(
    days_since_contact: int, target_days: int = DEFAULT_TARGET_DAYS
) -> int:
    """
    Linear decay: 100 at day 0, 0 at twice target_days.
    Non-positive elapsed days (including future timestamps) score 100.
    """
    if target_days is None:
        target_days = DEFAULT_TARGET_DAYS
    if target_days <= 0:
        raise ValueError("target_days must be positive.")
    if days_since_contact <= 0:
        return MAX_SCORE
    decay_rate = MAX_SCORE / (target_days * 2)
    score = round_half_up(MAX_SCORE - days_since_contact * decay_rate)
    return max(MIN_SCORE, min(MAX_SCORE, score))


def status_from_score(score: int) -> HealthStatus:
    if score >= HEALTHY_THRESHOLD:
        return HealthStatus.HEALTHY
    if score >= COOLING_THRESHOLD:
        return HealthStatus.COOLING
    if score >= AT_RISK_THRESHOLD:
        return HealthStatus.AT_RISK
    return HealthStatus.COLD


def health_color(status: HealthStatus | str | None) -> str:
    """Hex color for a status; gray for anything unrecognised."""
    if isinstance(status, HealthStatus):
        status = status.value
    return STATUS_COLORS.get(status, UNKNOWN_STATUS_COLOR)


def clamp_score(value: float) -> int:
    """Round half up and clamp to [0, 100]. Raises ValueError for non-numeric input."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"Score must be a number, got {value!r}.")
    if math.isnan(value):
        raise ValueError("Score must not be NaN.")
    if math.isinf(value):
        return MAX_SCORE if value > 0 else MIN_SCORE
    return max(MIN_SCORE, min(MAX_SCORE, round_half_up(value)))


def approximate_days_for_score(score: int) -> int:
    """
    Invert the decay for a manually set score. Uses the fixed 60-day
    reference curve, not the contact's tier target.
    """
    if score >= MAX_SCORE:
        return 0
    return round_half_up((MAX_SCORE - score) / (MAX_SCORE / OVERRIDE_REFERENCE_DAYS))


def resolve_contact_tiers(memberships: Iterable[CircleMembership]) -> dict[str, int]:
    """
    Map each contact to its closest tier (lowest number) across all its circles.
    Memberships without a contact id are skipped.
    """
    tiers: dict[str, int] = {}
    for membership in memberships:
        if not (membership.contact_id or "").strip():
            continue
        tier = membership.tier if membership.tier else DEFAULT_TIER
        current = tiers.get(membership.contact_id)
        if current is None or tier < current:
            tiers[membership.contact_id] = tier
    return tiers


def refresh_health_scores(
    user_id: str,
    memberships: Iterable[CircleMembership],
    existing: Iterable[ContactHealthRecord],
    now: datetime | None = None,
) -> list[ContactHealthRecord]:
    """
    Recompute one record per circle member from the stored baseline.
    Contacts without a stored last contact start from now, so they are healthy.
    """
    if not user_id:
        raise ValueError("user_id is required.")
    now = now or utcnow()
    existing_by_contact = {record.contact_id: record for record in existing}

    records = []
    for contact_id, tier in resolve_contact_tiers(memberships).items():
        previous = existing_by_contact.get(contact_id)
        last_contact_at = previous.last_contact_at if previous else None
        if last_contact_at is None:
            last_contact_at = now
        days = max(0, days_since(last_contact_at, now))
        records.append(
            ContactHealthRecord(
                user_id=user_id,
                contact_id=contact_id,
                tier=tier,
                health_score=calculate_health_score(days, tier_target_days(tier)),
                days_since_contact=days,
                last_contact_at=last_contact_at,
                last_calculated_at=now,
            )
        )
    return records


def logged_interaction_record(
    user_id: str,
    contact_id: str,
    now: datetime | None = None,
    tier: int | None = None,
) -> ContactHealthRecord:
    now = now or utcnow()
    return ContactHealthRecord(
        user_id=user_id,
        contact_id=contact_id,
        tier=tier,
        health_score=MAX_SCORE,
        days_since_contact=0,
        last_contact_at=now,
        last_calculated_at=now,
    )


@dataclass(frozen=True)
class HealthSummary:
    """Counts per status across a user's records."""

    total: int = 0
    counts: Mapping[str, int] = field(default_factory=dict)
    needs_attention: int = 0
    average_health: int | None = None


def summarize_health(records: Iterable[ContactHealthRecord]) -> HealthSummary:
    counts = {status.value: 0 for status in HealthStatus}
    total = 0
    score_sum = 0
    for record in records:
        total += 1
        score_sum += record.health_score
        counts[record.status.value] += 1
    if total == 0:
        return HealthSummary(counts=counts)
    return HealthSummary(
        total=total,
        counts=counts,
        needs_attention=total - counts[HealthStatus.HEALTHY.value],
        average_health=round_half_up(score_sum / total),
    )
