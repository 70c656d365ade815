"""Unit tests for health scoring. Pure functions only, no store."""

from datetime import datetime, timedelta, timezone

import pytest

from orbit.domain import CircleMembership, ContactHealthRecord, HealthStatus
from orbit.domain.health import (
    NEVER_CONTACTED_DAYS,
    TIER_TARGET_DAYS,
    approximate_days_for_score,
    calculate_health_score,
    clamp_score,
    days_since,
    health_color,
    refresh_health_scores,
    resolve_contact_tiers,
    status_from_score,
    summarize_health,
    tier_target_days,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _record(contact_id: str, score: int, **kwargs) -> ContactHealthRecord:
    return ContactHealthRecord(
        user_id="u1",
        contact_id=contact_id,
        health_score=score,
        days_since_contact=kwargs.pop("days", 0),
        last_calculated_at=NOW,
        **kwargs,
    )


@pytest.mark.parametrize("target", sorted(TIER_TARGET_DAYS.values()))
def test_zero_days_scores_full(target) -> None:
    assert calculate_health_score(0, target) == 100


@pytest.mark.parametrize("target", sorted(TIER_TARGET_DAYS.values()))
def test_score_reaches_zero_at_twice_target(target) -> None:
    assert calculate_health_score(2 * target, target) == 0
    assert calculate_health_score(2 * target + 5, target) == 0
    assert calculate_health_score(2 * target - 1, target) > 0


@pytest.mark.parametrize("target", sorted(TIER_TARGET_DAYS.values()))
def test_score_strictly_decreases_until_floor(target) -> None:
    scores = [calculate_health_score(d, target) for d in range(0, 2 * target + 1)]
    assert all(a > b for a, b in zip(scores, scores[1:]))


def test_linear_decay_values() -> None:
    assert calculate_health_score(30, 30) == 50
    assert calculate_health_score(60, 30) == 0
    assert calculate_health_score(100, 30) == 0
    assert calculate_health_score(7, 7) == 50
    assert calculate_health_score(3, 30) == 95
    assert calculate_health_score(15, 30) == 75


def test_default_target_is_monthly() -> None:
    assert calculate_health_score(30) == 50


def test_negative_days_score_full() -> None:
    assert calculate_health_score(-3, 7) == 100


def test_non_positive_target_rejected() -> None:
    with pytest.raises(ValueError):
        calculate_health_score(5, 0)


def test_score_always_integer_in_range() -> None:
    for target in range(1, 101, 7):
        for days in range(0, 250, 3):
            score = calculate_health_score(days, target)
            assert isinstance(score, int)
            assert 0 <= score <= 100


@pytest.mark.parametrize(
    "score,expected",
    [
        (100, HealthStatus.HEALTHY),
        (80, HealthStatus.HEALTHY),
        (79, HealthStatus.COOLING),
        (60, HealthStatus.COOLING),
        (59, HealthStatus.AT_RISK),
        (40, HealthStatus.AT_RISK),
        (39, HealthStatus.COLD),
        (0, HealthStatus.COLD),
    ],
)
def test_status_boundaries(score, expected) -> None:
    assert status_from_score(score) is expected


def test_status_compares_as_string() -> None:
    assert status_from_score(50) == "at_risk"


@pytest.mark.parametrize("tier", sorted(TIER_TARGET_DAYS))
def test_just_contacted_is_healthy_for_every_tier(tier) -> None:
    score = calculate_health_score(0, tier_target_days(tier))
    assert status_from_score(score) is HealthStatus.HEALTHY


def test_tier_target_days() -> None:
    assert [tier_target_days(t) for t in (1, 2, 3, 4, 5)] == [7, 14, 21, 30, 45]
    assert tier_target_days(99) == 30
    assert tier_target_days(0) == 30
    assert tier_target_days(None) == 30


def test_health_colors() -> None:
    assert health_color(HealthStatus.HEALTHY) == "#4FFFB0"
    assert health_color("cooling") == "#FFD93D"
    assert health_color(HealthStatus.AT_RISK) == "#FF8C42"
    assert health_color("cold") == "#FF6B6B"
    assert health_color("unknown") == "#999999"
    assert health_color(None) == "#999999"


def test_days_since_floors_whole_days() -> None:
    assert days_since(NOW - timedelta(days=3, hours=23), NOW) == 3
    assert days_since(NOW, NOW) == 0


def test_days_since_missing_is_very_stale() -> None:
    assert days_since(None, NOW) == NEVER_CONTACTED_DAYS == 999
    assert days_since("", NOW) == 999


def test_days_since_accepts_iso_strings_and_naive_datetimes() -> None:
    assert days_since("2026-02-20T12:00:00Z", NOW) == 9
    assert days_since(datetime(2026, 2, 27, 12, 0), NOW) == 2


def test_future_timestamp_counts_as_just_contacted() -> None:
    days = days_since(NOW + timedelta(hours=1), NOW)
    assert days == -1
    assert calculate_health_score(days, 7) == 100


def test_clamp_score() -> None:
    assert clamp_score(150) == 100
    assert clamp_score(-5) == 0
    assert clamp_score(79.5) == 80
    assert clamp_score(79.4) == 79
    assert clamp_score(float("inf")) == 100


@pytest.mark.parametrize("bad", [None, "80", True, float("nan")])
def test_clamp_score_rejects_malformed(bad) -> None:
    with pytest.raises(ValueError):
        clamp_score(bad)


def test_override_days_use_fixed_sixty_day_curve() -> None:
    # Tier is not consulted: a tier-1 contact at 50 still maps to 30 days.
    assert approximate_days_for_score(100) == 0
    assert approximate_days_for_score(50) == 30
    assert approximate_days_for_score(0) == 60
    assert approximate_days_for_score(80) == 12
    assert approximate_days_for_score(79) == 13


def test_lowest_tier_wins() -> None:
    tiers = resolve_contact_tiers(
        [
            CircleMembership("a", 3),
            CircleMembership("b", 4),
            CircleMembership("a", 1),
            CircleMembership("a", 2),
            CircleMembership("c", None),
        ]
    )
    assert tiers == {"a": 1, "b": 4, "c": 5}
    assert list(tiers) == ["a", "b", "c"]


def test_memberships_without_contact_id_are_skipped() -> None:
    memberships = [CircleMembership("", 1), CircleMembership("  ", 2), CircleMembership("a", 3)]
    assert resolve_contact_tiers(memberships) == {"a": 3}
    records = refresh_health_scores("u1", memberships, [], now=NOW)
    assert [r.contact_id for r in records] == ["a"]


def test_refresh_first_seen_contact_starts_healthy() -> None:
    records = refresh_health_scores("u1", [CircleMembership("a", 1)], [], now=NOW)
    assert len(records) == 1
    record = records[0]
    assert record.health_score == 100
    assert record.status is HealthStatus.HEALTHY
    assert record.days_since_contact == 0
    assert record.last_contact_at == NOW
    assert record.last_calculated_at == NOW
    assert record.tier == 1


def test_refresh_decays_from_stored_last_contact() -> None:
    existing = [
        _record("a", 100, last_contact_at=NOW - timedelta(days=10)),
        _record("b", 100, last_contact_at=NOW - timedelta(days=15)),
    ]
    memberships = [
        CircleMembership("a", 2),
        CircleMembership("a", 1),
        CircleMembership("b", 4),
    ]
    records = {r.contact_id: r for r in refresh_health_scores("u1", memberships, existing, now=NOW)}

    assert set(records) == {"a", "b"}
    # Tier 1 (7 days): 100 - 10 * 100/14 = 28.57
    assert records["a"].health_score == 29
    assert records["a"].status is HealthStatus.COLD
    assert records["a"].days_since_contact == 10
    # Tier 4 (30 days): 100 - 15 * 100/60 = 75
    assert records["b"].health_score == 75
    assert records["b"].status is HealthStatus.COOLING


def test_refresh_requires_user_id() -> None:
    with pytest.raises(ValueError):
        refresh_health_scores("", [CircleMembership("a", 1)], [], now=NOW)


def test_record_status_follows_score() -> None:
    assert _record("a", 80).status is HealthStatus.HEALTHY
    assert _record("a", 45).status is HealthStatus.AT_RISK


@pytest.mark.parametrize("score", [-1, 101])
def test_record_rejects_out_of_range_score(score) -> None:
    with pytest.raises(ValueError):
        _record("a", score)


def test_record_rejects_missing_contact_id() -> None:
    with pytest.raises(ValueError):
        _record("", 50)


def test_summarize_health() -> None:
    summary = summarize_health(
        [_record("a", 90), _record("b", 70), _record("c", 20), _record("d", 85)]
    )
    assert summary.total == 4
    assert summary.counts == {"healthy": 2, "cooling": 1, "at_risk": 0, "cold": 1}
    assert summary.needs_attention == 2
    assert summary.average_health == 66


def test_summarize_empty() -> None:
    summary = summarize_health([])
    assert summary.total == 0
    assert summary.average_health is None
    assert summary.counts["healthy"] == 0
