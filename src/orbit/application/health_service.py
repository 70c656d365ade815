"""Relationship health: batch recompute, interaction logging, manual override, reads."""

import logging
from collections.abc import Callable
from datetime import datetime

from orbit.application.dto import (
    ContactHealth,
    HealthScores,
    HealthStats,
    HealthUpdated,
    InteractionLogged,
    Invalid,
    RefreshCompleted,
    StoreFailed,
)
from orbit.application.errors import StoreError
from orbit.application.ports import AlertHistory, HealthRecordStore
from orbit.domain import ContactHealthRecord
from orbit.domain.entities import utcnow
from orbit.domain.health import (
    HEALTHY_THRESHOLD,
    approximate_days_for_score,
    clamp_score,
    logged_interaction_record,
    refresh_health_scores,
    resolve_contact_tiers,
    summarize_health,
)

logger = logging.getLogger(__name__)

MISSING_USER_ID = "Missing user_id."
MISSING_IDS = "Missing user_id or contact_id."


def _clean(value: str | None) -> str:
    return (value or "").strip()


class HealthService:
    """
    Scores relationships against the record store. Holds no state between
    calls, so concurrent refreshes for the same user only race on idempotent upserts.
    """

    def __init__(
        self,
        store: HealthRecordStore,
        *,
        alerts: AlertHistory | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._alerts = alerts
        self._clock = clock or utcnow

    async def refresh_health_scores(
        self, user_id: str
    ) -> RefreshCompleted | Invalid | StoreFailed:
        """Recompute and store scores for every contact in the user's circles."""
        user_id = _clean(user_id)
        if not user_id:
            return Invalid(reason=MISSING_USER_ID)

        logger.info("Refreshing health scores for user %s", user_id)
        try:
            memberships = await self._store.fetch_memberships(user_id)
            if not memberships:
                logger.info("No contacts in circles to score for user %s", user_id)
                return RefreshCompleted(updated=0)
            contact_ids = list(resolve_contact_tiers(memberships))
            existing = await self._store.fetch_records(user_id, contact_ids)
            records = refresh_health_scores(
                user_id, memberships, existing, now=self._clock()
            )
            updated = await self._store.upsert_records(records)
        except StoreError as exc:
            if exc.schema_not_ready:
                _warn_schema_not_ready(exc)
                return RefreshCompleted(updated=0, schema_ready=False)
            return _store_failed("refresh health scores", exc)

        logger.info("Updated %d health scores for user %s", updated, user_id)
        return RefreshCompleted(updated=updated, records=tuple(records))

    async def log_interaction(
        self, user_id: str, contact_id: str
    ) -> InteractionLogged | Invalid | StoreFailed:
        """Reset the contact to full health and retract its cooling alerts."""
        user_id, contact_id = _clean(user_id), _clean(contact_id)
        if not user_id or not contact_id:
            return Invalid(reason=MISSING_IDS)

        logger.info("Logging interaction for contact %s", contact_id)
        try:
            previous = await self._store.get_record(user_id, contact_id)
            record = logged_interaction_record(
                user_id,
                contact_id,
                now=self._clock(),
                tier=previous.tier if previous else None,
            )
            await self._store.upsert_records([record])
        except StoreError as exc:
            if exc.schema_not_ready:
                _warn_schema_not_ready(exc)
                return InteractionLogged(record=None)
            return _store_failed("log interaction", exc)

        await self._clear_alerts(user_id, contact_id)
        return InteractionLogged(record=record)

    async def update_health_score(
        self, user_id: str, contact_id: str, new_score: float
    ) -> HealthUpdated | Invalid | StoreFailed:
        """
        Manually set a contact's score. days_since_contact is back-computed on
        the fixed 60-day curve, not the contact's tier. Alert history is
        cleared only when the new score is healthy.
        """
        user_id, contact_id = _clean(user_id), _clean(contact_id)
        if not user_id or not contact_id:
            return Invalid(reason=MISSING_IDS)
        try:
            score = clamp_score(new_score)
        except ValueError as exc:
            return Invalid(reason=str(exc))

        logger.info("Manually updating health score of %s to %d", contact_id, score)
        now = self._clock()
        try:
            previous = await self._store.get_record(user_id, contact_id)
            last_contact_at = previous.last_contact_at if previous else None
            if score == 100:
                last_contact_at = now
            record = ContactHealthRecord(
                user_id=user_id,
                contact_id=contact_id,
                tier=previous.tier if previous else None,
                health_score=score,
                days_since_contact=approximate_days_for_score(score),
                last_contact_at=last_contact_at,
                last_calculated_at=now,
            )
            await self._store.upsert_records([record])
        except StoreError as exc:
            if exc.schema_not_ready:
                _warn_schema_not_ready(exc)
                return HealthUpdated(record=None)
            return _store_failed("update health score", exc)

        # Below the healthy threshold the history stays, so alerts are not repeated.
        if score >= HEALTHY_THRESHOLD:
            await self._clear_alerts(user_id, contact_id)
        return HealthUpdated(record=record)

    async def get_health_scores(self, user_id: str) -> HealthScores | Invalid | StoreFailed:
        user_id = _clean(user_id)
        if not user_id:
            return Invalid(reason=MISSING_USER_ID)
        try:
            records = await self._store.list_records(user_id)
        except StoreError as exc:
            if exc.schema_not_ready:
                _warn_schema_not_ready(exc)
                return HealthScores()
            return _store_failed("get health scores", exc)
        logger.debug("Fetched %d health scores", len(records))
        return HealthScores(records=tuple(records))

    async def get_contact_health(
        self, user_id: str, contact_id: str
    ) -> ContactHealth | Invalid | StoreFailed:
        user_id, contact_id = _clean(user_id), _clean(contact_id)
        if not user_id or not contact_id:
            return Invalid(reason=MISSING_IDS)
        try:
            record = await self._store.get_record(user_id, contact_id)
        except StoreError as exc:
            if exc.schema_not_ready:
                _warn_schema_not_ready(exc)
                return ContactHealth(record=None)
            return _store_failed("get contact health", exc)
        return ContactHealth(record=record)

    async def get_health_stats(self, user_id: str) -> HealthStats | Invalid | StoreFailed:
        """Counts per status, contacts needing attention and average score."""
        result = await self.get_health_scores(user_id)
        if not isinstance(result, HealthScores):
            return result
        return HealthStats(summary=summarize_health(result.records))

    async def _clear_alerts(self, user_id: str, contact_id: str) -> None:
        if self._alerts is None:
            return
        try:
            cleared = await self._alerts.clear_alerts(user_id, contact_id)
        except Exception:
            logger.warning(
                "Failed to clear alert history for contact %s", contact_id, exc_info=True
            )
            return
        if cleared:
            logger.info("Cleared %d alerts for contact %s", cleared, contact_id)


def _warn_schema_not_ready(exc: StoreError) -> None:
    logger.warning("Health schema not ready, run the migrations first: %s", exc.message)


def _store_failed(action: str, exc: StoreError) -> StoreFailed:
    logger.error("Failed to %s: %s", action, exc.message)
    return StoreFailed(message=exc.message)
