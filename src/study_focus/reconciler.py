"""Turns a terminated focus cycle into a ledger session record."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from .credits import credits_earned, duration_minutes
from .errors import LedgerError, SubmissionFailure
from .ledger import LedgerClient
from .models import SessionRecord, UserProfile
from .notifier import NotificationKind, Notifier

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    subject_id: str
    duration_minutes: int
    credits_earned: int
    recorded: bool
    record: SessionRecord | None = None


class SessionReconciler:
    """Submit sessions to the ledger without ever failing the timer.

    Delivery is at-most-once: a failed submission is reported to the user
    and dropped, never retried or queued.
    """

    def __init__(self, ledger: LedgerClient, notifier: Notifier) -> None:
        self.ledger = ledger
        self.notifier = notifier
        self.cached_profile: UserProfile | None = None
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def reconcile(self, subject_id: str, elapsed_seconds: int) -> ReconcileResult | None:
        """Record `elapsed_seconds` of study on `subject_id`.

        Returns None (no I/O) for less than one whole minute. Otherwise
        returns a result whose `recorded` flag says whether the ledger
        accepted it.
        """
        minutes = duration_minutes(elapsed_seconds)
        if minutes < 1:
            logger.debug(f"Skipping reconcile of {elapsed_seconds}s for {subject_id}: under one minute")
            return None

        credits = credits_earned(minutes)
        if self._in_flight:
            logger.info(f"Reconcile started with {self._in_flight} submission(s) still pending")

        loop = asyncio.get_running_loop()
        self._in_flight += 1
        try:
            record = await loop.run_in_executor(None, self.ledger.create_study_session, subject_id, minutes)
        except SubmissionFailure as exc:
            logger.warning(f"Session of {minutes}min on {subject_id} was not recorded: {exc}")
            self.notifier.notify(NotificationKind.ERROR, "Session completed but not saved.")
            return ReconcileResult(subject_id, minutes, credits, recorded=False)
        finally:
            self._in_flight -= 1

        logger.info(f"Recorded {minutes}min on {subject_id} (estimate {credits} credits)")
        self.notifier.notify(
            NotificationKind.SUCCESS,
            f"Session saved: {minutes} minutes of study recorded. You earned {credits} credits!",
        )
        await self.refresh_profile()
        return ReconcileResult(subject_id, minutes, credits, recorded=True, record=record)

    async def refresh_profile(self) -> UserProfile | None:
        """Reload profile totals after a save. Failures only get logged."""
        loop = asyncio.get_running_loop()
        try:
            self.cached_profile = await loop.run_in_executor(None, self.ledger.fetch_profile)
        except LedgerError as exc:
            logger.warning(f"Profile refresh failed: {exc}")
            return None
        return self.cached_profile
