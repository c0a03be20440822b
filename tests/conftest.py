"""Shared fakes for the ledger and notifier."""

import pytest

from study_focus.errors import LedgerError, PhraseUnavailable, SubmissionFailure
from study_focus.models import SessionRecord, UserProfile
from study_focus.notifier import NotificationKind


class FakeLedger:
    """In-memory stand-in for LedgerClient with the same method surface."""

    def __init__(self, fail_submit=False, fail_profile=False, phrase="Keep going!"):
        self.fail_submit = fail_submit
        self.fail_profile = fail_profile
        self.phrase = phrase
        self.sessions: list[tuple[str, int]] = []
        self.phrase_contexts: list[str] = []
        self.profile_calls = 0
        self.closed = False

    def create_study_session(self, subject_id, duration_minutes):
        self.sessions.append((subject_id, duration_minutes))
        if self.fail_submit:
            raise SubmissionFailure("POST /study-sessions -> 503: unavailable", status_code=503)
        return SessionRecord(
            subject_id=subject_id,
            duration_minutes=duration_minutes,
            id=f"session-{len(self.sessions)}",
        )

    def fetch_profile(self):
        self.profile_calls += 1
        if self.fail_profile:
            raise LedgerError("GET /auth/profile -> 500: boom", status_code=500)
        minutes = sum(m for _, m in self.sessions)
        return UserProfile(id="u1", name="Ada", credits=(minutes // 30) * 5, total_study_minutes=minutes)

    def motivational_phrase(self, context):
        self.phrase_contexts.append(context)
        if self.phrase is None:
            raise PhraseUnavailable("phrase service down")
        return self.phrase

    def close(self):
        self.closed = True


class RecordingNotifier:
    def __init__(self):
        self.messages: list[tuple[NotificationKind, str]] = []

    def notify(self, kind, message):
        self.messages.append((kind, message))

    def kinds(self) -> list[NotificationKind]:
        return [kind for kind, _ in self.messages]


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
