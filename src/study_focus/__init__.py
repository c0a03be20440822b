"""Focus session timer and credit-accrual engine.

A countdown state machine that turns focused study time into credit-bearing
session records on an external study ledger.
"""

from .credits import credits_earned, duration_minutes
from .errors import (
    FocusError,
    IllegalTransitionError,
    LedgerError,
    PhraseUnavailable,
    SubmissionFailure,
    ValidationError,
)
from .ledger import LedgerClient
from .models import SessionRecord, Subject, UserProfile
from .notifier import ConsoleNotifier, LoggingNotifier, NotificationKind, Notifier
from .phrases import PhraseProvider
from .reconciler import ReconcileResult, SessionReconciler
from .session import FocusSession, Ticker
from .timer import (
    PRESET_MINUTES,
    Handoff,
    TimerEngine,
    TimerEvent,
    TimerPhase,
    TransitionResult,
    format_countdown,
)

__all__ = [
    "PRESET_MINUTES",
    "ConsoleNotifier",
    "FocusError",
    "FocusSession",
    "Handoff",
    "IllegalTransitionError",
    "LedgerClient",
    "LedgerError",
    "LoggingNotifier",
    "NotificationKind",
    "Notifier",
    "PhraseProvider",
    "PhraseUnavailable",
    "ReconcileResult",
    "SessionReconciler",
    "SessionRecord",
    "Subject",
    "SubmissionFailure",
    "Ticker",
    "TimerEngine",
    "TimerEvent",
    "TimerPhase",
    "TransitionResult",
    "UserProfile",
    "ValidationError",
    "credits_earned",
    "duration_minutes",
    "format_countdown",
]
