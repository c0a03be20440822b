"""Credit estimate arithmetic.

All values are integers. The ledger owns the real balance; these helpers
only produce the number shown right after a session is saved.
"""

from __future__ import annotations

from .errors import ValidationError

SECONDS_PER_MINUTE = 60
MIN_RECORDED_SECONDS = 60   # sub-minute cycles are never submitted
CREDIT_BLOCK_MINUTES = 30
CREDITS_PER_BLOCK = 5


def duration_minutes(elapsed_seconds: int) -> int:
    """Whole minutes studied, floor-truncated."""
    if elapsed_seconds < 0:
        raise ValidationError(f"elapsed seconds must be >= 0, got {elapsed_seconds}")
    return elapsed_seconds // SECONDS_PER_MINUTE


def credits_earned(minutes: int) -> int:
    """5 credits per complete 30-minute block (29 -> 0, 59 -> 5, 60 -> 10)."""
    if minutes < 0:
        raise ValidationError(f"minutes must be >= 0, got {minutes}")
    return (minutes // CREDIT_BLOCK_MINUTES) * CREDITS_PER_BLOCK


def is_recordable(elapsed_seconds: int) -> bool:
    return elapsed_seconds >= MIN_RECORDED_SECONDS
