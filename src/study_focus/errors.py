"""Exception hierarchy for the focus engine."""

from __future__ import annotations


class FocusError(Exception):
    """Base class for every error raised by study_focus."""


class ValidationError(FocusError):
    """Input rejected before any state changed (e.g. no subject selected)."""


class IllegalTransitionError(FocusError):
    """A timer operation was called in a phase that does not allow it."""

    def __init__(self, operation: str, phase: str) -> None:
        self.operation = operation
        self.phase = phase
        super().__init__(f"cannot {operation} while {phase}")


class LedgerError(FocusError):
    """The study ledger could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class SubmissionFailure(LedgerError):
    """A study session could not be recorded by the ledger."""


class PhraseUnavailable(LedgerError):
    """The motivational phrase service did not return a phrase."""
