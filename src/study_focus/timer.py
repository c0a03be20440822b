"""Focus timer engine: pure logic, no I/O.

All time values are integer seconds. Nothing here sleeps or reads a
clock: the caller drives time by calling tick() once per second, which
keeps the state machine deterministically testable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .credits import is_recordable
from .errors import IllegalTransitionError, ValidationError


class TimerPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class TimerEvent(Enum):
    CONFIGURED = "configured"
    STARTED = "started"
    PAUSED = "paused"
    RESUMED = "resumed"
    STOPPED = "stopped"
    DISCARDED = "discarded"
    COMPLETED = "completed"
    RESET = "reset"


@dataclass(frozen=True)
class Handoff:
    """What a terminated cycle passes to the reconciler."""

    subject_id: str
    elapsed_seconds: int


@dataclass
class TransitionResult:
    events: list[TimerEvent] = field(default_factory=list)
    old_phase: TimerPhase | None = None
    handoff: Handoff | None = None

    @property
    def terminated(self) -> bool:
        return self.handoff is not None


PRESET_MINUTES: tuple[int, ...] = (15, 25, 30, 45, 60, 90)
DEFAULT_DURATION_SECONDS = 25 * 60   # Pomodoro
COMPLETION_DISPLAY_SECONDS = 2       # COMPLETED is shown this long before auto-reset


def format_countdown(seconds: int) -> str:
    """Format seconds as 'MM:SS' (minutes are not capped at 59)."""
    seconds = max(0, seconds)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def progress_percent(total_seconds: int, remaining_seconds: int) -> float:
    if total_seconds <= 0:
        return 0.0
    return (total_seconds - remaining_seconds) / total_seconds * 100


def _validate_duration(duration_seconds: int) -> None:
    if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, int):
        raise ValidationError(f"duration must be an integer number of seconds, got {duration_seconds!r}")
    if duration_seconds <= 0:
        raise ValidationError(f"duration must be positive, got {duration_seconds}")


class TimerEngine:
    """Countdown state machine for one focus cycle at a time.

    Single writer. Guard violations raise before any field is touched,
    so a rejected call never leaves partial state behind.
    """

    def __init__(self, duration_seconds: int = DEFAULT_DURATION_SECONDS, subject_id: str | None = None):
        _validate_duration(duration_seconds)
        self._phase: TimerPhase = TimerPhase.IDLE
        self._subject_id: str | None = subject_id or None
        self._total_seconds: int = duration_seconds
        self._remaining_seconds: int = duration_seconds

    # ---- Read-only properties ----

    @property
    def phase(self) -> TimerPhase:
        return self._phase

    @property
    def subject_id(self) -> str | None:
        return self._subject_id

    @property
    def total_seconds(self) -> int:
        return self._total_seconds

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    @property
    def elapsed_seconds(self) -> int:
        return self._total_seconds - self._remaining_seconds

    @property
    def is_active(self) -> bool:
        """True while a cycle is in progress (running or paused)."""
        return self._phase in (TimerPhase.RUNNING, TimerPhase.PAUSED)

    @property
    def progress_percent(self) -> float:
        return progress_percent(self._total_seconds, self._remaining_seconds)

    @property
    def display(self) -> str:
        return format_countdown(self._remaining_seconds)

    # ---- Configuration ----

    def configure(self, duration_seconds: int, subject_id: str | None = None) -> TransitionResult:
        """Set the cycle length (and optionally the subject). Idle only.

        Changing total_seconds mid-cycle would corrupt elapsed time, so
        this is rejected while running, paused, or showing completion.
        """
        self._require(TimerPhase.IDLE, operation="configure")
        _validate_duration(duration_seconds)

        self._total_seconds = duration_seconds
        self._remaining_seconds = duration_seconds
        if subject_id is not None:
            self._subject_id = subject_id or None
        return TransitionResult(events=[TimerEvent.CONFIGURED], old_phase=self._phase)

    def configure_preset(self, minutes: int) -> TransitionResult:
        if minutes not in PRESET_MINUTES:
            presets = ", ".join(str(m) for m in PRESET_MINUTES)
            raise ValidationError(f"unknown preset {minutes!r}; choose one of {presets}")
        return self.configure(minutes * 60)

    def select_subject(self, subject_id: str | None) -> TransitionResult:
        self._require(TimerPhase.IDLE, operation="change subject")
        self._subject_id = subject_id or None
        return TransitionResult(events=[TimerEvent.CONFIGURED], old_phase=self._phase)

    # ---- Transitions ----

    def start(self) -> TransitionResult:
        self._require(TimerPhase.IDLE, operation="start")
        if not self._subject_id:
            raise ValidationError("no subject selected")

        self._phase = TimerPhase.RUNNING
        return TransitionResult(events=[TimerEvent.STARTED], old_phase=TimerPhase.IDLE)

    def tick(self) -> TransitionResult:
        """Advance one second. Ignored unless running.

        Reaching zero completes the cycle inside this same call, so
        completion fires exactly once and remaining never goes negative.
        """
        if self._phase != TimerPhase.RUNNING:
            return TransitionResult()

        self._remaining_seconds -= 1
        if self._remaining_seconds > 0:
            return TransitionResult()

        self._remaining_seconds = 0
        self._phase = TimerPhase.COMPLETED
        return TransitionResult(
            events=[TimerEvent.COMPLETED],
            old_phase=TimerPhase.RUNNING,
            handoff=Handoff(self._subject_id, self._total_seconds),
        )

    def pause(self) -> TransitionResult:
        """Pause a running cycle. A second pause resumes it."""
        if self._phase == TimerPhase.PAUSED:
            return self.resume()
        self._require(TimerPhase.RUNNING, operation="pause")

        self._phase = TimerPhase.PAUSED
        return TransitionResult(events=[TimerEvent.PAUSED], old_phase=TimerPhase.RUNNING)

    def resume(self) -> TransitionResult:
        self._require(TimerPhase.PAUSED, operation="resume")

        self._phase = TimerPhase.RUNNING
        return TransitionResult(events=[TimerEvent.RESUMED], old_phase=TimerPhase.PAUSED)

    def stop(self) -> TransitionResult:
        """End the cycle early. Hands off elapsed time only if >= 1 minute."""
        if not self.is_active:
            raise IllegalTransitionError("stop", self._phase.value)

        old_phase = self._phase
        elapsed = self.elapsed_seconds
        self._phase = TimerPhase.IDLE
        self._remaining_seconds = self._total_seconds

        result = TransitionResult(events=[TimerEvent.STOPPED], old_phase=old_phase)
        if is_recordable(elapsed):
            result.handoff = Handoff(self._subject_id, elapsed)
        else:
            result.events.append(TimerEvent.DISCARDED)
        return result

    def finish_completion(self) -> TransitionResult:
        """Leave COMPLETED after the display delay. No-op in any other phase."""
        if self._phase != TimerPhase.COMPLETED:
            return TransitionResult()

        self._phase = TimerPhase.IDLE
        self._remaining_seconds = self._total_seconds
        return TransitionResult(events=[TimerEvent.RESET], old_phase=TimerPhase.COMPLETED)

    def reset(self) -> TransitionResult:
        """Discard progress without persisting. Not allowed while running."""
        if self._phase == TimerPhase.RUNNING:
            raise IllegalTransitionError("reset", self._phase.value)

        old_phase = self._phase
        self._phase = TimerPhase.IDLE
        self._remaining_seconds = self._total_seconds
        return TransitionResult(events=[TimerEvent.RESET], old_phase=old_phase)

    def abandon(self) -> TransitionResult:
        """Drop whatever cycle is in progress, from any phase. Never hands off."""
        if self._phase == TimerPhase.IDLE:
            return TransitionResult()

        old_phase = self._phase
        self._phase = TimerPhase.IDLE
        self._remaining_seconds = self._total_seconds
        return TransitionResult(events=[TimerEvent.RESET], old_phase=old_phase)

    # ---- Serialization ----

    def to_export_dict(self) -> dict:
        """CamelCase dict for display and JSON export."""
        return {
            "phase": self._phase.value,
            "subjectId": self._subject_id,
            "totalSeconds": self._total_seconds,
            "remainingSeconds": self._remaining_seconds,
            "elapsedSeconds": self.elapsed_seconds,
            "progressPercent": round(self.progress_percent, 1),
            "display": self.display,
        }

    # ---- Internal ----

    def _require(self, phase: TimerPhase, operation: str) -> None:
        if self._phase != phase:
            raise IllegalTransitionError(operation, self._phase.value)
