"""Event-loop driver for one focus timer.

FocusSession wires the pure TimerEngine to the outside world: a
cancellable one-second Ticker, the post-completion auto-reset, the
phrase provider, the notifier, and the reconciler. All timer state is
mutated synchronously on the loop thread; the only awaits happen inside
background tasks that never touch the engine.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from .errors import ValidationError
from .notifier import LoggingNotifier, NotificationKind, Notifier
from .phrases import PhraseProvider
from .reconciler import ReconcileResult, SessionReconciler
from .timer import (
    COMPLETION_DISPLAY_SECONDS,
    Handoff,
    TimerEngine,
    TimerEvent,
    TimerPhase,
    TransitionResult,
)

logger = logging.getLogger(__name__)

TICK_INTERVAL_SECONDS = 1.0


class Ticker:
    """Calls `callback` every `interval` seconds until cancelled.

    The callback returns False to stop the ticker from inside a tick.
    """

    def __init__(self, interval: float, callback: Callable[[], bool]) -> None:
        self.interval = interval
        self._callback = callback
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            raise RuntimeError("ticker already running")
        self._task = asyncio.create_task(self._run())

    def cancel(self) -> None:
        """Stop ticking. Safe to call repeatedly, and from inside a tick."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        if task is not asyncio.current_task():
            task.cancel()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if not self._callback():
                break

    async def __aenter__(self) -> "Ticker":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        task = self._task
        self.cancel()
        if task is not None and task is not asyncio.current_task():
            try:
                await task
            except asyncio.CancelledError:
                pass


class FocusSession:
    """One focus timer plus everything that reacts to its transitions.

    Use as `async with FocusSession(...)` so the ticker is always
    cancelled and pending submissions are awaited on exit.
    """

    def __init__(
        self,
        reconciler: SessionReconciler,
        phrases: PhraseProvider | None = None,
        notifier: Notifier | None = None,
        engine: TimerEngine | None = None,
        tick_interval: float = TICK_INTERVAL_SECONDS,
        completion_delay: float = COMPLETION_DISPLAY_SECONDS,
    ) -> None:
        self.engine = engine or TimerEngine()
        self.reconciler = reconciler
        self.phrases = phrases or PhraseProvider()
        self.notifier = notifier or LoggingNotifier()
        self.completion_delay = completion_delay
        self.subject_name: str | None = None
        self.phrase: str = ""
        self.last_result: ReconcileResult | None = None

        self._ticker = Ticker(tick_interval, self._on_tick)
        self._auto_reset: asyncio.TimerHandle | None = None
        self._reconciles: set[asyncio.Task] = set()
        self._background: set[asyncio.Task] = set()
        self._idle = asyncio.Event()
        self._idle.set()

    # ---- State ----

    @property
    def phase(self) -> TimerPhase:
        return self.engine.phase

    @property
    def ticking(self) -> bool:
        return self._ticker.running

    @property
    def pending_reconciles(self) -> int:
        return len(self._reconciles)

    # ---- Configuration ----

    def configure(self, duration_seconds: int, subject_id: str | None = None) -> TransitionResult:
        return self.engine.configure(duration_seconds, subject_id)

    def configure_preset(self, minutes: int) -> TransitionResult:
        return self.engine.configure_preset(minutes)

    def select_subject(self, subject_id: str | None, name: str | None = None) -> TransitionResult:
        result = self.engine.select_subject(subject_id)
        self.subject_name = name if subject_id else None
        return result

    # ---- User actions ----

    def start(self) -> TransitionResult:
        try:
            result = self.engine.start()
        except ValidationError:
            self.notifier.notify(NotificationKind.WARNING, "Select a subject: choose what you want to study.")
            raise

        self._idle.clear()
        self._start_ticker()
        self._spawn_background(self.refresh_phrase())
        logger.info(f"Focus cycle started: {self.engine.total_seconds}s on {self.engine.subject_id}")
        self.notifier.notify(NotificationKind.INFO, "Session started! Focus and give it your best.")
        return result

    def pause(self) -> TransitionResult:
        """Pause, or resume when already paused."""
        result = self.engine.pause()
        if TimerEvent.PAUSED in result.events:
            self._ticker.cancel()
            logger.info(f"Focus cycle paused at {self.engine.display}")
            self.notifier.notify(NotificationKind.INFO, "Session paused. Take a break if you need one.")
        else:
            self._after_resume()
        return result

    def resume(self) -> TransitionResult:
        result = self.engine.resume()
        self._after_resume()
        return result

    def stop(self) -> asyncio.Task | None:
        """End the cycle. Returns the reconcile task when time was handed off."""
        elapsed = self.engine.elapsed_seconds
        result = self.engine.stop()
        self._ticker.cancel()
        self._idle.set()

        task = None
        if result.handoff is not None:
            logger.info(f"Focus cycle stopped after {elapsed}s")
            task = self._hand_off(result.handoff)
        else:
            logger.info(f"Focus cycle stopped after {elapsed}s; under one minute, not recorded")
        self.notifier.notify(NotificationKind.INFO, "Session ended. Great work!")
        return task

    def reset(self) -> TransitionResult:
        result = self.engine.reset()
        self._ticker.cancel()
        self._cancel_auto_reset()
        self._idle.set()
        logger.info("Focus timer reset without recording")
        self.notifier.notify(NotificationKind.INFO, "Timer reset. Ready for a new session.")
        return result

    def tick(self) -> TransitionResult:
        """Advance the timer one second (normally called by the ticker)."""
        result = self.engine.tick()
        if TimerEvent.COMPLETED in result.events:
            self._on_completed(result)
        return result

    # ---- Background work ----

    async def refresh_phrase(self) -> str:
        context = self.subject_name or self.engine.subject_id
        loop = asyncio.get_running_loop()
        try:
            self.phrase = await loop.run_in_executor(None, self.phrases.motivational, context)
        except Exception as exc:
            logger.warning(f"Phrase lookup failed unexpectedly: {exc}")
            self.phrase = self.phrases.fallback()
        return self.phrase

    async def wait_idle(self) -> None:
        """Wait until the current cycle has ended (stopped, reset, or auto-reset)."""
        await self._idle.wait()

    async def drain(self) -> list[ReconcileResult]:
        """Wait for every submission still in flight."""
        if not self._reconciles:
            return []
        results = await asyncio.gather(*list(self._reconciles))
        return [r for r in results if r is not None]

    async def close(self) -> None:
        """Tear down. An unfinished cycle is dropped, not recorded."""
        self._ticker.cancel()
        self._cancel_auto_reset()
        result = self.engine.abandon()
        if result.events:
            logger.info(f"Focus timer closed while {result.old_phase.value}; cycle not recorded")
        self._idle.set()
        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
        await self.drain()

    async def __aenter__(self) -> "FocusSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ---- Internal ----

    def _on_tick(self) -> bool:
        self.tick()
        return self.engine.phase == TimerPhase.RUNNING

    def _start_ticker(self) -> None:
        self._ticker.cancel()
        self._ticker.start()

    def _after_resume(self) -> None:
        self._start_ticker()
        logger.info(f"Focus cycle resumed at {self.engine.display}")
        self.notifier.notify(NotificationKind.INFO, "Session resumed. Back to focus!")

    def _on_completed(self, result: TransitionResult) -> None:
        self._ticker.cancel()
        logger.info(f"Focus cycle completed: {self.engine.total_seconds}s on {self.engine.subject_id}")
        self._hand_off(result.handoff)
        self.notifier.notify(NotificationKind.SUCCESS, f"Session completed! {self.phrases.success()}")

        self._cancel_auto_reset()
        loop = asyncio.get_running_loop()
        self._auto_reset = loop.call_later(self.completion_delay, self._finish_completion)

    def _finish_completion(self) -> None:
        self._auto_reset = None
        self.engine.finish_completion()
        self._idle.set()

    def _cancel_auto_reset(self) -> None:
        if self._auto_reset is not None:
            self._auto_reset.cancel()
            self._auto_reset = None

    def _hand_off(self, handoff: Handoff) -> asyncio.Task:
        task = asyncio.create_task(self._reconcile(handoff))
        self._reconciles.add(task)
        task.add_done_callback(self._reconciles.discard)
        return task

    async def _reconcile(self, handoff: Handoff) -> ReconcileResult | None:
        result = await self.reconciler.reconcile(handoff.subject_id, handoff.elapsed_seconds)
        if result is not None:
            self.last_result = result
        return result

    def _spawn_background(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task
