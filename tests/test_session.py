"""Tests for the FocusSession driver and its Ticker.

Most tests use a one-hour tick interval so the ticker never fires and
time is driven by calling session.tick() directly. Tests that exercise
the real ticker use a millisecond interval.
"""

import asyncio

import pytest

from study_focus.errors import IllegalTransitionError, ValidationError
from study_focus.notifier import NotificationKind
from study_focus.phrases import FALLBACK_PHRASES, PhraseProvider
from study_focus.reconciler import SessionReconciler
from study_focus.session import FocusSession, Ticker
from study_focus.timer import TimerPhase

MANUAL = 3600.0


def make_session(ledger, notifier, tick_interval=MANUAL, completion_delay=0.01) -> FocusSession:
    return FocusSession(
        SessionReconciler(ledger, notifier),
        phrases=PhraseProvider(ledger),
        notifier=notifier,
        tick_interval=tick_interval,
        completion_delay=completion_delay,
    )


def ticks(session: FocusSession, count: int) -> None:
    for _ in range(count):
        session.tick()


# ---- Ticker ----

class TestTicker:
    @pytest.mark.asyncio
    async def test_calls_until_callback_returns_false(self):
        calls = []

        def callback():
            calls.append(1)
            return len(calls) < 3

        ticker = Ticker(0.001, callback)
        ticker.start()
        await asyncio.wait_for(ticker._task, timeout=2)
        assert len(calls) == 3
        assert not ticker.running

    @pytest.mark.asyncio
    async def test_start_twice_rejected(self):
        ticker = Ticker(MANUAL, lambda: True)
        ticker.start()
        with pytest.raises(RuntimeError):
            ticker.start()
        ticker.cancel()

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self):
        ticker = Ticker(MANUAL, lambda: True)
        ticker.cancel()
        ticker.start()
        ticker.cancel()
        ticker.cancel()
        assert not ticker.running

    @pytest.mark.asyncio
    async def test_context_manager_cancels(self):
        calls = []
        async with Ticker(0.001, lambda: calls.append(1) or True) as ticker:
            await asyncio.sleep(0.02)
            assert ticker.running
        assert not ticker.running
        count = len(calls)
        await asyncio.sleep(0.02)
        assert len(calls) == count


# ---- Natural completion ----

class TestCompletion:
    @pytest.mark.asyncio
    async def test_sixty_second_timer_posts_exactly_once(self, ledger, notifier):
        async with make_session(ledger, notifier, tick_interval=0.001) as session:
            session.configure(60, "math")
            session.start()
            await asyncio.wait_for(session.wait_idle(), timeout=5)
            await session.drain()

            assert ledger.sessions == [("math", 1)]
            assert session.phase == TimerPhase.IDLE
            assert session.engine.remaining_seconds == 60
            assert not session.ticking

    @pytest.mark.asyncio
    async def test_completion_then_auto_reset(self, ledger, notifier):
        async with make_session(ledger, notifier, completion_delay=0.05) as session:
            session.configure(60, "math")
            session.start()
            ticks(session, 59)
            assert session.phase == TimerPhase.RUNNING

            session.tick()
            assert session.phase == TimerPhase.COMPLETED
            assert session.engine.remaining_seconds == 0
            assert not session.ticking
            assert NotificationKind.SUCCESS in notifier.kinds()

            await asyncio.wait_for(session.wait_idle(), timeout=2)
            assert session.phase == TimerPhase.IDLE
            assert session.engine.remaining_seconds == 60

            # Ready for another cycle on the same subject
            session.start()
            assert session.phase == TimerPhase.RUNNING

    @pytest.mark.asyncio
    @pytest.mark.parametrize("duration,minutes,credits", [(1500, 25, 0), (1800, 30, 5)])
    async def test_pomodoro_scenarios(self, ledger, notifier, duration, minutes, credits):
        async with make_session(ledger, notifier) as session:
            session.configure(duration, "math")
            session.start()
            ticks(session, duration)
            results = await session.drain()

        assert ledger.sessions == [("math", minutes)]
        assert [r.credits_earned for r in results] == [credits]
        assert session.last_result.duration_minutes == minutes

    @pytest.mark.asyncio
    async def test_reset_during_completion_display(self, ledger, notifier):
        async with make_session(ledger, notifier, completion_delay=MANUAL) as session:
            session.configure(60, "math")
            session.start()
            ticks(session, 60)
            session.reset()
            assert session.phase == TimerPhase.IDLE
            await asyncio.wait_for(session.wait_idle(), timeout=1)
        assert ledger.sessions == [("math", 1)]


# ---- Stop / reset ----

class TestStop:
    @pytest.mark.asyncio
    async def test_sub_minute_stop_not_reconciled(self, ledger, notifier):
        async with make_session(ledger, notifier) as session:
            session.configure(1500, "math")
            session.start()
            ticks(session, 45)
            assert session.stop() is None
            assert await session.drain() == []
        assert ledger.sessions == []
        assert session.phase == TimerPhase.IDLE

    @pytest.mark.asyncio
    async def test_stop_records_elapsed_minutes(self, ledger, notifier):
        async with make_session(ledger, notifier) as session:
            session.configure(1500, "math")
            session.start()
            ticks(session, 10 * 60 + 30)
            task = session.stop()
            assert not session.ticking
            assert session.engine.remaining_seconds == 1500
            result = await task

        assert result.recorded
        assert result.duration_minutes == 10
        assert ledger.sessions == [("math", 10)]

    @pytest.mark.asyncio
    async def test_pause_then_reset_never_reconciles(self, ledger, notifier):
        async with make_session(ledger, notifier) as session:
            session.configure(1500, "math")
            session.start()
            ticks(session, 120)
            session.pause()
            session.reset()
            await session.drain()
        assert ledger.sessions == []
        assert session.engine.remaining_seconds == 1500

    @pytest.mark.asyncio
    async def test_reset_while_running_rejected(self, ledger, notifier):
        async with make_session(ledger, notifier) as session:
            session.configure(1500, "math")
            session.start()
            ticks(session, 10)
            with pytest.raises(IllegalTransitionError):
                session.reset()
            assert session.ticking
            assert session.engine.remaining_seconds == 1490

    @pytest.mark.asyncio
    async def test_failed_submission_does_not_block_next_cycle(self, ledger, notifier):
        ledger.fail_submit = True
        async with make_session(ledger, notifier) as session:
            session.configure(120, "math")
            session.start()
            ticks(session, 90)
            result = await session.stop()
            assert result.recorded is False
            assert NotificationKind.ERROR in notifier.kinds()

            session.start()
            assert session.phase == TimerPhase.RUNNING

    @pytest.mark.asyncio
    async def test_overlapping_terminations_are_all_submitted(self, ledger, notifier):
        async with make_session(ledger, notifier) as session:
            session.configure(300, "math")
            session.start()
            ticks(session, 120)
            session.stop()
            session.start()
            ticks(session, 180)
            session.stop()
            results = await session.drain()

        assert sorted(ledger.sessions) == [("math", 2), ("math", 3)]
        assert len(results) == 2


# ---- Pause / guards ----

class TestControls:
    @pytest.mark.asyncio
    async def test_pause_cancels_ticker_and_double_pause_resumes(self, ledger, notifier):
        async with make_session(ledger, notifier) as session:
            session.configure(1500, "math")
            session.start()
            assert session.ticking
            session.pause()
            assert session.phase == TimerPhase.PAUSED
            assert not session.ticking
            session.pause()
            assert session.phase == TimerPhase.RUNNING
            assert session.ticking

    @pytest.mark.asyncio
    async def test_paused_session_does_not_advance(self, ledger, notifier):
        async with make_session(ledger, notifier, tick_interval=0.001) as session:
            session.configure(1500, "math")
            session.start()
            session.pause()
            remaining = session.engine.remaining_seconds
            await asyncio.sleep(0.05)
            assert session.engine.remaining_seconds == remaining

    @pytest.mark.asyncio
    async def test_configure_while_paused_rejected(self, ledger, notifier):
        async with make_session(ledger, notifier) as session:
            session.configure(1500, "math")
            session.start()
            ticks(session, 5)
            session.pause()
            with pytest.raises(IllegalTransitionError):
                session.configure_preset(45)
            assert session.engine.total_seconds == 1500
            assert session.engine.remaining_seconds == 1495

    @pytest.mark.asyncio
    async def test_start_without_subject_warns(self, ledger, notifier):
        async with make_session(ledger, notifier) as session:
            with pytest.raises(ValidationError):
                session.start()
            assert session.phase == TimerPhase.IDLE
            assert not session.ticking
            assert notifier.kinds() == [NotificationKind.WARNING]

    @pytest.mark.asyncio
    async def test_close_cancels_ticker_without_recording(self, ledger, notifier):
        session = make_session(ledger, notifier)
        session.configure(1500, "math")
        session.start()
        ticks(session, 300)
        await session.close()
        assert not session.ticking
        assert ledger.sessions == []
        assert session.phase == TimerPhase.IDLE
        assert session.engine.remaining_seconds == 1500

    @pytest.mark.asyncio
    async def test_close_while_paused_returns_to_idle(self, ledger, notifier):
        session = make_session(ledger, notifier)
        session.configure(1500, "math")
        session.start()
        ticks(session, 120)
        session.pause()
        await session.close()
        assert session.phase == TimerPhase.IDLE
        assert session.engine.remaining_seconds == 1500
        assert ledger.sessions == []
        await asyncio.wait_for(session.wait_idle(), timeout=1)


# ---- Phrases ----

class TestPhrase:
    @pytest.mark.asyncio
    async def test_phrase_uses_subject_name(self, ledger, notifier):
        async with make_session(ledger, notifier) as session:
            session.select_subject("m1", "Mathematics")
            assert await session.refresh_phrase() == "Keep going!"
        assert ledger.phrase_contexts == ["Mathematics"]

    @pytest.mark.asyncio
    async def test_phrase_falls_back(self, ledger, notifier):
        ledger.phrase = None
        async with make_session(ledger, notifier) as session:
            session.select_subject("m1")
            assert await session.refresh_phrase() in FALLBACK_PHRASES
