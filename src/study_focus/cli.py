#!/usr/bin/env python3
"""Terminal front end for the focus timer.

Usage:
    focus presets
    focus credits 45
    focus subjects
    focus profile
    focus login student@example.com
    focus run --subject math-101 --minutes 25
"""

from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import contextmanager

import click
from rich.console import Console, Group
from rich.live import Live
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from .config import get_config
from .credits import credits_earned
from .errors import FocusError
from .ledger import LedgerClient
from .notifier import ConsoleNotifier
from .phrases import PhraseProvider
from .reconciler import ReconcileResult, SessionReconciler
from .session import FocusSession
from .timer import PRESET_MINUTES, TimerPhase

logger = logging.getLogger(__name__)

console = Console()

PHASE_LABELS = {
    TimerPhase.IDLE: ("Ready", "blue"),
    TimerPhase.RUNNING: ("In progress", "green"),
    TimerPhase.PAUSED: ("Paused", "yellow"),
    TimerPhase.COMPLETED: ("Completed", "magenta"),
}


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    logging.getLogger("study_focus").setLevel(logging.DEBUG if verbose else logging.INFO)


@contextmanager
def focus_errors():
    """Turn domain errors into clean CLI failures."""
    try:
        yield
    except FocusError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, verbose):
    """Focus timer: study in timed cycles and earn credits."""
    config = get_config()
    setup_logging(verbose or config.verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
def presets():
    """List the preset cycle lengths."""
    for minutes in PRESET_MINUTES:
        label = f"{minutes} minutes"
        if minutes == 25:
            label += " (Pomodoro)"
        click.echo(f"  {label:<26} {credits_earned(minutes)} credits")


@cli.command()
@click.argument("minutes", type=click.IntRange(min=0))
def credits(minutes):
    """Show the credit estimate for MINUTES of study."""
    click.echo(f"{minutes} minutes -> {credits_earned(minutes)} credits")


@cli.command()
@click.pass_context
def subjects(ctx):
    """List subjects from the study ledger."""
    ledger = ctx.obj["config"].ledger_client()
    with focus_errors():
        items = ledger.list_subjects()

    if not items:
        console.print("No subjects yet.")
        return

    table = Table(title="Subjects")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Color")
    for subject in items:
        table.add_row(subject.id, subject.name, subject.color or "")
    console.print(table)


@cli.command()
@click.pass_context
def profile(ctx):
    """Show credit balance and total study time."""
    ledger = ctx.obj["config"].ledger_client()
    with focus_errors():
        user = ledger.fetch_profile()

    hours, mins = divmod(user.total_study_minutes, 60)
    console.print(f"[bold]{escape(user.display_name)}[/bold]")
    console.print(f"  Credits:     [yellow]{user.credits}[/yellow]")
    console.print(f"  Study time:  {hours}h {mins}m")


@cli.command()
@click.argument("email")
@click.password_option(confirmation_prompt=False)
@click.pass_context
def login(ctx, email, password):
    """Log in and print the token to export."""
    ledger = ctx.obj["config"].ledger_client()
    with focus_errors():
        token = ledger.login(email, password)
    click.echo(f"export STUDY_FOCUS_TOKEN={token}")


@cli.command()
@click.option("--subject", "subject_id", required=True, help="Subject ID to study")
@click.option("--name", "subject_name", help="Subject name (used for the motivational phrase)")
@click.option("--minutes", type=click.IntRange(min=1), help="Cycle length in minutes")
@click.option("--seconds", type=click.IntRange(min=1), help="Cycle length in seconds")
@click.pass_context
def run(ctx, subject_id, subject_name, minutes, seconds):
    """Run one focus cycle. Ctrl-C stops it early."""
    if minutes and seconds:
        raise click.UsageError("use either --minutes or --seconds, not both")
    duration = seconds or (minutes or 25) * 60

    ledger = ctx.obj["config"].ledger_client()
    with focus_errors():
        result = asyncio.run(run_cycle(ledger, subject_id, duration, subject_name))

    if result is None:
        console.print("Nothing recorded.")
    elif result.recorded:
        console.print(f"Recorded {result.duration_minutes} min, +{result.credits_earned} credits (estimate).")
    else:
        console.print(f"[red]{result.duration_minutes} min studied but not recorded.[/red]")


async def run_cycle(
    ledger: LedgerClient,
    subject_id: str,
    duration_seconds: int,
    subject_name: str | None = None,
) -> ReconcileResult | None:
    notifier = ConsoleNotifier(console)
    reconciler = SessionReconciler(ledger, notifier)
    stop_requested = asyncio.Event()

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, stop_requested.set)
    except (NotImplementedError, RuntimeError):
        logger.debug("SIGINT handler not supported; Ctrl-C will abort")

    try:
        async with FocusSession(reconciler, PhraseProvider(ledger), notifier) as session:
            session.configure(duration_seconds)
            session.select_subject(subject_id, subject_name)
            session.start()

            with Live(render(session), console=console, refresh_per_second=4) as live:
                while session.engine.is_active and not stop_requested.is_set():
                    await asyncio.sleep(0.25)
                    live.update(render(session))
                if session.engine.is_active:
                    session.stop()
                live.update(render(session))

            await session.drain()
            return session.last_result
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass
        ledger.close()


def render(session: FocusSession) -> Panel:
    engine = session.engine
    label, color = PHASE_LABELS[engine.phase]
    body = Group(
        Text(engine.display, style=f"bold {color}", justify="center"),
        Text(label, justify="center"),
        ProgressBar(total=100, completed=engine.progress_percent),
        Text(session.phrase, style="italic", justify="center"),
    )
    title = session.subject_name or engine.subject_id or "Focus"
    return Panel(body, title=title, border_style=color)


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
