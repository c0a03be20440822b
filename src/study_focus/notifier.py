"""User-facing notifications, decoupled from the timer logic."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

from rich.console import Console
from rich.markup import escape


class NotificationKind(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notifier(Protocol):
    def notify(self, kind: NotificationKind, message: str) -> None: ...


KIND_STYLES = {
    NotificationKind.INFO: "cyan",
    NotificationKind.SUCCESS: "green",
    NotificationKind.WARNING: "yellow",
    NotificationKind.ERROR: "bold red",
}

KIND_LOG_LEVELS = {
    NotificationKind.INFO: logging.INFO,
    NotificationKind.SUCCESS: logging.INFO,
    NotificationKind.WARNING: logging.WARNING,
    NotificationKind.ERROR: logging.ERROR,
}


class ConsoleNotifier:
    """Print notifications to a rich console, one line each."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def notify(self, kind: NotificationKind, message: str) -> None:
        style = KIND_STYLES.get(kind, "")
        self.console.print(f"[{style}]{kind.value.upper():<7}[/{style}] {escape(message)}", highlight=False)


class LoggingNotifier:
    """Headless notifier: everything goes to the package logger."""

    def __init__(self, name: str = "study_focus.notifications") -> None:
        self._logger = logging.getLogger(name)

    def notify(self, kind: NotificationKind, message: str) -> None:
        self._logger.log(KIND_LOG_LEVELS.get(kind, logging.INFO), message)
