"""Notification sink for user-facing diagnostics."""
from __future__ import annotations

import logging
from typing import Callable, Dict

from scenescript.core.types import Severity

Notifier = Callable[[str, Severity], None]

_LEVELS: Dict[str, int] = {
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class LoggingNotifier:
    """Notifier that forwards every diagnostic to a logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("scenescript.notifications")

    def __call__(self, message: str, severity: Severity) -> None:
        self.logger.log(_LEVELS.get(severity, logging.WARNING), message)


def default_notifier() -> Notifier:
    """Return the notifier used when a caller does not supply one."""
    return LoggingNotifier()
