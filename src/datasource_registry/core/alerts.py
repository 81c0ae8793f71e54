"""User-facing alert channel for plugin load failures."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertEvent:
    title: str
    body: str


class AlertChannel(Protocol):
    """Fire-and-forget sink for alert events."""

    def emit(self, event: AlertEvent) -> None: ...


class LoggingAlertChannel:
    """Alert channel that writes events to the log at ERROR level."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def emit(self, event: AlertEvent) -> None:
        self._log.error("%s: %s", event.title, event.body)
