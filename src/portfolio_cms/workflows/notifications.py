"""Transient user notifications raised by the workflows."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol


class Severity(StrEnum):
    """Notification severities (names match Textual's toast severities)."""

    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notification:
    message: str
    severity: Severity


class Notifier(Protocol):
    """Anything that can surface a transient message to the user."""

    def notify(self, message: str, severity: Severity = Severity.INFORMATION) -> None: ...


class RecordingNotifier:
    """Notifier that keeps every notification in order (CLI output, tests)."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, message: str, severity: Severity = Severity.INFORMATION) -> None:
        self.notifications.append(Notification(message, Severity(severity)))

    @property
    def messages(self) -> list[str]:
        return [n.message for n in self.notifications]

    @property
    def errors(self) -> list[str]:
        return [n.message for n in self.notifications if n.severity is Severity.ERROR]

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    def clear(self) -> None:
        self.notifications.clear()
