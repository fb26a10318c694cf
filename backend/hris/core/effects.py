"""UI side effects (navigation, alerts, toasts) kept behind a small protocol."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from pydantic import BaseModel

NOTIFICATION_TIMEOUT_MS = 3000


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Notification(BaseModel):
    message: str
    kind: NotificationKind = NotificationKind.SUCCESS
    dismiss_after_ms: int = NOTIFICATION_TIMEOUT_MS


class Effects(Protocol):
    def redirect(self, url: str) -> None: ...

    def alert(self, message: str) -> None: ...

    def notify(self, message: str, kind: NotificationKind = NotificationKind.SUCCESS) -> None: ...


class RecordedEffects:
    """Collects effects so an HTTP adapter can turn them into responses."""

    def __init__(self) -> None:
        self.redirect_to: str | None = None
        self.alerts: list[str] = []
        self.notifications: list[Notification] = []

    def redirect(self, url: str) -> None:
        self.redirect_to = url

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def notify(self, message: str, kind: NotificationKind = NotificationKind.SUCCESS) -> None:
        self.notifications.append(Notification(message=message, kind=kind))
