"""Registro de notificaciones activas (sin renderizado)."""

from __future__ import annotations

import itertools
from dataclasses import dataclass

KINDS: tuple[str, ...] = ("success", "info", "warning", "error")
MAX_ACTIVE = 3


@dataclass(frozen=True)
class Notification:
    """One message waiting to be shown by the presentation layer."""

    notification_id: int
    message: str
    kind: str = "info"


class NotificationCenter:
    """Bounded, de-duplicated set of active notifications.

    Showing a message that is already active replaces it; when the registry
    is full the oldest notification is evicted.
    """

    def __init__(self, max_active: int = MAX_ACTIVE) -> None:
        self._max_active = max_active
        self._active: dict[int, Notification] = {}
        self._ids = itertools.count(1)

    def show(self, message: str, kind: str = "info") -> int:
        if kind not in KINDS:
            kind = "info"
        for existing in list(self._active.values()):
            if existing.message == message:
                self.dismiss(existing.notification_id)
        while len(self._active) >= self._max_active:
            oldest = next(iter(self._active))
            self.dismiss(oldest)
        notification = Notification(next(self._ids), message, kind)
        self._active[notification.notification_id] = notification
        return notification.notification_id

    def dismiss(self, notification_id: int) -> None:
        self._active.pop(notification_id, None)

    def active(self) -> list[Notification]:
        return list(self._active.values())

    def clear(self) -> None:
        self._active.clear()
