"""Side-channel notices for the user (the toasts of the web UI).

Notices never affect control flow: components report success or failure
here and callers that must react to a failure rely on exceptions instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from .models import NotificationKind

logger = logging.getLogger(__name__)

Listener = Callable[["Notification"], None]


@dataclass
class Notification:
    """A single transient notice."""
    kind: NotificationKind
    message: str
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def is_error(self) -> bool:
        return self.kind == NotificationKind.ERROR


class Notifier:
    """Fan-out of notices to subscribed listeners.

    Keeps the most recent notices so a console (or a test) can show them
    after the fact.
    """

    def __init__(self, history_size: int = 50) -> None:
        self._listeners: list[Listener] = []
        self._history: list[Notification] = []
        self._history_size = history_size

    @property
    def history(self) -> list[Notification]:
        return list(self._history)

    @property
    def last(self) -> Notification | None:
        return self._history[-1] if self._history else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def success(self, message: str) -> Notification:
        logger.info("%s", message)
        return self._emit(Notification(NotificationKind.SUCCESS, message))

    def error(self, message: str) -> Notification:
        logger.warning("%s", message)
        return self._emit(Notification(NotificationKind.ERROR, message))

    def clear(self) -> None:
        self._history.clear()

    def _emit(self, notice: Notification) -> Notification:
        self._history.append(notice)
        if len(self._history) > self._history_size:
            del self._history[: -self._history_size]
        for listener in list(self._listeners):
            try:
                listener(notice)
            except Exception:
                # A broken listener must not turn a notice into a failure
                logger.exception("Notification listener failed")
        return notice
