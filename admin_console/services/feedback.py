from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from admin_console.schemas.common import FeedbackKind

logger = logging.getLogger(__name__)

DEFAULT_FEEDBACK_TIMEOUT_SECONDS = 4.0


@dataclass(slots=True, frozen=True)
class Feedback:
    kind: FeedbackKind
    message: str


class FeedbackChannel:
    """Holds the one transient message a screen shows after an action settles."""

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_FEEDBACK_TIMEOUT_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._current: Feedback | None = None
        self._expires_at: float | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._closed = False

    @property
    def current(self) -> Feedback | None:
        if self._current is not None and self._expires_at is not None and self._clock() >= self._expires_at:
            self.clear()
        return self._current

    @property
    def timer_active(self) -> bool:
        return self._timer is not None and not self._timer.cancelled()

    @property
    def closed(self) -> bool:
        return self._closed

    def show(self, kind: FeedbackKind, message: str) -> None:
        if self._closed:
            logger.debug("feedback dropped on closed channel kind=%s", kind)
            return
        self._cancel_timer()
        self._current = Feedback(kind=kind, message=message)
        self._expires_at = self._clock() + self.timeout_seconds
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._timer = loop.call_later(self.timeout_seconds, self._expire)

    def success(self, message: str) -> None:
        self.show("success", message)

    def error(self, message: str) -> None:
        self.show("error", message)

    def clear(self) -> None:
        self._cancel_timer()
        self._current = None
        self._expires_at = None

    def close(self) -> None:
        self.clear()
        self._closed = True

    def _expire(self) -> None:
        self._timer = None
        self._current = None
        self._expires_at = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
