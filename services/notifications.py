"""
Notification collaborators.

The desk reports user-facing events through two fire-and-forget effects:
`notify(kind, message)` for toast-style messages and `play_sound(kind)` for
audio cues. Return values are never used, and a failing collaborator must not
break the action that triggered it.
"""

from __future__ import annotations

import logging
from typing import Literal, Protocol

logger = logging.getLogger(__name__)

NotifyKind = Literal["success", "error"]
SoundKind = Literal["success", "error", "notification"]


class Notifier(Protocol):
    def notify(self, kind: NotifyKind, message: str) -> None: ...

    def play_sound(self, kind: SoundKind) -> None: ...


class LoggingNotifier:
    """Default notifier: emits every notification as a log record."""

    def notify(self, kind: NotifyKind, message: str) -> None:
        level = logging.WARNING if kind == "error" else logging.INFO
        logger.log(level, message, extra={"notification_kind": kind})

    def play_sound(self, kind: SoundKind) -> None:
        logger.debug("Sound cue: %s", kind, extra={"sound_kind": kind})


class SafeNotifier:
    """
    Wraps another notifier so its failures are logged and dropped.
    """

    def __init__(self, inner: Notifier) -> None:
        self._inner = inner

    def notify(self, kind: NotifyKind, message: str) -> None:
        try:
            self._inner.notify(kind, message)
        except Exception:
            logger.exception("Notification failed", extra={"notification_kind": kind})

    def play_sound(self, kind: SoundKind) -> None:
        try:
            self._inner.play_sound(kind)
        except Exception as e:
            logger.info(f"Audio play failed: {e}", extra={"sound_kind": kind})


__all__ = [
    "LoggingNotifier",
    "Notifier",
    "NotifyKind",
    "SafeNotifier",
    "SoundKind",
]
