"""
Ephemeral user-facing messages: the latest one wins and auto-dismisses.
"""

import asyncio
from typing import Optional

DEFAULT_DISMISS_AFTER_S = 3.0


class EphemeralMessage:
    def __init__(self, dismiss_after: float = DEFAULT_DISMISS_AFTER_S):
        self._dismiss_after = dismiss_after
        self._text: Optional[str] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def text(self) -> Optional[str]:
        return self._text

    def show(self, text: str) -> None:
        self._cancel_timer()
        self._text = text
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync callers): the message stays until replaced
            return
        self._timer = loop.call_later(self._dismiss_after, self._expire)

    def clear(self) -> None:
        self._cancel_timer()
        self._text = None

    def _expire(self) -> None:
        self._timer = None
        self._text = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def __bool__(self) -> bool:
        return self._text is not None

    def __repr__(self) -> str:
        return f"EphemeralMessage(text={self._text!r})"
