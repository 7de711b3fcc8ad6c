"""Reconnect backoff timer."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable
from typing import Protocol

from pystation._constants import (
    RECONNECT_INITIAL_DELAY_MS,
    RECONNECT_LONG_STEP_MS,
    RECONNECT_MAX_DELAY_MS,
    RECONNECT_SHORT_LIMIT_MS,
    RECONNECT_SHORT_STEP_MS,
)

_logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


CallLater = Callable[[float, Callable[[], None]], TimerHandle]


def _loop_call_later(delay: float, callback: Callable[[], None]) -> TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class ReconnectState(enum.StrEnum):
    IDLE = "idle"
    PENDING = "pending"


def next_delay(delay_ms: int) -> int:
    """Delay to use after *delay_ms* has been scheduled."""
    if delay_ms < RECONNECT_SHORT_LIMIT_MS:
        return delay_ms + RECONNECT_SHORT_STEP_MS
    return min(delay_ms + RECONNECT_LONG_STEP_MS, RECONNECT_MAX_DELAY_MS)


class ReconnectScheduler:
    """One-shot reconnect timer with a growing delay.

    Delays from a fresh state run 5s, 15s, 25s ... 55s, 65s, then grow by a
    minute up to ten minutes.  At most one timer is pending.

    Parameters
    ----------
    on_fire : Callable[[], None]
        Invoked when the timer elapses, after the scheduler went back to
        ``IDLE``.
    call_later : CallLater, optional
        Timer factory taking seconds and a callback.  Defaults to the
        running event loop's ``call_later``.
    """

    def __init__(
        self,
        on_fire: Callable[[], None],
        *,
        call_later: CallLater | None = None,
    ) -> None:
        self._on_fire = on_fire
        self._call_later = call_later or _loop_call_later
        self._current_delay = 0
        self._handle: TimerHandle | None = None

    @property
    def state(self) -> ReconnectState:
        return ReconnectState.PENDING if self._handle is not None else ReconnectState.IDLE

    @property
    def current_delay(self) -> int:
        """Backoff value (ms) carried into the next schedule; ``0`` when reset."""
        return self._current_delay

    def on_disconnect(self) -> int | None:
        """Arm the timer unless one is already pending.

        Returns the armed delay in milliseconds, or ``None`` when a timer
        was already pending.
        """
        if self._handle is not None:
            _logger.debug("Reconnect already pending, ignoring disconnect")
            return None

        delay = self._current_delay or RECONNECT_INITIAL_DELAY_MS
        self._current_delay = next_delay(delay)
        _logger.debug("Scheduling reconnect in %d ms", delay)
        self._handle = self._call_later(delay / 1000, self._fire)
        return delay

    def on_connect_success(self) -> None:
        self._current_delay = 0

    def cancel(self) -> None:
        handle = self._handle
        self._handle = None
        if handle is not None:
            handle.cancel()
            _logger.debug("Pending reconnect cancelled")

    def _fire(self) -> None:
        self._handle = None
        self._on_fire()
