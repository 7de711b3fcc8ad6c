"""In-process event registry used by stations and P2P sessions."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from typing import Any

_logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class SessionEvent(enum.StrEnum):
    """Events a P2P session publishes."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    COMMAND = "command"
    ALARM_MODE = "alarm_mode"
    CAMERA_INFO = "camera_info"
    START_DOWNLOAD = "start_download"
    FINISH_DOWNLOAD = "finish_download"
    START_LIVESTREAM = "start_livestream"
    STOP_LIVESTREAM = "stop_livestream"
    WIFI_RSSI = "wifi_rssi"


class StationEvent(enum.StrEnum):
    """Events a :class:`pystation.station.Station` publishes."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    PARAMETER_CHANGED = "parameter_changed"
    DEVICE_PARAMETERS_UPDATED = "device_parameters_updated"
    COMMAND_RESULT = "command_result"
    DOWNLOAD_START = "download_start"
    DOWNLOAD_FINISH = "download_finish"
    LIVESTREAM_START = "livestream_start"
    LIVESTREAM_STOP = "livestream_stop"


class EventEmitter:
    """Ordered listener lists keyed by event name.

    Listeners run synchronously in registration order.  A listener that
    raises is logged and skipped; delivery to the remaining listeners
    continues.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Listener:
        """Register *listener* for *event* and return it (decorator friendly)."""
        self._listeners.setdefault(str(event), []).append(listener)
        return listener

    def once(self, event: str, listener: Listener) -> Listener:
        """Register *listener* for the next *event* only."""

        def _wrapper(*args: Any) -> Any:
            self.off(event, _wrapper)
            return listener(*args)

        return self.on(event, _wrapper)

    def off(self, event: str, listener: Listener) -> None:
        """Remove the first registration of *listener* for *event*, if any."""
        listeners = self._listeners.get(str(event))
        if not listeners:
            return
        try:
            listeners.remove(listener)
        except ValueError:
            return
        if not listeners:
            del self._listeners[str(event)]

    def remove_all_listeners(self, event: str | None = None) -> None:
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(str(event), None)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(str(event), ()))

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener of *event* with *args*.

        Returns ``True`` when at least one listener was registered.
        """
        listeners = list(self._listeners.get(str(event), ()))
        for listener in listeners:
            try:
                listener(*args)
            except Exception:
                _logger.exception("Listener for event %s failed", event)
        return bool(listeners)
