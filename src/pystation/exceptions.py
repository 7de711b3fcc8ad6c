"""Custom exception hierarchy for pystation."""

from __future__ import annotations


class StationError(Exception):
    """Base exception for all pystation errors."""


class StationConfigError(StationError):
    """Invalid or missing configuration."""


class StationTransportError(StationError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class StationApiError(StationError):
    """API returned a non-zero code (application-level error)."""

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class StationCommandError(StationError):
    """A station intent could not be turned into a wire command.

    These never escape the public :class:`pystation.station.Station` intent
    methods; they are logged and the intent is dropped.
    """


class StationNotConnectedError(StationCommandError):
    """No connected P2P session is available for the command."""


class UnsupportedCapabilityError(StationCommandError):
    """The target device lacks every capability the intent requires."""

    def __init__(self, message: str, *, intent: str = "", serial: str = "") -> None:
        self.intent = intent
        self.serial = serial
        super().__init__(message)


class DeviceNotManagedError(StationCommandError):
    """The target device belongs to a different station."""


class InvalidGuardModeError(StationCommandError):
    """Requested guard mode is not one of the known :class:`GuardMode` values."""
