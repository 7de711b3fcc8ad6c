"""pystation - Async session coordinator for P2P security camera stations."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pystation")
except PackageNotFoundError:
    __version__ = "0+local"
from pystation.api import HttpStationApi, StationApi
from pystation.capabilities import Capability, CapabilityOracle, DeviceClassifier
from pystation.config import StationConfig
from pystation.credentials import CredentialCache
from pystation.events import EventEmitter, SessionEvent, StationEvent
from pystation.exceptions import (
    DeviceNotManagedError,
    InvalidGuardModeError,
    StationApiError,
    StationCommandError,
    StationConfigError,
    StationError,
    StationNotConnectedError,
    StationTransportError,
    UnsupportedCapabilityError,
)
from pystation.models import (
    AlarmMode,
    CommandType,
    DeviceInfo,
    DeviceType,
    GuardMode,
    HubInfo,
    ParamType,
    VideoCodec,
    WatermarkSetting,
    WireCommand,
)
from pystation.p2p import P2PSession, SessionFactory
from pystation.reconnect import ReconnectScheduler
from pystation.router import CommandRouter, Intent
from pystation.state import ParameterStore, ParameterValue
from pystation.station import ConnectionState, Station

__all__ = [
    "__version__",
    "AlarmMode",
    "Capability",
    "CapabilityOracle",
    "CommandRouter",
    "CommandType",
    "ConnectionState",
    "CredentialCache",
    "DeviceClassifier",
    "DeviceInfo",
    "DeviceNotManagedError",
    "DeviceType",
    "EventEmitter",
    "GuardMode",
    "HttpStationApi",
    "HubInfo",
    "Intent",
    "InvalidGuardModeError",
    "P2PSession",
    "ParamType",
    "ParameterStore",
    "ParameterValue",
    "ReconnectScheduler",
    "SessionEvent",
    "SessionFactory",
    "Station",
    "StationApi",
    "StationApiError",
    "StationCommandError",
    "StationConfig",
    "StationConfigError",
    "StationError",
    "StationEvent",
    "StationNotConnectedError",
    "StationTransportError",
    "UnsupportedCapabilityError",
    "VideoCodec",
    "WatermarkSetting",
    "WireCommand",
]
