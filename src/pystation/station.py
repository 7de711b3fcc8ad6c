"""Station session coordinator."""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from pystation._constants import STATION_CHANNEL
from pystation._redact import mask_secret, redact_payload
from pystation.api import StationApi
from pystation.capabilities import CapabilityOracle, DeviceClassifier
from pystation.config import StationConfig
from pystation.credentials import CredentialCache
from pystation.events import EventEmitter, Listener, SessionEvent, StationEvent
from pystation.exceptions import (
    InvalidGuardModeError,
    StationCommandError,
    StationError,
    StationNotConnectedError,
)
from pystation.models.commands import (
    Address,
    CameraInfoResponse,
    CommandEncoding,
    CommandResult,
    CommandType,
    ParamType,
    WatermarkSetting,
    WireCommand,
)
from pystation.models.hub import AlarmMode, DeviceInfo, DeviceType, GuardMode, HubInfo
from pystation.p2p import P2PSession, SessionFactory
from pystation.reconnect import CallLater, ReconnectScheduler
from pystation.router import CommandRouter
from pystation.state.decode import read_value
from pystation.state.parameters import ParameterSet, ParameterStore, ParameterValue

_logger = logging.getLogger(__name__)


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class ConnectionState(enum.StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class Station:
    """Coordinates one station: its P2P session, parameters and commands.

    Usage::

        station = Station(api, hub, session_factory=make_session)
        station.on(StationEvent.PARAMETER_CHANGED, print)
        await station.connect()
        await station.set_guard_mode(GuardMode.HOME)
        station.close()

    Intents never raise: unsupported or impossible commands are logged and
    dropped, so one bad command cannot destabilise the coordinator.

    Parameters
    ----------
    api : StationApi
        Cloud API used for DSK keys and download ciphers.
    hub : HubInfo
        Cloud record of the station.
    session_factory : SessionFactory
        Builds a P2P session from ``(p2p_did, dsk_key)``.
    classifier : CapabilityOracle, optional
        Capability oracle; defaults to :class:`DeviceClassifier`.
    config : StationConfig, optional
    call_later : CallLater, optional
        Timer factory for reconnects (seconds, callback).
    clock : Callable[[], int], optional
        Epoch milliseconds used to stamp P2P-sourced parameters.
    """

    def __init__(
        self,
        api: StationApi,
        hub: HubInfo,
        *,
        session_factory: SessionFactory,
        classifier: CapabilityOracle | None = None,
        config: StationConfig | None = None,
        call_later: CallLater | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._api = api
        self._hub = hub
        self._session_factory = session_factory
        self._config = config or StationConfig()
        self._clock = clock
        self._events = EventEmitter()
        self._parameters = ParameterStore()
        self._credentials = CredentialCache(api)
        self._router = CommandRouter(classifier or DeviceClassifier(), self._config)
        self._reconnect = ReconnectScheduler(self._on_reconnect_timer, call_later=call_later)
        self._session: P2PSession | None = None
        self._state = ConnectionState.DISCONNECTED
        self._connect_generation = 0
        self._reconnect_task: asyncio.Task[None] | None = None
        self._background_tasks: set[asyncio.Task[Any]] = set()
        self._load_parameters()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: StationEvent | str, listener: Listener) -> Listener:
        return self._events.on(event, listener)

    def once(self, event: StationEvent | str, listener: Listener) -> Listener:
        return self._events.once(event, listener)

    def off(self, event: StationEvent | str, listener: Listener) -> None:
        self._events.off(event, listener)

    def remove_all_listeners(self, event: StationEvent | str | None = None) -> None:
        self._events.remove_all_listeners(event)

    def _emit(self, event: StationEvent, *args: Any) -> None:
        self._events.emit(event, *args)

    # ------------------------------------------------------------------
    # Hub record
    # ------------------------------------------------------------------

    @property
    def hub(self) -> HubInfo:
        return self._hub

    @property
    def serial(self) -> str:
        return self._hub.station_sn

    @property
    def name(self) -> str:
        return self._hub.station_name

    @property
    def model(self) -> str:
        return self._hub.station_model

    @property
    def device_type(self) -> DeviceType:
        return self._hub.device_type

    @property
    def software_version(self) -> str:
        return self._hub.main_sw_version

    @property
    def hardware_version(self) -> str:
        return self._hub.main_hw_version

    @property
    def mac_address(self) -> str:
        return self._hub.wifi_mac

    @property
    def ip_address(self) -> str:
        return self._hub.ip_addr

    @property
    def is_station(self) -> bool:
        """Whether this is a dedicated base station (not a standalone device)."""
        return self._hub.device_type == DeviceType.STATION

    @property
    def is_device_station(self) -> bool:
        return not self.is_station

    @property
    def connection_state(self) -> ConnectionState:
        return self._state

    @property
    def credentials(self) -> CredentialCache:
        return self._credentials

    def device(self, serial: str) -> DeviceInfo | None:
        """Build a :class:`DeviceInfo` for a device listed in the hub record."""
        for device in self._hub.devices:
            if device.device_sn == serial:
                return DeviceInfo.from_hub_device(device, self.serial)
        return None

    def update(self, hub: HubInfo) -> None:
        """Replace the hub record and merge its parameters."""
        self._hub = hub
        self._merge_hub_parameters()

    def _load_parameters(self) -> None:
        self._merge_hub_parameters()
        _logger.debug("Station %s loaded %d parameters", self.serial, len(self._parameters))

    def _merge_hub_parameters(self) -> None:
        for param in self._hub.params:
            self._update_parameter(param.param_type, param.param_value, param.update_time)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def get_parameter(self, param_type: int) -> ParameterValue | None:
        return self._parameters.lookup(param_type)

    def get_parameters(self) -> ParameterSet:
        return dict(self._parameters.snapshot())

    def _update_parameter(self, param_type: int, raw_value: Any, modified: int) -> None:
        param = self._parameters.merge(param_type, raw_value, modified)
        if param is None:
            return
        self._emit(StationEvent.PARAMETER_CHANGED, self.serial, param_type, param.value, param.modified)

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def is_connected(self) -> bool:
        return self._session is not None and self._session.is_connected()

    async def connect(self) -> None:
        """Open a fresh P2P session, replacing any existing one.

        Supersedes a pending reconnect timer and any other reconnect attempt
        still in flight.
        """
        self._reconnect.cancel()
        task = self._reconnect_task
        if task is not None and task is not asyncio.current_task():
            self._reconnect_task = None
            if not task.done():
                task.cancel()
        self._connect_generation += 1
        generation = self._connect_generation
        self._state = ConnectionState.CONNECTING

        credential = await self._credentials.ensure_fresh(self.serial)
        if generation != self._connect_generation:
            _logger.debug("Connect to station %s superseded while refreshing credentials", self.serial)
            return

        _logger.debug(
            "Connecting to station %s p2p_did=%s dsk_key=%s",
            self.serial,
            self._hub.p2p_did,
            mask_secret(credential.key),
        )
        self._teardown_session()

        session = self._session_factory(self._hub.p2p_did, credential.key)
        self._session = session
        self._subscribe(session)
        await session.connect()

    def _subscribe(self, session: P2PSession) -> None:
        session.on(SessionEvent.CONNECTED, self._on_connected)
        session.on(SessionEvent.DISCONNECTED, self._on_disconnected)
        session.on(SessionEvent.COMMAND, self._on_command_result)
        session.on(SessionEvent.ALARM_MODE, self._on_alarm_mode)
        session.on(SessionEvent.CAMERA_INFO, self._on_camera_info)
        session.on(SessionEvent.START_DOWNLOAD, self._on_start_download)
        session.on(SessionEvent.FINISH_DOWNLOAD, self._on_finish_download)
        session.on(SessionEvent.START_LIVESTREAM, self._on_start_livestream)
        session.on(SessionEvent.STOP_LIVESTREAM, self._on_stop_livestream)
        session.on(SessionEvent.WIFI_RSSI, self._on_wifi_rssi)

    def _teardown_session(self) -> None:
        session = self._session
        self._session = None
        if session is None:
            return
        session.remove_all_listeners()
        session.close()

    def close(self) -> None:
        """Disconnect and suppress any pending reconnect.  Safe in any state."""
        _logger.info("Disconnect from station %s.", self.serial)
        self._connect_generation += 1
        self._reconnect.cancel()
        task = self._reconnect_task
        self._reconnect_task = None
        if task is not None and not task.done():
            task.cancel()
        self._teardown_session()
        self._state = ConnectionState.DISCONNECTED

    def _on_reconnect_timer(self) -> None:
        self._reconnect_task = asyncio.get_running_loop().create_task(self._reconnect_now())

    async def _reconnect_now(self) -> None:
        try:
            await self.connect()
        except Exception:
            _logger.warning("Reconnect to station %s failed", self.serial, exc_info=True)
            # A failed handshake may never report "disconnected"; keep retrying.
            if self._session is not None:
                self._reconnect.on_disconnect()
        finally:
            if self._reconnect_task is asyncio.current_task():
                self._reconnect_task = None

    def _spawn(self, coro: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Future[Any]) -> None:
        self._background_tasks.discard(task)  # type: ignore[arg-type]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.debug("Background task for station %s failed", self.serial, exc_info=exc)

    # ------------------------------------------------------------------
    # Session events
    # ------------------------------------------------------------------

    def _on_connected(self, address: Address) -> None:
        self._reconnect.on_connect_success()
        self._state = ConnectionState.CONNECTED
        _logger.info("Connected to station %s on host %s and port %s.", self.serial, address.host, address.port)
        self._emit(StationEvent.CONNECTED, self, address)

    def _on_disconnected(self) -> None:
        _logger.info("Disconnected from station %s.", self.serial)
        self._emit(StationEvent.DISCONNECTED, self)
        if self._session is not None:
            self._state = ConnectionState.CONNECTING
            self._reconnect.on_disconnect()

    def _on_command_result(self, result: CommandResult) -> None:
        _logger.debug(
            "Station %s command result command_type=%s channel=%s return_code=%s",
            self.serial,
            result.command_type,
            result.channel,
            result.return_code,
        )
        self._emit(StationEvent.COMMAND_RESULT, self, result)

    def _on_alarm_mode(self, mode: AlarmMode | int) -> None:
        alarm_mode = AlarmMode(int(mode))
        _logger.info("Alarm mode for station %s changed to: %s", self.serial, alarm_mode.name)
        self._update_parameter(ParamType.SCHEDULE_MODE, str(int(mode)), self._clock())
        # Refresh guard mode derived state.
        self._spawn(self.get_camera_info())

    def _on_camera_info(self, camera_info: CameraInfoResponse) -> None:
        _logger.debug("Station %s camera info with %d params", self.serial, len(camera_info.params))
        timestamp = self._clock()
        devices: dict[str, ParameterSet] = {}
        for param in camera_info.params:
            if param.dev_type == STATION_CHANNEL:
                self._update_parameter(param.param_type, param.param_value, timestamp)
                continue
            device_sn = self._hub.device_serial_for_channel(param.dev_type)
            if device_sn is None:
                continue
            devices.setdefault(device_sn, {})[param.param_type] = ParameterValue(
                value=read_value(param.param_type, param.param_value),
                modified=timestamp,
            )
        for device_sn, params in devices.items():
            self._emit(StationEvent.DEVICE_PARAMETERS_UPDATED, device_sn, params)

    def _on_start_download(self, channel: int, metadata: Any, video_stream: Any, audio_stream: Any) -> None:
        _logger.debug("Station %s download started on channel %s", self.serial, channel)
        self._emit(StationEvent.DOWNLOAD_START, self, channel, metadata, video_stream, audio_stream)

    def _on_finish_download(self, channel: int) -> None:
        _logger.debug("Station %s download finished on channel %s", self.serial, channel)
        self._emit(StationEvent.DOWNLOAD_FINISH, self, channel)

    def _on_start_livestream(self, channel: int, metadata: Any, video_stream: Any, audio_stream: Any) -> None:
        _logger.debug("Station %s livestream started on channel %s", self.serial, channel)
        self._emit(StationEvent.LIVESTREAM_START, self, channel, metadata, video_stream, audio_stream)

    def _on_stop_livestream(self, channel: int) -> None:
        _logger.debug("Station %s livestream stopped on channel %s", self.serial, channel)
        self._emit(StationEvent.LIVESTREAM_STOP, self, channel)

    def _on_wifi_rssi(self, channel: int, rssi: int) -> None:
        owner = self._hub.device_serial_for_channel(channel) or self.serial
        _logger.debug("Station %s wifi rssi %s on channel %s", self.serial, rssi, channel)
        self._emit(StationEvent.PARAMETER_CHANGED, owner, CommandType.CMD_WIFI_CONFIG, str(rssi), self._clock())

    # ------------------------------------------------------------------
    # Command dispatch
    # ------------------------------------------------------------------

    async def _ensure_connected(self) -> P2PSession:
        """Connect implicitly when needed and return the connected session."""
        if not self.is_connected():
            _logger.debug("P2P connection to station %s not present, establish it.", self.serial)
            try:
                await self.connect()
            except Exception:
                _logger.debug("Implicit connect to station %s failed", self.serial, exc_info=True)
        session = self._session
        if session is None or not session.is_connected():
            raise StationNotConnectedError(f"P2P connection to station {self.serial} could not be established")
        return session

    def _connected_session(self) -> P2PSession:
        session = self._session
        if session is None or not session.is_connected():
            raise StationNotConnectedError(f"P2P connection to station {self.serial} not present, command aborted")
        return session

    async def _send(self, session: P2PSession, commands: tuple[WireCommand, ...]) -> None:
        try:
            for wire in commands:
                await self._send_one(session, wire)
        except Exception:
            _logger.warning("Station %s: sending command failed", self.serial, exc_info=True)

    async def _send_one(self, session: P2PSession, wire: WireCommand) -> None:
        _logger.debug(
            "Station %s sending %s (%s) on channel %s payload=%s",
            self.serial,
            wire.command.name,
            wire.encoding,
            wire.channel,
            redact_payload(wire.payload),
        )
        if wire.encoding is CommandEncoding.INT:
            await session.send_command_with_int(wire.command, wire.value, wire.str_value, wire.channel)
        elif wire.encoding is CommandEncoding.INT_STRING:
            await session.send_command_with_int_string(
                wire.command,
                wire.value,
                wire.value_sub,
                wire.str_value,
                wire.str_value_sub,
                wire.channel,
            )
        elif wire.encoding is CommandEncoding.STRING:
            await session.send_command_with_string(wire.command, wire.str_value, wire.str_value_sub, wire.channel)
        else:
            await session.send_command_with_string_payload(wire.command, wire.payload or "", wire.channel)

    async def _run(
        self,
        intent: str,
        route: Callable[[], tuple[WireCommand, ...]],
        *,
        implicit_connect: bool = False,
    ) -> None:
        """Route then send an intent; rejections are logged, never raised."""
        try:
            commands = route()
            session = await self._ensure_connected() if implicit_connect else self._connected_session()
        except InvalidGuardModeError as exc:
            _logger.error("%s: %s", intent, exc)
            return
        except StationCommandError as exc:
            _logger.warning("%s: %s", intent, exc)
            return
        await self._send(session, commands)

    # ------------------------------------------------------------------
    # Station intents
    # ------------------------------------------------------------------

    async def set_guard_mode(self, mode: GuardMode | int) -> None:
        await self._run(
            "set_guard_mode",
            lambda: self._router.guard_mode(self._hub, mode),
            implicit_connect=True,
        )

    async def get_camera_info(self) -> None:
        await self._run("get_camera_info", lambda: self._router.camera_info(self._hub), implicit_connect=True)

    async def get_storage_info(self) -> None:
        await self._run("get_storage_info", lambda: self._router.storage_info(self._hub), implicit_connect=True)

    async def reboot_hub(self) -> None:
        await self._run("reboot_hub", lambda: self._router.reboot(self._hub))

    # ------------------------------------------------------------------
    # Device intents
    # ------------------------------------------------------------------

    async def set_status_led(self, device: DeviceInfo, value: bool) -> None:
        await self._run("set_status_led", lambda: self._router.status_led(self._hub, device, value))

    async def set_auto_night_vision(self, device: DeviceInfo, value: bool) -> None:
        await self._run("set_auto_night_vision", lambda: self._router.auto_night_vision(self._hub, device, value))

    async def set_anti_theft_detection(self, device: DeviceInfo, value: bool) -> None:
        await self._run(
            "set_anti_theft_detection",
            lambda: self._router.anti_theft_detection(self._hub, device, value),
        )

    async def set_watermark(self, device: DeviceInfo, value: WatermarkSetting | int) -> None:
        await self._run("set_watermark", lambda: self._router.watermark(self._hub, device, value))

    async def enable_device(self, device: DeviceInfo, value: bool) -> None:
        await self._run("enable_device", lambda: self._router.enable_device(self._hub, device, value))

    async def start_download(self, path: str, cipher_id: int) -> None:
        try:
            session = self._connected_session()
        except StationNotConnectedError as exc:
            _logger.warning("start_download: %s", exc)
            return
        try:
            cipher = await self._api.get_cipher(cipher_id, self._hub.member.admin_user_id)
        except StationError as exc:
            _logger.warning("start_download: cipher %s lookup failed: %s", cipher_id, exc)
            cipher = None
        except Exception:
            _logger.exception("start_download: unexpected error looking up cipher %s", cipher_id)
            cipher = None
        if cipher is None:
            _logger.warning(
                "Cancelled download of video %r from station %s, because RSA certificate couldn't be loaded.",
                path,
                self.serial,
            )
            return
        _logger.debug("start_download: station %s download video path: %s", self.serial, path)
        try:
            session.set_download_key(cipher.private_key)
        except Exception:
            _logger.warning(
                "Cancelled download of video %r from station %s, because the RSA key of cipher %s was rejected.",
                path,
                self.serial,
                cipher_id,
                exc_info=True,
            )
            return
        await self._send(session, self._router.start_download(self._hub, path))

    async def cancel_download(self, device: DeviceInfo) -> None:
        await self._run("cancel_download", lambda: self._router.cancel_download(self._hub, device))

    async def start_livestream(self, device: DeviceInfo) -> None:
        try:
            session = self._connected_session()
            commands = self._router.start_livestream(self._hub, device, session.get_rsa_private_key())
        except StationCommandError as exc:
            _logger.warning("start_livestream: %s", exc)
            return
        await self._send(session, commands)

    async def stop_livestream(self, device: DeviceInfo) -> None:
        await self._run("stop_livestream", lambda: self._router.stop_livestream(self._hub, device))

    def is_live_streaming(self, device: DeviceInfo) -> bool:
        session = self._session
        if session is None or not session.is_connected():
            return False
        if device.station_serial != self.serial:
            return False
        return session.is_live_streaming(device.channel)
