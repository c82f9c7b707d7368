"""Command dispatch for hub front ends.

Front ends hand over a free-form payload, either a bare command string or
a mapping ``{"command": ..., "deviceId": ...}``. The payload is decoded
once into a Command and executed against the hub client. Every outcome,
including hub failures, comes back as a CommandResult.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any, Awaitable, Callable, ClassVar

from .client import TapoHubClient
from .connection import TapoHub
from .const import DEFAULT_TEMP_UNIT
from .exceptions import TapoHubException
from .models import ChildDevice

_LOGGER = logging.getLogger(__name__)

DEVICE_ID_REQUIRED = 'Device ID required. Use "discover" command first.'
COMMAND_REQUIRED = "Command required"


class DeviceClass(Enum):
    """Kind of front end a dispatcher serves."""

    SWITCH = "switch"
    SENSOR = "sensor"


class CommandType(Enum):
    """Logical commands understood by the dispatcher."""

    DISCOVER = "discover"
    TURN_ON = "turnOn"
    TURN_OFF = "turnOff"
    TOGGLE = "toggle"
    STATUS = "getInfo"
    READ = "read"
    UNKNOWN = "unknown"


COMMAND_ALIASES: dict[DeviceClass, dict[str, CommandType]] = {
    DeviceClass.SWITCH: {
        "discover": CommandType.DISCOVER,
        "list": CommandType.DISCOVER,
        "listdevices": CommandType.DISCOVER,
        "on": CommandType.TURN_ON,
        "turnon": CommandType.TURN_ON,
        "turn_on": CommandType.TURN_ON,
        "off": CommandType.TURN_OFF,
        "turnoff": CommandType.TURN_OFF,
        "turn_off": CommandType.TURN_OFF,
        "toggle": CommandType.TOGGLE,
        "status": CommandType.STATUS,
        "getinfo": CommandType.STATUS,
        "get_info": CommandType.STATUS,
    },
    DeviceClass.SENSOR: {
        "discover": CommandType.DISCOVER,
        "list": CommandType.DISCOVER,
        "listsensors": CommandType.DISCOVER,
        "read": CommandType.READ,
        "status": CommandType.READ,
        "getinfo": CommandType.READ,
        "get_readings": CommandType.READ,
    },
}

AVAILABLE_COMMANDS: dict[DeviceClass, tuple[str, ...]] = {
    DeviceClass.SWITCH: ("on", "off", "toggle", "status", "discover"),
    DeviceClass.SENSOR: ("read", "status", "discover"),
}

# Key holding the filtered device list in a discover result
DISCOVER_KEYS: dict[DeviceClass, str] = {
    DeviceClass.SWITCH: "switches",
    DeviceClass.SENSOR: "sensors",
}


@dataclass(frozen=True)
class Command:
    """A decoded command.

    ``token`` is the command string as received, None if the payload did
    not carry one.
    """

    type: CommandType
    token: str | None = None
    device_id: str | None = None

    @property
    def needs_device(self) -> bool:
        """Return True if the command targets a single device."""
        return self.type not in (CommandType.DISCOVER, CommandType.UNKNOWN)


def parse_command(
    payload: Any,
    device_class: DeviceClass = DeviceClass.SWITCH,
    default_device_id: str | None = None,
) -> Command:
    """Decode a front-end payload into a Command.

    Args:
        payload: Command string, or mapping with ``command`` and optional
            ``deviceId`` (``device_id`` is accepted too)
        device_class: Alias table to match against
        default_device_id: Device id used when the payload names none

    Returns:
        Command; unrecognized tokens decode to ``CommandType.UNKNOWN``
    """
    device_id = default_device_id
    if isinstance(payload, Mapping):
        token = payload.get("command")
        device_id = payload.get("deviceId") or payload.get("device_id") or device_id
    else:
        token = payload

    if device_id is not None and not isinstance(device_id, str):
        device_id = str(device_id)

    if not isinstance(token, str):
        return Command(CommandType.UNKNOWN, token=None, device_id=device_id)

    command_type = COMMAND_ALIASES[device_class].get(
        token.strip().lower(), CommandType.UNKNOWN
    )
    return Command(command_type, token=token, device_id=device_id or None)


@dataclass(frozen=True)
class CommandSuccess:
    """Successful command outcome.

    ``data`` keys are the front-end wire names (``deviceId``,
    ``allDevices``); device records inside keep the hub's field names.
    """

    command: str
    data: Mapping[str, Any] = field(default_factory=dict)

    success: ClassVar[bool] = True

    def as_payload(self) -> dict[str, Any]:
        """Return the result as handed to front ends."""
        return {"success": True, "command": self.command, **self.data}


@dataclass(frozen=True)
class CommandFailure:
    """Failed command outcome."""

    error: str
    available_commands: tuple[str, ...] | None = None

    success: ClassVar[bool] = False

    def as_payload(self) -> dict[str, Any]:
        """Return the result as handed to front ends."""
        payload: dict[str, Any] = {"success": False, "error": self.error}
        if self.available_commands is not None:
            payload["availableCommands"] = list(self.available_commands)
        return payload


CommandResult = CommandSuccess | CommandFailure

Handler = Callable[[TapoHubClient, Command], Awaitable[CommandResult]]


class CommandDispatcher:
    """Runs commands for one front end against a shared hub.

    Toggle reads the cached state and then writes the inverse. The device
    may change in between; the device is the authority and no lock is
    taken.
    """

    def __init__(
        self,
        hub: TapoHub,
        device_class: DeviceClass = DeviceClass.SWITCH,
        device_id: str | None = None,
    ) -> None:
        """Initialize dispatcher.

        Args:
            hub: Shared hub connection
            device_class: Front-end profile (alias table, discover filter)
            device_id: Device used when a payload names none
        """
        self._hub = hub
        self._device_class = device_class
        self._device_id = device_id or None
        self._handlers: dict[CommandType, Handler] = {
            CommandType.DISCOVER: self._discover,
            CommandType.TURN_ON: self._turn_on,
            CommandType.TURN_OFF: self._turn_off,
            CommandType.TOGGLE: self._toggle,
            CommandType.STATUS: self._status,
            CommandType.READ: self._read,
        }

    @property
    def device_class(self) -> DeviceClass:
        """Return front-end profile."""
        return self._device_class

    @property
    def available_commands(self) -> tuple[str, ...]:
        """Return commands advertised to the front end."""
        return AVAILABLE_COMMANDS[self._device_class]

    def parse(self, payload: Any) -> Command:
        """Decode a payload with this dispatcher's profile."""
        return parse_command(payload, self._device_class, self._device_id)

    async def dispatch(self, payload: Any) -> CommandResult:
        """Decode and execute a payload. Never raises."""
        command = self.parse(payload)

        if command.type is CommandType.UNKNOWN:
            if command.token is None:
                return CommandFailure(COMMAND_REQUIRED, self.available_commands)
            _LOGGER.warning("Unknown command received: %s", command.token)
            return CommandFailure(
                f"Unknown command: {command.token}", self.available_commands
            )

        if command.needs_device and not command.device_id:
            return CommandFailure(DEVICE_ID_REQUIRED)

        try:
            client = await self._hub.get_connection()
            return await self._handlers[command.type](client, command)
        except TapoHubException as err:
            _LOGGER.error("Error processing command %s: %s", command.token, err)
            return CommandFailure(str(err))
        except Exception as err:  # noqa: BLE001
            _LOGGER.exception("Unexpected error processing command %s", command.token)
            return CommandFailure(str(err) or type(err).__name__)

    async def async_handle(self, payload: Any) -> dict[str, Any]:
        """Dispatch a payload and return the result payload dict."""
        result = await self.dispatch(payload)
        return result.as_payload()

    def _matches(self, device: ChildDevice) -> bool:
        """Return True if the device belongs to this front end's class."""
        if self._device_class is DeviceClass.SENSOR:
            return device.is_sensor
        return device.is_switch

    def _not_found(self, device_id: str) -> CommandFailure:
        """Return the not-found failure for this profile."""
        noun = "Sensor" if self._device_class is DeviceClass.SENSOR else "Device"
        return CommandFailure(f"{noun} {device_id} not found")

    # =========================================================================
    # Handlers
    # =========================================================================

    async def _discover(self, client: TapoHubClient, command: Command) -> CommandResult:
        """Sweep the hub and filter devices for this front end."""
        directory = await client.get_child_devices(force_refresh=True)
        matching = directory.filter(self._matches)
        key = DISCOVER_KEYS[self._device_class]
        _LOGGER.info(
            "Discovered %d %s out of %d total devices",
            len(matching),
            key,
            len(directory),
        )
        return CommandSuccess(
            CommandType.DISCOVER.value,
            {
                key: [device.as_dict() for device in matching],
                "allDevices": [device.as_dict() for device in directory],
                "totalDevices": len(directory),
            },
        )

    async def _turn_on(self, client: TapoHubClient, command: Command) -> CommandResult:
        """Switch the device on."""
        await client.turn_on(command.device_id)
        _LOGGER.info("Device %s turned ON", command.device_id)
        return CommandSuccess(
            CommandType.TURN_ON.value, {"state": "on", "deviceId": command.device_id}
        )

    async def _turn_off(self, client: TapoHubClient, command: Command) -> CommandResult:
        """Switch the device off."""
        await client.turn_off(command.device_id)
        _LOGGER.info("Device %s turned OFF", command.device_id)
        return CommandSuccess(
            CommandType.TURN_OFF.value, {"state": "off", "deviceId": command.device_id}
        )

    async def _toggle(self, client: TapoHubClient, command: Command) -> CommandResult:
        """Invert the device's current on/off state."""
        directory = await client.get_child_devices()
        device = directory.get(command.device_id)
        if device is None:
            return self._not_found(command.device_id)

        if device.is_on:
            await client.turn_off(command.device_id)
            state = "off"
        else:
            await client.turn_on(command.device_id)
            state = "on"
        _LOGGER.info("Device %s toggled %s", command.device_id, state)
        return CommandSuccess(
            CommandType.TOGGLE.value, {"state": state, "deviceId": command.device_id}
        )

    async def _status(self, client: TapoHubClient, command: Command) -> CommandResult:
        """Return the device record from the directory."""
        directory = await client.get_child_devices()
        device = directory.get(command.device_id)
        if device is None:
            return self._not_found(command.device_id)

        _LOGGER.info("Retrieved info for device %s", command.device_id)
        return CommandSuccess(
            CommandType.STATUS.value, {"deviceInfo": device.as_dict()}
        )

    async def _read(self, client: TapoHubClient, command: Command) -> CommandResult:
        """Return temperature and humidity readings for a sensor."""
        directory = await client.get_child_devices()
        sensor = directory.get(command.device_id)
        if sensor is None:
            return self._not_found(command.device_id)

        raw = sensor.raw
        readings = {
            "temperature": raw.get("current_temp"),
            "humidity": raw.get("current_humidity"),
            "temp_unit": raw.get("temp_unit") or DEFAULT_TEMP_UNIT,
            "temp_exception": raw.get("current_temp_exception"),
            "humidity_exception": raw.get("current_humidity_exception"),
        }
        _LOGGER.info(
            "Sensor %s: %s, %s",
            command.device_id,
            format_temperature(readings["temperature"], readings["temp_unit"]),
            format_humidity(readings["humidity"]),
        )
        return CommandSuccess(
            CommandType.READ.value,
            {
                "deviceId": command.device_id,
                "readings": readings,
                "device": {
                    "nickname": sensor.nickname,
                    "model": sensor.model,
                    "status": sensor.status,
                    "battery_low": sensor.low_battery,
                    "signal_level": sensor.signal_level,
                    "rssi": sensor.rssi,
                    "report_interval": raw.get("report_interval"),
                },
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )


def format_temperature(value: Any, unit: str) -> str:
    """Format a temperature reading, e.g. ``21.5°C``."""
    if value is None:
        return "N/A"
    suffix = "C" if unit == DEFAULT_TEMP_UNIT else "F"
    return f"{value}°{suffix}"


def format_humidity(value: Any) -> str:
    """Format a humidity reading, e.g. ``48%``."""
    if value is None:
        return "N/A"
    return f"{value}%"
