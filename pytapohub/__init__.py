"""pytapohub - Async client for Tapo H100 hubs and their child devices.

This package provides a typed interface for discovering and controlling
child devices (S200-series switches, T310/T315 sensors) registered to a
local Tapo hub. The authenticated transport is supplied by the caller.

Main components:
- TapoHub: Shared connection with single-flight connect
- TapoHubClient: Discovery sweep, directory cache and device control
- CommandDispatcher: Command payloads in, CommandResult out

Example:
    hub = TapoHub("me@example.com", "secret", "192.168.1.50", session_factory)
    switches = CommandDispatcher(hub, DeviceClass.SWITCH)

    result = await switches.dispatch({"command": "on", "deviceId": "dev1"})
    print(result.as_payload())
"""

from .cache import DeviceDirectoryCache
from .client import TapoHubClient
from .config import HUB_CONFIG_SCHEMA, HubConfig
from .connection import TapoHub
from .diagnostics import async_get_diagnostics
from .dispatcher import (
    Command,
    CommandDispatcher,
    CommandFailure,
    CommandResult,
    CommandSuccess,
    CommandType,
    DeviceClass,
    parse_command,
)
from .exceptions import (
    TapoHubConfigurationError,
    TapoHubConnectionFailed,
    TapoHubException,
    TapoHubTransportError,
)
from .models import ChildDevice, Credentials, DeviceDirectory, HubHealth
from .protocol import control_child, decode_nickname, normalize_child_device
from .session import HubSession, SessionFactory

__all__ = [
    # Connection and client
    "TapoHub",
    "TapoHubClient",
    "DeviceDirectoryCache",
    "HubSession",
    "SessionFactory",
    # Configuration
    "HUB_CONFIG_SCHEMA",
    "HubConfig",
    # Dispatch
    "Command",
    "CommandDispatcher",
    "CommandFailure",
    "CommandResult",
    "CommandSuccess",
    "CommandType",
    "DeviceClass",
    "parse_command",
    # Models
    "ChildDevice",
    "Credentials",
    "DeviceDirectory",
    "HubHealth",
    # Protocol utilities
    "control_child",
    "decode_nickname",
    "normalize_child_device",
    # Diagnostics
    "async_get_diagnostics",
    # Exceptions
    "TapoHubConfigurationError",
    "TapoHubConnectionFailed",
    "TapoHubException",
    "TapoHubTransportError",
]
