"""Data models for the Tapo hub client."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Iterator

from .const import SENSOR_CATEGORY, SENSOR_MODELS, SWITCH_CATEGORY, SWITCH_MODELS


@dataclass(frozen=True)
class Credentials:
    """Account credentials used to log in to the hub.

    Both fields are excluded from repr so they never end up in logs.
    """

    email: str = field(repr=False)
    password: str = field(repr=False)

    @classmethod
    def normalized(cls, email: str | None, password: str | None) -> "Credentials":
        """Trim both fields and lower-case the email."""
        return cls(
            email=(email or "").strip().lower(),
            password=(password or "").strip(),
        )

    @property
    def complete(self) -> bool:
        """Return True if both email and password are present."""
        return bool(self.email and self.password)


def normalize_hub_address(address: str | None) -> str:
    """Trim a hub IP address or hostname."""
    return (address or "").strip()


@dataclass(frozen=True)
class ChildDevice:
    """A child device registered under the hub.

    Fields not promoted to attributes (sensor readings, report interval)
    stay available through ``raw``.
    """

    device_id: str
    category: str | None = None
    type: str | None = None
    model: str | None = None
    hw_ver: str | None = None
    fw_ver: str | None = None
    nickname: str = "Unknown"
    status: str | None = None
    is_on: bool = False
    low_battery: bool = False
    signal_level: int | None = None
    rssi: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def model_matches(self, *models: str) -> bool:
        """Return True if the model string contains any of ``models``."""
        if not self.model:
            return False
        upper = self.model.upper()
        return any(model.upper() in upper for model in models)

    def category_matches(self, category: str) -> bool:
        """Return True if the category string contains ``category``."""
        return bool(self.category) and category in self.category

    @property
    def is_switch(self) -> bool:
        """Return True for S200-series switches."""
        return self.model_matches(*SWITCH_MODELS)

    @property
    def is_sensor(self) -> bool:
        """Return True for temperature/humidity sensors."""
        return self.category_matches(SENSOR_CATEGORY) or self.model_matches(
            *SENSOR_MODELS
        )

    @property
    def is_switch_like(self) -> bool:
        """Return True for switch models or any switch category."""
        return self.is_switch or self.category_matches(SWITCH_CATEGORY)

    def as_dict(self) -> dict[str, Any]:
        """Return the device using the hub's field names."""
        return {
            "device_id": self.device_id,
            "category": self.category,
            "type": self.type,
            "model": self.model,
            "hw_ver": self.hw_ver,
            "fw_ver": self.fw_ver,
            "nickname": self.nickname,
            "status": self.status,
            "device_on": self.is_on,
            "at_low_battery": self.low_battery,
            "rssi": self.rssi,
            "signal_level": self.signal_level,
            "raw": dict(self.raw),
        }


@dataclass(frozen=True)
class DeviceDirectory:
    """Result of one discovery sweep.

    ``fetched_at`` is a monotonic reading used for cache expiry,
    ``timestamp`` is wall-clock time for display.
    """

    devices: tuple[ChildDevice, ...]
    fetched_at: float
    timestamp: datetime = field(default_factory=datetime.now)

    def __len__(self) -> int:
        return len(self.devices)

    def __iter__(self) -> Iterator[ChildDevice]:
        return iter(self.devices)

    def get(self, device_id: str) -> ChildDevice | None:
        """Return the device with ``device_id`` or None."""
        for device in self.devices:
            if device.device_id == device_id:
                return device
        return None

    def filter(self, predicate: Callable[[ChildDevice], bool]) -> list[ChildDevice]:
        """Return devices matching ``predicate``, in directory order."""
        return [device for device in self.devices if predicate(device)]

    @property
    def device_ids(self) -> list[str]:
        """Return all device ids in directory order."""
        return [device.device_id for device in self.devices]

    def with_device_state(self, device_id: str, is_on: bool) -> "DeviceDirectory":
        """Return a copy with one device's on/off state replaced.

        The fetch time is kept so the copy expires with this directory.
        Returns self if the device is not listed.
        """
        if self.get(device_id) is None:
            return self
        devices = tuple(
            replace(device, is_on=is_on, raw={**device.raw, "device_on": is_on})
            if device.device_id == device_id
            else device
            for device in self.devices
        )
        return replace(self, devices=devices)


@dataclass
class HubHealth:
    """Connection and discovery metrics for one hub."""

    connected: bool = False
    connected_at: datetime | None = None
    connect_count: int = 0
    connect_failure_count: int = 0
    sweep_count: int = 0
    last_sweep_at: datetime | None = None
    transport_failure_count: int = 0
    last_error: str | None = None

    def record_connect(self) -> None:
        """Record a successful login."""
        self.connected = True
        self.connected_at = datetime.now()
        self.connect_count += 1

    def record_connect_failure(self, error: str) -> None:
        """Record a failed login."""
        self.connected = False
        self.connect_failure_count += 1
        self.last_error = error

    def record_disconnect(self) -> None:
        """Record an explicit disconnect."""
        self.connected = False

    def record_sweep(self) -> None:
        """Record a completed discovery sweep."""
        self.sweep_count += 1
        self.last_sweep_at = datetime.now()

    def record_transport_failure(self, error: str) -> None:
        """Record a failed page fetch or control request."""
        self.transport_failure_count += 1
        self.last_error = error

    def as_dict(self) -> dict[str, Any]:
        """Return metrics as a JSON-friendly dict."""
        return {
            "connected": self.connected,
            "connected_at": self.connected_at.isoformat() if self.connected_at else None,
            "connect_count": self.connect_count,
            "connect_failure_count": self.connect_failure_count,
            "sweep_count": self.sweep_count,
            "last_sweep_at": self.last_sweep_at.isoformat() if self.last_sweep_at else None,
            "transport_failure_count": self.transport_failure_count,
            "last_error": self.last_error,
        }
