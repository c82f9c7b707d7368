"""Fake Tapo hub for testing."""

from __future__ import annotations

import asyncio
import base64
import copy
import logging
from typing import Any

_LOGGER = logging.getLogger(__name__)

PAGE_SIZE = 10


def encode_nickname(name: str) -> str:
    """Encode a nickname the way the hub reports it."""
    return base64.b64encode(name.encode("utf-8")).decode("ascii")


def make_record(
    device_id: str,
    model: str = "S220",
    category: str = "subg.trigger.switch",
    nickname: str | None = None,
    device_on: bool = False,
    **extra: Any,
) -> dict[str, Any]:
    """Build a raw child device record."""
    record = {
        "device_id": device_id,
        "category": category,
        "type": "SMART.TAPOSWITCH",
        "model": model,
        "hw_ver": "1.0",
        "fw_ver": "1.1.2",
        "nickname": encode_nickname(nickname or device_id),
        "status": "online",
        "device_on": device_on,
        "at_low_battery": False,
        "rssi": -60,
        "signal_level": 2,
    }
    record.update(extra)
    return record


def make_sensor_record(device_id: str, **extra: Any) -> dict[str, Any]:
    """Build a raw T310 sensor record."""
    values = {
        "model": "T310",
        "category": "subg.trigger.temp-hmdt-sensor",
        "type": "SMART.TAPOSENSOR",
        "current_temp": 21.5,
        "current_humidity": 48,
        "temp_unit": "celsius",
        "current_temp_exception": 0,
        "current_humidity_exception": 0,
        "report_interval": 16,
    }
    values.update(extra)
    return make_record(device_id, **values)


class FakeTapoHub:
    """A fake hub holding child device records.

    Simulates:
    - Login with optional failure and delay
    - Paginated child device listing (10 per page)
    - control_child requests updating device_on

    Records every login, page request and sent envelope for assertions.
    """

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        """Initialize the fake hub."""
        self.records: list[dict[str, Any]] = list(records or [])

        # Behaviour switches
        self.report_sum = True
        self.sum_override: int | None = None
        self.always_full_pages = False
        self.login_error: Exception | None = None
        self.login_gate: asyncio.Event | None = None
        self.fail_on_offset: int | None = None
        self.send_error: Exception | None = None

        # Recorded traffic
        self.login_count = 0
        self.page_requests: list[int] = []
        self.sent: list[dict[str, Any]] = []
        self.sessions: list[FakeHubSession] = []

    def add(self, record: dict[str, Any]) -> None:
        """Register a child device record."""
        self.records.append(record)

    def factory(self, credentials: Any, address: str) -> "FakeHubSession":
        """Session factory handed to TapoHub / TapoHubClient."""
        session = FakeHubSession(self, credentials, address)
        self.sessions.append(session)
        return session

    def set_device_on(self, device_id: str, on: bool) -> None:
        """Change a device's state behind the client's back."""
        for record in self.records:
            if record["device_id"] == device_id:
                record["device_on"] = on

    def device_on(self, device_id: str) -> bool | None:
        """Return the stored on/off state for a device."""
        for record in self.records:
            if record["device_id"] == device_id:
                return record.get("device_on")
        return None

    def page(self, start_index: int) -> dict[str, Any]:
        """Return one page of the child device list."""
        if self.always_full_pages:
            items = [
                make_record(f"filler{start_index + i}") for i in range(PAGE_SIZE)
            ]
        else:
            items = self.records[start_index : start_index + PAGE_SIZE]

        response: dict[str, Any] = {
            "child_device_list": copy.deepcopy(items),
            "start_index": start_index,
        }
        if self.report_sum:
            response["sum"] = (
                self.sum_override if self.sum_override is not None else len(self.records)
            )
        return response

    def handle(self, request: dict[str, Any]) -> dict[str, Any]:
        """Apply a control_child request."""
        params = request["params"]
        inner = params["requestData"]["params"]["requests"][0]
        if inner["method"] == "set_device_info":
            self.set_device_on(params["device_id"], inner["params"]["device_on"])
        return {
            "responseData": {
                "result": {
                    "responses": [
                        {"method": inner["method"], "result": {}, "error_code": 0}
                    ]
                }
            }
        }


class FakeHubSession:
    """Session handed out by FakeTapoHub."""

    def __init__(self, hub: FakeTapoHub, credentials: Any, address: str) -> None:
        self.hub = hub
        self.credentials = credentials
        self.address = address
        self.logged_in = False

    async def login(self) -> None:
        self.hub.login_count += 1
        if self.hub.login_gate is not None:
            await self.hub.login_gate.wait()
        else:
            await asyncio.sleep(0)
        if self.hub.login_error is not None:
            raise self.hub.login_error
        self.logged_in = True
        _LOGGER.debug("Fake login to %s", self.address)

    async def get_child_device_list(self, start_index: int) -> dict[str, Any]:
        self.hub.page_requests.append(start_index)
        await asyncio.sleep(0)
        if self.hub.fail_on_offset == start_index:
            raise OSError(f"connection reset at offset {start_index}")
        return self.hub.page(start_index)

    async def send(self, request: dict[str, Any]) -> dict[str, Any]:
        self.hub.sent.append(copy.deepcopy(request))
        await asyncio.sleep(0)
        if self.hub.send_error is not None:
            raise self.hub.send_error
        return self.hub.handle(request)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
