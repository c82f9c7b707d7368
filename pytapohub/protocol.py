"""Wire helpers for the Tapo hub protocol.

This module provides:
- Request builders for the ``control_child`` envelope
- Normalization of raw child device records
- Parsing of child device list pages

The envelope layout is what the hub firmware expects; field names and
nesting must not change.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, NamedTuple

from .const import (
    METHOD_CONTROL_CHILD,
    METHOD_MULTIPLE_REQUEST,
    UNKNOWN_NICKNAME,
)
from .models import ChildDevice

_LOGGER = logging.getLogger(__name__)


# =============================================================================
# Request Builders
# =============================================================================


def control_child(
    device_id: str, method: str, params: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Build a ``control_child`` request for a single child method call.

    Args:
        device_id: Child device id
        method: Inner method name (e.g. ``set_device_info``)
        params: Inner method parameters

    Returns:
        Request dict ready for ``HubSession.send``
    """
    return {
        "method": METHOD_CONTROL_CHILD,
        "params": {
            "device_id": device_id,
            "requestData": {
                "method": METHOD_MULTIPLE_REQUEST,
                "params": {
                    "requests": [
                        {
                            "method": method,
                            "params": params if params is not None else {},
                        }
                    ]
                },
            },
        },
    }


# =============================================================================
# Record Normalization
# =============================================================================


def decode_nickname(value: Any) -> str:
    """Decode a base64 nickname.

    Missing ``=`` padding is restored before decoding. Returns
    ``"Unknown"`` when the value is absent, not base64, or not UTF-8 once
    decoded. Never raises.
    """
    if not value or not isinstance(value, (str, bytes)):
        return UNKNOWN_NICKNAME
    value = value.strip()
    padding = -len(value) % 4
    if padding:
        value += ("=" if isinstance(value, str) else b"=") * padding
    try:
        decoded = base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        _LOGGER.warning("Malformed nickname: %r", value)
        return UNKNOWN_NICKNAME
    return decoded or UNKNOWN_NICKNAME


def normalize_child_device(record: dict[str, Any]) -> ChildDevice:
    """Convert a raw child device record into a ChildDevice."""
    return ChildDevice(
        device_id=str(record.get("device_id", "")),
        category=record.get("category"),
        type=record.get("type"),
        model=record.get("model"),
        hw_ver=record.get("hw_ver"),
        fw_ver=record.get("fw_ver"),
        nickname=decode_nickname(record.get("nickname")),
        status=record.get("status"),
        is_on=bool(record.get("device_on", False)),
        low_battery=bool(record.get("at_low_battery", False)),
        signal_level=record.get("signal_level"),
        rssi=record.get("rssi"),
        raw=dict(record),
    )


class DevicePage(NamedTuple):
    """One page of the child device list."""

    total: int | None
    records: list[dict[str, Any]]


def parse_device_page(response: Any) -> DevicePage:
    """Extract the total and raw records from a child device list response.

    A missing or non-positive ``sum`` yields ``total=None``. Non-dict
    entries in ``child_device_list`` are skipped.
    """
    if not isinstance(response, dict):
        return DevicePage(total=None, records=[])

    total = response.get("sum")
    if not isinstance(total, int) or isinstance(total, bool) or total <= 0:
        total = None

    items = response.get("child_device_list") or []
    records = [item for item in items if isinstance(item, dict)]
    return DevicePage(total=total, records=records)
