"""Diagnostics snapshot for a Tapo hub."""

from __future__ import annotations

from typing import Any

from .connection import TapoHub
from .const import (
    DIAG_ADDRESS,
    DIAG_CONNECTED,
    DIAG_CREDENTIALS,
    DIAG_DIRECTORY,
    DIAG_HEALTH,
    DIAG_NAME,
    REDACTED,
)


async def async_get_diagnostics(hub: TapoHub) -> dict[str, Any]:
    """Return diagnostics for a hub.

    Reads only local state; no request is sent to the hub. Credentials
    are redacted.
    """
    directory = hub.cache.directory
    directory_info: dict[str, Any] | None = None
    if directory is not None:
        directory_info = {
            "count": len(directory),
            "age_seconds": hub.cache.age(),
            "fresh": hub.cache.get() is not None,
            "timestamp": directory.timestamp.isoformat(),
            "devices": [
                {
                    "device_id": device.device_id,
                    "model": device.model,
                    "category": device.category,
                    "status": device.status,
                }
                for device in directory
            ],
        }

    return {
        DIAG_NAME: hub.name,
        DIAG_ADDRESS: hub.address,
        DIAG_CONNECTED: hub.connected,
        DIAG_CREDENTIALS: {"email": REDACTED, "password": REDACTED},
        DIAG_HEALTH: hub.health.as_dict(),
        DIAG_DIRECTORY: directory_info,
    }
