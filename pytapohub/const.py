"""Constants for the Tapo hub client."""

from __future__ import annotations

from typing import Final

DEFAULT_HUB_NAME: Final = "H100 Hub"

# Configuration keys
CONF_EMAIL: Final = "email"
CONF_PASSWORD: Final = "password"
CONF_HUB_IP: Final = "hub_ip"
CONF_NAME: Final = "name"
CONF_CACHE_SECONDS: Final = "cache_seconds"
CONF_MAX_DISCOVERY_PAGES: Final = "max_discovery_pages"

# Device directory cache lifetime (seconds)
DEFAULT_CACHE_SECONDS: Final = 5.0

# The hub returns child devices 10 at a time
DISCOVERY_PAGE_SIZE: Final = 10

# Upper bound on pages per sweep; 100 pages covers 1000 children
MAX_DISCOVERY_PAGES: Final = 100

# Wire methods
METHOD_CONTROL_CHILD: Final = "control_child"
METHOD_MULTIPLE_REQUEST: Final = "multipleRequest"
METHOD_SET_DEVICE_INFO: Final = "set_device_info"
METHOD_GET_DEVICE_INFO: Final = "get_device_info"

UNKNOWN_NICKNAME: Final = "Unknown"
DEFAULT_TEMP_UNIT: Final = "celsius"

# Device classification
SWITCH_MODELS: Final = ("S220", "S210", "S200")
SENSOR_MODELS: Final = ("T310", "T315")
SWITCH_CATEGORY: Final = "switch"
SENSOR_CATEGORY: Final = "temp-hmdt-sensor"

# Diagnostic keys
DIAG_NAME: Final = "name"
DIAG_ADDRESS: Final = "address"
DIAG_CONNECTED: Final = "connected"
DIAG_HEALTH: Final = "health"
DIAG_DIRECTORY: Final = "directory"
DIAG_CREDENTIALS: Final = "credentials"
REDACTED: Final = "**REDACTED**"
