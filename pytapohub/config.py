"""Configuration schema for a Tapo hub."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import voluptuous as vol

from .const import (
    CONF_CACHE_SECONDS,
    CONF_EMAIL,
    CONF_HUB_IP,
    CONF_MAX_DISCOVERY_PAGES,
    CONF_NAME,
    CONF_PASSWORD,
    DEFAULT_CACHE_SECONDS,
    DEFAULT_HUB_NAME,
    MAX_DISCOVERY_PAGES,
)
from .exceptions import TapoHubConfigurationError


def _optional_str(value: Any) -> str:
    """Coerce None to an empty string, reject other non-strings."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise vol.Invalid("expected a string")
    return value


def _not_bool(value: Any) -> Any:
    """Reject booleans, which would otherwise pass as numbers."""
    if isinstance(value, bool):
        raise vol.Invalid("expected a number")
    return value


def _whole_number(value: Any) -> int:
    """Coerce to int without truncating fractional values."""
    if isinstance(value, float) and not value.is_integer():
        raise vol.Invalid("expected a whole number")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as err:
        raise vol.Invalid("expected a whole number") from err


HUB_CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_EMAIL, default=""): vol.All(_optional_str, vol.Strip, vol.Lower),
        vol.Optional(CONF_PASSWORD, default=""): vol.All(_optional_str, vol.Strip),
        vol.Optional(CONF_HUB_IP, default=""): vol.All(_optional_str, vol.Strip),
        vol.Optional(CONF_NAME, default=DEFAULT_HUB_NAME): vol.All(
            _optional_str, vol.Strip, lambda name: name or DEFAULT_HUB_NAME
        ),
        vol.Optional(CONF_CACHE_SECONDS, default=DEFAULT_CACHE_SECONDS): vol.All(
            _not_bool, vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional(CONF_MAX_DISCOVERY_PAGES, default=MAX_DISCOVERY_PAGES): vol.All(
            _not_bool, _whole_number, vol.Range(min=1)
        ),
    },
    extra=vol.REMOVE_EXTRA,
)


@dataclass(frozen=True)
class HubConfig:
    """Validated hub configuration.

    Missing credentials are allowed here; they are reported when the hub
    first tries to connect.
    """

    email: str
    password: str
    hub_ip: str
    name: str = DEFAULT_HUB_NAME
    cache_seconds: float = DEFAULT_CACHE_SECONDS
    max_discovery_pages: int = MAX_DISCOVERY_PAGES

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HubConfig":
        """Validate and normalize a configuration mapping.

        Raises:
            TapoHubConfigurationError: If the mapping is invalid
        """
        try:
            validated = HUB_CONFIG_SCHEMA(dict(data))
        except vol.Invalid as err:
            raise TapoHubConfigurationError(f"Invalid hub configuration: {err}") from err

        return cls(
            email=validated[CONF_EMAIL],
            password=validated[CONF_PASSWORD],
            hub_ip=validated[CONF_HUB_IP],
            name=validated[CONF_NAME],
            cache_seconds=validated[CONF_CACHE_SECONDS],
            max_discovery_pages=validated[CONF_MAX_DISCOVERY_PAGES],
        )

    def __repr__(self) -> str:
        return f"HubConfig(name={self.name!r}, hub_ip={self.hub_ip!r})"
