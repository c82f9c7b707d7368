"""Shared connection to one Tapo hub.

Several front ends (switches, sensors) hold the same TapoHub and may all
trigger a connect on first use. Concurrent connects share one login
attempt and its outcome.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any, Callable

from .cache import DeviceDirectoryCache
from .client import TapoHubClient
from .config import HubConfig
from .const import DEFAULT_CACHE_SECONDS, DEFAULT_HUB_NAME, MAX_DISCOVERY_PAGES
from .exceptions import TapoHubConfigurationError, TapoHubConnectionFailed
from .models import Credentials, HubHealth, normalize_hub_address
from .session import SessionFactory

_LOGGER = logging.getLogger(__name__)


class TapoHub:
    """Connection manager for a single hub.

    This class:
    - Validates credentials and address before any I/O
    - Deduplicates concurrent connection attempts
    - Hands out the shared TapoHubClient
    - Owns the device directory cache for the hub
    """

    def __init__(
        self,
        email: str | None,
        password: str | None,
        hub_ip: str | None,
        session_factory: SessionFactory,
        name: str = DEFAULT_HUB_NAME,
        cache_seconds: float = DEFAULT_CACHE_SECONDS,
        max_discovery_pages: int = MAX_DISCOVERY_PAGES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the hub.

        Args:
            email: Account email (trimmed and lower-cased)
            password: Account password (trimmed)
            hub_ip: Hub IP or hostname (trimmed)
            session_factory: Builds sessions for the client
            name: Display name
            cache_seconds: Device directory cache lifetime
            max_discovery_pages: Upper bound on pages per discovery sweep
            clock: Monotonic time source for the cache
        """
        self._credentials = Credentials.normalized(email, password)
        self._address = normalize_hub_address(hub_ip)
        self._session_factory = session_factory
        self._name = name
        self._max_discovery_pages = max_discovery_pages
        self._cache = DeviceDirectoryCache(cache_seconds, clock)
        self._health = HubHealth()

        self._client: TapoHubClient | None = None
        self._connected = False
        self._connect_task: asyncio.Task[TapoHubClient] | None = None

        _LOGGER.info("Hub config created: %s (%s)", self._name, self._address)

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        session_factory: SessionFactory,
        clock: Callable[[], float] = time.monotonic,
    ) -> "TapoHub":
        """Create a hub from a configuration mapping.

        Raises:
            TapoHubConfigurationError: If the mapping fails validation
        """
        hub_config = HubConfig.from_dict(config)
        return cls(
            email=hub_config.email,
            password=hub_config.password,
            hub_ip=hub_config.hub_ip,
            session_factory=session_factory,
            name=hub_config.name,
            cache_seconds=hub_config.cache_seconds,
            max_discovery_pages=hub_config.max_discovery_pages,
            clock=clock,
        )

    @property
    def name(self) -> str:
        """Return display name."""
        return self._name

    @property
    def address(self) -> str:
        """Return hub address."""
        return self._address

    @property
    def connected(self) -> bool:
        """Return True if a connected client is available."""
        return self._connected and self._client is not None

    @property
    def connecting(self) -> bool:
        """Return True while a connection attempt is in flight."""
        return self._connect_task is not None

    @property
    def health(self) -> HubHealth:
        """Return health metrics."""
        return self._health

    @property
    def cache(self) -> DeviceDirectoryCache:
        """Return the device directory cache."""
        return self._cache

    def _validate(self) -> None:
        """Check that credentials and address are present."""
        if not self._credentials.complete:
            raise TapoHubConfigurationError("Email and password required")
        if not self._address:
            raise TapoHubConfigurationError("H100 Hub IP address is required")

    async def connect(self) -> TapoHubClient:
        """Connect to the hub, or join the attempt already in flight.

        Returns:
            The connected client, shared by every caller

        Raises:
            TapoHubConfigurationError: If credentials or address are missing
            TapoHubConnectionFailed: If login failed
        """
        if self._connected and self._client is not None:
            return self._client

        if self._connect_task is None:
            self._validate()
            self._connect_task = asyncio.create_task(self._async_connect())
            self._connect_task.add_done_callback(_consume_connect_result)

        # A waiter that is cancelled must not cancel the shared attempt
        return await asyncio.shield(self._connect_task)

    async def _async_connect(self) -> TapoHubClient:
        """Run one connection attempt."""
        _LOGGER.info("Connecting to hub at %s...", self._address)
        client = TapoHubClient(
            self._credentials,
            self._address,
            self._session_factory,
            cache=self._cache,
            health=self._health,
            max_pages=self._max_discovery_pages,
        )
        task = asyncio.current_task()
        try:
            await client.connect()
        except BaseException:
            if self._connect_task is task:
                self._connect_task = None
                self._client = None
                self._connected = False
            raise

        if self._connect_task is not task:
            # disconnect() ran during login
            _LOGGER.debug("Connection to %s superseded by disconnect", self._address)
            client.close()
            self._health.record_disconnect()
            raise TapoHubConnectionFailed(
                f"Connection to hub at {self._address} was closed during login"
            )

        self._client = client
        self._connected = True
        self._connect_task = None
        return client

    async def get_connection(self) -> TapoHubClient:
        """Return the client, connecting first if needed."""
        if not self._connected or self._client is None:
            return await self.connect()
        return self._client

    def disconnect(self) -> None:
        """Drop the client and any in-flight attempt marker.

        A front end still holding the old client gets TapoHubConnectionFailed
        on its next request and must go through connect() again. Safe to
        call any number of times.
        """
        if self._client is not None:
            self._client.close()
        self._client = None
        self._connected = False
        self._connect_task = None
        self._cache.invalidate()
        self._health.record_disconnect()
        _LOGGER.info("Disconnected from hub %s", self._name)


def _consume_connect_result(task: asyncio.Task[TapoHubClient]) -> None:
    """Retrieve a finished attempt's exception.

    Every waiter may have been cancelled before the attempt failed.
    """
    if not task.cancelled() and task.exception() is not None:
        _LOGGER.debug("Connection attempt failed: %s", task.exception())
