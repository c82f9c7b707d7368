"""Async client for a Tapo hub and its child devices.

This module provides:
- Lazy session establishment through an injected session factory
- Paginated child device discovery with a short-lived cache
- Child device control through the ``control_child`` envelope
"""

from __future__ import annotations

import logging
from typing import Any

from . import protocol
from .cache import DeviceDirectoryCache
from .const import (
    DEFAULT_CACHE_SECONDS,
    DISCOVERY_PAGE_SIZE,
    MAX_DISCOVERY_PAGES,
    METHOD_GET_DEVICE_INFO,
    METHOD_SET_DEVICE_INFO,
)
from .exceptions import (
    TapoHubConnectionFailed,
    TapoHubException,
    TapoHubTransportError,
)
from .models import ChildDevice, Credentials, DeviceDirectory, HubHealth
from .session import HubSession, SessionFactory

_LOGGER = logging.getLogger(__name__)


class TapoHubClient:
    """Client owning one session to a Tapo hub.

    Example:
        client = TapoHubClient(credentials, "192.168.1.50", session_factory)
        directory = await client.get_child_devices()
        await client.turn_on(directory.device_ids[0])
    """

    def __init__(
        self,
        credentials: Credentials,
        address: str,
        session_factory: SessionFactory,
        cache: DeviceDirectoryCache | None = None,
        health: HubHealth | None = None,
        max_pages: int = MAX_DISCOVERY_PAGES,
    ) -> None:
        """Initialize client.

        Args:
            credentials: Normalized account credentials
            address: Hub IP or hostname
            session_factory: Builds an unauthenticated HubSession
            cache: Directory cache (a 5 second cache is created if omitted)
            health: Shared health metrics
            max_pages: Upper bound on pages fetched per discovery sweep
        """
        self._credentials = credentials
        self._address = address
        self._session_factory = session_factory
        self._cache = cache or DeviceDirectoryCache(DEFAULT_CACHE_SECONDS)
        self._health = health or HubHealth()
        self._max_pages = max_pages
        self._session: HubSession | None = None
        self._closed = False

    @property
    def address(self) -> str:
        """Return hub address."""
        return self._address

    @property
    def connected(self) -> bool:
        """Return True if a session has been established."""
        return self._session is not None

    @property
    def cache(self) -> DeviceDirectoryCache:
        """Return the directory cache."""
        return self._cache

    @property
    def health(self) -> HubHealth:
        """Return health metrics."""
        return self._health

    async def connect(self) -> HubSession:
        """Create a session and log in to the hub.

        Reopens a closed client.

        Raises:
            TapoHubConnectionFailed: If the session cannot be created or
                login is rejected
        """
        try:
            session = self._session_factory(self._credentials, self._address)
            await session.login()
        except TapoHubConnectionFailed as err:
            self._session = None
            self._health.record_connect_failure(str(err))
            _LOGGER.error("Failed to connect to hub at %s: %s", self._address, err)
            raise
        except Exception as err:
            self._session = None
            self._health.record_connect_failure(str(err))
            _LOGGER.error("Failed to connect to hub at %s: %s", self._address, err)
            raise TapoHubConnectionFailed(
                f"Failed to connect to hub at {self._address}: {err}"
            ) from err

        self._session = session
        self._closed = False
        self._health.record_connect()
        _LOGGER.info("Successfully connected to hub at %s", self._address)
        return session

    async def _ensure_session(self) -> HubSession:
        """Return the session, logging in first if needed.

        Raises:
            TapoHubConnectionFailed: If the client was closed; a closed
                client only logs in again through an explicit connect()
        """
        if self._session is not None:
            return self._session
        if self._closed:
            raise TapoHubConnectionFailed(
                f"Connection to hub at {self._address} was closed"
            )
        return await self.connect()

    def close(self) -> None:
        """Drop the session and refuse further requests until connect()."""
        self._session = None
        self._closed = True

    # =========================================================================
    # Discovery
    # =========================================================================

    async def get_child_devices(self, force_refresh: bool = False) -> DeviceDirectory:
        """Return the hub's child devices.

        A cached directory younger than the cache TTL is returned as is
        unless ``force_refresh`` is set.

        Raises:
            TapoHubConnectionFailed: If a session had to be created and failed
            TapoHubTransportError: If a page fetch failed; the cache is kept
        """
        if not force_refresh:
            cached = self._cache.get()
            if cached is not None:
                return cached

        session = await self._ensure_session()

        try:
            directory = await self._sweep(session)
        except TapoHubException as err:
            self._health.record_transport_failure(str(err))
            _LOGGER.error("Failed to get child devices: %s", err)
            raise
        except Exception as err:
            self._health.record_transport_failure(str(err))
            _LOGGER.error("Failed to get child devices: %s", err)
            raise TapoHubTransportError(f"Failed to get child devices: {err}") from err

        self._health.record_sweep()
        if self._closed:
            # Closed mid-sweep; the hub already dropped its directory
            return directory
        self._cache.store(directory)
        return directory

    async def _sweep(self, session: HubSession) -> DeviceDirectory:
        """Fetch every page of the child device list.

        Stops once the reported total is reached, on an empty page, on a
        short page when no total was reported, or after ``max_pages``.
        """
        devices: dict[str, ChildDevice] = {}
        total: int | None = None
        fetched = 0
        start_index = 0

        for _ in range(self._max_pages):
            response = await session.get_child_device_list(start_index)
            page = protocol.parse_device_page(response)

            if total is None and page.total is not None:
                total = page.total
                _LOGGER.debug("Total child devices: %d", total)

            for record in page.records:
                device = protocol.normalize_child_device(record)
                if device.device_id in devices:
                    _LOGGER.debug("Skipping duplicate device %s", device.device_id)
                    continue
                devices[device.device_id] = device
                _LOGGER.debug(
                    "Found device: %s (%s) - %s",
                    device.nickname,
                    device.model,
                    device.category,
                )

            fetched += len(page.records)
            start_index += DISCOVERY_PAGE_SIZE

            if not page.records:
                break
            if total is not None:
                if fetched >= total:
                    break
            elif len(page.records) < DISCOVERY_PAGE_SIZE:
                break
        else:
            _LOGGER.warning(
                "Stopped discovery after %d pages (%d devices fetched, total %s)",
                self._max_pages,
                fetched,
                total,
            )

        return DeviceDirectory(
            devices=tuple(devices.values()),
            fetched_at=self._cache.now(),
        )

    def invalidate_cache(self) -> None:
        """Drop the cached directory so the next read sweeps again."""
        self._cache.invalidate()

    async def find_devices_by_model(self, model: str) -> list[ChildDevice]:
        """Return devices whose model contains ``model`` (case-insensitive)."""
        directory = await self.get_child_devices()
        return directory.filter(lambda device: device.model_matches(model))

    async def find_devices_by_category(self, category: str) -> list[ChildDevice]:
        """Return devices whose category contains ``category``."""
        directory = await self.get_child_devices()
        return directory.filter(lambda device: device.category_matches(category))

    async def find_switches(self) -> list[ChildDevice]:
        """Return switch models and anything in a switch category."""
        directory = await self.get_child_devices()
        return directory.filter(lambda device: device.is_switch_like)

    async def find_sensors(self) -> list[ChildDevice]:
        """Return temperature/humidity sensors."""
        directory = await self.get_child_devices()
        return directory.filter(lambda device: device.is_sensor)

    # =========================================================================
    # Control
    # =========================================================================

    async def send_command(
        self,
        device_id: str,
        method: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a single method call to a child device.

        Args:
            device_id: Child device id
            method: Inner method name
            params: Inner method parameters

        Returns:
            Raw result from the hub

        Raises:
            TapoHubConnectionFailed: If a session had to be created and failed
            TapoHubTransportError: If the request failed
        """
        session = await self._ensure_session()
        request = protocol.control_child(device_id, method, params)
        try:
            return await session.send(request)
        except TapoHubException as err:
            self._health.record_transport_failure(str(err))
            _LOGGER.error("Failed to control device %s: %s", device_id, err)
            raise
        except Exception as err:
            self._health.record_transport_failure(str(err))
            _LOGGER.error("Failed to control device %s: %s", device_id, err)
            raise TapoHubTransportError(
                f"Failed to control device {device_id}: {err}"
            ) from err

    async def turn_on(self, device_id: str) -> Any:
        """Switch a child device on."""
        result = await self.send_command(
            device_id, METHOD_SET_DEVICE_INFO, {"device_on": True}
        )
        self._record_device_state(device_id, True)
        return result

    async def turn_off(self, device_id: str) -> Any:
        """Switch a child device off."""
        result = await self.send_command(
            device_id, METHOD_SET_DEVICE_INFO, {"device_on": False}
        )
        self._record_device_state(device_id, False)
        return result

    def _record_device_state(self, device_id: str, is_on: bool) -> None:
        """Write a confirmed on/off state through to the cached directory."""
        directory = self._cache.directory
        if directory is None or self._closed:
            return
        updated = directory.with_device_state(device_id, is_on)
        if updated is not directory:
            self._cache.store(updated)

    async def get_device_info(self, device_id: str) -> Any:
        """Read a child device's info directly from the hub."""
        return await self.send_command(device_id, METHOD_GET_DEVICE_INFO, {})

