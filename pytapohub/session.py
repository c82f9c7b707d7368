"""Session boundary between the client and the hub transport.

The authenticated transport (including the hub's encrypted handshake) is
supplied by the caller through a ``SessionFactory``. The client only relies
on the three coroutines declared by ``HubSession``.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

from .models import Credentials


class HubSession(Protocol):
    """Authenticated transport to one hub."""

    async def login(self) -> None:
        """Authenticate with the hub. Raises on failure."""

    async def get_child_device_list(self, start_index: int) -> dict[str, Any]:
        """Return one page: ``{"sum": int, "child_device_list": [...]}``."""

    async def send(self, request: dict[str, Any]) -> Any:
        """Send a request envelope and return the hub's result."""


SessionFactory = Callable[[Credentials, str], HubSession]
