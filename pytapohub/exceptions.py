"""Exceptions raised by the Tapo hub client."""

from __future__ import annotations


class TapoHubException(Exception):
    """Base class for all Tapo hub errors."""


class TapoHubConfigurationError(TapoHubException):
    """Credentials or hub address missing or invalid.

    Raised before any network I/O is attempted.
    """


class TapoHubConnectionFailed(TapoHubException):
    """Session could not be established (login failed)."""


class TapoHubTransportError(TapoHubException):
    """A discovery page fetch or control request failed."""
