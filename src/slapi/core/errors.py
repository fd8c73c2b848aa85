"""Error taxonomy: configuration, remote faults, transport failures, caller bugs."""
from __future__ import annotations

from typing import Any


class SoftLayerError(Exception):
    """Base for every error raised by slapi."""


class ConfigurationError(SoftLayerError):
    """Client or service cannot be built: missing name, credentials, conflicting options."""


class RemoteFault(SoftLayerError):
    """
    The API reported an error for a well-formed request.
    code is kept exactly as the server sent it (int or str, e.g. "SoftLayer_Exception_ObjectNotFound").
    """

    def __init__(self, code: Any, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class TransportError(SoftLayerError):
    """Connection, DNS, timeout, HTTP status or decode failure. Nothing reached the API's logic."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message if status_code is None else f"HTTP {status_code}: {message}")


class ProgrammingError(SoftLayerError):
    """Caller bug: runaway dispatch depth or malformed filter usage. Not retryable."""
