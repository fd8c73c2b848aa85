"""Client configuration: typed settings plus loading from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any

from slapi import __version__
from slapi.core.errors import ConfigurationError

API_PUBLIC_ENDPOINT = "https://api.softlayer.com/xmlrpc/v3/"
API_PRIVATE_ENDPOINT = "https://api.service.softlayer.com/xmlrpc/v3/"
SOAP_PUBLIC_ENDPOINT = "https://api.softlayer.com/soap/v3/"

DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_CALL_DEPTH = 3
TRANSPORTS = ("xmlrpc", "soap")

_TRUE = {"1", "true", "yes", "on"}


def default_user_agent() -> str:
    return f"slapi/{__version__}"


def default_endpoint(transport: str) -> str:
    """Public endpoint matching the wire protocol."""
    return SOAP_PUBLIC_ENDPOINT if transport == "soap" else API_PUBLIC_ENDPOINT


@dataclass
class ClientSettings:
    """
    Everything a Client needs besides the credentials object itself.
    Explicit values win; missing ones are filled by settings_from_env().
    """

    username: str | None = None
    api_key: str | None = None
    endpoint_url: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = field(default_factory=default_user_agent)
    transport: str = "xmlrpc"
    debug: bool = False
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH

    def merged(self, **overrides: Any) -> ClientSettings:
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def resolved_endpoint(self) -> str:
        return self.endpoint_url or default_endpoint(self.transport)


class Config:
    """Environment access. Variables are read with a prefix, e.g. SL_USERNAME -> username."""

    @classmethod
    def load_from_env(cls, prefix: str = "SL_", **defaults: Any) -> dict[str, Any]:
        """Load from os.environ with prefix and defaults. Returns dict for ClientSettings(**...)."""
        result = dict(defaults)
        for key, value in os.environ.items():
            if key.startswith(prefix) and value != "":
                name = key[len(prefix):].lower()
                result[name] = value
        return result


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE


def settings_from_env(prefix: str = "SL_") -> ClientSettings:
    """
    Build ClientSettings from SL_USERNAME, SL_API_KEY, SL_ENDPOINT_URL, SL_TIMEOUT,
    SL_USER_AGENT, SL_TRANSPORT, SL_DEBUG and SL_MAX_CALL_DEPTH. Unknown variables are ignored.
    """
    raw = Config.load_from_env(prefix)
    settings = ClientSettings()
    values: dict[str, Any] = {}
    for name in ("username", "api_key", "endpoint_url", "user_agent"):
        if name in raw:
            values[name] = raw[name].strip()
    if "transport" in raw:
        values["transport"] = raw["transport"].strip().lower()
    try:
        if "timeout" in raw:
            values["timeout"] = float(raw["timeout"])
        if "max_call_depth" in raw:
            values["max_call_depth"] = int(raw["max_call_depth"])
    except ValueError as exc:
        raise ConfigurationError(f"Invalid numeric setting in {prefix}* environment: {exc}") from exc
    if "debug" in raw:
        values["debug"] = _as_bool(raw["debug"])
    return replace(settings, **values)
