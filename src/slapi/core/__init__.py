from slapi.core.client import Client, normalize_service_name
from slapi.core.config import ClientSettings, Config, settings_from_env
from slapi.core.errors import (
    ConfigurationError,
    ProgrammingError,
    RemoteFault,
    SoftLayerError,
    TransportError,
)

__all__ = [
    "Client",
    "ClientSettings",
    "Config",
    "ConfigurationError",
    "ProgrammingError",
    "RemoteFault",
    "SoftLayerError",
    "TransportError",
    "normalize_service_name",
    "settings_from_env",
]
