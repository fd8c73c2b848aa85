"""
slapi — dynamic client for the SoftLayer API.
Get a Service from a Client by name and call any API method on it.
"""
__version__ = "0.1.0"

from slapi.core import (  # noqa: E402
    Client,
    ClientSettings,
    Config,
    ConfigurationError,
    ProgrammingError,
    RemoteFault,
    SoftLayerError,
    TransportError,
)
from slapi.service import CallParameters, ParameterFilter, Service  # noqa: E402

__all__ = [
    "CallParameters",
    "Client",
    "ClientSettings",
    "Config",
    "ConfigurationError",
    "ParameterFilter",
    "ProgrammingError",
    "RemoteFault",
    "Service",
    "SoftLayerError",
    "TransportError",
]
