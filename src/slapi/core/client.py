"""
Client — connection configuration plus one Service per service name.
Services are created on first access and reused for the client's lifetime.
"""
from __future__ import annotations

import logging
import threading
from typing import Any

from slapi.auth.protocol import ApiKeyCredentials, CredentialsProvider
from slapi.core.config import TRANSPORTS, ClientSettings, settings_from_env
from slapi.core.errors import ConfigurationError
from slapi.discovery.protocol import EndpointResolver, StaticEndpoint
from slapi.rpc.protocol import Transport
from slapi.rpc.soap import SoapTransport
from slapi.rpc.xmlrpc import XmlRpcTransport
from slapi.service.proxy import Service

logger = logging.getLogger(__name__)

SERVICE_PREFIX = "SoftLayer_"


def normalize_service_name(name: str) -> str:
    """"Account" -> "SoftLayer_Account"; already prefixed names are kept."""
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError("Please provide a service name")
    name = name.strip()
    return name if name.startswith(SERVICE_PREFIX) else SERVICE_PREFIX + name


def make_transport(settings: ClientSettings) -> Transport:
    """Adapter for settings.transport ("xmlrpc" or "soap")."""
    if settings.transport == "xmlrpc":
        return XmlRpcTransport(timeout=settings.timeout, user_agent=settings.user_agent)
    if settings.transport == "soap":
        return SoapTransport(timeout=settings.timeout, user_agent=settings.user_agent)
    raise ConfigurationError(f"Unknown transport {settings.transport!r}; expected one of {', '.join(TRANSPORTS)}")


def _transport_name(transport: Transport | None) -> str | None:
    name = getattr(transport, "name", None)
    return name if name in TRANSPORTS else None


class Client:
    """
    Entry point: credentials, endpoint, timeout and the service registry.

        client = Client(username="joe", api_key="feeddeadbeef...")
        client["Ticket"].object_with_id(35212).getObject()

    Values not passed explicitly are read from SL_* environment variables.
    transport is either a name ("xmlrpc", "soap") or a ready Transport instance;
    an instance's name attribute, when it has one, picks the default endpoint.
    """

    def __init__(
        self,
        username: str | None = None,
        api_key: str | None = None,
        endpoint_url: str | None = None,
        *,
        credentials: CredentialsProvider | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
        transport: str | Transport | None = None,
        resolver: EndpointResolver | None = None,
        debug: bool | None = None,
        max_call_depth: int | None = None,
        settings: ClientSettings | None = None,
    ) -> None:
        if credentials is not None and (username or api_key):
            raise ConfigurationError("Provide either a credentials object or username/api_key, not both")
        if endpoint_url is not None and not endpoint_url.strip():
            raise ConfigurationError("endpoint_url must not be empty")

        base = settings if settings is not None else settings_from_env()
        self.settings = base.merged(
            username=username,
            api_key=api_key,
            endpoint_url=endpoint_url,
            timeout=timeout,
            user_agent=user_agent,
            # A ready adapter decides the wire protocol, and with it the default endpoint.
            transport=transport if isinstance(transport, str) else _transport_name(transport),
            debug=debug,
            max_call_depth=max_call_depth,
        )
        if self.settings.transport not in TRANSPORTS:
            raise ConfigurationError(
                f"Unknown transport {self.settings.transport!r}; expected one of {', '.join(TRANSPORTS)}"
            )

        if credentials is None:
            if not self.settings.username or not self.settings.api_key:
                raise ConfigurationError(
                    "A SoftLayer client requires a username and an API key "
                    "(pass them or set SL_USERNAME and SL_API_KEY)"
                )
            credentials = ApiKeyCredentials(self.settings.username, self.settings.api_key)
        self.credentials = credentials

        self._resolver = resolver or StaticEndpoint(self.settings.resolved_endpoint())
        self._transport: Transport | None = None if transport is None or isinstance(transport, str) else transport
        self._transport_lock = threading.Lock()
        self._services: dict[str, Service] = {}
        self._services_lock = threading.Lock()

    @classmethod
    def from_env(cls, prefix: str = "SL_") -> Client:
        return cls(settings=settings_from_env(prefix))

    @property
    def endpoint_url(self) -> str:
        return self.settings.resolved_endpoint()

    @property
    def timeout(self) -> float:
        return self.settings.timeout

    @property
    def user_agent(self) -> str:
        return self.settings.user_agent

    @property
    def debug(self) -> bool:
        return self.settings.debug

    @property
    def max_call_depth(self) -> int:
        return self.settings.max_call_depth

    @property
    def authentication_headers(self) -> dict[str, Any]:
        """Identity fragment sent with every call."""
        return self.credentials.authentication_headers()

    @property
    def transport(self) -> Transport:
        """Wire adapter, created on first use."""
        with self._transport_lock:
            if self._transport is None:
                self._transport = make_transport(self.settings)
                logger.debug("Using %s transport for %s", self.settings.transport, self.endpoint_url)
            return self._transport

    def url_for(self, service_name: str) -> str:
        urls = self._resolver.resolve(service_name)
        if not urls:
            raise ConfigurationError(f"No endpoint for service {service_name!r}")
        return urls[0]

    def service_named(self, service_name: str) -> Service:
        """The Service for service_name ("Account" or "SoftLayer_Account"); one instance per name."""
        full_name = normalize_service_name(service_name)
        with self._services_lock:
            service = self._services.get(full_name)
            if service is None:
                service = Service(full_name, client=self)
                self._services[full_name] = service
        return service

    def __getitem__(self, service_name: str) -> Service:
        return self.service_named(service_name)

    def close(self) -> None:
        """Release the transport's connections. Services stay usable; a new transport is made on demand."""
        with self._transport_lock:
            if self._transport is not None:
                self._transport.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Client(username={self.settings.username!r}, endpoint_url={self.endpoint_url!r})"
