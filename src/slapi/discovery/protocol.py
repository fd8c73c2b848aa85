"""Endpoint resolution: resolve(service_name) -> URL(s)."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class EndpointResolver(Protocol):
    """
    How to find the URL a service is served at. Default: base URL + service name.
    """

    def resolve(self, service_name: str) -> list[str]:
        """Return list of URLs (the first one is used)."""
        ...


class StaticEndpoint:
    """Each service is a path segment under base_url (https://api.softlayer.com/xmlrpc/v3/SoftLayer_Account)."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"

    def resolve(self, service_name: str) -> list[str]:
        return [self.base_url + service_name] if service_name else []


class MappedEndpoint:
    """Per-service overrides (name -> URL), falling back to another resolver."""

    def __init__(self, services: dict[str, str], fallback: EndpointResolver | None = None) -> None:
        self._services = dict(services)
        self._fallback = fallback

    def resolve(self, service_name: str) -> list[str]:
        url = self._services.get(service_name)
        if url:
            return [url]
        return self._fallback.resolve(service_name) if self._fallback is not None else []
