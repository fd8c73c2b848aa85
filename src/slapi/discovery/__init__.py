from slapi.discovery.protocol import EndpointResolver, MappedEndpoint, StaticEndpoint

__all__ = ["EndpointResolver", "MappedEndpoint", "StaticEndpoint"]
