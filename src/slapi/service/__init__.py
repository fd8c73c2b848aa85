from slapi.service.filter import CallParameters, ParameterFilter
from slapi.service.proxy import Service

__all__ = ["CallParameters", "ParameterFilter", "Service"]
