from slapi.rpc.protocol import RpcRequest, Transport
from slapi.rpc.soap import SoapTransport
from slapi.rpc.xmlrpc import XmlRpcTransport

__all__ = [
    "RpcRequest",
    "SoapTransport",
    "Transport",
    "XmlRpcTransport",
]
