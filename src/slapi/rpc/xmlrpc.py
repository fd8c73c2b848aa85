"""
XML-RPC adapter: positional arguments, exact method names, nil allowed both ways.
HTTP goes through httpx; (de)serialization through the standard xmlrpc.client codec.
"""
from __future__ import annotations

import logging
import threading
import xmlrpc.client
from typing import Any
from xml.parsers.expat import ExpatError

import httpx

from slapi.core.errors import ProgrammingError, RemoteFault, TransportError
from slapi.rpc.protocol import RpcRequest

logger = logging.getLogger(__name__)


def encode_request(request: RpcRequest) -> bytes:
    """
    The header bag travels as the first positional parameter, wrapped as {"headers": ...};
    the caller's arguments follow unchanged. Values XML-RPC cannot carry, such as
    ints beyond 32 bits or non-string map keys, raise ProgrammingError.
    """
    params = ({"headers": request.headers}, *request.args)
    try:
        body = xmlrpc.client.dumps(params, methodname=request.method, allow_none=True, encoding="utf-8")
    except (TypeError, OverflowError) as exc:
        raise ProgrammingError(f"Cannot encode {request.service_name}::{request.method} for XML-RPC: {exc}") from exc
    return body.encode("utf-8")


def decode_response(content: bytes) -> Any:
    """
    Decode a methodResponse. Faults become RemoteFault with the code untouched:
    the API sends string codes such as "SoftLayer_Exception_ObjectNotFound".
    """
    try:
        params, _ = xmlrpc.client.loads(content, use_builtin_types=True)
    except xmlrpc.client.Fault as fault:
        raise RemoteFault(fault.faultCode, fault.faultString) from None
    except (ExpatError, xmlrpc.client.ResponseError, ValueError, TypeError, IndexError) as exc:
        raise TransportError(f"Malformed XML-RPC response: {exc}") from exc
    return params[0] if params else None


class XmlRpcTransport:
    """Blocking XML-RPC over HTTP(S). One httpx.Client (connection pool) per transport, created on first call."""

    name = "xmlrpc"

    def __init__(
        self,
        timeout: float = 60.0,
        user_agent: str = "slapi",
        http_client: httpx.Client | None = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._client = http_client
        self._owns_client = http_client is None
        self._lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        with self._lock:
            if self._client is None:
                self._client = httpx.Client(timeout=httpx.Timeout(self.timeout))
            return self._client

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "text/xml; charset=utf-8",
            "Accept-Encoding": "identity",
            "User-Agent": self.user_agent,
        }

    def call(self, request: RpcRequest) -> Any:
        body = encode_request(request)
        logger.debug("XML-RPC %s -> %s (%d bytes)", request.method, request.url, len(body))
        try:
            response = self._get_client().post(request.url, content=body, headers=self._headers())
        except httpx.TimeoutException as exc:
            raise TransportError(f"Timed out calling {request.service_name}::{request.method}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Cannot reach {request.url}: {exc}") from exc

        if response.status_code >= 400:
            # Faults may arrive with an error status; they still carry the API's code.
            if b"<fault>" in response.content:
                decode_response(response.content)
            raise TransportError(response.reason_phrase or "request failed", status_code=response.status_code)
        return decode_response(response.content)

    def close(self) -> None:
        with self._lock:
            if self._client is not None and self._owns_client:
                self._client.close()
                self._client = None
