"""
SOAP adapter: structured/typed wire format.

Outgoing: sequences become keyed structures (item0, item1, ...) and the operation is called
by its snake_case name. Incoming: typed arrays become lists again, and the result is found
under the *original* method name (getOpenTicketsResponse / getOpenTicketsReturn).
"""
from __future__ import annotations

import base64
import logging
import threading
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from xml.etree import ElementTree

import httpx

from slapi.core.errors import RemoteFault, TransportError
from slapi.rpc.normalize import KeyedArray, from_keyed, snake_case, to_keyed
from slapi.rpc.protocol import RpcRequest

logger = logging.getLogger(__name__)

SOAP_ENV = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP_ENC = "http://schemas.xmlsoap.org/soap/encoding/"
XSI = "http://www.w3.org/2001/XMLSchema-instance"
XSD = "http://www.w3.org/2001/XMLSchema"
API_NS = "http://api.service.softlayer.com/soap/v3/"

ElementTree.register_namespace("SOAP-ENV", SOAP_ENV)
ElementTree.register_namespace("SOAP-ENC", SOAP_ENC)
ElementTree.register_namespace("xsi", XSI)
ElementTree.register_namespace("slapi", API_NS)

_XSI_TYPE = f"{{{XSI}}}type"
_XSI_NIL = f"{{{XSI}}}nil"
_ARRAY_TYPE = f"{{{SOAP_ENC}}}arrayType"

_INT_TYPES = {"int", "integer", "long", "short", "byte", "unsignedInt", "unsignedLong", "unsignedShort", "unsignedByte"}
_INT32_MAX = 2**31 - 1


def operation_name(method: str) -> str:
    """SOAP calling convention: getOpenTickets -> get_open_tickets."""
    return snake_case(method)


def _local(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


# --- encoding -----------------------------------------------------------------


def _write_value(parent: ElementTree.Element, tag: str, value: Any) -> ElementTree.Element:
    el = ElementTree.SubElement(parent, tag)
    if value is None:
        el.set(_XSI_NIL, "true")
    elif isinstance(value, KeyedArray):
        el.set(_XSI_TYPE, "SOAP-ENC:Array")
        el.set("SOAP-ENC:arrayType", f"xsd:anyType[{len(value)}]")
        for key, item in value.ordered():
            _write_value(el, key, item)
    elif isinstance(value, Mapping):
        if not value:
            el.set(_XSI_TYPE, "SOAP-ENC:Struct")
        for key, child in value.items():
            _write_value(el, str(key), child)
    elif isinstance(value, bool):
        el.set(_XSI_TYPE, "xsd:boolean")
        el.text = "true" if value else "false"
    elif isinstance(value, int):
        el.set(_XSI_TYPE, "xsd:int" if abs(value) <= _INT32_MAX else "xsd:long")
        el.text = str(value)
    elif isinstance(value, float):
        el.set(_XSI_TYPE, "xsd:double")
        el.text = repr(value)
    elif isinstance(value, Decimal):
        el.set(_XSI_TYPE, "xsd:decimal")
        el.text = str(value)
    elif isinstance(value, (datetime, date)):
        el.set(_XSI_TYPE, "xsd:dateTime" if isinstance(value, datetime) else "xsd:date")
        el.text = value.isoformat()
    elif isinstance(value, (bytes, bytearray)):
        el.set(_XSI_TYPE, "xsd:base64Binary")
        el.text = base64.b64encode(bytes(value)).decode("ascii")
    else:
        el.set(_XSI_TYPE, "xsd:string")
        el.text = str(value)
    return el


def build_envelope(request: RpcRequest) -> bytes:
    """Header bag -> SOAP-ENV:Header entries; args -> item{n} children of the operation element."""
    envelope = ElementTree.Element(f"{{{SOAP_ENV}}}Envelope")
    # Both prefixes appear only inside attribute values or literal attribute names,
    # so ElementTree never declares them itself.
    envelope.set("xmlns:xsd", XSD)
    envelope.set("xmlns:SOAP-ENC", SOAP_ENC)
    header = ElementTree.SubElement(envelope, f"{{{SOAP_ENV}}}Header")
    for name, value in to_keyed(request.headers).items():
        _write_value(header, f"{{{API_NS}}}{name}", value)

    body = ElementTree.SubElement(envelope, f"{{{SOAP_ENV}}}Body")
    operation = ElementTree.SubElement(body, f"{{{API_NS}}}{operation_name(request.method)}")
    for key, value in to_keyed(list(request.args)).ordered():
        _write_value(operation, key, value)
    return ElementTree.tostring(envelope, encoding="utf-8", xml_declaration=True)


# --- decoding -----------------------------------------------------------------


def _parse_datetime(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _read_scalar(xsi_type: str, text: str) -> Any:
    if xsi_type in _INT_TYPES:
        return int(text)
    if xsi_type == "boolean":
        return text.strip().lower() in ("true", "1")
    if xsi_type in ("double", "float"):
        return float(text)
    if xsi_type == "decimal":
        return Decimal(text)
    if xsi_type == "dateTime":
        return _parse_datetime(text)
    if xsi_type == "date":
        return date.fromisoformat(text)
    if xsi_type == "base64Binary":
        return base64.b64decode(text)
    return text


def read_value(el: ElementTree.Element) -> Any:
    """Element -> native value. Typed arrays come back as KeyedArray; from_keyed() finishes the job."""
    if el.get(_XSI_NIL) in ("true", "1"):
        return None
    xsi_type = el.get(_XSI_TYPE, "").split(":")[-1]
    if xsi_type == "Array" or el.get(_ARRAY_TYPE) is not None:
        return KeyedArray.from_items([read_value(child) for child in el])
    if xsi_type == "Struct" and not len(el):
        return {}
    if len(el):
        result: dict[str, Any] = {}
        for child in el:
            tag = _local(child.tag)
            value = read_value(child)
            if tag in result:
                # Repeated untyped elements collect into a list.
                if not isinstance(result[tag], list):
                    result[tag] = [result[tag]]
                result[tag].append(value)
            else:
                result[tag] = value
        return result
    return _read_scalar(xsi_type, el.text or "")


def _find_child(parent: ElementTree.Element, local_name: str) -> ElementTree.Element | None:
    for child in parent:
        if _local(child.tag) == local_name:
            return child
    return None


def parse_response(content: bytes, method: str) -> Any:
    """Fault -> RemoteFault; otherwise the {method}Return value (None when the method returns nothing)."""
    try:
        root = ElementTree.fromstring(content)
    except ElementTree.ParseError as exc:
        raise TransportError(f"Malformed SOAP response: {exc}") from exc

    body = _find_child(root, "Body")
    if body is None:
        raise TransportError("SOAP response has no Body")

    fault = _find_child(body, "Fault")
    if fault is not None:
        code_el = _find_child(fault, "faultcode")
        string_el = _find_child(fault, "faultstring")
        code = (code_el.text or "").strip() if code_el is not None else ""
        message = (string_el.text or "") if string_el is not None else ""
        raise RemoteFault(code, message)

    response_el = _find_child(body, f"{method}Response")
    if response_el is None:
        raise TransportError(f"SOAP response has no {method}Response element")
    return_el = _find_child(response_el, f"{method}Return")
    if return_el is None:
        return_el = next(iter(response_el), None)
    if return_el is None:
        return None
    try:
        return from_keyed(read_value(return_el))
    except (ValueError, InvalidOperation) as exc:
        raise TransportError(f"Cannot decode {method} result: {exc}") from exc


class SoapTransport:
    """Blocking SOAP 1.1 over HTTP(S). One httpx.Client per transport, created on first call."""

    name = "soap"

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

    def call(self, request: RpcRequest) -> Any:
        body = build_envelope(request)
        logger.debug("SOAP %s -> %s (%d bytes)", operation_name(request.method), request.url, len(body))
        headers = {
            "Content-Type": "text/xml; charset=utf-8",
            "SOAPAction": f'"{API_NS}{request.service_name}/{operation_name(request.method)}"',
            "User-Agent": self.user_agent,
        }
        try:
            response = self._get_client().post(request.url, content=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Timed out calling {request.service_name}::{request.method}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Cannot reach {request.url}: {exc}") from exc

        if response.status_code >= 400:
            # SOAP 1.1 sends faults with HTTP 500.
            if b"Fault" in response.content:
                parse_response(response.content, request.method)
            raise TransportError(response.reason_phrase or "request failed", status_code=response.status_code)
        return parse_response(response.content, request.method)

    def close(self) -> None:
        with self._lock:
            if self._client is not None and self._owns_client:
                self._client.close()
                self._client = None
