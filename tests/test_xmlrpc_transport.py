"""XML-RPC adapter against an in-process HTTP handler (httpx.MockTransport)."""
import xmlrpc.client
from datetime import datetime

import httpx
import pytest

from slapi import Client, ProgrammingError, RemoteFault, TransportError
from slapi.rpc import RpcRequest, XmlRpcTransport
from slapi.rpc.xmlrpc import decode_response, encode_request

URL = "https://api.softlayer.com/xmlrpc/v3/SoftLayer_Account"


def _response(*params, status=200):
    body = xmlrpc.client.dumps(params, methodresponse=True, allow_none=True)
    return httpx.Response(status, content=body.encode("utf-8"))


def _fault(code, message, status=200):
    body = xmlrpc.client.dumps(xmlrpc.client.Fault(code, message), methodresponse=True)
    return httpx.Response(status, content=body.encode("utf-8"))


def _transport(handler, **kwargs):
    return XmlRpcTransport(http_client=httpx.Client(transport=httpx.MockTransport(handler)), **kwargs)


def _request(method="getObject", headers=None, args=()):
    return RpcRequest(url=URL, service_name="SoftLayer_Account", method=method, headers=headers or {}, args=args)


class TestEncoding:
    def test_headers_are_first_parameter(self):
        body = encode_request(_request("getHardware", {"authenticate": {"username": "u"}}, (1, "two")))
        params, method = xmlrpc.client.loads(body)
        assert method == "getHardware"
        assert params == ({"headers": {"authenticate": {"username": "u"}}}, 1, "two")

    def test_none_is_encoded_as_nil(self):
        body = encode_request(_request("editObject", args=({"notes": None},)))
        assert b"<nil/>" in body
        params, _ = xmlrpc.client.loads(body)
        assert params[1] == {"notes": None}

    def test_method_name_is_exact(self):
        _, method = xmlrpc.client.loads(encode_request(_request("getOpenTickets")))
        assert method == "getOpenTickets"

    def test_int_beyond_32_bits_is_a_programming_error(self):
        with pytest.raises(ProgrammingError, match="getBandwidth"):
            encode_request(_request("getBandwidth", args=(2**31,)))

    def test_non_string_map_key_is_a_programming_error(self):
        with pytest.raises(ProgrammingError):
            encode_request(_request("editObject", args=({1: "a"},)))


class TestDecoding:
    def test_single_value(self):
        assert decode_response(xmlrpc.client.dumps(({"id": 5},), methodresponse=True).encode()) == {"id": 5}

    def test_nil_result(self):
        assert decode_response(xmlrpc.client.dumps((None,), methodresponse=True, allow_none=True).encode()) is None

    def test_empty_params(self):
        body = b"<?xml version='1.0'?><methodResponse><params></params></methodResponse>"
        assert decode_response(body) is None

    def test_string_fault_code_is_preserved(self):
        body = xmlrpc.client.dumps(xmlrpc.client.Fault("SoftLayer_Exception", "bad"), methodresponse=True)
        with pytest.raises(RemoteFault) as exc_info:
            decode_response(body.encode())
        assert exc_info.value.code == "SoftLayer_Exception"
        assert exc_info.value.message == "bad"

    def test_malformed_body(self):
        with pytest.raises(TransportError):
            decode_response(b"<html>gateway timeout")

    def test_not_a_method_response(self):
        with pytest.raises(TransportError):
            decode_response(b"<html></html>")


class TestXmlRpcTransport:
    def test_posts_to_service_url(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["params"], seen["method"] = xmlrpc.client.loads(request.content)
            return _response([{"id": 1}, {"id": 2}])

        transport = _transport(handler, user_agent="slapi-test")
        result = transport.call(_request("getHardware", {"authenticate": {"username": "u", "apiKey": "k"}}))
        assert result == [{"id": 1}, {"id": 2}]
        assert seen["url"] == URL
        assert seen["method"] == "getHardware"
        assert seen["headers"]["User-Agent"] == "slapi-test"
        assert seen["headers"]["Accept-Encoding"] == "identity"
        assert seen["headers"]["Content-Type"].startswith("text/xml")

    def test_datetime_values_are_native(self):
        stamp = datetime(2014, 3, 1, 12, 30, 0)
        transport = _transport(lambda request: _response({"createDate": stamp}))
        assert transport.call(_request()) == {"createDate": stamp}

    def test_fault_with_string_code(self):
        transport = _transport(lambda request: _fault("SoftLayer_Exception_ObjectNotFound", "Unable to find object"))
        with pytest.raises(RemoteFault) as exc_info:
            transport.call(_request())
        assert exc_info.value.code == "SoftLayer_Exception_ObjectNotFound"
        assert exc_info.value.message == "Unable to find object"

    def test_fault_with_numeric_code_and_error_status(self):
        transport = _transport(lambda request: _fault(404, "Not found", status=500))
        with pytest.raises(RemoteFault) as exc_info:
            transport.call(_request())
        assert exc_info.value.code == 404

    def test_http_error_status(self):
        transport = _transport(lambda request: httpx.Response(503, content=b"Service Unavailable"))
        with pytest.raises(TransportError) as exc_info:
            transport.call(_request())
        assert exc_info.value.status_code == 503

    def test_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError):
            _transport(handler).call(_request())

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransportError, match="Timed out"):
            _transport(handler).call(_request())

    def test_close_keeps_injected_client(self):
        http_client = httpx.Client(transport=httpx.MockTransport(lambda request: _response(1)))
        transport = XmlRpcTransport(http_client=http_client)
        transport.close()
        assert transport.call(_request()) == 1


class TestClientOverXmlRpc:
    def test_full_call_path(self):
        seen = {}

        def handler(request):
            seen["params"], seen["method"] = xmlrpc.client.loads(request.content)
            return _response({"id": 42, "title": "Help"})

        client = Client(username="fakeuser", api_key="fakekey", transport=_transport(handler))
        result = client["Ticket"].object_with_id(42).object_mask("mask.title").getObject("ignored")
        assert result == {"id": 42, "title": "Help"}
        assert seen["method"] == "getObject"
        assert seen["params"] == (
            {
                "headers": {
                    "authenticate": {"username": "fakeuser", "apiKey": "fakekey"},
                    "SoftLayer_ObjectMask": {"mask": "mask.title"},
                    "SoftLayer_TicketInitParameters": {"id": 42},
                }
            },
        )

    def test_unencodable_argument_never_reaches_the_server(self):
        calls = []

        def handler(request):
            calls.append(request)
            return _response(None)

        client = Client(username="fakeuser", api_key="fakekey", transport=_transport(handler))
        with pytest.raises(ProgrammingError):
            client["Account"].getBandwidth(2**31)
        assert calls == []
