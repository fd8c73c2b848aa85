"""
Service — runtime representation of an API service (SoftLayer_Account, SoftLayer_Ticket, ...).

Get one from a client rather than building it:

    client = Client(username="joe", api_key="feeddeadbeef...")
    account = client.service_named("Account")   # same as client["Account"]
    account.getOpenTickets()

Any method the service does not define itself is sent to the API under the same name.
"""
from __future__ import annotations

import functools
import logging
import re
import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from slapi.core.errors import ConfigurationError, ProgrammingError, RemoteFault
from slapi.rpc.protocol import RpcRequest
from slapi.service.filter import FILTER_OPERATIONS, CallParameters, ParameterFilter

if TYPE_CHECKING:
    from slapi.core.client import Client

logger = logging.getLogger(__name__)

CLIENT_OPTIONS = frozenset({"username", "api_key", "endpoint_url", "timeout", "user_agent"})
LOCAL_OPERATIONS = FILTER_OPERATIONS | {"related_service_named"}

_METHOD_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


class Service:
    """
    One named service bound to a client. Holds no per-call state: parameters travel
    in ParameterFilter objects, so a Service can be shared between threads.
    """

    def __init__(self, service_name: str, client: Client | None = None, **client_options: Any) -> None:
        if not isinstance(service_name, str) or not service_name.strip():
            raise ConfigurationError("Please provide a service name")
        unknown = set(client_options) - CLIENT_OPTIONS
        if unknown:
            raise ConfigurationError(f"Unknown client options: {', '.join(sorted(unknown))}")

        if client is not None:
            if client_options:
                raise ConfigurationError(
                    "Attempting to construct a service both with a client and with client "
                    "initialization options. Only one or the other should be provided."
                )
        else:
            from slapi.core.client import Client

            logger.debug(
                "Creating services with client options is deprecated; use client.service_named(%r)",
                service_name,
            )
            client = Client(**client_options)

        self.service_name = service_name
        self.client = client
        self._calls = threading.local()

    @property
    def target(self) -> Service:
        """Same interface as ParameterFilter.target: for a service the target is itself."""
        return self

    def related_service_named(self, service_name: str) -> Service:
        """Another service sharing this service's client."""
        return self.client.service_named(service_name)

    def object_with_id(self, object_id: Any) -> ParameterFilter:
        return ParameterFilter(self).object_with_id(object_id)

    def object_mask(self, *masks: Any) -> ParameterFilter:
        return ParameterFilter(self).object_mask(*masks)

    def object_filter(self, object_filter: Any) -> ParameterFilter:
        return ParameterFilter(self).object_filter(object_filter)

    def result_limit(self, offset: int | None, limit: int) -> ParameterFilter:
        return ParameterFilter(self).result_limit(offset, limit)

    def invoke(self, method_name: str, *args: Any) -> Any:
        """
        Explicit dispatcher. Local operations (filter builders, related_service_named)
        short-circuit; any other name is a remote call with args forwarded unchanged.
        """
        if method_name in LOCAL_OPERATIONS:
            return getattr(self, method_name)(*args)
        return self.call_with_params(method_name, None, args)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails. Underscore names stay local so that
        # copy, pickle and friends never turn into API calls.
        if name.startswith("_"):
            raise AttributeError(name)
        return functools.partial(self.invoke, name)

    def build_headers(self, parameters: CallParameters | None) -> dict[str, Any]:
        """Authentication plus whatever the parameters ask for."""
        headers: dict[str, Any] = dict(self.client.authentication_headers)
        if parameters is None:
            return headers

        if parameters.object_filter is not None:
            headers[f"{self.service_name}ObjectFilter"] = parameters.object_filter

        mask = parameters.wire_mask()
        if mask:
            headers["SoftLayer_ObjectMask"] = {"mask": mask}

        if parameters.result_limit is not None:
            offset = parameters.result_offset if parameters.result_offset is not None else 0
            headers["resultLimit"] = {"limit": parameters.result_limit, "offset": offset}

        if parameters.object_id is not None:
            headers[f"{self.service_name}InitParameters"] = {"id": parameters.object_id}
        return headers

    def call_with_params(
        self,
        method_name: str,
        parameters: CallParameters | None,
        args: Sequence[Any] | None,
    ) -> Any:
        """
        Send method_name to the API.

        parameters are information *about* the call (mask, filter, object id, limit);
        args are the arguments of the remote method itself. Returns the decoded result,
        which may legitimately be None.
        """
        if not isinstance(method_name, str) or not _METHOD_NAME.match(method_name):
            raise ProgrammingError(f"Not a valid API method name: {method_name!r}")

        depth = getattr(self._calls, "depth", 0) + 1
        if depth > self.client.max_call_depth:
            raise ProgrammingError(
                f"Stopping runaway dispatch of {self.service_name}::{method_name} "
                f"(call depth {depth} > {self.client.max_call_depth})"
            )
        self._calls.depth = depth
        try:
            return self._send(method_name, parameters, tuple(args or ()))
        finally:
            self._calls.depth = depth - 1

    def _send(self, method_name: str, parameters: CallParameters | None, args: tuple[Any, ...]) -> Any:
        headers = self.build_headers(parameters)

        # getObject sent with a body is treated by the API as "create a copy of this object",
        # which can be billed. The arguments are dropped instead.
        if method_name == "getObject" and args:
            logger.warning(
                "The getObject method takes no parameters. The %d parameter(s) provided to %s::getObject will be ignored.",
                len(args),
                self.service_name,
            )
            args = ()

        request = RpcRequest(
            url=self.client.url_for(self.service_name),
            service_name=self.service_name,
            method=method_name,
            headers=headers,
            args=args,
        )
        if self.client.debug:
            logger.debug(
                "%s::%s args=%r headers=%r",
                self.service_name,
                method_name,
                args,
                sorted(k for k in headers if k != "authenticate"),
            )
        try:
            result = self.client.transport.call(request)
        except RemoteFault as fault:
            if self.client.debug:
                logger.debug("%s::%s returned fault %s", self.service_name, method_name, fault)
            raise
        return result

    def __repr__(self) -> str:
        return f"<Service {self.service_name}>"
