"""Transport protocol: one blocking call per request; wire format is the adapter's business."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class RpcRequest:
    """
    One wire request. method is exactly what the caller asked for;
    adapters apply their own naming convention when encoding.
    """

    url: str
    service_name: str
    method: str
    headers: dict[str, Any] = field(default_factory=dict)
    args: tuple[Any, ...] = ()


@runtime_checkable
class Transport(Protocol):
    """
    Send a request, return the decoded result (None for void methods).
    Raises RemoteFault for API faults and TransportError for everything below that.
    """

    def call(self, request: RpcRequest) -> Any:
        ...

    def close(self) -> None:
        ...
