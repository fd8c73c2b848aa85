"""Shared fixtures: isolated environment, a recording transport, a client wired to it."""
from __future__ import annotations

import os
from typing import Any

import pytest

from slapi import Client
from slapi.rpc.protocol import RpcRequest


class RecordingTransport:
    """Transport double: remembers every request and answers from a queue (or raises)."""

    def __init__(self, result: Any = None) -> None:
        self.requests: list[RpcRequest] = []
        self.result = result
        self.error: Exception | None = None
        self.closed = False

    def call(self, request: RpcRequest) -> Any:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result

    def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> RpcRequest:
        return self.requests[-1]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """No SL_* variable from the developer's shell leaks into a test."""
    for key in list(os.environ):
        if key.startswith("SL_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def client(transport):
    return Client(username="fakeuser", api_key="fakekey", transport=transport)
