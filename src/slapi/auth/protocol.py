"""Credentials protocol: produce the authentication header fragment sent with every call."""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CredentialsProvider(Protocol):
    """
    Proof of identity for API calls. The default is username + API key;
    a token-based implementation only needs to return a different fragment.
    """

    def authentication_headers(self) -> dict[str, Any]:
        ...


class ApiKeyCredentials:
    """Username and API key, sent as the "authenticate" header."""

    def __init__(self, username: str, api_key: str) -> None:
        self.username = username
        self.api_key = api_key

    def authentication_headers(self) -> dict[str, Any]:
        return {"authenticate": {"username": self.username, "apiKey": self.api_key}}

    def __repr__(self) -> str:
        return f"ApiKeyCredentials(username={self.username!r})"
