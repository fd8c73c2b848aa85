"""
Shape conversions for the structured (SOAP) wire format.
Sequences travel as keyed structures (item0, item1, ...) and come back as typed arrays;
both directions recurse through every level of maps and sequences.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

ITEM_PREFIX = "item"

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


class KeyedArray(dict):
    """A sequence in keyed form. Keys are item0..itemN-1 in order."""

    @classmethod
    def from_items(cls, items: list[Any]) -> KeyedArray:
        return cls((f"{ITEM_PREFIX}{i}", v) for i, v in enumerate(items))

    def ordered(self) -> list[tuple[str, Any]]:
        """(key, value) pairs by position."""
        return [(k, self[k]) for k in sorted(self, key=_item_index)]

    def items_in_order(self) -> list[Any]:
        return [v for _, v in self.ordered()]


def _item_index(key: str) -> int:
    return int(key[len(ITEM_PREFIX):])


def snake_case(name: str) -> str:
    """getOpenTickets -> get_open_tickets, getIPAddresses -> get_ip_addresses."""
    return _WORD_BOUNDARY.sub("_", name).lower()


def to_keyed(value: Any) -> Any:
    """Outgoing: every list/tuple, at any depth, becomes a KeyedArray."""
    if isinstance(value, KeyedArray):
        return KeyedArray({k: to_keyed(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return KeyedArray.from_items([to_keyed(v) for v in value])
    if isinstance(value, Mapping):
        return {k: to_keyed(v) for k, v in value.items()}
    return value


def from_keyed(value: Any) -> Any:
    """Incoming: every KeyedArray, at any depth, becomes a list. Plain maps stay maps."""
    if isinstance(value, KeyedArray):
        return [from_keyed(v) for v in value.items_in_order()]
    if isinstance(value, Mapping):
        return {k: from_keyed(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [from_keyed(v) for v in value]
    return value
