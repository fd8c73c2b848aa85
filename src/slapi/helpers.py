"""Small lookups that are fetched once per client and then reused."""
from __future__ import annotations

import threading
import weakref
from typing import Any

from slapi.core.client import Client

_ticket_subjects: weakref.WeakKeyDictionary[Client, Any] = weakref.WeakKeyDictionary()
_lock = threading.Lock()


def ticket_subjects(client: Client) -> Any:
    """
    All SoftLayer_Ticket_Subject objects. The list rarely changes, so it is requested
    once per client; later calls return the same object.
    """
    with _lock:
        if client in _ticket_subjects:
            return _ticket_subjects[client]
    subjects = client["Ticket_Subject"].getAllObjects()
    with _lock:
        return _ticket_subjects.setdefault(client, subjects)


def clear_ticket_subjects(client: Client | None = None) -> None:
    """Forget memoized subjects for one client, or for all of them."""
    with _lock:
        if client is None:
            _ticket_subjects.clear()
        else:
            _ticket_subjects.pop(client, None)
