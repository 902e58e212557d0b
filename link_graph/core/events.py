"""Link event kinds and how they map onto collection mutation hooks.

``insert``, ``update`` and ``remove`` follow one collection hook each.
``link`` and ``unlink`` are composites: a subscription to either is
registered on two hook kinds, so a single mutation can be delivered once
per underlying kind it belongs to.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


class EventKind(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    REMOVE = "remove"
    LINK = "link"
    UNLINK = "unlink"


HOOK_KINDS: Dict[EventKind, Tuple[str, ...]] = {
    EventKind.INSERT: ("insert",),
    EventKind.UPDATE: ("update",),
    EventKind.REMOVE: ("remove",),
    EventKind.LINK: ("insert", "update"),
    EventKind.UNLINK: ("update", "remove"),
}


def hook_kinds(event: str) -> Tuple[str, ...]:
    """Return the collection hook kinds an event subscribes to.

    Raises:
        ValueError: If ``event`` is not a known event name.
    """
    try:
        kind = EventKind(event)
    except ValueError:
        names = ", ".join(k.value for k in EventKind)
        raise ValueError(f"Unknown event '{event}', expected one of: {names}") from None
    return HOOK_KINDS[kind]
