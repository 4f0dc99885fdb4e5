"""Presence bookkeeping for realtime channels.

A :class:`PresenceSet` holds the identities currently "entered" on a single
channel. It is a soft signal used for online indicators only; message
delivery never depends on it. Members are keyed by client id, so repeated
``enter`` calls from the same client collapse into one member.

Clean ``leave`` events are not guaranteed (tabs close, networks drop), so
every member carries a ``last_seen`` timestamp refreshed by ``touch`` and
:meth:`PresenceSet.evict_stale` drops members whose heartbeat stopped.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass
class PresenceMember:
    client_id: str
    data: dict[str, Any] = field(default_factory=dict)
    last_seen: float = 0.0

    def as_payload(self) -> dict[str, Any]:
        return {"client_id": self.client_id, "data": dict(self.data)}


class PresenceSet:
    """Deduplicated set of members present on one channel."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._members: dict[str, PresenceMember] = {}

    def enter(self, client_id: str, data: dict[str, Any] | None = None) -> bool:
        """Add ``client_id``. Returns ``True`` when it was not present before."""

        if not client_id:
            return False
        is_new = client_id not in self._members
        self._members[client_id] = PresenceMember(
            client_id=client_id, data=dict(data or {}), last_seen=self._clock()
        )
        return is_new

    def update(self, client_id: str, data: dict[str, Any] | None = None) -> bool:
        """Merge ``data`` into an existing member; unknown members are ignored."""

        member = self._members.get(client_id)
        if member is None:
            return False
        member.data.update(data or {})
        member.last_seen = self._clock()
        return True

    def leave(self, client_id: str) -> bool:
        """Remove ``client_id``. Returns ``True`` when it was present."""

        return self._members.pop(client_id, None) is not None

    def touch(self, client_id: str) -> None:
        member = self._members.get(client_id)
        if member is not None:
            member.last_seen = self._clock()

    def evict_stale(self, max_idle: float) -> list[str]:
        """Drop members not seen within ``max_idle`` seconds and return their ids."""

        cutoff = self._clock() - max_idle
        stale = [cid for cid, member in self._members.items() if member.last_seen < cutoff]
        for client_id in stale:
            del self._members[client_id]
        return stale

    def members(self) -> list[PresenceMember]:
        return list(self._members.values())

    def client_ids(self) -> set[str]:
        return set(self._members)

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._members

    def __len__(self) -> int:
        return len(self._members)


__all__ = ["PresenceMember", "PresenceSet"]
