"""Presence registry mapping users to their live client sessions."""

from __future__ import annotations

import threading
import zlib
from collections.abc import Hashable
from typing import Generic, TypeVar

SessionT = TypeVar("SessionT", bound=Hashable)


class _Shard:
    __slots__ = ("lock", "entries")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: dict = {}


class PresenceRegistry(Generic[SessionT]):
    """Track active sessions grouped by user.

    Users are spread across shards, each guarded by its own lock, so joins and
    leaves for different users do not contend. A second set of shards, keyed by
    session, records the owner of every session so :meth:`leave` works from the
    handle alone.

    Lock order is always owner shard first, then user shard. Readers only take
    the user shard lock.
    """

    def __init__(self, shard_count: int = 16) -> None:
        if shard_count < 1:
            raise ValueError("shard_count must be positive")
        self._user_shards = [_Shard() for _ in range(shard_count)]
        self._owner_shards = [_Shard() for _ in range(shard_count)]

    def join(self, user_id: str, session: SessionT) -> None:
        """Register ``session`` for ``user_id``, moving it away from a previous user."""

        owners = self._owner_shard(session)
        with owners.lock:
            previous = owners.entries.get(session)
            if previous == user_id:
                return
            if previous is not None:
                self._discard(previous, session)
            owners.entries[session] = user_id
            shard = self._user_shard(user_id)
            with shard.lock:
                shard.entries.setdefault(user_id, set()).add(session)

    def leave(self, session: SessionT) -> str | None:
        """Deregister ``session`` and return the user it belonged to.

        Unknown sessions are ignored.
        """

        owners = self._owner_shard(session)
        with owners.lock:
            user_id = owners.entries.pop(session, None)
            if user_id is not None:
                self._discard(user_id, session)
        return user_id

    def sessions_for(self, user_id: str) -> frozenset[SessionT]:
        shard = self._user_shard(user_id)
        with shard.lock:
            return frozenset(shard.entries.get(user_id, ()))

    def user_for(self, session: SessionT) -> str | None:
        owners = self._owner_shard(session)
        with owners.lock:
            return owners.entries.get(session)

    def connected_count(self) -> int:
        total = 0
        for owners in self._owner_shards:
            with owners.lock:
                total += len(owners.entries)
        return total

    def _discard(self, user_id: str, session: SessionT) -> None:
        shard = self._user_shard(user_id)
        with shard.lock:
            sessions = shard.entries.get(user_id)
            if sessions is None:
                return
            sessions.discard(session)
            if not sessions:
                shard.entries.pop(user_id, None)

    def _user_shard(self, user_id: str) -> _Shard:
        return self._user_shards[zlib.crc32(user_id.encode("utf-8")) % len(self._user_shards)]

    def _owner_shard(self, session: SessionT) -> _Shard:
        return self._owner_shards[hash(session) % len(self._owner_shards)]


__all__ = ["PresenceRegistry"]
