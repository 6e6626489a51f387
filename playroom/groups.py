from __future__ import annotations

from collections import defaultdict
from collections.abc import Hashable
from typing import Generic, TypeVar

HOSTS_GROUP = "hosts"

C = TypeVar("C", bound=Hashable)


class GroupMembership(Generic[C]):
    """Which connections are in the hosts group and which are in each player channel.

    Pure bookkeeping; callers decide who may join what.
    """

    def __init__(self) -> None:
        self._hosts: set[C] = set()
        self._by_channel: dict[str, set[C]] = defaultdict(set)

    def join_hosts(self, conn: C) -> None:
        self._hosts.add(conn)

    def leave_hosts(self, conn: C) -> None:
        self._hosts.discard(conn)

    def is_host(self, conn: C) -> bool:
        return conn in self._hosts

    def hosts(self) -> list[C]:
        return list(self._hosts)

    def join_channel(self, conn: C, channel: str) -> None:
        self._by_channel[channel].add(conn)

    def members(self, channel: str) -> list[C]:
        return list(self._by_channel.get(channel, ()))

    def channels_of(self, conn: C) -> list[str]:
        return [ch for ch, conns in self._by_channel.items() if conn in conns]

    def evict_channel(self, channel: str) -> set[C]:
        """Remove every member from `channel` and forget it. Returns who was evicted."""

        return self._by_channel.pop(channel, set())

    def leave_channel(self, conn: C, channel: str) -> None:
        conns = self._by_channel.get(channel)
        if not conns:
            return
        conns.discard(conn)
        if not conns:
            self._by_channel.pop(channel, None)

    def drop(self, conn: C) -> None:
        """Forget `conn` everywhere (used when its transport is gone)."""

        self.leave_hosts(conn)
        for channel in self.channels_of(conn):
            self.leave_channel(conn, channel)
