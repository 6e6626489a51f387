from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from playroom.api.models import PlayerDetail, PlayerState, PlayerSummary
from playroom.groups import GroupMembership
from playroom.player_store import PlayerStore
from playroom.websocket_hub import Connection, fan_out

logger = logging.getLogger(__name__)

PLAYERS_LIST_EVENT = "players:list"
PLAYER_STATE_EVENT = "player:state"

HOST_HISTORY_WINDOW = 10


def render_summary(player: PlayerState) -> PlayerSummary:
    return PlayerSummary(
        id=player.id,
        name=player.name,
        money=player.money,
        trust=player.trust,
        history=player.history[-HOST_HISTORY_WINDOW:],
    )


def render_detail(player: PlayerState) -> PlayerDetail:
    return PlayerDetail(
        id=player.id,
        name=player.name,
        money=player.money,
        trust=player.trust,
        history=list(player.history),
    )


@dataclass(frozen=True, slots=True)
class Push:
    """A rendered frame plus the recipients captured at render time."""

    event: str
    data: Any
    recipients: tuple[Connection, ...]


class Broadcaster:
    """Renders the host and player views and pushes them to their groups.

    Rendering is synchronous and deliberately separate from delivery: callers
    render every push for a mutation before awaiting any send, so all pushes
    for one mutation come from the same snapshot.
    """

    def __init__(self, *, store: PlayerStore, groups: GroupMembership[Connection]) -> None:
        self._store = store
        self._groups = groups

    def players_list(self) -> list[dict[str, Any]]:
        return [render_summary(p).model_dump() for p in self._store.list_players()]

    def hosts_push(self) -> Push:
        return Push(
            event=PLAYERS_LIST_EVENT,
            data=self.players_list(),
            recipients=tuple(self._groups.hosts()),
        )

    def player_push(self, player_id: str) -> Push | None:
        player = self._store.get(player_id)
        if player is None:
            return None
        return Push(
            event=PLAYER_STATE_EVENT,
            data=render_detail(player).model_dump(),
            recipients=tuple(self._groups.members(player.channel)),
        )

    async def deliver(self, pushes: list[Push | None]) -> list[Connection]:
        """Send rendered pushes. Returns connections whose send failed."""

        dead: list[Connection] = []
        for push in pushes:
            if push is None or not push.recipients:
                continue
            logger.debug("push %s -> %d connection(s)", push.event, len(push.recipients))
            dead.extend(await fan_out(list(push.recipients), push.event, push.data))
        return dead

    async def publish_to_hosts(self) -> list[Connection]:
        return await self.deliver([self.hosts_push()])

    async def publish_to_player(self, player_id: str) -> list[Connection]:
        return await self.deliver([self.player_push(player_id)])
