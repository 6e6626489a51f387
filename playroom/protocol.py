from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from playroom.api.models import (
    Ack,
    HostAdjustRequest,
    HostRemovePlayerRequest,
    InboundFrame,
    PlayerBindRequest,
    PlayerJoinRequest,
)
from playroom.broadcast import Broadcaster, Push
from playroom.errors import PlayroomError, ValidationError
from playroom.groups import GroupMembership
from playroom.player_store import PlayerStore
from playroom.websocket_hub import Connection

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Outcome:
    """Result of applying one request.

    - `ack`: body for the caller's acknowledgement (None => no ack for this event).
    - `pushes`: rendered broadcasts, captured right after the state change.
    """

    ack: Ack | None = None
    pushes: list[Push | None] = field(default_factory=list)


def _first_error(e: PydanticValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err['msg']}" if loc else err["msg"]


class SessionProtocol:
    """Request handlers for the live session; sole writer of players and groups.

    Each request is applied synchronously (validate, mutate, render pushes) and
    only then are the ack and pushes put on the wire. With a single event loop
    this means no two requests interleave inside the state change.
    """

    def __init__(self, store: PlayerStore | None = None) -> None:
        self.store = store or PlayerStore()
        self.groups: GroupMembership[Connection] = GroupMembership()
        self.broadcaster = Broadcaster(store=self.store, groups=self.groups)
        self._handlers: dict[str, Callable[[Connection, dict[str, Any]], Outcome]] = {
            "host:join": self._host_join,
            "player:join": self._player_join,
            "player:bind": self._player_bind,
            "host:adjust": self._host_adjust,
            "host:removePlayer": self._host_remove_player,
        }

    # --- entry points -------------------------------------------------------

    async def receive(self, conn: Connection, raw: Any) -> None:
        """Decode one inbound frame and handle it."""

        try:
            frame = InboundFrame.model_validate(raw)
        except PydanticValidationError as e:
            ack_id = raw.get("ack") if isinstance(raw, dict) else None
            logger.warning("malformed frame from %s: %s", conn, _first_error(e))
            if isinstance(ack_id, (int, str)):
                if not await self._send_ack(conn, ack_id, Ack.failure("Malformed request")):
                    self.groups.drop(conn)
            return

        await self.handle(conn, frame.event, frame.data or {}, ack_id=frame.ack)

    async def handle(
        self,
        conn: Connection,
        event: str,
        payload: dict[str, Any],
        *,
        ack_id: int | str | None = None,
    ) -> Ack | None:
        outcome = self.apply(conn, event, payload)

        dead: list[Connection] = []
        if outcome.ack is not None and ack_id is not None:
            if not await self._send_ack(conn, ack_id, outcome.ack):
                dead.append(conn)

        # The state change is already applied; its pushes go out regardless of the caller.
        dead.extend(await self.broadcaster.deliver(outcome.pushes))
        for gone in dead:
            self.groups.drop(gone)
        return outcome.ack

    async def _send_ack(self, conn: Connection, ack_id: int | str, ack: Ack) -> bool:
        try:
            await conn.send_ack(ack_id, ack.to_wire())
        except Exception:
            logger.warning("ack %r to %s failed; dropping connection", ack_id, conn, exc_info=True)
            return False
        return True

    def apply(self, conn: Connection, event: str, payload: dict[str, Any]) -> Outcome:
        """Apply a request to the store and groups; never raises for bad requests."""

        handler = self._handlers.get(event)
        try:
            if handler is None:
                raise ValidationError(f"Unknown event: {event}")
            return handler(conn, payload)
        except PydanticValidationError as e:
            message = _first_error(e)
        except PlayroomError as e:
            message = str(e)

        logger.warning("%s rejected for %s: %s", event, conn, message)
        return Outcome(ack=Ack.failure(message))

    def disconnect(self, conn: Connection) -> None:
        """Transport closed: forget the connection. Players are never removed here."""

        was_host = self.groups.is_host(conn)
        self.groups.drop(conn)
        logger.info("connection closed %s (host=%s)", conn, was_host)

    # --- handlers -----------------------------------------------------------

    def _host_join(self, conn: Connection, payload: dict[str, Any]) -> Outcome:
        self.groups.join_hosts(conn)
        logger.info("host joined %s", conn)
        return Outcome(pushes=[self.broadcaster.hosts_push()])

    def _player_join(self, conn: Connection, payload: dict[str, Any]) -> Outcome:
        req = PlayerJoinRequest.model_validate(payload)
        player = self.store.create(req.name)
        self.groups.join_channel(conn, player.channel)
        return Outcome(
            ack=Ack.success(player_id=player.id),
            pushes=[self.broadcaster.player_push(player.id), self.broadcaster.hosts_push()],
        )

    def _player_bind(self, conn: Connection, payload: dict[str, Any]) -> Outcome:
        req = PlayerBindRequest.model_validate(payload)
        player = self.store.require(req.player_id)
        self.groups.join_channel(conn, player.channel)
        logger.info("connection %s bound to player %s", conn, player.id)
        return Outcome(ack=Ack.success(), pushes=[self.broadcaster.player_push(player.id)])

    def _host_adjust(self, conn: Connection, payload: dict[str, Any]) -> Outcome:
        req = HostAdjustRequest.model_validate(payload)
        player = self.store.mutate(
            req.player_id,
            money_delta=req.money_delta or 0,
            trust_delta=req.trust_delta or 0,
            note=req.note,
        )
        return Outcome(
            ack=Ack.success(),
            pushes=[self.broadcaster.player_push(player.id), self.broadcaster.hosts_push()],
        )

    def _host_remove_player(self, conn: Connection, payload: dict[str, Any]) -> Outcome:
        req = HostRemovePlayerRequest.model_validate(payload)
        player = self.store.require(req.player_id)
        evicted = self.groups.evict_channel(player.channel)
        self.store.remove(player.id)
        logger.info("evicted %d connection(s) from %s", len(evicted), player.channel)
        return Outcome(ack=Ack.success(), pushes=[self.broadcaster.hosts_push()])
