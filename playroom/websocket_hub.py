from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

from fastapi import WebSocket

from playroom.api.models import OutboundFrame

logger = logging.getLogger(__name__)


class Connection:
    """One open WebSocket, addressed by a server-assigned id.

    Group membership lives in `GroupMembership`; this object only knows how to
    put frames on the wire. Hashing is by identity so it can sit in sets.
    """

    def __init__(self, websocket: WebSocket) -> None:
        self.id = uuid4().hex
        self.websocket = websocket

    def __repr__(self) -> str:
        return f"Connection(id={self.id!r})"

    async def send(self, event: str, data: Any = None, *, ack: int | str | None = None) -> None:
        await self.websocket.send_json(OutboundFrame(event=event, data=data, ack=ack).to_wire())

    async def send_ack(self, ack_id: int | str, body: dict[str, Any]) -> None:
        await self.send("ack", body, ack=ack_id)


async def fan_out(conns: list[Connection], event: str, data: Any) -> list[Connection]:
    """Send one frame to each connection; return the ones that failed.

    Delivery is best-effort: a failing socket does not stop the others.
    """

    dead: list[Connection] = []
    for conn in conns:
        try:
            await conn.send(event, data)
        except Exception:
            logger.warning("push %s to %s failed; dropping connection", event, conn, exc_info=True)
            dead.append(conn)
    return dead
