from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from playroom.api.deps import get_session
from playroom.protocol import SessionProtocol
from playroom.websocket_hub import Connection

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def session_ws(websocket: WebSocket, session: SessionProtocol = Depends(get_session)) -> None:
    await websocket.accept()
    conn = Connection(websocket)
    logger.debug("connection opened %s", conn)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            text = message.get("text")
            if text is None:
                logger.warning("dropping binary frame from %s", conn)
                continue
            try:
                raw = json.loads(text)
            except json.JSONDecodeError:
                logger.warning("dropping non-JSON frame from %s", conn)
                continue
            await session.receive(conn, raw)
    except WebSocketDisconnect:
        session.disconnect(conn)
    except Exception:
        session.disconnect(conn)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/players")
async def list_players_route(session: SessionProtocol = Depends(get_session)) -> list[dict[str, Any]]:
    """Debug endpoint: the same summary hosts receive as `players:list`."""

    return session.broadcaster.players_list()
