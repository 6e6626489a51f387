from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from playroom.main import create_app
from playroom.player_store import PlayerStore
from playroom.protocol import SessionProtocol
from playroom.websocket_hub import Connection


class FakeWebSocket:
    """Records frames instead of writing them; can be told to fail like a dead socket."""

    def __init__(self, *, fail: bool = False) -> None:
        self.frames: list[dict[str, Any]] = []
        self.fail = fail

    async def send_json(self, data: dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.frames.append(data)

    def events(self) -> list[str]:
        return [f["event"] for f in self.frames]

    def last(self, event: str) -> dict[str, Any]:
        for frame in reversed(self.frames):
            if frame["event"] == event:
                return frame
        raise AssertionError(f"no {event} frame in {self.events()}")


def _make_conn(*, fail: bool = False) -> tuple[Connection, FakeWebSocket]:
    ws = FakeWebSocket(fail=fail)
    return Connection(ws), ws  # type: ignore[arg-type]


@pytest.fixture()
def make_conn() -> Callable[..., tuple[Connection, FakeWebSocket]]:
    """Factory for connections backed by a recording fake socket."""

    return _make_conn


@pytest.fixture()
def store() -> PlayerStore:
    return PlayerStore()


@pytest.fixture()
def session(store: PlayerStore) -> SessionProtocol:
    return SessionProtocol(store=store)


@pytest.fixture()
def client(session: SessionProtocol) -> Generator[TestClient, None, None]:
    with TestClient(create_app(session=session)) as c:
        yield c
