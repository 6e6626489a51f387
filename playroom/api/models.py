from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str
    note: str


class PlayerState(BaseModel):
    """Authoritative record of one player. Only `PlayerStore` mutates it."""

    id: str
    name: str
    money: int = Field(..., ge=0)
    trust: int = Field(..., ge=0)
    history: list[HistoryEntry] = Field(default_factory=list)

    # Exclusive broadcast group for this player's viewers.
    channel: str


class PlayerDetail(BaseModel):
    """`player:state` push: full history."""

    id: str
    name: str
    money: int
    trust: int
    history: list[HistoryEntry]


class PlayerSummary(BaseModel):
    """One row of the `players:list` push sent to hosts."""

    id: str
    name: str
    money: int
    trust: int
    history: list[HistoryEntry]


# Inbound payloads. Wire keys are camelCase.


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PlayerJoinRequest(_Payload):
    name: str = ""


class PlayerBindRequest(_Payload):
    player_id: str = Field(..., alias="playerId")


class HostAdjustRequest(_Payload):
    player_id: str = Field(..., alias="playerId")
    money_delta: int | None = Field(default=None, alias="moneyDelta")
    trust_delta: int | None = Field(default=None, alias="trustDelta")
    note: str | None = None


class HostRemovePlayerRequest(_Payload):
    player_id: str = Field(..., alias="playerId")


# Acknowledgements.


class Ack(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool
    error: str | None = None
    player_id: str | None = Field(default=None, alias="playerId")

    @classmethod
    def success(cls, **kwargs: Any) -> "Ack":
        return cls(ok=True, **kwargs)

    @classmethod
    def failure(cls, error: str) -> "Ack":
        return cls(ok=False, error=error)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# Frames exchanged over the WebSocket.


class InboundFrame(BaseModel):
    event: str = Field(..., min_length=1)
    data: dict[str, Any] | None = None
    ack: int | str | None = None


class OutboundFrame(BaseModel):
    event: str
    data: Any = None
    ack: int | str | None = None

    def to_wire(self) -> dict[str, Any]:
        frame: dict[str, Any] = {"event": self.event, "data": self.data}
        if self.ack is not None:
            frame["ack"] = self.ack
        return frame
