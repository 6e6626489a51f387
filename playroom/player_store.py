from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import uuid4

from playroom.api.models import HistoryEntry, PlayerState
from playroom.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

STARTING_MONEY = 1500
STARTING_TRUST = 50
MAX_NAME_LENGTH = 50
MAX_HISTORY = 100

PLAYER_ID_PREFIX = "p_"
CHANNEL_PREFIX = "player:"  # + {player_id}


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


def _new_player_id() -> str:
    return f"{PLAYER_ID_PREFIX}{uuid4().hex}"


def channel_for(player_id: str) -> str:
    return f"{CHANNEL_PREFIX}{player_id}"


def normalize_name(raw: str | None) -> str:
    """Trim and clamp a display name; raise if nothing is left."""

    name = (raw or "").strip()[:MAX_NAME_LENGTH]
    if not name:
        raise ValidationError("Name is required")
    return name


def _signed(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


def describe_adjustment(*, money_delta: int, trust_delta: int, note: str = "") -> str:
    parts: list[str] = []
    if money_delta:
        parts.append(f"money {_signed(money_delta)}")
    if trust_delta:
        parts.append(f"trust {_signed(trust_delta)}")
    text = f"Host update: {', '.join(parts) or 'no change'}"
    if note:
        text += f" ({note})"
    return text


class PlayerStore:
    """In-memory registry of player entities, keyed by player id.

    Every mutation builds the next version of the entity first and then swaps it
    in with a single dict assignment, so readers only ever see whole versions.
    Nothing here awaits, which keeps each call atomic on the event loop.
    """

    def __init__(self) -> None:
        self._players: dict[str, PlayerState] = {}

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._players

    def create(self, name: str | None) -> PlayerState:
        clean = normalize_name(name)

        player_id = _new_player_id()
        while player_id in self._players:
            player_id = _new_player_id()

        player = PlayerState(
            id=player_id,
            name=clean,
            money=STARTING_MONEY,
            trust=STARTING_TRUST,
            history=[
                HistoryEntry(
                    timestamp=_now_iso(),
                    note=f"Player joined: {clean}. Starting money {STARTING_MONEY}, trust {STARTING_TRUST}.",
                )
            ],
            channel=channel_for(player_id),
        )
        self._players[player_id] = player
        logger.info("player created id=%s name=%r", player_id, clean)
        return player

    def get(self, player_id: str) -> PlayerState | None:
        return self._players.get(player_id)

    def require(self, player_id: str) -> PlayerState:
        player = self.get(player_id)
        if player is None:
            raise NotFoundError("Player not found")
        return player

    def list_players(self) -> list[PlayerState]:
        # dicts keep insertion order => creation order.
        return list(self._players.values())

    def mutate(
        self,
        player_id: str,
        *,
        money_delta: int = 0,
        trust_delta: int = 0,
        note: str | None = None,
    ) -> PlayerState:
        player = self.require(player_id)

        money_delta = money_delta or 0
        trust_delta = trust_delta or 0

        entry = HistoryEntry(
            timestamp=_now_iso(),
            note=describe_adjustment(money_delta=money_delta, trust_delta=trust_delta, note=(note or "").strip()),
        )
        history = [*player.history, entry][-MAX_HISTORY:]

        updated = player.model_copy(
            update={
                "money": max(0, player.money + money_delta),
                "trust": max(0, player.trust + trust_delta),
                "history": history,
            }
        )
        self._players[player_id] = updated
        logger.info(
            "player adjusted id=%s money=%d trust=%d history=%d",
            player_id,
            updated.money,
            updated.trust,
            len(updated.history),
        )
        return updated

    def remove(self, player_id: str) -> PlayerState:
        player = self._players.pop(player_id, None)
        if player is None:
            raise NotFoundError("Player not found")
        logger.info("player removed id=%s", player_id)
        return player
