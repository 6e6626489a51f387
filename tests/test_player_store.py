from __future__ import annotations

from datetime import datetime

import pytest

from playroom.errors import NotFoundError, ValidationError
from playroom.player_store import (
    MAX_HISTORY,
    PlayerStore,
    channel_for,
    describe_adjustment,
)


def test_create_sets_starting_resources(store: PlayerStore) -> None:
    p = store.create("  Alice  ")

    assert p.name == "Alice"
    assert p.money == 1500
    assert p.trust == 50
    assert len(p.history) == 1
    assert "Alice" in p.history[0].note
    assert datetime.fromisoformat(p.history[0].timestamp).tzinfo is not None
    assert p.channel == channel_for(p.id)
    assert store.get(p.id) == p


def test_create_clamps_long_names(store: PlayerStore) -> None:
    p = store.create("x" * 80)
    assert p.name == "x" * 50


@pytest.mark.parametrize("bad", ["", "   ", None])
def test_create_rejects_empty_names(store: PlayerStore, bad: str | None) -> None:
    with pytest.raises(ValidationError):
        store.create(bad)
    assert len(store) == 0


def test_ids_are_unique(store: PlayerStore) -> None:
    ids = {store.create(f"p{i}").id for i in range(500)}
    assert len(ids) == 500
    assert all(i.startswith("p_") for i in ids)


def test_mutate_clamps_at_zero(store: PlayerStore) -> None:
    p = store.create("Bob")

    updated = store.mutate(p.id, money_delta=-2000, trust_delta=-60)
    assert updated.money == 0
    assert updated.trust == 0

    # No upper bound.
    updated = store.mutate(p.id, money_delta=10_000_000)
    assert updated.money == 10_000_000


def test_mutate_deltas_are_independent(store: PlayerStore) -> None:
    p = store.create("Bob")

    updated = store.mutate(p.id, money_delta=-200, note=" rent ")
    assert updated.money == 1300
    assert updated.trust == 50
    assert [h.note for h in updated.history][-1] == "Host update: money -200 (rent)"


def test_mutate_does_not_touch_previous_version(store: PlayerStore) -> None:
    before = store.create("Carol")
    after = store.mutate(before.id, money_delta=5)

    assert before.money == 1500
    assert len(before.history) == 1
    assert after.money == 1505
    assert len(after.history) == 2


def test_history_keeps_latest_entries(store: PlayerStore) -> None:
    p = store.create("Dave")
    for i in range(MAX_HISTORY + 20):
        p = store.mutate(p.id, money_delta=1, note=f"n{i}")

    assert len(p.history) == MAX_HISTORY
    assert p.history[-1].note.endswith(f"(n{MAX_HISTORY + 19})")
    # genesis entry has been dropped.
    assert not p.history[0].note.startswith("Player joined")


def test_mutate_unknown_player(store: PlayerStore) -> None:
    with pytest.raises(NotFoundError):
        store.mutate("p_missing", money_delta=1)


def test_remove(store: PlayerStore) -> None:
    p = store.create("Eve")

    removed = store.remove(p.id)
    assert removed.id == p.id
    assert p.id not in store
    assert store.get(p.id) is None

    with pytest.raises(NotFoundError):
        store.remove(p.id)


def test_list_players_in_creation_order(store: PlayerStore) -> None:
    names = ["a", "b", "c"]
    for n in names:
        store.create(n)
    assert [p.name for p in store.list_players()] == names


@pytest.mark.parametrize(
    ("money", "trust", "note", "expected"),
    [
        (100, 0, "", "Host update: money +100"),
        (0, -5, "", "Host update: trust -5"),
        (-1, 2, "fine", "Host update: money -1, trust +2 (fine)"),
        (0, 0, "", "Host update: no change"),
    ],
)
def test_describe_adjustment(money: int, trust: int, note: str, expected: str) -> None:
    assert describe_adjustment(money_delta=money, trust_delta=trust, note=note) == expected
