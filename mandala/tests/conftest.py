"""
Pytest fixtures for Mandala tests.
"""

import random

import pytest

from ..engine_core.deck import create_deck
from ..engine_core.setup import create_game
from ..engine_core.state import (
    COLORS,
    CARDS_PER_COLOR,
    RIVER_SIZE,
    Card,
    GamePhase,
    GameState,
    Mandala,
    PlayerState,
)


def card(color: str, k: int = 0) -> Card:
    """The k-th card (0-17) of a color, with the id create_deck() gives it."""
    return Card(card_id=f"{color}-{COLORS.index(color) * CARDS_PER_COLOR + k}", color=color)


def cards(color: str, *ks: int) -> list[Card]:
    return [card(color, k) for k in ks]


def make_state(
    hands=None,
    cups=None,
    mountains=None,
    fields=None,
    rivers=None,
    deck=None,
    discard=None,
    current: int = 0,
    phase: GamePhase = GamePhase.PLAYING,
    starting_cup_count: int = 0,
    player_ids=("alice", "bob"),
) -> GameState:
    """
    Build a game state by hand.

    rivers lists the colors per player in slot order; each river color is
    backed by the last card of that color (index 17). Unless deck is given,
    every card not placed elsewhere goes into the deck in create_deck()
    order, so the state holds all 108 cards.
    """
    hands = hands or ([], [])
    cups = cups or ([], [])
    mountains = mountains or ([], [])
    fields = fields or (([], []), ([], []))
    rivers = rivers or ([], [])
    discard = list(discard or [])

    players = []
    for i in range(2):
        river = list(rivers[i]) + [None] * (RIVER_SIZE - len(rivers[i]))
        players.append(PlayerState(
            player_id=player_ids[i],
            hand=list(hands[i]),
            cup=list(cups[i]),
            river=river,
            river_cards=[card(color, CARDS_PER_COLOR - 1) for color in rivers[i]],
            starting_cup_count=starting_cup_count,
        ))

    mandalas = [
        Mandala(mountain=list(mountains[m]), fields=[list(fields[m][0]), list(fields[m][1])])
        for m in range(2)
    ]

    if deck is None:
        used = {c.card_id for c in discard}
        for player in players:
            used |= {c.card_id for c in player.hand + player.cup + player.river_cards}
        for mandala in mandalas:
            used |= {c.card_id for c in mandala.mountain + mandala.fields[0] + mandala.fields[1]}
        deck = [c for c in create_deck() if c.card_id not in used]

    return GameState(
        deck=list(deck),
        discard_pile=discard,
        players=players,
        mandalas=mandalas,
        current_player_idx=current,
        phase=phase,
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(7)


@pytest.fixture
def new_game() -> GameState:
    """A freshly dealt, seeded game."""
    return create_game("alice", "bob", random_seed=42)


@pytest.fixture
def basic_state() -> GameState:
    """
    Mid-game state with known hands.

    alice: red x2, orange, yellow, green, purple
    bob:   black x2, red, orange, yellow, green
    mandala 0 mountain: black, purple
    mandala 1 mountain: red
    """
    return make_state(
        hands=(
            cards("red", 0, 1) + [card("orange"), card("yellow"), card("green"), card("purple")],
            cards("black", 0, 1) + [card("red", 2), card("orange", 1), card("yellow", 1), card("green", 1)],
        ),
        mountains=([card("black", 2), card("purple", 1)], [card("red", 3)]),
    )


@pytest.fixture
def nearly_complete_state() -> GameState:
    """
    Mandala 0 holds five colors; alice's green play completes it.

    mountain: red, orange, red
    alice field: yellow x2
    bob field: purple, black
    """
    return make_state(
        hands=(
            [card("green"), card("green", 1), card("red", 4)],
            [card("orange", 4), card("yellow", 4)],
        ),
        mountains=([card("red"), card("orange"), card("red", 1)], []),
        fields=(
            (cards("yellow", 0, 1), [card("purple"), card("black")]),
            ([], []),
        ),
    )
