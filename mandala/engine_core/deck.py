"""
Deck - Card universe construction, shuffling and drawing.

Drawing never fails: when the deck runs dry the discard pile is shuffled
into a fresh deck (which also arms the deck_exhausted end trigger), and when
both are empty the draw simply comes up short.
"""

from __future__ import annotations
import logging
import random

from .state import COLORS, CARDS_PER_COLOR, Card, EndGameTrigger, GameState

logger = logging.getLogger(__name__)


def create_deck() -> list[Card]:
    """Create the 108-card deck in fixed color order, ids like 'red-0'."""
    deck = []
    card_number = 0
    for color in COLORS:
        for _ in range(CARDS_PER_COLOR):
            deck.append(Card(card_id=f"{color}-{card_number}", color=color))
            card_number += 1
    return deck


def shuffle_deck(deck: list[Card], rng: random.Random | None = None) -> list[Card]:
    """Return a uniformly shuffled copy of deck. Pass a seeded rng for determinism."""
    shuffled = list(deck)
    (rng or random).shuffle(shuffled)
    return shuffled


def draw_into(state: GameState, count: int, rng: random.Random | None = None) -> list[Card]:
    """
    Draw up to count cards from the front of state.deck, mutating state.

    Only call this on a working copy; see draw_cards() for the pure form.
    """
    cards: list[Card] = []
    for _ in range(max(0, count)):
        if not state.deck:
            if not state.discard_pile:
                logger.debug(f"Deck and discard empty, drew {len(cards)} of {count}")
                break
            state.deck = shuffle_deck(state.discard_pile, rng)
            state.discard_pile = []
            if state.set_end_game_trigger(EndGameTrigger.DECK_EXHAUSTED):
                logger.info("Deck exhausted: discard reshuffled, end of game triggered")
            else:
                logger.info("Deck exhausted: discard reshuffled")
        cards.append(state.deck.pop(0))
    return cards


def draw_cards(
    state: GameState,
    count: int,
    rng: random.Random | None = None,
) -> tuple[list[Card], GameState]:
    """
    Draw up to count cards without touching the given state.

    Returns:
        (drawn cards, new state with deck/discard/trigger updated)
    """
    new_state = state.clone()
    cards = draw_into(new_state, count, rng)
    return cards, new_state
