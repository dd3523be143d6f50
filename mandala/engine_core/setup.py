"""
Game Setup - Creates the initial state of a match.

This module handles:
- Building and shuffling the 108-card deck (seedable for determinism)
- Dealing six cards to each hand
- Dealing two face-down cup cards to each player
- Seeding each mandala's mountain with two cards

After setup the deck holds 108 - 12 - 4 - 4 = 88 cards.
"""

from __future__ import annotations
import logging
import random

from .deck import create_deck, shuffle_deck
from .state import (
    GameState,
    GamePhase,
    Mandala,
    PlayerState,
    INITIAL_HAND_SIZE,
    INITIAL_CUP_SIZE,
    INITIAL_MOUNTAIN_SIZE,
    NUM_MANDALAS,
)

logger = logging.getLogger(__name__)


def create_game(
    player1_id: str,
    player2_id: str,
    random_seed: int | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """
    Set up a new Mandala game.

    Args:
        player1_id: ID of the player who moves first
        player2_id: ID of the second player
        random_seed: Seed for deterministic shuffling
        rng: Explicit random source (overrides random_seed)

    Returns:
        Initial GameState ready for play
    """
    if player1_id == player2_id:
        raise ValueError("Player IDs must differ")

    rng = rng or random.Random(random_seed)
    deck = shuffle_deck(create_deck(), rng)

    players = [PlayerState(player_id=player1_id), PlayerState(player_id=player2_id)]

    for player in players:
        player.hand = deck[:INITIAL_HAND_SIZE]
        deck = deck[INITIAL_HAND_SIZE:]

    # Starting cups are face-down; only their owner may see them
    for player in players:
        player.cup = deck[:INITIAL_CUP_SIZE]
        player.starting_cup_count = INITIAL_CUP_SIZE
        deck = deck[INITIAL_CUP_SIZE:]

    mandalas = []
    for _ in range(NUM_MANDALAS):
        mandalas.append(Mandala(mountain=deck[:INITIAL_MOUNTAIN_SIZE]))
        deck = deck[INITIAL_MOUNTAIN_SIZE:]

    state = GameState(
        deck=deck,
        discard_pile=[],
        players=players,
        mandalas=mandalas,
        current_player_idx=0,
        phase=GamePhase.PLAYING,
        end_game_trigger=None,
        destruction=None,
        last_mandala_player_idx=None,
        turn_number=1,
    )

    logger.info(f"New game: {player1_id} vs {player2_id}, {len(deck)} cards in deck")
    return state
