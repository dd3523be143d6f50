"""
Destruction - The claim sub-phase entered when a mandala completes.

Flow:
1. start_destruction(): pick the first claimer, list the mountain colors
2. resolve_claim(): one claim_color action; claimers alternate
3. finish_destruction(): once no colors remain, discard both fields, then
   either end the game (trigger set) or refill the mountain and resume play

These functions mutate and return the working copy handed to them by the
reducer; they are never called on a state owned by anyone else.
"""

from __future__ import annotations
import logging
import random

from .deck import draw_into
from .errors import EngineInvariantError
from .rules import colors_in_mountain
from .state import (
    Destruction,
    EndGameTrigger,
    GamePhase,
    GameState,
    INITIAL_MOUNTAIN_SIZE,
    RIVER_SIZE,
)

logger = logging.getLogger(__name__)


def first_claimer(state: GameState, mandala_index: int) -> int:
    """
    Whoever has more cards in their own field claims first.

    On a tie the player who did not make the completing play goes first.
    """
    fields = state.mandalas[mandala_index].fields
    if len(fields[0]) > len(fields[1]):
        return 0
    if len(fields[1]) > len(fields[0]):
        return 1
    return 1 if state.last_mandala_player_idx == 0 else 0


def start_destruction(
    state: GameState,
    mandala_index: int,
    rng: random.Random | None = None,
) -> GameState:
    """Enter the destruction phase for a completed mandala."""
    mandala = state.mandalas[mandala_index]
    claimer = first_claimer(state, mandala_index)

    # Mountain order of first appearance
    remaining = []
    for card in mandala.mountain:
        if card.color not in remaining:
            remaining.append(card.color)

    state.phase = GamePhase.DESTROYING
    state.destruction = Destruction(
        mandala_index=mandala_index,
        current_claimer_index=claimer,
        remaining_colors=remaining,
    )
    state.current_player_idx = claimer
    logger.info(
        f"Mandala {mandala_index} complete: {state.players[claimer].player_id} claims first "
        f"from {remaining}"
    )

    if not remaining:
        # An empty mountain (only possible once every card is out) has nothing to claim
        return finish_destruction(state, rng)
    return state


def resolve_claim(
    state: GameState,
    color: str,
    rng: random.Random | None = None,
) -> tuple[GameState, str]:
    """
    Apply one claim by the current claimer.

    Returns:
        (state, public description of the claim)
    """
    destruction = state.destruction
    if destruction is None or color not in destruction.remaining_colors:
        raise EngineInvariantError(f"Claim of {color} without a matching destruction")

    mandala = state.mandalas[destruction.mandala_index]
    claimer_idx = destruction.current_claimer_index
    claimer = state.players[claimer_idx]

    claimed = [card for card in mandala.mountain if card.color == color]
    mandala.mountain = [card for card in mandala.mountain if card.color != color]

    if not mandala.fields[claimer_idx]:
        state.discard_pile.extend(claimed)
        change = f"{claimer.player_id} had no field cards and discarded {len(claimed)} {color}"
    elif claimer.river_index(color) is None:
        slot = claimer.first_empty_river_slot()
        if slot is None:
            raise EngineInvariantError(
                f"{claimer.player_id} claimed new color {color} with a full river"
            )
        claimer.river[slot] = color
        claimer.river_cards.append(claimed[0])
        claimer.cup.extend(claimed[1:])
        change = (
            f"{claimer.player_id} placed {color} in river slot {slot + 1} "
            f"and cupped {len(claimed) - 1}"
        )
        if slot == RIVER_SIZE - 1 and state.set_end_game_trigger(EndGameTrigger.SIXTH_RIVER_COLOR):
            logger.info(f"{claimer.player_id} filled their river, end of game triggered")
    else:
        claimer.cup.extend(claimed)
        change = f"{claimer.player_id} cupped {len(claimed)} {color}"

    destruction.remaining_colors = [c for c in destruction.remaining_colors if c != color]

    if destruction.remaining_colors:
        destruction.current_claimer_index = state.opponent_index(claimer_idx)
        state.current_player_idx = destruction.current_claimer_index
        return state, change

    return finish_destruction(state, rng), change


def finish_destruction(state: GameState, rng: random.Random | None = None) -> GameState:
    """Close out a destruction once every mountain color has been claimed."""
    destruction = state.destruction
    if destruction is None:
        raise EngineInvariantError("No destruction to finish")

    mandala = state.mandalas[destruction.mandala_index]

    # Field cards never return to hand or cup
    for player_field in mandala.fields:
        state.discard_pile.extend(player_field)
    mandala.fields = [[] for _ in mandala.fields]

    state.destruction = None

    if state.end_game_trigger is not None:
        state.phase = GamePhase.ENDED
        logger.info(f"Game ended ({state.end_game_trigger.value}) after turn {state.turn_number}")
        return state

    mandala.mountain = draw_into(state, INITIAL_MOUNTAIN_SIZE, rng)
    state.phase = GamePhase.PLAYING
    state.current_player_idx = state.opponent_index(state.last_mandala_player_idx)
    state.turn_number += 1
    return state
