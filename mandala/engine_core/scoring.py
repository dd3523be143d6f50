"""
Scoring - Cup valuation and winner resolution.

A cup card is worth its color's river slot index + 1 (1-6), or nothing if
the color never made it into the river.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .state import GamePhase, GameState, PlayerState


@dataclass
class WinnerResult:
    """
    Final outcome of an ended game.

    tie_break is None when scores decided it, "cup_count" when fewer cup
    cards decided it, and "player_order" when everything was equal and the
    lower player index was awarded the win.
    """
    winner_id: str
    winner_index: int
    scores: list[int] = field(default_factory=list)
    tie_break: str | None = None


def calculate_score(player: PlayerState) -> int:
    """Score a player's cup against their river."""
    score = 0
    for card in player.cup:
        river_index = player.river_index(card.color)
        if river_index is not None:
            score += river_index + 1
    return score


def calculate_scores(state: GameState) -> list[int]:
    return [calculate_score(player) for player in state.players]


def get_winner(state: GameState) -> WinnerResult | None:
    """Determine the winner; None unless the game has ended."""
    if state.phase != GamePhase.ENDED:
        return None

    scores = calculate_scores(state)
    cups = [len(player.cup) for player in state.players]

    if scores[0] != scores[1]:
        winner_index = 0 if scores[0] > scores[1] else 1
        tie_break = None
    elif cups[0] != cups[1]:
        winner_index = 0 if cups[0] < cups[1] else 1
        tie_break = "cup_count"
    else:
        winner_index = 0
        tie_break = "player_order"

    return WinnerResult(
        winner_id=state.players[winner_index].player_id,
        winner_index=winner_index,
        scores=scores,
        tie_break=tie_break,
    )
