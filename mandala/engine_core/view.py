"""
Player View - Redacts hidden information for one observer.

Hidden from the observer:
- the opponent's hand (count stays visible)
- the opponent's face-down starting cup cards (cards won later stay visible)
- every deck card (deck size stays visible)
"""

from __future__ import annotations

from .state import HIDDEN_CARD, GameState


def get_player_view(state: GameState, player_idx: int) -> GameState:
    """
    Create a filtered copy of the game state for one player.

    The canonical state is never modified. Applying this to its own output
    gives the same result.
    """
    if player_idx not in (0, 1):
        raise ValueError(f"Invalid player index: {player_idx}")

    view = state.clone()
    opponent = view.players[view.opponent_index(player_idx)]

    opponent.hand = [HIDDEN_CARD for _ in opponent.hand]

    starting = opponent.starting_cup_count
    opponent.cup = [HIDDEN_CARD for _ in opponent.cup[:starting]] + opponent.cup[starting:]

    view.deck = [HIDDEN_CARD for _ in view.deck]
    return view
