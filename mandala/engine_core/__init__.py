"""
Engine Core - Deterministic rules, state transitions and views for Mandala.

The engine is a set of pure functions:
1. create_game() builds the initial GameState
2. dispatch() / apply_action() validate and apply one action
3. get_player_view() redacts hidden information for one player
4. calculate_scores() / get_winner() read the final result
5. valid_actions() enumerates legal moves for UIs and bots
"""

from .state import (
    COLORS,
    HIDDEN_CARD,
    Card,
    Destruction,
    EndGameTrigger,
    GamePhase,
    GameState,
    Mandala,
    PlayerState,
)
from .action import (
    Action,
    ActionResult,
    ActionType,
    BuildMountain,
    ClaimColor,
    DiscardRedraw,
    ErrorCode,
    GrowField,
    ValidationResult,
    parse_action,
)
from .errors import EngineInvariantError, InvalidActionError, MandalaError
from .deck import create_deck, draw_cards, shuffle_deck
from .setup import create_game
from .reducer import Reducer, apply_action, dispatch
from .action_generator import ActionGenerator, ValidActions, is_legal, legal_actions, valid_actions
from .scoring import WinnerResult, calculate_score, calculate_scores, get_winner
from .view import get_player_view

__all__ = [
    "COLORS",
    "HIDDEN_CARD",
    "Card",
    "Destruction",
    "EndGameTrigger",
    "GamePhase",
    "GameState",
    "Mandala",
    "PlayerState",
    "Action",
    "ActionResult",
    "ActionType",
    "BuildMountain",
    "ClaimColor",
    "DiscardRedraw",
    "ErrorCode",
    "GrowField",
    "ValidationResult",
    "parse_action",
    "EngineInvariantError",
    "InvalidActionError",
    "MandalaError",
    "create_deck",
    "draw_cards",
    "shuffle_deck",
    "create_game",
    "Reducer",
    "apply_action",
    "dispatch",
    "ActionGenerator",
    "ValidActions",
    "is_legal",
    "legal_actions",
    "valid_actions",
    "WinnerResult",
    "calculate_score",
    "calculate_scores",
    "get_winner",
    "get_player_view",
    "initialize",
    "redact",
    "score",
    "winner",
]

# Boundary names used by the transport layer
initialize = create_game
redact = get_player_view
score = calculate_scores
winner = get_winner
