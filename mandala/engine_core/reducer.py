"""
Reducer - Applies actions to game state.

The reducer is the single point of state change.
All state changes must go through apply_action() / dispatch().

Design principles:
- Pure function: (state, action) -> new_state; the input is never touched
- Validates before applying; rejections carry a reason and an error code
- Executes on a clone, so earlier snapshots stay valid
- Delegates the claim sub-phase to the destruction module
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping
import logging
import random

from .action import (
    Action,
    ActionResult,
    BuildMountain,
    ClaimColor,
    DiscardRedraw,
    ErrorCode,
    GrowField,
    ValidationResult,
    parse_action,
)
from .deck import draw_into
from .destruction import resolve_claim, start_destruction
from .errors import EngineInvariantError, InvalidActionError
from .rules import can_play_color_to_field, can_play_color_to_mountain, is_mandala_complete
from .state import (
    BUILD_MOUNTAIN_DRAW,
    MAX_HAND_SIZE,
    Card,
    GamePhase,
    GameState,
    PlayerState,
)

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all game state is in GameState. The optional rng only
    drives reshuffles of the discard pile.
    """
    rng: random.Random | None = None

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or error. On failure the
        result carries the original, unmodified state.
        """
        validation = self.validate(state, action)
        if not validation.valid:
            logger.debug(f"Rejected {action!r}: {validation.error}")
            return ActionResult.failure(validation.error, validation.error_code, state=state)

        if isinstance(action, BuildMountain):
            new_state, changes = self._handle_build_mountain(state.clone(), action)
        elif isinstance(action, GrowField):
            new_state, changes = self._handle_grow_field(state.clone(), action)
        elif isinstance(action, DiscardRedraw):
            new_state, changes = self._handle_discard_redraw(state.clone(), action)
        elif isinstance(action, ClaimColor):
            new_state, changes = self._handle_claim_color(state.clone(), action)
        else:
            raise EngineInvariantError(f"Validated an unknown action: {action!r}")

        return ActionResult.success_with_state(new_state, changes=changes)

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self, state: GameState, action: Any) -> ValidationResult:
        """
        Validate that an action is legal in the current state.

        Never modifies state.
        """
        if isinstance(action, BuildMountain):
            return self._validate_build_mountain(state, action)
        elif isinstance(action, GrowField):
            return self._validate_grow_field(state, action)
        elif isinstance(action, DiscardRedraw):
            return self._validate_discard_redraw(state, action)
        elif isinstance(action, ClaimColor):
            return self._validate_claim_color(state, action)
        return ValidationResult.reject("Unknown action type", ErrorCode.UNKNOWN_ACTION)

    def _validate_build_mountain(self, state: GameState, action: BuildMountain) -> ValidationResult:
        if state.phase != GamePhase.PLAYING:
            return ValidationResult.reject(
                "Cannot build mountain during this phase", ErrorCode.WRONG_PHASE
            )

        card = state.current_player.find_in_hand(action.card_id)
        if card is None:
            return ValidationResult.reject("Card not in hand", ErrorCode.CARD_NOT_IN_HAND)

        mandala_error = self._check_mandala_index(state, action.mandala_index)
        if mandala_error:
            return mandala_error

        if not can_play_color_to_mountain(state.mandalas[action.mandala_index], card.color):
            return ValidationResult.reject(
                f"Cannot play {card.color} to this mountain (Rule of Color)",
                ErrorCode.RULE_OF_COLOR,
            )

        return ValidationResult.ok()

    def _validate_grow_field(self, state: GameState, action: GrowField) -> ValidationResult:
        if state.phase != GamePhase.PLAYING:
            return ValidationResult.reject(
                "Cannot grow field during this phase", ErrorCode.WRONG_PHASE
            )

        player = state.current_player
        selection = self._check_selection(player, action.card_ids, "play")
        if isinstance(selection, ValidationResult):
            return selection

        mandala_error = self._check_mandala_index(state, action.mandala_index)
        if mandala_error:
            return mandala_error

        color = selection[0].color
        mandala = state.mandalas[action.mandala_index]
        if not can_play_color_to_field(mandala, state.current_player_idx, color):
            return ValidationResult.reject(
                f"Cannot play {color} to this field (Rule of Color)",
                ErrorCode.RULE_OF_COLOR,
            )

        if len(action.card_ids) >= len(player.hand):
            return ValidationResult.reject(
                "Must keep at least one card in hand", ErrorCode.MUST_KEEP_CARD
            )

        return ValidationResult.ok()

    def _validate_discard_redraw(self, state: GameState, action: DiscardRedraw) -> ValidationResult:
        if state.phase != GamePhase.PLAYING:
            return ValidationResult.reject(
                "Cannot discard during this phase", ErrorCode.WRONG_PHASE
            )

        selection = self._check_selection(state.current_player, action.card_ids, "discard")
        if isinstance(selection, ValidationResult):
            return selection

        return ValidationResult.ok()

    def _validate_claim_color(self, state: GameState, action: ClaimColor) -> ValidationResult:
        if state.phase != GamePhase.DESTROYING:
            return ValidationResult.reject(
                "Can only claim colors during destruction phase", ErrorCode.WRONG_PHASE
            )

        destruction = state.destruction
        if destruction is None:
            return ValidationResult.reject("No destruction in progress", ErrorCode.NO_DESTRUCTION)

        if destruction.current_claimer_index != state.current_player_idx:
            return ValidationResult.reject("Not your turn to claim", ErrorCode.NOT_YOUR_CLAIM)

        if action.color not in destruction.remaining_colors:
            return ValidationResult.reject(
                "Color not available to claim", ErrorCode.COLOR_UNAVAILABLE
            )

        return ValidationResult.ok()

    def _check_mandala_index(self, state: GameState, mandala_index: int) -> ValidationResult | None:
        if not 0 <= mandala_index < len(state.mandalas):
            return ValidationResult.reject(
                f"No mandala at index {mandala_index}", ErrorCode.INVALID_MANDALA
            )
        return None

    def _check_selection(
        self,
        player: PlayerState,
        card_ids: tuple[str, ...],
        verb: str,
    ) -> list[Card] | ValidationResult:
        """Resolve a same-color selection from hand, or explain why it is invalid."""
        if not card_ids:
            return ValidationResult.reject(
                f"Must {verb} at least one card", ErrorCode.EMPTY_SELECTION
            )

        if len(set(card_ids)) != len(card_ids):
            return ValidationResult.reject(
                "The same card was selected twice", ErrorCode.DUPLICATE_CARD
            )

        cards = [player.find_in_hand(card_id) for card_id in card_ids]
        if any(card is None for card in cards):
            return ValidationResult.reject("Some cards not in hand", ErrorCode.CARD_NOT_IN_HAND)

        color = cards[0].color
        if any(card.color != color for card in cards):
            return ValidationResult.reject(
                "All cards must be the same color", ErrorCode.MIXED_COLORS
            )

        return cards

    # =========================================================================
    # Execution (always on a working copy)
    # =========================================================================

    def _handle_build_mountain(
        self, state: GameState, action: BuildMountain
    ) -> tuple[GameState, list[str]]:
        """Handle build mountain: play one card, then draw back up."""
        player_idx = state.current_player_idx
        player = state.players[player_idx]
        card = self._take_from_hand(player, (action.card_id,))[0]

        state.mandalas[action.mandala_index].mountain.append(card)
        state.last_mandala_player_idx = player_idx

        to_draw = min(BUILD_MOUNTAIN_DRAW, MAX_HAND_SIZE - len(player.hand))
        drawn = draw_into(state, to_draw, self.rng)
        player.hand.extend(drawn)

        changes = [
            f"{player.player_id} built mountain {action.mandala_index} with {card.color}",
            f"{player.player_id} drew {len(drawn)} card(s)",
        ]
        return self._after_mandala_play(state, action.mandala_index, player_idx, changes)

    def _handle_grow_field(
        self, state: GameState, action: GrowField
    ) -> tuple[GameState, list[str]]:
        """Handle grow field: move same-colored cards to own field, no draw."""
        player_idx = state.current_player_idx
        player = state.players[player_idx]
        cards = self._take_from_hand(player, action.card_ids)

        state.mandalas[action.mandala_index].fields[player_idx].extend(cards)
        state.last_mandala_player_idx = player_idx

        changes = [
            f"{player.player_id} grew field in mandala {action.mandala_index} "
            f"with {len(cards)} {cards[0].color}"
        ]
        return self._after_mandala_play(state, action.mandala_index, player_idx, changes)

    def _handle_discard_redraw(
        self, state: GameState, action: DiscardRedraw
    ) -> tuple[GameState, list[str]]:
        """Handle discard/redraw: discard, draw as many, pass the turn."""
        player_idx = state.current_player_idx
        player = state.players[player_idx]
        cards = self._take_from_hand(player, action.card_ids)

        state.discard_pile.extend(cards)
        drawn = draw_into(state, len(cards), self.rng)
        player.hand.extend(drawn)

        self._advance_turn(state, player_idx)
        changes = [
            f"{player.player_id} discarded {len(cards)} {cards[0].color}",
            f"{player.player_id} drew {len(drawn)} card(s)",
        ]
        return state, changes

    def _handle_claim_color(
        self, state: GameState, action: ClaimColor
    ) -> tuple[GameState, list[str]]:
        """Handle claim color during destruction."""
        state, change = resolve_claim(state, action.color, self.rng)
        changes = [change]
        if state.phase == GamePhase.ENDED:
            changes.append("Game over")
        elif state.phase == GamePhase.PLAYING:
            changes.append(f"Destruction finished. Next player: {state.current_player.player_id}")
        return state, changes

    def _after_mandala_play(
        self,
        state: GameState,
        mandala_index: int,
        player_idx: int,
        changes: list[str],
    ) -> tuple[GameState, list[str]]:
        if is_mandala_complete(state.mandalas[mandala_index]):
            state = start_destruction(state, mandala_index, self.rng)
            changes.append(f"Mandala {mandala_index} completed")
        else:
            self._advance_turn(state, player_idx)
        return state, changes

    def _advance_turn(self, state: GameState, player_idx: int) -> None:
        state.current_player_idx = state.opponent_index(player_idx)
        state.turn_number += 1

    def _take_from_hand(self, player: PlayerState, card_ids: tuple[str, ...]) -> list[Card]:
        """Remove validated cards from hand, in selection order."""
        taken = []
        for card_id in card_ids:
            card = player.find_in_hand(card_id)
            if card is None:
                raise EngineInvariantError(f"Validated card {card_id} missing from hand")
            player.hand.remove(card)
            taken.append(card)
        return taken


def apply_action(
    state: GameState,
    action: Action,
    rng: random.Random | None = None,
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(rng=rng)
    return reducer.apply(state, action)


def dispatch(
    state: GameState,
    action: Action | Mapping[str, Any],
    rng: random.Random | None = None,
) -> ActionResult:
    """
    Transport entry point: accepts an Action or a raw action record.

    Malformed records and unknown tags come back as a failed result.
    """
    if isinstance(action, Mapping):
        try:
            action = parse_action(action)
        except InvalidActionError as e:
            return ActionResult.failure(str(e), ErrorCode.UNKNOWN_ACTION, state=state)
    return apply_action(state, action, rng)
