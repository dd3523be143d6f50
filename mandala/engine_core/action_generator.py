"""
Action Generator - Enumerates the currently legal actions.

The action generator is used by:
1. Bots to enumerate possible moves
2. UI to highlight available plays

Results are advisory. The reducer re-validates every action it applies,
so a stale or hand-built action is still checked.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .action import Action, BuildMountain, ClaimColor, DiscardRedraw, GrowField
from .reducer import Reducer
from .rules import can_play_color_to_field, can_play_color_to_mountain
from .state import Card, GamePhase, GameState


@dataclass
class ValidActions:
    """Legal actions grouped by type."""
    build_mountain: list[BuildMountain] = field(default_factory=list)
    grow_field: list[GrowField] = field(default_factory=list)
    discard_redraw: list[DiscardRedraw] = field(default_factory=list)
    claim_color: list[ClaimColor] = field(default_factory=list)

    def all(self) -> list[Action]:
        return [*self.build_mountain, *self.grow_field, *self.discard_redraw, *self.claim_color]

    @property
    def is_empty(self) -> bool:
        return not self.all()


def group_by_color(hand: list[Card]) -> dict[str, list[Card]]:
    """Hand cards grouped by color, in order of first appearance."""
    groups: dict[str, list[Card]] = {}
    for card in hand:
        groups.setdefault(card.color, []).append(card)
    return groups


@dataclass
class ActionGenerator:
    """Generates legal actions for one player in the current state."""

    def generate(self, state: GameState, player_idx: int | None = None) -> ValidActions:
        """
        Generate all legal actions for a player (default: the current player).

        Players who are not on turn (or not the current claimer) get nothing.
        """
        result = ValidActions()
        if player_idx is None:
            player_idx = state.current_player_idx

        if state.phase == GamePhase.ENDED or player_idx != state.current_player_idx:
            return result

        if state.phase == GamePhase.DESTROYING:
            destruction = state.destruction
            if destruction and destruction.current_claimer_index == player_idx:
                result.claim_color = [ClaimColor(color) for color in destruction.remaining_colors]
            return result

        hand = state.players[player_idx].hand
        groups = group_by_color(hand)

        result.build_mountain = self._generate_build_mountain(state, hand)
        result.grow_field = self._generate_grow_field(state, player_idx, hand, groups)
        result.discard_redraw = self._generate_discard_redraw(groups)
        return result

    def _generate_build_mountain(self, state: GameState, hand: list[Card]) -> list[BuildMountain]:
        """One candidate per hand card per mandala that accepts its color."""
        actions = []
        for card in hand:
            for mandala_index, mandala in enumerate(state.mandalas):
                if can_play_color_to_mountain(mandala, card.color):
                    actions.append(BuildMountain(card.card_id, mandala_index))
        return actions

    def _generate_grow_field(
        self,
        state: GameState,
        player_idx: int,
        hand: list[Card],
        groups: dict[str, list[Card]],
    ) -> list[GrowField]:
        """Every same-color run of 1..hand-1 cards, per mandala that accepts the color."""
        actions = []
        if len(hand) < 2:
            return actions

        for color, cards in groups.items():
            max_cards = min(len(cards), len(hand) - 1)
            for mandala_index, mandala in enumerate(state.mandalas):
                if not can_play_color_to_field(mandala, player_idx, color):
                    continue
                for count in range(1, max_cards + 1):
                    card_ids = tuple(card.card_id for card in cards[:count])
                    actions.append(GrowField(card_ids, mandala_index))
        return actions

    def _generate_discard_redraw(self, groups: dict[str, list[Card]]) -> list[DiscardRedraw]:
        """Every same-color run of 1..run-length cards."""
        actions = []
        for cards in groups.values():
            for count in range(1, len(cards) + 1):
                actions.append(DiscardRedraw(tuple(card.card_id for card in cards[:count])))
        return actions


def valid_actions(state: GameState, player_idx: int | None = None) -> ValidActions:
    """Convenience function to get grouped legal actions."""
    return ActionGenerator().generate(state, player_idx)


def legal_actions(state: GameState, player_idx: int | None = None) -> list[Action]:
    """Convenience function to get a flat list of legal actions."""
    return valid_actions(state, player_idx).all()


def is_legal(state: GameState, action: Action) -> bool:
    """Check if a specific action is legal (authoritative, via the reducer)."""
    return Reducer().validate(state, action).valid
