"""
Bot Policy - Interface for bot decision-making.

A BotPolicy takes a game state and the enumerated legal actions and
returns a decision. Bots only ever see the redacted view of their seat.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
import random
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..engine_core.action import Action


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The action to take
    - Explanation (for UI/debugging)
    - Confidence in the decision
    """
    action: Action
    explanation: str = ""
    confidence: float = 1.0
    evaluated_actions: int = 0


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects actions.
    """

    @abstractmethod
    def select_action(
        self,
        state: GameState,
        player_idx: int,
        legal_actions: list[Action],
    ) -> BotDecision:
        """
        Select an action from the legal actions.

        Args:
            state: The bot's (redacted) view of the game
            player_idx: Seat the bot is playing
            legal_actions: List of legal actions to choose from

        Returns:
            BotDecision with the selected action
        """

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - selects actions uniformly at random.

    Used for:
    - Testing (random playouts)
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(
        self,
        state: GameState,
        player_idx: int,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        action = self.rng.choice(legal_actions)
        return BotDecision(
            action=action,
            explanation="Selected randomly",
            confidence=1.0 / len(legal_actions),
            evaluated_actions=len(legal_actions),
        )


class FirstLegalPolicy(BotPolicy):
    """
    First-legal policy - always selects the first legal action.

    Used for:
    - Deterministic testing
    - Baseline comparison
    """

    def select_action(
        self,
        state: GameState,
        player_idx: int,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        return BotDecision(
            action=legal_actions[0],
            explanation="Selected first legal action",
            evaluated_actions=1,
        )
