"""
Bots module - Simple automated opponents.

Provides:
- BotPolicy: Interface for bot decision-making
- RandomPolicy / FirstLegalPolicy: baseline policies
- play_game: run a bot-vs-bot match to completion
"""

from .policy import BotPolicy, BotDecision, RandomPolicy, FirstLegalPolicy
from .runner import play_game, MatchRecord

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "play_game",
    "MatchRecord",
]
