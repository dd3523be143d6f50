"""
Match Runner - Drives bot-vs-bot games through the engine.

Each step:
1. Enumerate legal actions for the seat on turn
2. Hand the bot its redacted view and the legal actions
3. Apply the decision through the reducer
4. Stop when the game ends, nobody can move, or the safety limit is hit
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random

from ..engine_core.action import Action
from ..engine_core.action_generator import legal_actions
from ..engine_core.reducer import Reducer
from ..engine_core.scoring import WinnerResult, get_winner
from ..engine_core.setup import create_game
from ..engine_core.state import GamePhase, GameState
from ..engine_core.view import get_player_view
from .policy import BotPolicy

logger = logging.getLogger(__name__)


@dataclass
class MatchRecord:
    """Everything a finished (or abandoned) bot match produced."""
    final_state: GameState
    actions: list[Action] = field(default_factory=list)
    states: list[GameState] = field(default_factory=list)
    winner: WinnerResult | None = None
    stalled: bool = False

    @property
    def finished(self) -> bool:
        return self.final_state.phase == GamePhase.ENDED


def play_game(
    policies: tuple[BotPolicy, BotPolicy],
    player_ids: tuple[str, str] = ("bot_1", "bot_2"),
    seed: int | None = None,
    max_actions: int = 2000,
    keep_states: bool = False,
) -> MatchRecord:
    """
    Play a full match between two policies.

    Args:
        policies: Policy for seat 0 and seat 1
        player_ids: Player IDs for the two seats
        seed: Seed for the deal and every reshuffle
        max_actions: Safety limit on applied actions
        keep_states: Record every intermediate state (for property checks)
    """
    rng = random.Random(seed)
    reducer = Reducer(rng=rng)
    state = create_game(player_ids[0], player_ids[1], rng=rng)
    record = MatchRecord(final_state=state)
    if keep_states:
        record.states.append(state)

    for _ in range(max_actions):
        if state.phase == GamePhase.ENDED:
            break

        seat = state.current_player_idx
        legal = legal_actions(state, seat)
        if not legal:
            logger.warning(f"{state.players[seat].player_id} has no legal action, stopping")
            record.stalled = True
            break

        decision = policies[seat].select_action(get_player_view(state, seat), seat, legal)
        result = reducer.apply(state, decision.action)
        if not result.success:
            raise ValueError(f"Bot chose an illegal action: {result.error}")

        state = result.new_state
        record.actions.append(decision.action)
        if keep_states:
            record.states.append(state)

    if state.phase != GamePhase.ENDED and not record.stalled:
        logger.warning(f"Match stopped unfinished after {len(record.actions)} actions")
        record.stalled = True

    record.final_state = state
    record.winner = get_winner(state)
    return record
