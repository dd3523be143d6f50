"""
Tests for bot action selection and the match runner.

Tests:
- Bots select legal actions
- Bots only see the redacted view
- Matches run to completion
- CLI simulation
"""

import pytest

from ..bots import BotDecision, BotPolicy, FirstLegalPolicy, MatchRecord, RandomPolicy, play_game
from .. import logging_config
from ..cli import main
from ..engine_core.action import BuildMountain
from ..engine_core.action_generator import legal_actions
from ..engine_core.state import HIDDEN_CARD


class TestBotActionLegality:
    """Tests that bots only select legal actions."""

    def test_random_bot_selects_legal(self, new_game):
        bot = RandomPolicy(seed=42)
        legal = legal_actions(new_game)

        for _ in range(10):
            decision = bot.select_action(new_game, 0, legal)
            assert decision.action in legal

    def test_first_legal_is_deterministic(self, new_game):
        legal = legal_actions(new_game)
        decision = FirstLegalPolicy().select_action(new_game, 0, legal)

        assert decision.action == legal[0]

    def test_no_legal_actions(self, new_game):
        with pytest.raises(ValueError):
            RandomPolicy().select_action(new_game, 0, [])

    def test_names(self):
        assert RandomPolicy().get_name() == "RandomPolicy"


class RecordingPolicy(BotPolicy):
    """Remembers what it was shown, then defers to the first legal action."""

    def __init__(self):
        self.seen = []

    def select_action(self, state, player_idx, legal_actions):
        self.seen.append((state, player_idx))
        return BotDecision(action=legal_actions[0])


class IllegalPolicy(BotPolicy):

    def select_action(self, state, player_idx, legal_actions):
        return BotDecision(action=BuildMountain("no-such-card", 0))


class TestPlayGame:

    def test_random_match_finishes(self):
        record = play_game((RandomPolicy(seed=1), RandomPolicy(seed=2)), seed=9)

        assert isinstance(record, MatchRecord)
        assert record.finished or record.stalled
        if record.finished:
            assert record.winner is not None
            assert record.winner.winner_id in ("bot_1", "bot_2")

    def test_bots_see_redacted_view(self):
        recorder = RecordingPolicy()
        play_game((recorder, RandomPolicy(seed=2)), seed=4, max_actions=10)

        for state, seat in recorder.seen:
            assert seat == 0
            opponent = state.players[1]
            assert all(card == HIDDEN_CARD for card in opponent.hand)
            assert all(card == HIDDEN_CARD for card in state.deck)

    def test_max_actions_limit(self):
        record = play_game((RandomPolicy(seed=1), RandomPolicy(seed=2)), seed=9, max_actions=3)

        assert len(record.actions) == 3
        assert not record.finished
        assert record.stalled
        assert record.winner is None

    def test_finished_match_is_not_stalled(self):
        record = play_game((RandomPolicy(seed=1), RandomPolicy(seed=2)), seed=9)
        assert record.finished != record.stalled

    def test_keep_states(self):
        record = play_game(
            (RandomPolicy(seed=1), RandomPolicy(seed=2)), seed=9, max_actions=5, keep_states=True
        )
        assert len(record.states) == len(record.actions) + 1

    def test_illegal_choice_raises(self):
        with pytest.raises(ValueError):
            play_game((IllegalPolicy(), IllegalPolicy()), seed=1)


class TestCLI:

    def test_simulate(self, capsys, monkeypatch):
        monkeypatch.setattr(logging_config, "setup_logging", lambda *args, **kwargs: None)

        main(["simulate", "--games", "2", "--seed", "3"])

        out = capsys.readouterr().out
        assert "Game 1:" in out
        assert "Game 2:" in out

    def test_no_command(self):
        with pytest.raises(SystemExit):
            main([])
