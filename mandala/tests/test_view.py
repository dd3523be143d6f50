"""
Tests for per-player redaction.
"""

import pytest

from ..engine_core.state import HIDDEN_CARD
from ..engine_core.view import get_player_view
from .conftest import card, make_state


class TestPlayerView:

    def test_opponent_hand_hidden_count_kept(self, new_game):
        view = get_player_view(new_game, 0)

        assert view.players[1].hand == [HIDDEN_CARD] * 6
        assert view.players[0].hand == new_game.players[0].hand

    def test_opponent_starting_cup_hidden(self, new_game):
        view = get_player_view(new_game, 1)

        assert view.players[0].cup == [HIDDEN_CARD] * 2
        assert view.players[1].cup == new_game.players[1].cup

    def test_deck_hidden_size_kept(self, new_game):
        view = get_player_view(new_game, 0)

        assert len(view.deck) == 88
        assert all(c.is_hidden for c in view.deck)

    def test_public_zones_visible(self, new_game):
        view = get_player_view(new_game, 0)

        assert view.mandalas == new_game.mandalas
        assert view.discard_pile == new_game.discard_pile
        assert view.current_player_idx == new_game.current_player_idx

    def test_cards_won_later_stay_visible(self):
        state = make_state(cups=([card("red"), card("orange")], []), starting_cup_count=1)

        view = get_player_view(state, 1)

        assert view.players[0].cup == [HIDDEN_CARD, card("orange")]

    def test_canonical_state_untouched(self, new_game):
        before = new_game.clone()

        get_player_view(new_game, 0)
        get_player_view(new_game, 1)

        assert new_game == before

    @pytest.mark.parametrize("seat", [0, 1])
    def test_idempotent(self, new_game, seat):
        view = get_player_view(new_game, seat)
        assert get_player_view(view, seat) == view

    def test_idempotent_with_claimed_cup_cards(self):
        state = make_state(cups=([card("red"), card("orange"), card("yellow")], []), starting_cup_count=2)

        view = get_player_view(state, 1)

        assert view.players[0].cup == [HIDDEN_CARD, HIDDEN_CARD, card("yellow")]
        assert get_player_view(view, 1) == view

    def test_invalid_seat(self, new_game):
        with pytest.raises(ValueError):
            get_player_view(new_game, 2)
