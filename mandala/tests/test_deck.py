"""
Tests for deck handling and game setup.

Tests:
- Card universe
- Seeded shuffling
- Drawing, reshuffle and the deck_exhausted trigger
- Initial deal
"""

import random
from collections import Counter

import pytest

from ..engine_core.deck import create_deck, draw_cards, draw_into, shuffle_deck
from ..engine_core.setup import create_game
from ..engine_core.state import (
    COLORS,
    TOTAL_CARDS,
    EndGameTrigger,
    GamePhase,
)
from .conftest import card, cards, make_state


class TestCreateDeck:
    """Tests for the card universe."""

    def test_has_108_cards(self):
        assert len(create_deck()) == TOTAL_CARDS == 108

    def test_eighteen_per_color(self):
        counts = Counter(c.color for c in create_deck())
        assert set(counts) == set(COLORS)
        assert all(count == 18 for count in counts.values())

    def test_ids_are_unique(self):
        ids = [c.card_id for c in create_deck()]
        assert len(set(ids)) == len(ids)

    def test_id_format(self):
        deck = create_deck()
        assert deck[0].card_id == "red-0"
        assert deck[18].card_id == "orange-18"
        assert deck[-1].card_id == "black-107"


class TestShuffle:
    """Tests for shuffling."""

    def test_same_seed_same_order(self):
        deck = create_deck()
        a = shuffle_deck(deck, random.Random(3))
        b = shuffle_deck(deck, random.Random(3))
        assert a == b

    def test_does_not_modify_input(self):
        deck = create_deck()
        shuffle_deck(deck, random.Random(3))
        assert deck == create_deck()

    def test_is_permutation(self):
        deck = create_deck()
        shuffled = shuffle_deck(deck, random.Random(3))
        assert sorted(c.card_id for c in shuffled) == sorted(c.card_id for c in deck)


class TestDraw:
    """Tests for drawing."""

    def test_draws_from_front(self):
        state = make_state(deck=cards("red", 0, 1, 2))
        drawn, new_state = draw_cards(state, 2)

        assert drawn == cards("red", 0, 1)
        assert new_state.deck == [card("red", 2)]

    def test_draw_cards_leaves_input_untouched(self):
        state = make_state(deck=cards("red", 0, 1, 2))
        draw_cards(state, 2)
        assert len(state.deck) == 3

    def test_reshuffles_discard_when_empty(self, rng):
        state = make_state(deck=[card("red")], discard=cards("green", 0, 1, 2))
        drawn, new_state = draw_cards(state, 3, rng)

        assert len(drawn) == 3
        assert drawn[0] == card("red")
        assert new_state.discard_pile == []
        assert len(new_state.deck) == 1
        assert new_state.end_game_trigger == EndGameTrigger.DECK_EXHAUSTED

    def test_no_trigger_without_reshuffle(self):
        state = make_state(deck=cards("red", 0, 1), discard=[card("green")])
        _, new_state = draw_cards(state, 2)
        assert new_state.end_game_trigger is None

    def test_reshuffle_keeps_existing_trigger(self, rng):
        state = make_state(deck=[], discard=cards("green", 0, 1))
        state.end_game_trigger = EndGameTrigger.SIXTH_RIVER_COLOR

        _, new_state = draw_cards(state, 1, rng)

        assert new_state.end_game_trigger == EndGameTrigger.SIXTH_RIVER_COLOR

    def test_short_draw_when_everything_is_empty(self):
        state = make_state(deck=[card("red")], discard=[])
        drawn = draw_into(state, 3)

        assert drawn == [card("red")]
        assert state.deck == []

    def test_zero_count_draws_nothing(self):
        state = make_state(deck=cards("red", 0, 1))
        drawn = draw_into(state, 0)
        assert drawn == []
        assert len(state.deck) == 2


class TestCreateGame:
    """Tests for the initial deal."""

    def test_initial_zones(self, new_game):
        state = new_game

        assert state.phase == GamePhase.PLAYING
        assert state.current_player_idx == 0
        assert state.turn_number == 1
        assert len(state.deck) == 88
        assert state.discard_pile == []
        assert state.end_game_trigger is None
        assert state.destruction is None

        for player in state.players:
            assert len(player.hand) == 6
            assert len(player.cup) == 2
            assert player.starting_cup_count == 2
            assert player.river == [None] * 6

        for mandala in state.mandalas:
            assert len(mandala.mountain) == 2
            assert mandala.fields == [[], []]

    def test_all_cards_accounted_for(self, new_game):
        assert new_game.total_cards() == 108
        ids = [c.card_id for c in new_game.deck]
        for player in new_game.players:
            ids += [c.card_id for c in player.hand + player.cup]
        for mandala in new_game.mandalas:
            ids += [c.card_id for c in mandala.mountain]
        assert len(set(ids)) == 108

    def test_same_seed_same_deal(self):
        a = create_game("alice", "bob", random_seed=11)
        b = create_game("alice", "bob", random_seed=11)
        assert a == b

    def test_different_seeds_differ(self):
        a = create_game("alice", "bob", random_seed=11)
        b = create_game("alice", "bob", random_seed=12)
        assert a.deck != b.deck

    def test_player_order(self, new_game):
        assert [p.player_id for p in new_game.players] == ["alice", "bob"]

    def test_same_ids_rejected(self):
        with pytest.raises(ValueError):
            create_game("alice", "alice")
