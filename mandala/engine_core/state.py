"""
Game State - Value objects for a two-player Mandala match.

Design principles:
- Immutable-friendly: every transition works on a clone and returns it
- Comparable: dataclass equality is used to compare snapshots and views
- Conserving: 108 cards, every one of them in exactly one zone

Zones:
    deck, discard_pile              shared
    hand, cup, river_cards          per player
    mountain, fields[0], fields[1]  per mandala
"""

from __future__ import annotations
from dataclasses import dataclass, field
from copy import deepcopy
from enum import Enum


COLORS: tuple[str, ...] = ("red", "orange", "yellow", "green", "purple", "black")
CARDS_PER_COLOR = 18
TOTAL_CARDS = len(COLORS) * CARDS_PER_COLOR
MAX_HAND_SIZE = 8
INITIAL_HAND_SIZE = 6
INITIAL_CUP_SIZE = 2
INITIAL_MOUNTAIN_SIZE = 2
RIVER_SIZE = 6
BUILD_MOUNTAIN_DRAW = 3
NUM_PLAYERS = 2
NUM_MANDALAS = 2


class GamePhase(Enum):
    """High-level game phases."""
    PLAYING = "playing"
    DESTROYING = "destroying"
    ENDED = "ended"


class EndGameTrigger(Enum):
    """Why the game is going to end once the current destruction completes."""
    DECK_EXHAUSTED = "deck_exhausted"
    SIXTH_RIVER_COLOR = "sixth_river_color"


@dataclass(frozen=True)
class Card:
    """A single physical card. Identity is the card_id."""
    card_id: str
    color: str

    @property
    def is_hidden(self) -> bool:
        return self.card_id == HIDDEN_CARD_ID


HIDDEN_CARD_ID = "hidden"
HIDDEN_CARD = Card(card_id=HIDDEN_CARD_ID, color="hidden")


@dataclass
class PlayerState:
    """
    State for a single player.

    The river records which color occupies each of the six slots; the card
    that opened a slot is kept face-up in river_cards so it stays counted.
    """
    player_id: str
    hand: list[Card] = field(default_factory=list)
    cup: list[Card] = field(default_factory=list)
    river: list[str | None] = field(default_factory=lambda: [None] * RIVER_SIZE)
    river_cards: list[Card] = field(default_factory=list)
    starting_cup_count: int = 0

    def find_in_hand(self, card_id: str) -> Card | None:
        for card in self.hand:
            if card.card_id == card_id:
                return card
        return None

    def river_index(self, color: str) -> int | None:
        """Slot index holding this color, or None."""
        try:
            return self.river.index(color)
        except ValueError:
            return None

    def first_empty_river_slot(self) -> int | None:
        for i, color in enumerate(self.river):
            if color is None:
                return i
        return None

    @property
    def river_colors(self) -> list[str]:
        return [color for color in self.river if color is not None]

    @property
    def card_count(self) -> int:
        return len(self.hand) + len(self.cup) + len(self.river_cards)


@dataclass
class Mandala:
    """Shared board zone: one mountain plus a field per player."""
    mountain: list[Card] = field(default_factory=list)
    fields: list[list[Card]] = field(default_factory=lambda: [[] for _ in range(NUM_PLAYERS)])

    @property
    def card_count(self) -> int:
        return len(self.mountain) + sum(len(f) for f in self.fields)


@dataclass
class Destruction:
    """Bookkeeping for an in-progress destruction (claim) phase."""
    mandala_index: int
    current_claimer_index: int
    remaining_colors: list[str] = field(default_factory=list)


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer, which never touches the
    instance it was handed.
    """
    deck: list[Card] = field(default_factory=list)
    discard_pile: list[Card] = field(default_factory=list)
    players: list[PlayerState] = field(default_factory=list)
    mandalas: list[Mandala] = field(default_factory=list)

    current_player_idx: int = 0
    phase: GamePhase = GamePhase.PLAYING
    end_game_trigger: EndGameTrigger | None = None
    destruction: Destruction | None = None
    last_mandala_player_idx: int | None = None
    turn_number: int = 1

    @property
    def current_player(self) -> PlayerState:
        """Get the current player."""
        return self.players[self.current_player_idx]

    @staticmethod
    def opponent_index(player_idx: int) -> int:
        return 1 - player_idx

    def get_player(self, player_id: str) -> PlayerState | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def player_index(self, player_id: str) -> int | None:
        for i, p in enumerate(self.players):
            if p.player_id == player_id:
                return i
        return None

    def set_end_game_trigger(self, trigger: EndGameTrigger) -> bool:
        """
        Set the end-game trigger unless one is already set.

        Only call on a working copy. Returns True if the trigger was set.
        """
        if self.end_game_trigger is not None:
            return False
        self.end_game_trigger = trigger
        return True

    def total_cards(self) -> int:
        """Cards across every zone; 108 in any reachable state."""
        return (
            len(self.deck)
            + len(self.discard_pile)
            + sum(p.card_count for p in self.players)
            + sum(m.card_count for m in self.mandalas)
        )

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)
