"""
Rule of Color - Pure predicates over a mandala's color placement.

Within a mandala each color may live in at most one zone type: the
mountain, or exactly one of the two fields. Repeats inside the zone that
already holds a color are fine.
"""

from __future__ import annotations

from .state import COLORS, Mandala


def colors_in_mountain(mandala: Mandala) -> set[str]:
    return {card.color for card in mandala.mountain}


def colors_in_field(mandala: Mandala, player_idx: int) -> set[str]:
    return {card.color for card in mandala.fields[player_idx]}


def colors_in_mandala(mandala: Mandala) -> set[str]:
    colors = colors_in_mountain(mandala)
    for player_idx in range(len(mandala.fields)):
        colors |= colors_in_field(mandala, player_idx)
    return colors


def can_play_color_to_mountain(mandala: Mandala, color: str) -> bool:
    """A color may join the mountain unless either field holds it."""
    return all(color not in colors_in_field(mandala, i) for i in range(len(mandala.fields)))


def can_play_color_to_field(mandala: Mandala, player_idx: int, color: str) -> bool:
    """A color may join a player's field unless the mountain or the opponent's field holds it."""
    if color in colors_in_mountain(mandala):
        return False
    return color not in colors_in_field(mandala, 1 - player_idx)


def available_colors_for_mountain(mandala: Mandala) -> list[str]:
    return [color for color in COLORS if can_play_color_to_mountain(mandala, color)]


def available_colors_for_field(mandala: Mandala, player_idx: int) -> list[str]:
    return [color for color in COLORS if can_play_color_to_field(mandala, player_idx, color)]


def is_mandala_complete(mandala: Mandala) -> bool:
    """A mandala completes once all six colors appear somewhere in it."""
    return len(colors_in_mandala(mandala)) == len(COLORS)
