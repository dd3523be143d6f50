"""
Action System - Actions, validation results, and action results.

There are exactly four actions:
1. build_mountain  - play one card to a mandala's mountain, then draw
2. grow_field      - play same-colored cards to your own field
3. discard_redraw  - discard same-colored cards and draw as many
4. claim_color     - take a mountain color during destruction

Actions are a closed union of frozen dataclasses. Transport records
(plain dicts) are converted with parse_action().
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, Union

from .errors import InvalidActionError


class ActionType(Enum):
    """Wire tags for the four actions."""
    BUILD_MOUNTAIN = "build_mountain"
    GROW_FIELD = "grow_field"
    DISCARD_REDRAW = "discard_redraw"
    CLAIM_COLOR = "claim_color"


@dataclass(frozen=True)
class BuildMountain:
    card_id: str
    mandala_index: int

    action_type: ClassVar[ActionType] = ActionType.BUILD_MOUNTAIN

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.action_type.value,
            "cardId": self.card_id,
            "mandalaIndex": self.mandala_index,
        }


@dataclass(frozen=True)
class GrowField:
    card_ids: tuple[str, ...]
    mandala_index: int

    action_type: ClassVar[ActionType] = ActionType.GROW_FIELD

    def __post_init__(self):
        object.__setattr__(self, "card_ids", tuple(self.card_ids))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.action_type.value,
            "cardIds": list(self.card_ids),
            "mandalaIndex": self.mandala_index,
        }


@dataclass(frozen=True)
class DiscardRedraw:
    card_ids: tuple[str, ...]

    action_type: ClassVar[ActionType] = ActionType.DISCARD_REDRAW

    def __post_init__(self):
        object.__setattr__(self, "card_ids", tuple(self.card_ids))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.action_type.value, "cardIds": list(self.card_ids)}


@dataclass(frozen=True)
class ClaimColor:
    color: str

    action_type: ClassVar[ActionType] = ActionType.CLAIM_COLOR

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.action_type.value, "color": self.color}


Action = Union[BuildMountain, GrowField, DiscardRedraw, ClaimColor]


def _field(data: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in data:
            return data[name]
    raise InvalidActionError(f"Missing field '{names[0]}'")


def _card_ids(data: Mapping[str, Any]) -> tuple[str, ...]:
    card_ids = _field(data, "cardIds", "card_ids")
    if isinstance(card_ids, (str, bytes)) or not isinstance(card_ids, (list, tuple)):
        raise InvalidActionError("cardIds must be a list of card ids")
    if not all(isinstance(card_id, str) for card_id in card_ids):
        raise InvalidActionError("cardIds must be a list of card ids")
    return tuple(card_ids)


def _mandala_index(data: Mapping[str, Any]) -> int:
    index = _field(data, "mandalaIndex", "mandala_index")
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidActionError("mandalaIndex must be an integer")
    return index


def parse_action(data: Mapping[str, Any]) -> Action:
    """
    Parse a transport record into an Action.

    Accepts camelCase (cardId) and snake_case (card_id) keys.

    Raises:
        InvalidActionError: unknown type tag or malformed fields
    """
    if not isinstance(data, Mapping):
        raise InvalidActionError("Action must be an object")

    try:
        action_type = ActionType(data.get("type"))
    except ValueError:
        raise InvalidActionError("Unknown action type") from None

    if action_type == ActionType.BUILD_MOUNTAIN:
        card_id = _field(data, "cardId", "card_id")
        if not isinstance(card_id, str):
            raise InvalidActionError("cardId must be a string")
        return BuildMountain(card_id=card_id, mandala_index=_mandala_index(data))
    elif action_type == ActionType.GROW_FIELD:
        return GrowField(card_ids=_card_ids(data), mandala_index=_mandala_index(data))
    elif action_type == ActionType.DISCARD_REDRAW:
        return DiscardRedraw(card_ids=_card_ids(data))
    else:
        color = _field(data, "color")
        if not isinstance(color, str):
            raise InvalidActionError("color must be a string")
        return ClaimColor(color=color)


class ErrorCode(str, Enum):
    """Machine-readable reasons an action was rejected."""
    WRONG_PHASE = "WRONG_PHASE"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    DUPLICATE_CARD = "DUPLICATE_CARD"
    EMPTY_SELECTION = "EMPTY_SELECTION"
    MIXED_COLORS = "MIXED_COLORS"
    RULE_OF_COLOR = "RULE_OF_COLOR"
    MUST_KEEP_CARD = "MUST_KEEP_CARD"
    INVALID_MANDALA = "INVALID_MANDALA"
    NO_DESTRUCTION = "NO_DESTRUCTION"
    NOT_YOUR_CLAIM = "NOT_YOUR_CLAIM"
    COLOR_UNAVAILABLE = "COLOR_UNAVAILABLE"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating an action; never has side effects."""
    valid: bool
    error: str | None = None
    error_code: ErrorCode | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def reject(cls, error: str, error_code: ErrorCode) -> ValidationResult:
        return cls(valid=False, error=error, error_code=error_code)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (the untouched input state on failure)
    - Errors (if failed)
    - Public, human-readable description of what changed
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: ErrorCode | None = None
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: ErrorCode | None = None,
        state: Any | None = None,
    ) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, state_changes=changes or [])
