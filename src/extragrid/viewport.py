"""Viewport rectangle, viewport and navigation command types.

Navigation commands travel as comma separated text tokens, for example
``extend-right-column,down-pixel 50,select cell B2``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, replace

from extragrid.exceptions import ParseError, ValidationError
from extragrid.reference import CellReference, Direction, LabelName, Selection
from extragrid.selection import AnchoredSelection, parse_selection, selection_type

NAVIGATION_SEPARATOR = ","

_STEP_TOKENS = {
    Direction.LEFT: "left-column",
    Direction.RIGHT: "right-column",
    Direction.UP: "up-row",
    Direction.DOWN: "down-row",
}
_STEP_DIRECTIONS = {token: direction for direction, token in _STEP_TOKENS.items()}

_PIXEL_PATTERN = re.compile(r"^(extend-)?(left|right|up|down)-pixel\s+([0-9]+)$")
_SELECT_PATTERN = re.compile(r"^select\s+([a-z-]+)\s+(\S+)$")


@dataclass(frozen=True)
class ViewportRectangle:
    """The pixel rectangle whose top-left cell is ``home``."""

    home: CellReference
    width: float
    height: float

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if math.isnan(value) or value < 0:
                raise ValidationError(f"Invalid {name}={value} < 0", (name,))

    def set_home(self, home: CellReference) -> ViewportRectangle:
        return replace(self, home=home)


@dataclass(frozen=True)
class MoveStep:
    """Move the selection one cell, column or row."""

    direction: Direction

    @property
    def text(self) -> str:
        return _STEP_TOKENS[self.direction]


@dataclass(frozen=True)
class ExtendStep:
    """Extend the selection one cell, column or row away from its anchor."""

    direction: Direction

    @property
    def text(self) -> str:
        return "extend-" + _STEP_TOKENS[self.direction]


@dataclass(frozen=True)
class MovePixel:
    """Scroll the home by a pixel amount, carrying the selection along."""

    direction: Direction
    amount: int

    @property
    def text(self) -> str:
        return f"{self.direction.value}-pixel {self.amount}"


@dataclass(frozen=True)
class ExtendPixel:
    """Scroll the home by a pixel amount, extending the selection as it goes."""

    direction: Direction
    amount: int

    @property
    def text(self) -> str:
        return f"extend-{self.direction.value}-pixel {self.amount}"


@dataclass(frozen=True)
class Select:
    """Replace the selection outright."""

    selection: Selection

    @property
    def text(self) -> str:
        return f"select {selection_type(self.selection)} {self.selection}"


NavigationCommand = MoveStep | ExtendStep | MovePixel | ExtendPixel | Select


def parse_navigation(text: str) -> NavigationCommand:
    """Parse a single navigation token.

    Raises:
        ParseError: if the token is not a known navigation
    """
    token = text.strip()
    lowered = token.lower()

    direction = _STEP_DIRECTIONS.get(lowered)
    if direction is not None:
        return MoveStep(direction)
    if lowered.startswith("extend-"):
        direction = _STEP_DIRECTIONS.get(lowered[len("extend-") :])
        if direction is not None:
            return ExtendStep(direction)

    match = _PIXEL_PATTERN.match(lowered)
    if match:
        extend_prefix, direction_text, amount = match.groups()
        command = ExtendPixel if extend_prefix else MovePixel
        return command(Direction(direction_text), int(amount))

    match = _SELECT_PATTERN.match(token)
    if match:
        type_name, selection_text = match.groups()
        selection = parse_selection(selection_text, type_name)
        if isinstance(selection, LabelName):
            raise ParseError(text, f"Invalid navigation {text!r}, labels cannot be selected")
        return Select(selection)

    raise ParseError(text, f"Invalid navigation {text!r}")


def parse_navigations(text: str) -> tuple[NavigationCommand, ...]:
    """Parse a comma separated navigation list. Blank text gives an empty list.

    Every token is parsed before any is returned so a bad token fails the whole list.
    """
    if not text.strip():
        return ()
    return tuple(parse_navigation(token) for token in text.split(NAVIGATION_SEPARATOR))


def navigations_text(navigations: tuple[NavigationCommand, ...]) -> str:
    return NAVIGATION_SEPARATOR.join(navigation.text for navigation in navigations)


@dataclass(frozen=True)
class Viewport:
    """Everything a request says about what the client is looking at."""

    rectangle: ViewportRectangle
    include_frozen_columns_rows: bool = True
    anchored_selection: AnchoredSelection | None = None
    navigations: tuple[NavigationCommand, ...] = field(default_factory=tuple)

    @property
    def home(self) -> CellReference:
        return self.rectangle.home

    def set_anchored_selection(self, anchored_selection: AnchoredSelection | None) -> Viewport:
        return replace(self, anchored_selection=anchored_selection)

    def set_navigations(self, navigations: tuple[NavigationCommand, ...]) -> Viewport:
        return replace(self, navigations=tuple(navigations))
