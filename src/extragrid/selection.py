"""Anchored selections and the anchor-relative extend/move rules.

An anchored selection pairs a selection with the corner or edge that stays put
while the opposite corner or edge moves. The rules here are pure functions so
the collapse-on-cross behaviour can be tested without any viewport around it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from extragrid.exceptions import InvalidAnchorError, ParseError
from extragrid.reference import (
    CellRange,
    CellReference,
    ColumnRange,
    ColumnReference,
    Direction,
    LabelName,
    RowRange,
    RowReference,
    Selection,
)


class Anchor(Enum):
    """The fixed corner or edge of a selection."""

    NONE = "none"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"

    @classmethod
    def parse(cls, text: str) -> Anchor:
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise ParseError(text, f"Invalid anchor {text!r}") from None

    def opposite(self) -> Anchor:
        return _OPPOSITES[self]

    def __str__(self) -> str:
        return self.value


_OPPOSITES = {
    Anchor.NONE: Anchor.NONE,
    Anchor.TOP_LEFT: Anchor.BOTTOM_RIGHT,
    Anchor.TOP_RIGHT: Anchor.BOTTOM_LEFT,
    Anchor.BOTTOM_LEFT: Anchor.TOP_RIGHT,
    Anchor.BOTTOM_RIGHT: Anchor.TOP_LEFT,
    Anchor.LEFT: Anchor.RIGHT,
    Anchor.RIGHT: Anchor.LEFT,
    Anchor.TOP: Anchor.BOTTOM,
    Anchor.BOTTOM: Anchor.TOP,
}

_CORNERS = (Anchor.TOP_LEFT, Anchor.TOP_RIGHT, Anchor.BOTTOM_LEFT, Anchor.BOTTOM_RIGHT)

SELECTION_TYPES: dict[str, type] = {
    CellReference.SELECTION_TYPE: CellReference,
    CellRange.SELECTION_TYPE: CellRange,
    ColumnReference.SELECTION_TYPE: ColumnReference,
    ColumnRange.SELECTION_TYPE: ColumnRange,
    RowReference.SELECTION_TYPE: RowReference,
    RowRange.SELECTION_TYPE: RowRange,
    LabelName.SELECTION_TYPE: LabelName,
}


def allowed_anchors(selection: Selection) -> tuple[Anchor, ...]:
    """Anchors that may be paired with ``selection``."""
    if isinstance(selection, CellRange):
        return _CORNERS
    if isinstance(selection, ColumnRange):
        return (Anchor.LEFT, Anchor.RIGHT)
    if isinstance(selection, RowRange):
        return (Anchor.TOP, Anchor.BOTTOM)
    if isinstance(selection, CellReference | ColumnReference | RowReference):
        return (Anchor.NONE,)
    raise TypeError(f"Unsupported selection {selection!r}")


def default_anchor(selection: Selection) -> Anchor:
    """The canonical initial anchor for a freshly made selection."""
    return allowed_anchors(selection)[0]


def selection_type(selection: Selection | LabelName) -> str:
    """The wire name of a selection's kind, eg ``cell-range``."""
    return type(selection).SELECTION_TYPE


def parse_selection(text: str, type_name: str) -> Selection | LabelName:
    """Parse ``text`` as the selection kind named by ``type_name``.

    Raises:
        ParseError: if the type is unknown or the text does not match it
    """
    kind = SELECTION_TYPES.get(type_name)
    if kind is None:
        raise ParseError(type_name, f"Invalid selection type {type_name!r}")
    return kind.parse(text)


@dataclass(frozen=True)
class AnchoredSelection:
    """A selection plus the anchor that stays fixed while it is extended."""

    selection: Selection
    anchor: Anchor = Anchor.NONE

    def __post_init__(self) -> None:
        allowed = allowed_anchors(self.selection)
        if self.anchor not in allowed:
            raise InvalidAnchorError(self.selection, self.anchor, allowed)

    @classmethod
    def with_default_anchor(cls, selection: Selection) -> AnchoredSelection:
        return cls(selection, default_anchor(selection))

    def moving_cell(self) -> CellReference | None:
        """The corner opposite the anchor, or the cell itself. None for column/row selections."""
        selection = self.selection
        if isinstance(selection, CellReference):
            return selection
        if isinstance(selection, CellRange):
            return corner(selection, self.anchor.opposite())
        return None

    def __str__(self) -> str:
        if self.anchor is Anchor.NONE:
            return str(self.selection)
        return f"{self.selection} {self.anchor}"


def corner(cell_range: CellRange, anchor: Anchor) -> CellReference:
    """The cell at ``anchor``'s corner of ``cell_range``."""
    if anchor is Anchor.TOP_LEFT:
        return CellReference(cell_range.left, cell_range.top)
    if anchor is Anchor.TOP_RIGHT:
        return CellReference(cell_range.right, cell_range.top)
    if anchor is Anchor.BOTTOM_LEFT:
        return CellReference(cell_range.left, cell_range.bottom)
    if anchor is Anchor.BOTTOM_RIGHT:
        return CellReference(cell_range.right, cell_range.bottom)
    raise ValueError(f"{anchor} is not a corner")


def _corner_of(cell_range: CellRange, fixed: CellReference) -> Anchor:
    """Work out which corner ``fixed`` occupies.

    A range one column wide or one row high leaves one axis ambiguous; the
    answer is then taken on the top-left/bottom-right diagonal.
    """
    on_left = fixed.column == cell_range.left
    on_top = fixed.row == cell_range.top
    if cell_range.width == 1:
        on_left = on_top
    elif cell_range.height == 1:
        on_top = on_left
    if on_top:
        return Anchor.TOP_LEFT if on_left else Anchor.TOP_RIGHT
    return Anchor.BOTTOM_LEFT if on_left else Anchor.BOTTOM_RIGHT


def _cell_range_result(fixed: CellReference, moved: CellReference, previous: Anchor | None) -> AnchoredSelection:
    cell_range = CellRange(fixed, moved)
    if cell_range.is_single:
        return AnchoredSelection(cell_range.begin)
    if previous is not None and corner(cell_range, previous) == fixed:
        return AnchoredSelection(cell_range, previous)
    return AnchoredSelection(cell_range, _corner_of(cell_range, fixed))


def _column_range_result(fixed: ColumnReference, moved: ColumnReference) -> AnchoredSelection:
    column_range = ColumnRange(fixed, moved)
    if column_range.is_single:
        return AnchoredSelection(column_range.begin)
    anchor = Anchor.LEFT if fixed == column_range.begin else Anchor.RIGHT
    return AnchoredSelection(column_range, anchor)


def _row_range_result(fixed: RowReference, moved: RowReference) -> AnchoredSelection:
    row_range = RowRange(fixed, moved)
    if row_range.is_single:
        return AnchoredSelection(row_range.begin)
    anchor = Anchor.TOP if fixed == row_range.begin else Anchor.BOTTOM
    return AnchoredSelection(row_range, anchor)


def extend(anchored: AnchoredSelection, direction: Direction) -> AnchoredSelection:
    """Extend the selection one cell, column or row in ``direction``.

    The anchor stays fixed and the opposite corner or edge moves, saturating at
    the grid edge. A result of a single element collapses back to a cell,
    column or row with no anchor.
    """
    selection = anchored.selection
    anchor = anchored.anchor

    if isinstance(selection, CellReference):
        moved = selection.step(direction)
        if moved == selection:
            return anchored
        return _cell_range_result(selection, moved, None)

    if isinstance(selection, CellRange):
        fixed = corner(selection, anchor)
        moving = corner(selection, anchor.opposite())
        moved = moving.step(direction)
        if moved == moving:
            return anchored
        return _cell_range_result(fixed, moved, anchor)

    if isinstance(selection, ColumnReference | ColumnRange):
        # Columns have no row extent
        if direction.is_vertical:
            return anchored
        if isinstance(selection, ColumnReference):
            fixed = moving = selection
        elif anchor is Anchor.LEFT:
            fixed, moving = selection.begin, selection.end
        else:
            fixed, moving = selection.end, selection.begin
        moved = moving.step(direction)
        if moved == moving:
            return anchored
        return _column_range_result(fixed, moved)

    if isinstance(selection, RowReference | RowRange):
        if direction.is_horizontal:
            return anchored
        if isinstance(selection, RowReference):
            fixed = moving = selection
        elif anchor is Anchor.TOP:
            fixed, moving = selection.begin, selection.end
        else:
            fixed, moving = selection.end, selection.begin
        moved = moving.step(direction)
        if moved == moving:
            return anchored
        return _row_range_result(fixed, moved)

    raise TypeError(f"Unsupported selection {selection!r}")


def move(anchored: AnchoredSelection, direction: Direction) -> AnchoredSelection:
    """Replace the selection with the single element one step from its moving edge."""
    selection = anchored.selection
    anchor = anchored.anchor

    if isinstance(selection, CellReference | CellRange):
        moving = anchored.moving_cell()
        return AnchoredSelection(moving.step(direction))

    if isinstance(selection, ColumnReference | ColumnRange):
        if direction.is_vertical:
            return anchored
        if isinstance(selection, ColumnReference):
            moving = selection
        else:
            moving = selection.end if anchor is Anchor.LEFT else selection.begin
        return AnchoredSelection(moving.step(direction))

    if isinstance(selection, RowReference | RowRange):
        if direction.is_horizontal:
            return anchored
        if isinstance(selection, RowReference):
            moving = selection
        else:
            moving = selection.end if anchor is Anchor.TOP else selection.begin
        return AnchoredSelection(moving.step(direction))

    raise TypeError(f"Unsupported selection {selection!r}")
