"""Navigation interpreter.

Folds a list of navigation commands over a home cell and an optional anchored
selection. After every command home is nudged so the selection's moving corner
stays on screen.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from extragrid.reference import (
    MAX_COLUMN_INDEX,
    MAX_ROW_INDEX,
    CellRange,
    CellReference,
    ColumnRange,
    ColumnReference,
    Direction,
    RowRange,
    RowReference,
)
from extragrid.selection import Anchor, AnchoredSelection, extend, move
from extragrid.viewport import (
    ExtendPixel,
    ExtendStep,
    MovePixel,
    MoveStep,
    NavigationCommand,
    Select,
    Viewport,
    ViewportRectangle,
)
from extragrid.window import GridMetrics, frozen_counts, frozen_height, frozen_width


@dataclass(frozen=True)
class NavigationResult:
    """Home and selection after every navigation has been applied."""

    home: CellReference
    anchored_selection: AnchoredSelection | None = None


def pixel_steps(
    start: int,
    forward: bool,
    amount: float,
    size_of: Callable[[int], float],
    maximum: int,
) -> int:
    """Count whole columns or rows passed when scrolling ``amount`` pixels from ``start``.

    A column or row counts as passed once the remaining amount reaches its far
    edge, so an amount landing exactly on a boundary stops at that boundary.
    Stepping stops at the grid edge.
    """
    remaining = amount
    index = start
    steps = 0
    if forward:
        while remaining > 0 and index < maximum:
            remaining -= size_of(index)
            index += 1
            steps += 1
    else:
        while remaining > 0 and index > 0:
            index -= 1
            remaining -= size_of(index)
            steps += 1
    return steps


def _axis_steps(start: int, direction: Direction, amount: float, metrics: GridMetrics) -> int:
    """Whole columns (or rows, for vertical directions) passed scrolling ``amount`` from ``start``."""
    forward = direction in (Direction.RIGHT, Direction.DOWN)
    if direction.is_horizontal:
        return pixel_steps(
            start,
            forward,
            amount,
            lambda i: metrics.column_width(ColumnReference(i)),
            MAX_COLUMN_INDEX,
        )
    return pixel_steps(
        start,
        forward,
        amount,
        lambda i: metrics.row_height(RowReference(i)),
        MAX_ROW_INDEX,
    )


def _scroll(home: CellReference, direction: Direction, amount: float, metrics: GridMetrics) -> CellReference:
    start = home.column.index if direction.is_horizontal else home.row.index
    steps = _axis_steps(start, direction, amount, metrics)
    return home.add_saturating(direction.column_delta * steps, direction.row_delta * steps)


def _selection_steps(
    anchored: AnchoredSelection,
    direction: Direction,
    amount: float,
    metrics: GridMetrics,
) -> int:
    """Single steps the selection takes for a pixel command, measured from its moving edge."""
    column, row = _moving_edges(anchored)
    edge = column if direction.is_horizontal else row
    if edge is None:
        return 0
    return _axis_steps(edge.index, direction, amount, metrics)


def _repeat(
    step: Callable[[AnchoredSelection, Direction], AnchoredSelection],
    anchored: AnchoredSelection,
    direction: Direction,
    times: int,
) -> AnchoredSelection:
    for _ in range(times):
        anchored = step(anchored, direction)
    return anchored


def _reveal(
    home: int,
    target: int,
    frozen: int,
    available: float,
    size_of: Callable[[int], float],
    maximum: int,
) -> int:
    """New home index along one axis so that ``target`` is visible."""
    if target < frozen:
        return home
    if target < home:
        return target
    if available <= 0:
        return target

    # Is the target already inside the scrollable span?
    index = max(home, frozen)
    total = 0.0
    while index < target and index < maximum:
        total += size_of(index)
        if total >= available:
            break
        index += 1
    else:
        return home

    # Smallest home whose span still reaches the target
    start = target
    total = 0.0
    while start - 1 >= frozen and total + size_of(start - 1) < available:
        start -= 1
        total += size_of(start)
    return start


def _moving_edges(anchored: AnchoredSelection) -> tuple[ColumnReference | None, RowReference | None]:
    selection = anchored.selection
    if isinstance(selection, CellReference | CellRange):
        cell = anchored.moving_cell()
        return cell.column, cell.row
    if isinstance(selection, ColumnReference):
        return selection, None
    if isinstance(selection, ColumnRange):
        return (selection.end if anchored.anchor is Anchor.LEFT else selection.begin), None
    if isinstance(selection, RowReference):
        return None, selection
    if isinstance(selection, RowRange):
        return None, (selection.end if anchored.anchor is Anchor.TOP else selection.begin)
    raise TypeError(f"Unsupported selection {selection!r}")


def keep_visible(
    home: CellReference,
    anchored: AnchoredSelection | None,
    rectangle: ViewportRectangle,
    metrics: GridMetrics,
    include_frozen_columns_rows: bool,
) -> CellReference:
    """Move ``home`` the least distance that brings the selection's moving corner on screen.

    Targets inside a frozen band are always visible and never move home.
    """
    if anchored is None:
        return home
    column, row = _moving_edges(anchored)
    frozen_columns, frozen_rows = frozen_counts(metrics, include_frozen_columns_rows)

    if column is not None:
        index = _reveal(
            home.column.index,
            column.index,
            frozen_columns,
            rectangle.width - frozen_width(metrics, frozen_columns),
            lambda i: metrics.column_width(ColumnReference(i)),
            MAX_COLUMN_INDEX,
        )
        home = home.set_column(ColumnReference(index))
    if row is not None:
        index = _reveal(
            home.row.index,
            row.index,
            frozen_rows,
            rectangle.height - frozen_height(metrics, frozen_rows),
            lambda i: metrics.row_height(RowReference(i)),
            MAX_ROW_INDEX,
        )
        home = home.set_row(RowReference(index))
    return home


def _apply(
    navigation: NavigationCommand,
    home: CellReference,
    anchored: AnchoredSelection | None,
    metrics: GridMetrics,
) -> tuple[CellReference, AnchoredSelection | None]:
    if isinstance(navigation, Select):
        return home, AnchoredSelection.with_default_anchor(navigation.selection)

    if isinstance(navigation, MoveStep):
        if anchored is None:
            return home, AnchoredSelection(home.step(navigation.direction))
        return home, move(anchored, navigation.direction)

    if isinstance(navigation, ExtendStep):
        if anchored is None:
            return home, None
        return home, extend(anchored, navigation.direction)

    if isinstance(navigation, MovePixel | ExtendPixel):
        home = _scroll(home, navigation.direction, navigation.amount, metrics)
        if anchored is None:
            return home, None
        steps = _selection_steps(anchored, navigation.direction, navigation.amount, metrics)
        step = move if isinstance(navigation, MovePixel) else extend
        return home, _repeat(step, anchored, navigation.direction, steps)

    raise TypeError(f"Unsupported navigation {navigation!r}")


def apply_navigations(
    navigations: Iterable[NavigationCommand],
    rectangle: ViewportRectangle,
    metrics: GridMetrics,
    anchored_selection: AnchoredSelection | None = None,
    include_frozen_columns_rows: bool = False,
) -> NavigationResult:
    """Apply ``navigations`` left to right.

    Args:
        navigations: parsed navigation commands
        rectangle: the viewport, whose home is the starting home
        metrics: column widths, row heights and frozen counts
        anchored_selection: the starting selection, if any
        include_frozen_columns_rows: whether frozen bands count as always visible

    Returns:
        NavigationResult with the final home and selection
    """
    home = rectangle.home
    anchored = anchored_selection
    for navigation in navigations:
        home, anchored = _apply(navigation, home, anchored, metrics)
        home = keep_visible(home, anchored, rectangle, metrics, include_frozen_columns_rows)
    return NavigationResult(home, anchored)


def navigate(viewport: Viewport, metrics: GridMetrics) -> Viewport:
    """Apply a viewport's navigations, returning a viewport with them consumed."""
    if not viewport.navigations:
        return viewport
    result = apply_navigations(
        viewport.navigations,
        viewport.rectangle,
        metrics,
        viewport.anchored_selection,
        viewport.include_frozen_columns_rows,
    )
    return replace(
        viewport,
        rectangle=viewport.rectangle.set_home(result.home),
        anchored_selection=result.anchored_selection,
        navigations=(),
    )
