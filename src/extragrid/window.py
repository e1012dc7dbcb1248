"""Window computation: which cell ranges are visible in a viewport.

The column and row sizes and the frozen pane counts come from a ``GridMetrics``
collaborator supplied by the engine.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import ClassVar, Protocol

from extragrid.exceptions import ParseError
from extragrid.reference import (
    MAX_COLUMN_INDEX,
    MAX_ROW_INDEX,
    CellRange,
    CellReference,
    ColumnReference,
    RowReference,
    Selection,
    contains,
    intersects,
)
from extragrid.viewport import ViewportRectangle

WINDOW_SEPARATOR = ","


class GridMetrics(Protocol):
    """Column widths, row heights and frozen pane counts for one sheet."""

    def column_width(self, column: ColumnReference) -> float: ...

    def row_height(self, row: RowReference) -> float: ...

    def frozen_column_count(self) -> int: ...

    def frozen_row_count(self) -> int: ...


@dataclass(frozen=True)
class UniformGridMetrics:
    """GridMetrics with default sizes and optional per-column/per-row overrides."""

    default_column_width: float = 100.0
    default_row_height: float = 30.0
    column_widths: Mapping[ColumnReference, float] = field(default_factory=dict)
    row_heights: Mapping[RowReference, float] = field(default_factory=dict)
    frozen_columns: int = 0
    frozen_rows: int = 0

    def column_width(self, column: ColumnReference) -> float:
        return self.column_widths.get(column, self.default_column_width)

    def row_height(self, row: RowReference) -> float:
        return self.row_heights.get(row, self.default_row_height)

    def frozen_column_count(self) -> int:
        return self.frozen_columns

    def frozen_row_count(self) -> int:
        return self.frozen_rows


@dataclass(frozen=True)
class Window:
    """An ordered set of disjoint visible cell ranges."""

    EMPTY: ClassVar[Window]

    ranges: tuple[CellRange, ...] = ()

    def __post_init__(self) -> None:
        ranges = tuple(self.ranges)
        object.__setattr__(self, "ranges", ranges)
        for i, first in enumerate(ranges):
            for second in ranges[i + 1 :]:
                if first.intersect(second) is not None:
                    raise ValueError(f"Window ranges {first} and {second} overlap")

    @classmethod
    def parse(cls, text: str) -> Window:
        """Parse a comma separated list of cell ranges, eg ``A1:A4,B1:D4``."""
        if not text.strip():
            return cls.EMPTY
        try:
            return cls(tuple(CellRange.parse(token.strip()) for token in text.split(WINDOW_SEPARATOR)))
        except ParseError as e:
            raise ParseError(text, f"Invalid window {text!r}: {e}") from e
        except ValueError as e:
            raise ParseError(text, f"Invalid window {text!r}: {e}") from e

    @property
    def is_empty(self) -> bool:
        return not self.ranges

    def contains(self, item: Selection) -> bool:
        """Check whether ``item`` lies wholly within a single range."""
        return any(contains(cell_range, item) for cell_range in self.ranges)

    def contains_cell(self, cell: CellReference) -> bool:
        return self.contains(cell)

    def contains_column(self, column: ColumnReference) -> bool:
        return any(cell_range.left <= column <= cell_range.right for cell_range in self.ranges)

    def contains_row(self, row: RowReference) -> bool:
        return any(cell_range.top <= row <= cell_range.bottom for cell_range in self.ranges)

    def intersects(self, item: Selection) -> bool:
        return any(intersects(cell_range, item) for cell_range in self.ranges)

    def cells(self) -> Iterable[CellReference]:
        """Every visible cell, range by range."""
        for cell_range in self.ranges:
            for column in cell_range.column_range():
                for row in cell_range.row_range():
                    yield CellReference(column, row)

    def __str__(self) -> str:
        return WINDOW_SEPARATOR.join(str(cell_range) for cell_range in self.ranges)


Window.EMPTY = Window()


def _span(
    first: int,
    pixels: float,
    size_of: Callable[[int], float],
    maximum: int,
) -> tuple[int, int] | None:
    """Indices from ``first`` whose accumulated size first reaches ``pixels``.

    Stops early at ``maximum``. None when nothing fits or ``first`` is off the grid.
    """
    if pixels <= 0 or first > maximum:
        return None
    index = first
    total = size_of(index)
    while total < pixels and index < maximum:
        index += 1
        total += size_of(index)
    return first, index


def frozen_counts(metrics: GridMetrics, include_frozen_columns_rows: bool) -> tuple[int, int]:
    """Frozen column and row counts, clamped to the grid; zero when frozen panes are excluded."""
    if not include_frozen_columns_rows:
        return 0, 0
    columns = max(0, min(metrics.frozen_column_count(), MAX_COLUMN_INDEX + 1))
    rows = max(0, min(metrics.frozen_row_count(), MAX_ROW_INDEX + 1))
    return columns, rows


def frozen_width(metrics: GridMetrics, frozen_columns: int) -> float:
    return sum(metrics.column_width(ColumnReference(i)) for i in range(frozen_columns))


def frozen_height(metrics: GridMetrics, frozen_rows: int) -> float:
    return sum(metrics.row_height(RowReference(i)) for i in range(frozen_rows))


def _cell_range(columns: tuple[int, int], rows: tuple[int, int]) -> CellRange:
    return CellRange(CellReference.at(columns[0], rows[0]), CellReference.at(columns[1], rows[1]))


def compute_window(
    rectangle: ViewportRectangle,
    include_frozen_columns_rows: bool,
    metrics: GridMetrics,
    selection: Selection | None = None,
) -> Window:
    """Compute the visible ranges for ``rectangle``.

    Frozen columns and rows are only honoured when ``include_frozen_columns_rows``
    is set. They are emitted as their own ranges, never merged with the
    scrollable region, in the order frozen columns, frozen rows, frozen corner,
    scroll region.

    ``selection`` is advisory and does not change the geometry.

    Args:
        rectangle: home cell plus the viewport's pixel size
        include_frozen_columns_rows: whether frozen panes take part
        metrics: column widths, row heights and frozen counts
        selection: the current selection, if any

    Returns:
        Window of pairwise disjoint ranges
    """
    home = rectangle.home
    if rectangle.width <= 0 or rectangle.height <= 0:
        return Window((CellRange(home, home),))

    frozen_columns, frozen_rows = frozen_counts(metrics, include_frozen_columns_rows)

    scroll_columns = _span(
        max(home.column.index, frozen_columns),
        rectangle.width - frozen_width(metrics, frozen_columns),
        lambda i: metrics.column_width(ColumnReference(i)),
        MAX_COLUMN_INDEX,
    )
    scroll_rows = _span(
        max(home.row.index, frozen_rows),
        rectangle.height - frozen_height(metrics, frozen_rows),
        lambda i: metrics.row_height(RowReference(i)),
        MAX_ROW_INDEX,
    )
    frozen_column_span = (0, frozen_columns - 1) if frozen_columns else None
    frozen_row_span = (0, frozen_rows - 1) if frozen_rows else None

    ranges: list[CellRange] = []
    if frozen_column_span and scroll_rows:
        ranges.append(_cell_range(frozen_column_span, scroll_rows))
    if frozen_row_span and scroll_columns:
        ranges.append(_cell_range(scroll_columns, frozen_row_span))
    if frozen_column_span and frozen_row_span:
        ranges.append(_cell_range(frozen_column_span, frozen_row_span))
    if scroll_columns and scroll_rows:
        ranges.append(_cell_range(scroll_columns, scroll_rows))

    return Window(tuple(ranges))
