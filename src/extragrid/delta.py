"""Deltas and the window filter that trims them to what a client can see."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from extragrid.exceptions import ScopeError
from extragrid.reference import (
    CellRange,
    CellReference,
    ColumnRange,
    ColumnReference,
    LabelName,
    RowRange,
    RowReference,
    Selection,
    contains,
)
from extragrid.viewport import Viewport
from extragrid.window import Window


@dataclass(frozen=True)
class Cell:
    """A stored cell: its formula text and last computed value."""

    reference: CellReference
    formula: str = ""
    value: Any = None


@dataclass(frozen=True)
class Column:
    reference: ColumnReference
    hidden: bool = False


@dataclass(frozen=True)
class Row:
    reference: RowReference
    hidden: bool = False


@dataclass(frozen=True)
class LabelMapping:
    """A label and the cell or cell range it names."""

    label: LabelName
    target: CellReference | CellRange


@dataclass(frozen=True)
class Delta:
    """The changes produced by one request, plus the viewport and window they were shaped for."""

    cells: tuple[Cell, ...] = ()
    columns: tuple[Column, ...] = ()
    rows: tuple[Row, ...] = ()
    labels: tuple[LabelMapping, ...] = ()
    deleted_cells: tuple[CellReference, ...] = ()
    deleted_columns: tuple[ColumnReference, ...] = ()
    deleted_rows: tuple[RowReference, ...] = ()
    deleted_labels: tuple[LabelMapping, ...] = ()
    column_widths: Mapping[ColumnReference, float] = field(default_factory=dict)
    row_heights: Mapping[RowReference, float] = field(default_factory=dict)
    column_count: int | None = None
    row_count: int | None = None
    viewport: Viewport | None = None
    window: Window = Window.EMPTY

    def set_window(self, window: Window) -> Delta:
        return replace(self, window=window)

    def set_viewport(self, viewport: Viewport | None) -> Delta:
        return replace(self, viewport=viewport)


EMPTY_DELTA = Delta()


def filter_by_window(delta: Delta, window: Window | None = None) -> Delta:
    """Drop every entry of ``delta`` that is not visible through ``window``.

    When ``window`` is None the delta's own window is used. An empty window
    leaves the delta untouched. Cells, columns and rows (deleted ones too) must
    sit inside some range; labels are kept when their target overlaps any range.
    Filtering twice with the same window gives the same result as once.
    """
    if window is None:
        window = delta.window
    if window.is_empty:
        return delta

    return replace(
        delta,
        cells=tuple(cell for cell in delta.cells if window.contains_cell(cell.reference)),
        columns=tuple(column for column in delta.columns if window.contains_column(column.reference)),
        rows=tuple(row for row in delta.rows if window.contains_row(row.reference)),
        labels=tuple(mapping for mapping in delta.labels if window.intersects(mapping.target)),
        deleted_cells=tuple(cell for cell in delta.deleted_cells if window.contains_cell(cell)),
        deleted_columns=tuple(column for column in delta.deleted_columns if window.contains_column(column)),
        deleted_rows=tuple(row for row in delta.deleted_rows if window.contains_row(row)),
        deleted_labels=tuple(mapping for mapping in delta.deleted_labels if window.intersects(mapping.target)),
        column_widths={
            column: width for column, width in delta.column_widths.items() if window.contains_column(column)
        },
        row_heights={row: height for row, height in delta.row_heights.items() if window.contains_row(row)},
        window=window,
    )


def _kind(selection: Selection) -> str:
    if isinstance(selection, CellReference | CellRange):
        return "cells"
    if isinstance(selection, ColumnReference | ColumnRange):
        return "columns"
    if isinstance(selection, RowReference | RowRange):
        return "rows"
    raise TypeError(f"Unsupported selection {selection!r}")


def validate_patch_scope(selections: Iterable[Selection], addressed: Selection) -> None:
    """Check every patched reference lies inside the range the request addressed.

    Raises:
        ScopeError: naming every offender, grouped as cells, columns then rows,
            eg ``Patch includes cells Z99 outside A1:B2``
    """
    outside: dict[str, list[str]] = {}
    for selection in selections:
        if not contains(addressed, selection):
            names = outside.setdefault(_kind(selection), [])
            text = str(selection)
            if text not in names:
                names.append(text)
    if not outside:
        return

    parts = [f"{kind} {', '.join(outside[kind])}" for kind in ("cells", "columns", "rows") if kind in outside]
    raise ScopeError(f"Patch includes {' and '.join(parts)} outside {addressed}")


def validate_delta_patch_scope(delta: Delta, addressed: Selection) -> None:
    """Check the cells, columns and rows of a patch body against ``addressed``."""
    selections: list[Selection] = [cell.reference for cell in delta.cells]
    selections.extend(column.reference for column in delta.columns)
    selections.extend(row.reference for row in delta.rows)
    validate_patch_scope(selections, addressed)


def require_closed_range(text: str, begin: object | None, end: object | None, kind: str) -> None:
    """Reject an open ended column or row range such as ``B:`` or ``*``.

    Raises:
        ScopeError: ``Range with both columns required=B:``
    """
    if begin is None or end is None:
        raise ScopeError(f"Range with both {kind} required={text}")
