"""Spreadsheet engine collaborator.

The request pipeline only needs column and row sizes, frozen pane counts, label
resolution and a handful of mutations that return deltas. ``MemorySpreadsheet``
keeps all of that in dictionaries and backs the HTTP server and the tests.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from typing import Protocol, TypeVar

from extragrid.delta import Cell, Column, Delta, LabelMapping, Row
from extragrid.exceptions import UnknownLabelError
from extragrid.reference import (
    MAX_COLUMN_INDEX,
    MAX_ROW_INDEX,
    CellRange,
    CellReference,
    ColumnRange,
    ColumnReference,
    LabelName,
    RowRange,
    RowReference,
)
from extragrid.window import GridMetrics, Window


class SpreadsheetEngine(GridMetrics, Protocol):
    """Everything the request handlers ask of a spreadsheet."""

    def resolve_label(self, label: LabelName) -> CellReference | CellRange: ...

    def load_cells(self, window: Window) -> Delta: ...

    def save_cells(self, cells: Iterable[Cell]) -> Delta: ...

    def patch_columns(self, columns: Iterable[Column]) -> Delta: ...

    def patch_rows(self, rows: Iterable[Row]) -> Delta: ...

    def clear_columns(self, columns: ColumnRange) -> Delta: ...

    def clear_rows(self, rows: RowRange) -> Delta: ...

    def insert_columns(self, column: ColumnReference, count: int, after: bool = False) -> Delta: ...

    def insert_rows(self, row: RowReference, count: int, after: bool = False) -> Delta: ...

    def delete_columns(self, columns: ColumnRange) -> Delta: ...

    def delete_rows(self, rows: RowRange) -> Delta: ...


class MemorySpreadsheet:
    """A single sheet held in memory.

    Column widths and row heights fall back to the defaults unless set
    explicitly. Hidden columns and rows keep their size.
    """

    def __init__(
        self,
        *,
        default_column_width: float = 100.0,
        default_row_height: float = 30.0,
        frozen_columns: int = 0,
        frozen_rows: int = 0,
    ) -> None:
        self.default_column_width = default_column_width
        self.default_row_height = default_row_height
        self.frozen_columns = frozen_columns
        self.frozen_rows = frozen_rows
        self._cells: dict[CellReference, Cell] = {}
        self._columns: dict[ColumnReference, Column] = {}
        self._rows: dict[RowReference, Row] = {}
        self._labels: dict[str, LabelMapping] = {}
        self._column_widths: dict[ColumnReference, float] = {}
        self._row_heights: dict[RowReference, float] = {}

    # GridMetrics

    def column_width(self, column: ColumnReference) -> float:
        return self._column_widths.get(column, self.default_column_width)

    def row_height(self, row: RowReference) -> float:
        return self._row_heights.get(row, self.default_row_height)

    def frozen_column_count(self) -> int:
        return self.frozen_columns

    def frozen_row_count(self) -> int:
        return self.frozen_rows

    def set_column_width(self, column: ColumnReference, width: float) -> None:
        self._column_widths[column] = width

    def set_row_height(self, row: RowReference, height: float) -> None:
        self._row_heights[row] = height

    # Labels

    def add_label(self, label: LabelName, target: CellReference | CellRange) -> LabelMapping:
        mapping = LabelMapping(label, target)
        self._labels[label.name.lower()] = mapping
        return mapping

    def resolve_label(self, label: LabelName) -> CellReference | CellRange:
        mapping = self._labels.get(label.name.lower())
        if mapping is None:
            raise UnknownLabelError(label.name)
        return mapping.target

    # Queries

    def column_count(self) -> int:
        used = [cell.column.index for cell in self._cells]
        return max(used) + 1 if used else 0

    def row_count(self) -> int:
        used = [cell.row.index for cell in self._cells]
        return max(used) + 1 if used else 0

    def _sizes(self, columns: Iterable[ColumnReference], rows: Iterable[RowReference]) -> dict:
        return {
            "column_widths": {column: self.column_width(column) for column in columns},
            "row_heights": {row: self.row_height(row) for row in rows},
            "column_count": self.column_count(),
            "row_count": self.row_count(),
        }

    def load_cells(self, window: Window) -> Delta:
        """Every stored cell, column, row and label visible in ``window``, with its sizes."""
        cells = tuple(sorted((c for c in self._cells.values() if window.contains_cell(c.reference)), key=_cell_key))
        columns = tuple(c for ref, c in sorted(self._columns.items()) if window.contains_column(ref))
        rows = tuple(r for ref, r in sorted(self._rows.items()) if window.contains_row(ref))
        labels = tuple(m for m in self._labels.values() if window.intersects(m.target))

        window_columns: list[ColumnReference] = []
        window_rows: list[RowReference] = []
        for cell_range in window.ranges:
            window_columns.extend(cell_range.column_range())
            window_rows.extend(cell_range.row_range())

        return Delta(
            cells=cells,
            columns=columns,
            rows=rows,
            labels=labels,
            window=window,
            **self._sizes(window_columns, window_rows),
        )

    # Mutations

    def save_cells(self, cells: Iterable[Cell]) -> Delta:
        saved = []
        for cell in cells:
            self._cells[cell.reference] = cell
            saved.append(cell)
        return Delta(
            cells=tuple(saved),
            **self._sizes(
                sorted({cell.reference.column for cell in saved}),
                sorted({cell.reference.row for cell in saved}),
            ),
        )

    def patch_columns(self, columns: Iterable[Column]) -> Delta:
        saved = []
        for column in columns:
            self._columns[column.reference] = column
            saved.append(column)
        return Delta(columns=tuple(saved), **self._sizes([c.reference for c in saved], []))

    def patch_rows(self, rows: Iterable[Row]) -> Delta:
        saved = []
        for row in rows:
            self._rows[row.reference] = row
            saved.append(row)
        return Delta(rows=tuple(saved), **self._sizes([], [r.reference for r in saved]))

    def clear_columns(self, columns: ColumnRange) -> Delta:
        """Delete every cell in ``columns`` and reset the columns themselves."""
        deleted = sorted((ref for ref in self._cells if columns.contains(ref)), key=_reference_key)
        for ref in deleted:
            del self._cells[ref]
        cleared = [column for column in columns if self._columns.pop(column, None) is not None]
        return Delta(
            deleted_cells=tuple(deleted),
            deleted_columns=tuple(cleared),
            **self._sizes(list(columns), []),
        )

    def clear_rows(self, rows: RowRange) -> Delta:
        """Delete every cell in ``rows`` and reset the rows themselves."""
        deleted = sorted((ref for ref in self._cells if rows.contains(ref)), key=_reference_key)
        for ref in deleted:
            del self._cells[ref]
        cleared = [row for row in rows if self._rows.pop(row, None) is not None]
        return Delta(
            deleted_cells=tuple(deleted),
            deleted_rows=tuple(cleared),
            **self._sizes([], list(rows)),
        )

    # Structure

    def insert_columns(self, column: ColumnReference, count: int, after: bool = False) -> Delta:
        """Insert ``count`` empty columns before (or after) ``column``, shifting later columns right.

        Columns pushed past the last column of the grid are dropped.
        """
        at = column.index + 1 if after else column.index
        return self._shift_columns(lambda index: _insert_index(index, at, count, MAX_COLUMN_INDEX), ())

    def insert_rows(self, row: RowReference, count: int, after: bool = False) -> Delta:
        at = row.index + 1 if after else row.index
        return self._shift_rows(lambda index: _insert_index(index, at, count, MAX_ROW_INDEX), ())

    def delete_columns(self, columns: ColumnRange) -> Delta:
        """Remove ``columns`` and everything in them, shifting later columns left."""
        begin, end = columns.begin.index, columns.end.index
        return self._shift_columns(lambda index: _delete_index(index, begin, end), tuple(columns))

    def delete_rows(self, rows: RowRange) -> Delta:
        begin, end = rows.begin.index, rows.end.index
        return self._shift_rows(lambda index: _delete_index(index, begin, end), tuple(rows))

    def _shift_columns(
        self,
        shift: Callable[[int], int | None],
        deleted_columns: tuple[ColumnReference, ...],
    ) -> Delta:
        def new_column(column: ColumnReference) -> ColumnReference | None:
            index = shift(column.index)
            return None if index is None else ColumnReference(index)

        def new_cell(cell: CellReference) -> CellReference | None:
            column = new_column(cell.column)
            return None if column is None else cell.set_column(column)

        self._columns = {ref: replace(c, reference=ref) for ref, c in _rekey(self._columns, new_column).items()}
        self._column_widths = _rekey(self._column_widths, new_column)
        return self._move_cells(new_cell, deleted_columns=deleted_columns)

    def _shift_rows(
        self,
        shift: Callable[[int], int | None],
        deleted_rows: tuple[RowReference, ...],
    ) -> Delta:
        def new_row(row: RowReference) -> RowReference | None:
            index = shift(row.index)
            return None if index is None else RowReference(index)

        def new_cell(cell: CellReference) -> CellReference | None:
            row = new_row(cell.row)
            return None if row is None else cell.set_row(row)

        self._rows = {ref: replace(r, reference=ref) for ref, r in _rekey(self._rows, new_row).items()}
        self._row_heights = _rekey(self._row_heights, new_row)
        return self._move_cells(new_cell, deleted_rows=deleted_rows)

    def _move_cells(
        self,
        new_reference: Callable[[CellReference], CellReference | None],
        deleted_columns: tuple[ColumnReference, ...] = (),
        deleted_rows: tuple[RowReference, ...] = (),
    ) -> Delta:
        """Re-key every cell and label through ``new_reference``; None deletes it.

        The delta holds the moved cells at their new references, every reference
        left empty, and the labels that lost a corner.
        """
        before = self._cells
        self._cells = {}
        moved = []
        for reference, cell in before.items():
            target = new_reference(reference)
            if target is None:
                continue
            self._cells[target] = replace(cell, reference=target)
            if target != reference:
                moved.append(self._cells[target])
        moved.sort(key=_cell_key)
        vacated = sorted((ref for ref in before if ref not in self._cells), key=_reference_key)

        deleted_labels = []
        for key, mapping in list(self._labels.items()):
            target = _move_target(mapping.target, new_reference)
            if target is None:
                deleted_labels.append(self._labels.pop(key))
            elif target != mapping.target:
                self._labels[key] = LabelMapping(mapping.label, target)

        return Delta(
            cells=tuple(moved),
            deleted_cells=tuple(vacated),
            deleted_columns=deleted_columns,
            deleted_rows=deleted_rows,
            deleted_labels=tuple(deleted_labels),
            **self._sizes(
                sorted({cell.reference.column for cell in moved}),
                sorted({cell.reference.row for cell in moved}),
            ),
        )


def _reference_key(reference: CellReference) -> tuple[int, int]:
    # Row major, the order a sheet is read in
    return reference.row.index, reference.column.index


def _cell_key(cell: Cell) -> tuple[int, int]:
    return _reference_key(cell.reference)


K = TypeVar("K")
V = TypeVar("V")


def _rekey(mapping: Mapping[K, V], new_key: Callable[[K], K | None]) -> dict[K, V]:
    rekeyed = {}
    for key, value in mapping.items():
        moved = new_key(key)
        if moved is not None:
            rekeyed[moved] = value
    return rekeyed


def _insert_index(index: int, at: int, count: int, maximum: int) -> int | None:
    if index < at:
        return index
    shifted = index + count
    return shifted if shifted <= maximum else None


def _delete_index(index: int, begin: int, end: int) -> int | None:
    if index < begin:
        return index
    if index <= end:
        return None
    return index - (end - begin + 1)


def _move_target(
    target: CellReference | CellRange,
    new_reference: Callable[[CellReference], CellReference | None],
) -> CellReference | CellRange | None:
    if isinstance(target, CellReference):
        return new_reference(target)
    begin = new_reference(target.begin)
    end = new_reference(target.end)
    if begin is None or end is None:
        return None
    return CellRange(begin, end)
