"""Tests for the request pipeline and the in-memory engine."""

import pytest

from extragrid import handlers
from extragrid.delta import Cell, Column, Delta, Row
from extragrid.engine import MemorySpreadsheet
from extragrid.exceptions import MissingParametersError, ScopeError, UnknownLabelError
from extragrid.reference import (
    CellRange,
    CellReference,
    ColumnRange,
    ColumnReference,
    LabelName,
    RowRange,
    RowReference,
)
from extragrid.selection import Anchor, AnchoredSelection
from extragrid.window import Window

VIEWPORT = {"home": "A1", "width": "400", "height": "150", "includeFrozenColumnsRows": "true"}


def fill(engine: MemorySpreadsheet, *texts: str) -> None:
    engine.save_cells(Cell(CellReference.parse(text), f"={text}", text) for text in texts)


def cell_names(delta: Delta) -> list[str]:
    return [str(cell.reference) for cell in delta.cells]


class TestMemorySpreadsheet:
    def test_sizes_and_overrides(self, engine: MemorySpreadsheet) -> None:
        engine.set_column_width(ColumnReference.parse("B"), 250)
        assert engine.column_width(ColumnReference.parse("B")) == 250
        assert engine.column_width(ColumnReference.parse("C")) == 100
        assert engine.row_height(RowReference.parse("1")) == 50

    def test_load_cells_in_window(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "A1", "B2", "Z99")
        delta = engine.load_cells(Window.parse("A1:C3"))
        assert cell_names(delta) == ["A1", "B2"]
        assert set(delta.column_widths) == {ColumnReference(i) for i in range(3)}
        assert delta.column_count == 26
        assert delta.row_count == 99

    def test_labels(self, engine: MemorySpreadsheet) -> None:
        engine.add_label(LabelName("Total"), CellReference.parse("B2"))
        assert engine.resolve_label(LabelName("total")) == CellReference.parse("B2")
        with pytest.raises(UnknownLabelError):
            engine.resolve_label(LabelName("Nope"))

    def test_clear_columns(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "A1", "B1", "B7", "C2")
        engine.patch_columns([Column(ColumnReference.parse("B"), hidden=True)])
        delta = engine.clear_columns(ColumnRange.parse("B"))
        assert [str(c) for c in delta.deleted_cells] == ["B1", "B7"]
        assert delta.deleted_columns == (ColumnReference.parse("B"),)
        assert cell_names(engine.load_cells(Window.parse("A1:D9"))) == ["A1", "C2"]

    def test_insert_columns_shifts_right(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "A1", "B1", "C2")
        engine.set_column_width(ColumnReference.parse("B"), 250)
        delta = engine.insert_columns(ColumnReference.parse("B"), 2)
        assert cell_names(delta) == ["D1", "E2"]
        assert [str(c) for c in delta.deleted_cells] == ["B1", "C2"]
        assert cell_names(engine.load_cells(Window.parse("A1:E2"))) == ["A1", "D1", "E2"]
        assert engine.column_width(ColumnReference.parse("D")) == 250
        assert engine.column_width(ColumnReference.parse("B")) == 100

    def test_insert_rows_after(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "A1", "A2", "A3")
        delta = engine.insert_rows(RowReference.parse("2"), 1, after=True)
        assert cell_names(delta) == ["A4"]
        assert [str(c) for c in delta.deleted_cells] == ["A3"]

    def test_delete_columns_shifts_left(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "A1", "B1", "C2", "D3")
        engine.add_label(LabelName("Total"), CellReference.parse("D3"))
        engine.add_label(LabelName("Gone"), CellReference.parse("B1"))
        delta = engine.delete_columns(ColumnRange.parse("B:C"))
        assert cell_names(delta) == ["B3"]
        assert [str(c) for c in delta.deleted_cells] == ["B1", "C2", "D3"]
        assert delta.deleted_columns == (ColumnReference.parse("B"), ColumnReference.parse("C"))
        assert [m.label.name for m in delta.deleted_labels] == ["Gone"]
        assert engine.resolve_label(LabelName("Total")) == CellReference.parse("B3")

    def test_delete_rows_shifts_up(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "A1", "A2", "A3")
        delta = engine.delete_rows(RowRange.parse("2"))
        assert cell_names(delta) == ["A2"]
        assert delta.cells[0].formula == "=A3"
        assert [str(c) for c in delta.deleted_cells] == ["A3"]
        assert delta.deleted_rows == (RowReference.parse("2"),)


class TestLoadViewport:
    def test_loads_visible_cells(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "A1", "D3", "E1", "A4")
        delta = handlers.load_viewport(VIEWPORT, engine)
        assert cell_names(delta) == ["A1", "D3"]
        assert str(delta.window) == "A1:D3"
        assert delta.viewport is not None
        assert delta.viewport.home == CellReference.parse("A1")

    def test_navigation_moves_window(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "A1", "E2")
        delta = handlers.load_viewport(
            {**VIEWPORT, "selectionType": "cell", "selection": "D2", "navigation": "right-column"},
            engine,
        )
        assert str(delta.window) == "B1:E3"
        assert cell_names(delta) == ["E2"]
        assert delta.viewport.home == CellReference.parse("B1")
        assert delta.viewport.anchored_selection == AnchoredSelection(CellReference.parse("E2"))
        assert delta.viewport.navigations == ()

    def test_extend_selection(self, engine: MemorySpreadsheet) -> None:
        delta = handlers.load_viewport(
            {**VIEWPORT, "selectionType": "cell", "selection": "B2", "navigation": "extend-right-column"},
            engine,
        )
        assert delta.viewport.anchored_selection == AnchoredSelection(CellRange.parse("B2:C2"), Anchor.TOP_LEFT)

    def test_frozen_columns(self) -> None:
        engine = MemorySpreadsheet(default_column_width=100, default_row_height=50, frozen_columns=1)
        delta = handlers.load_viewport({**VIEWPORT, "height": "200"}, engine)
        assert str(delta.window) == "A1:A4,B1:D4"

    def test_explicit_window_ignores_navigation(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "A1", "C3")
        delta = handlers.load_viewport({"window": "C3:D4", "navigation": "not-even-parsed"}, engine)
        assert cell_names(delta) == ["C3"]
        assert delta.viewport is None

    def test_missing_everything(self, engine: MemorySpreadsheet) -> None:
        with pytest.raises(MissingParametersError) as exc_info:
            handlers.load_viewport({}, engine)
        assert str(exc_info.value) == "Missing: home, width, height, includeFrozenColumnsRows"

    def test_label_selection(self, engine: MemorySpreadsheet) -> None:
        engine.add_label(LabelName("Sales"), CellRange.parse("B2:C3"))
        delta = handlers.load_viewport({**VIEWPORT, "selectionType": "label", "selection": "Sales"}, engine)
        assert delta.viewport.anchored_selection == AnchoredSelection(CellRange.parse("B2:C3"), Anchor.TOP_LEFT)


class TestPatch:
    def test_patch_cells_filtered_to_window(self, engine: MemorySpreadsheet) -> None:
        patch = Delta(cells=(Cell(CellReference.parse("A1"), "=1"), Cell(CellReference.parse("Z9"), "=2")))
        delta = handlers.patch_cells("A1:Z9", patch, {"window": "A1:B2"}, engine)
        assert cell_names(delta) == ["A1"]
        assert cell_names(engine.load_cells(Window.parse("A1:Z9"))) == ["A1", "Z9"]

    def test_patch_cells_outside_range(self, engine: MemorySpreadsheet) -> None:
        patch = Delta(cells=(Cell(CellReference.parse("Z99"), "=1"),))
        with pytest.raises(ScopeError, match="^Patch includes cells Z99 outside A1:B2$"):
            handlers.patch_cells("A1:B2", patch, {}, engine)
        assert engine.load_cells(Window.parse("Z99")).cells == ()

    def test_patch_without_window_returns_everything(self, engine: MemorySpreadsheet) -> None:
        patch = Delta(cells=(Cell(CellReference.parse("B2"), "=1"),))
        delta = handlers.patch_cells("B2", patch, {}, engine)
        assert cell_names(delta) == ["B2"]
        assert delta.window == Window.EMPTY

    def test_patch_columns(self, engine: MemorySpreadsheet) -> None:
        patch = Delta(columns=(Column(ColumnReference.parse("C"), hidden=True),))
        delta = handlers.patch_columns("B:D", patch, VIEWPORT, engine)
        assert delta.columns == patch.columns
        assert str(delta.window) == "A1:D3"

    def test_patch_rows_outside(self, engine: MemorySpreadsheet) -> None:
        patch = Delta(rows=(Row(RowReference.parse("9")),))
        with pytest.raises(ScopeError, match="rows 9 outside 1:3"):
            handlers.patch_rows("1:3", patch, {}, engine)


class TestClear:
    def test_clear_rows(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "A1", "A2", "B2", "A3")
        delta = handlers.clear_rows("2", {}, engine)
        assert [str(c) for c in delta.deleted_cells] == ["A2", "B2"]

    def test_clear_open_range_rejected(self, engine: MemorySpreadsheet) -> None:
        with pytest.raises(ScopeError, match="^Range with both columns required=B:$"):
            handlers.clear_columns("B:", {}, engine)

    def test_clear_filtered_by_window(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "B1", "B9")
        delta = handlers.clear_columns("B", {"window": "A1:C3"}, engine)
        assert [str(c) for c in delta.deleted_cells] == ["B1"]


class TestInsertDelete:
    def test_insert_columns_before(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "B1")
        delta = handlers.insert_columns("B:C", {"count": "2"}, engine)
        assert cell_names(delta) == ["D1"]

    def test_insert_columns_after(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "B1", "D1")
        delta = handlers.insert_columns("B:C", {"count": "1"}, engine, after=True)
        assert cell_names(delta) == ["E1"]
        assert [str(c) for c in delta.deleted_cells] == ["D1"]

    @pytest.mark.parametrize("text", ["B:", ":C", "*"])
    def test_insert_open_column_range_rejected(self, engine: MemorySpreadsheet, text: str) -> None:
        with pytest.raises(ScopeError) as exc_info:
            handlers.insert_columns(text, {"count": "1"}, engine)
        assert str(exc_info.value) == f"Range with both columns required={text}"

    def test_insert_requires_count(self, engine: MemorySpreadsheet) -> None:
        with pytest.raises(MissingParametersError, match="^Missing: count$"):
            handlers.insert_rows("2", {}, engine)

    @pytest.mark.parametrize("text", ["3:", "*"])
    def test_delete_open_row_range_rejected(self, engine: MemorySpreadsheet, text: str) -> None:
        fill(engine, "A3")
        with pytest.raises(ScopeError) as exc_info:
            handlers.delete_rows(text, {}, engine)
        assert str(exc_info.value) == f"Range with both rows required={text}"
        assert cell_names(engine.load_cells(Window.parse("A1:A3"))) == ["A3"]

    def test_delete_columns_open_range_rejected(self, engine: MemorySpreadsheet) -> None:
        with pytest.raises(ScopeError, match="^Range with both columns required=B:$"):
            handlers.delete_columns("B:", {}, engine)

    def test_delete_rows_filtered_by_window(self, engine: MemorySpreadsheet) -> None:
        fill(engine, "A1", "A5", "A9")
        delta = handlers.delete_rows("2", {"window": "A1:B5"}, engine)
        assert cell_names(delta) == ["A4"]
        assert [str(c) for c in delta.deleted_cells] == ["A5"]
        assert delta.deleted_rows == (RowReference.parse("2"),)
