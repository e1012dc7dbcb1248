"""Tests for the navigation interpreter.

Unless stated otherwise every test uses home A1, a 400x150 viewport, 100px
columns and 50px rows, so columns A-D and rows 1-3 are visible.
"""

from extragrid.navigation import apply_navigations, keep_visible, navigate, pixel_steps
from extragrid.reference import (
    MAX_COLUMN_INDEX,
    CellRange,
    CellReference,
    ColumnReference,
    RowReference,
)
from extragrid.selection import Anchor, AnchoredSelection
from extragrid.viewport import Viewport, ViewportRectangle, parse_navigations
from tests.fakes import VIEWPORT_HEIGHT, VIEWPORT_WIDTH, FakeGridMetrics


def run(
    navigations: str,
    selection: AnchoredSelection | None = None,
    home: str = "A1",
    metrics: FakeGridMetrics | None = None,
    include_frozen: bool = False,
):
    rectangle = ViewportRectangle(CellReference.parse(home), VIEWPORT_WIDTH, VIEWPORT_HEIGHT)
    return apply_navigations(
        parse_navigations(navigations),
        rectangle,
        metrics or FakeGridMetrics(),
        selection,
        include_frozen,
    )


def cell(text: str) -> AnchoredSelection:
    return AnchoredSelection(CellReference.parse(text))


def cell_range(text: str, anchor: Anchor) -> AnchoredSelection:
    return AnchoredSelection(CellRange.parse(text), anchor)


class TestPixelSteps:
    def test_partial_column_counts(self) -> None:
        assert pixel_steps(0, True, 401, lambda i: 100, MAX_COLUMN_INDEX) == 5

    def test_exact_boundary_stops_there(self) -> None:
        assert pixel_steps(0, True, 400, lambda i: 100, MAX_COLUMN_INDEX) == 4

    def test_zero_amount(self) -> None:
        assert pixel_steps(3, True, 0, lambda i: 100, MAX_COLUMN_INDEX) == 0

    def test_backwards_stops_at_zero(self) -> None:
        assert pixel_steps(2, False, 10_000, lambda i: 100, MAX_COLUMN_INDEX) == 2

    def test_forwards_stops_at_edge(self) -> None:
        assert pixel_steps(MAX_COLUMN_INDEX - 1, True, 10_000, lambda i: 100, MAX_COLUMN_INDEX) == 1


class TestMoveStep:
    def test_cell_left(self) -> None:
        result = run("left-column", cell("B2"))
        assert result.anchored_selection == cell("A2")
        assert result.home == CellReference.parse("A1")

    def test_cell_right(self) -> None:
        assert run("right-column", cell("B2")).anchored_selection == cell("C2")

    def test_column_left(self) -> None:
        column = AnchoredSelection(ColumnReference.parse("C"))
        assert run("left-column", column).anchored_selection == AnchoredSelection(ColumnReference.parse("B"))

    def test_column_down_is_noop(self) -> None:
        column = AnchoredSelection(ColumnReference.parse("C"))
        assert run("down-row", column).anchored_selection == column

    def test_row_down(self) -> None:
        row = AnchoredSelection(RowReference.parse("3"))
        assert run("down-row", row).anchored_selection == AnchoredSelection(RowReference.parse("4"))

    def test_no_selection_selects_next_to_home(self) -> None:
        result = run("right-column", home="B2")
        assert result.anchored_selection == cell("C2")
        assert result.home == CellReference.parse("B2")

    def test_left_at_edge_saturates(self) -> None:
        assert run("left-column,left-column", cell("A1")).anchored_selection == cell("A1")


class TestExtendStep:
    def test_extend_right(self) -> None:
        result = run("extend-right-column", cell("B2"))
        assert result.anchored_selection == cell_range("B2:C2", Anchor.TOP_LEFT)

    def test_extend_left(self) -> None:
        result = run("extend-left-column", cell("B2"))
        assert result.anchored_selection == cell_range("A2:B2", Anchor.BOTTOM_RIGHT)

    def test_extend_range_right(self) -> None:
        result = run("extend-right-column", cell_range("A2:B2", Anchor.TOP_LEFT))
        assert result.anchored_selection == cell_range("A2:C2", Anchor.TOP_LEFT)

    def test_extend_across_anchor_collapses(self) -> None:
        result = run("extend-right-column", cell_range("B2:C2", Anchor.TOP_RIGHT))
        assert result.anchored_selection == cell("C2")

    def test_extend_up_collapses(self) -> None:
        result = run("extend-up-row", cell_range("C1:C2", Anchor.TOP_LEFT))
        assert result.anchored_selection == cell("C1")

    def test_no_selection_is_noop(self) -> None:
        result = run("extend-right-column")
        assert result.anchored_selection is None
        assert result.home == CellReference.parse("A1")

    def test_sequence_folds_left_to_right(self) -> None:
        result = run("extend-right-column,extend-down-row,extend-left-column", cell("B2"))
        assert result.anchored_selection == cell_range("B2:B3", Anchor.TOP_LEFT)


class TestPixelNavigation:
    def test_extend_right_pixel_scrolls_and_extends(self) -> None:
        result = run("extend-right-pixel 401", cell_range("C1:C2", Anchor.TOP_LEFT))
        assert result.home == CellReference.parse("F1")
        assert result.anchored_selection == cell_range("C1:H2", Anchor.TOP_LEFT)

    def test_extend_right_pixel_without_selection_only_scrolls(self) -> None:
        result = run("extend-right-pixel 401")
        assert result.home == CellReference.parse("F1")
        assert result.anchored_selection is None

    def test_move_right_pixel_carries_selection(self) -> None:
        result = run("right-pixel 200", cell("B2"))
        assert result.home == CellReference.parse("C1")
        assert result.anchored_selection == cell("D2")

    def test_down_pixel(self) -> None:
        result = run("down-pixel 100", home="A1")
        assert result.home == CellReference.parse("A3")

    def test_up_pixel_saturates(self) -> None:
        result = run("up-pixel 1000", home="A3")
        assert result.home == CellReference.parse("A1")

    def test_column_selection_down_pixel_scrolls_home_only(self) -> None:
        column = AnchoredSelection(ColumnReference.parse("C"))
        result = run("down-pixel 50", column)
        assert result.home == CellReference.parse("A2")
        assert result.anchored_selection == column

    def test_left_pixel_moves_selection_when_home_at_edge(self) -> None:
        result = run("left-pixel 200", cell("D2"))
        assert result.home == CellReference.parse("A1")
        assert result.anchored_selection == cell("B2")

    def test_extend_left_pixel_when_home_at_edge(self) -> None:
        result = run("extend-left-pixel 200", cell("D2"))
        assert result.home == CellReference.parse("A1")
        assert result.anchored_selection == cell_range("B2:D2", Anchor.BOTTOM_RIGHT)

    def test_up_pixel_moves_selection_when_home_at_edge(self) -> None:
        result = run("up-pixel 100", cell("B3"))
        assert result.home == CellReference.parse("A1")
        assert result.anchored_selection == cell("B1")

    def test_selection_steps_measured_from_selection(self) -> None:
        metrics = FakeGridMetrics()
        metrics.widths[ColumnReference.parse("B")] = 300
        result = run("right-pixel 250", cell("B2"), metrics=metrics)
        # Home passes A and B; the selection only passes the wide column B
        assert result.home == CellReference.parse("C1")
        assert result.anchored_selection == cell("C2")

    def test_extend_pixel_back_over_anchor_collapses(self) -> None:
        result = run("extend-left-pixel 100", cell_range("B2:C2", Anchor.TOP_LEFT), home="B1")
        assert result.home == CellReference.parse("A1")
        assert result.anchored_selection == cell("B2")


class TestSelect:
    def test_select_replaces_selection(self) -> None:
        result = run("select cell-range B2:C3", cell("A1"))
        assert result.anchored_selection == cell_range("B2:C3", Anchor.TOP_LEFT)

    def test_select_then_extend(self) -> None:
        result = run("select column C,extend-right-column")
        assert result.anchored_selection is not None
        assert str(result.anchored_selection) == "C:D left"


class TestKeepVisible:
    """Home follows the selection's moving corner."""

    def test_moving_right_past_window_scrolls(self) -> None:
        result = run("right-column", cell("D2"))
        assert result.anchored_selection == cell("E2")
        assert result.home == CellReference.parse("B1")

    def test_moving_left_of_home_pulls_home(self) -> None:
        result = run("left-column", cell("C2"), home="C1")
        assert result.home == CellReference.parse("B1")

    def test_moving_down_past_window_scrolls(self) -> None:
        result = run("down-row", cell("A3"))
        assert result.home == CellReference.parse("A2")

    def test_selecting_far_cell_scrolls_to_it(self) -> None:
        result = run("select cell Z99")
        assert result.home == CellReference.parse("W97")

    def test_visible_target_leaves_home(self) -> None:
        assert run("right-column", cell("B2")).home == CellReference.parse("A1")

    def test_frozen_target_is_always_visible(self) -> None:
        metrics = FakeGridMetrics(frozen_columns=1)
        result = run("left-column", cell("B2"), home="E1", metrics=metrics, include_frozen=True)
        assert result.anchored_selection == cell("A2")
        assert result.home == CellReference.parse("E1")

    def test_frozen_band_shrinks_scroll_area(self) -> None:
        metrics = FakeGridMetrics(frozen_columns=1)
        # Scrollable columns B-D; moving to E scrolls home to C
        result = run("right-column", cell("D2"), metrics=metrics, include_frozen=True)
        assert result.home == CellReference.parse("C1")

    def test_no_selection_leaves_home(self, metrics: FakeGridMetrics) -> None:
        rectangle = ViewportRectangle(CellReference.parse("C3"), VIEWPORT_WIDTH, VIEWPORT_HEIGHT)
        assert keep_visible(rectangle.home, None, rectangle, metrics, False) == CellReference.parse("C3")


class TestNavigate:
    def test_navigations_consumed(self, metrics: FakeGridMetrics) -> None:
        viewport = Viewport(
            ViewportRectangle(CellReference.parse("A1"), VIEWPORT_WIDTH, VIEWPORT_HEIGHT),
            include_frozen_columns_rows=False,
            anchored_selection=cell("B2"),
            navigations=parse_navigations("extend-right-column"),
        )
        navigated = navigate(viewport, metrics)
        assert navigated.navigations == ()
        assert navigated.anchored_selection == cell_range("B2:C2", Anchor.TOP_LEFT)
        assert navigated.home == CellReference.parse("A1")
        assert navigated.rectangle.width == VIEWPORT_WIDTH

    def test_without_navigations_is_identity(self, metrics: FakeGridMetrics) -> None:
        viewport = Viewport(ViewportRectangle(CellReference.parse("A1"), VIEWPORT_WIDTH, VIEWPORT_HEIGHT))
        assert navigate(viewport, metrics) is viewport
