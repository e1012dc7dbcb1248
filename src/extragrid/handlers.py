"""Request pipeline: parse the viewport, navigate, compute the window, filter the delta.

Each handler takes the raw query parameters plus the engine and returns the
delta to send back. Errors propagate as ``ViewportError`` subclasses for the
HTTP layer to map onto status codes.
"""

from __future__ import annotations

from collections.abc import Mapping

from loguru import logger

from extragrid.delta import Delta, filter_by_window, validate_delta_patch_scope
from extragrid.engine import SpreadsheetEngine
from extragrid.exceptions import MissingParametersError
from extragrid.navigation import navigate
from extragrid.query import (
    VIEWPORT_PARAMETERS,
    WINDOW,
    parse_cell_range_id,
    parse_column_range_id,
    parse_count,
    parse_row_range_id,
    parse_viewport,
    parse_window,
)
from extragrid.window import Window, compute_window


def load_viewport(parameters: Mapping[str, str], engine: SpreadsheetEngine) -> Delta:
    """Load the cells a viewport can see.

    An explicit ``window`` parameter is used as-is and every selection,
    navigation and frozen pane parameter is ignored. Otherwise the viewport is
    parsed, its navigations applied and its window computed.

    Raises:
        MissingParametersError: if neither a window nor a viewport is given
    """
    if WINDOW in parameters:
        window = Window.parse(parameters[WINDOW])
        logger.debug("Loading explicit window", extra={"window": str(window)})
        return filter_by_window(engine.load_cells(window), window)

    viewport = parse_viewport(parameters, resolve_label=engine.resolve_label)
    if viewport is None:
        raise MissingParametersError(VIEWPORT_PARAMETERS)

    navigated = navigate(viewport, engine)
    selection = navigated.anchored_selection.selection if navigated.anchored_selection else None
    window = compute_window(navigated.rectangle, navigated.include_frozen_columns_rows, engine, selection)
    logger.debug(
        "Viewport navigated",
        extra={
            "home": str(navigated.home),
            "selection": str(navigated.anchored_selection) if navigated.anchored_selection else None,
            "navigations": len(viewport.navigations),
            "window": str(window),
        },
    )
    return filter_by_window(engine.load_cells(window).set_viewport(navigated), window)


def resolve_window(
    parameters: Mapping[str, str],
    engine: SpreadsheetEngine,
    delta: Delta | None = None,
) -> Window:
    return parse_window(parameters, engine, delta)


def prepare_response(delta: Delta, parameters: Mapping[str, str], engine: SpreadsheetEngine) -> Delta:
    """Filter a mutation's delta through the window the request asked for."""
    window = resolve_window(parameters, engine, delta)
    viewport = None
    if WINDOW not in parameters:
        viewport = parse_viewport(parameters, include_navigation=False, resolve_label=engine.resolve_label)
    return filter_by_window(delta.set_viewport(viewport or delta.viewport), window)


def patch_cells(range_text: str, patch: Delta, parameters: Mapping[str, str], engine: SpreadsheetEngine) -> Delta:
    """Save the cells of ``patch``, all of which must sit inside ``range_text``."""
    addressed = parse_cell_range_id(range_text)
    validate_delta_patch_scope(patch, addressed)
    delta = engine.save_cells(patch.cells)
    logger.debug("Cells patched", extra={"range": str(addressed), "count": len(patch.cells)})
    return prepare_response(delta, parameters, engine)


def patch_columns(range_text: str, patch: Delta, parameters: Mapping[str, str], engine: SpreadsheetEngine) -> Delta:
    addressed = parse_column_range_id(range_text)
    validate_delta_patch_scope(patch, addressed)
    delta = engine.patch_columns(patch.columns)
    logger.debug("Columns patched", extra={"range": str(addressed), "count": len(patch.columns)})
    return prepare_response(delta, parameters, engine)


def patch_rows(range_text: str, patch: Delta, parameters: Mapping[str, str], engine: SpreadsheetEngine) -> Delta:
    addressed = parse_row_range_id(range_text)
    validate_delta_patch_scope(patch, addressed)
    delta = engine.patch_rows(patch.rows)
    logger.debug("Rows patched", extra={"range": str(addressed), "count": len(patch.rows)})
    return prepare_response(delta, parameters, engine)


def clear_columns(range_text: str, parameters: Mapping[str, str], engine: SpreadsheetEngine) -> Delta:
    columns = parse_column_range_id(range_text)
    delta = engine.clear_columns(columns)
    logger.debug("Columns cleared", extra={"range": str(columns)})
    return prepare_response(delta, parameters, engine)


def clear_rows(range_text: str, parameters: Mapping[str, str], engine: SpreadsheetEngine) -> Delta:
    rows = parse_row_range_id(range_text)
    delta = engine.clear_rows(rows)
    logger.debug("Rows cleared", extra={"range": str(rows)})
    return prepare_response(delta, parameters, engine)


def insert_columns(
    range_text: str,
    parameters: Mapping[str, str],
    engine: SpreadsheetEngine,
    *,
    after: bool = False,
) -> Delta:
    """Insert ``count`` columns before the first (or after the last) column of ``range_text``.

    Raises:
        ScopeError: if the range is open ended
        ValidationError: if ``count`` is missing or not a positive integer
    """
    columns = parse_column_range_id(range_text)
    count = parse_count(parameters)
    delta = engine.insert_columns(columns.end if after else columns.begin, count, after)
    logger.debug("Columns inserted", extra={"range": str(columns), "count": count, "after": after})
    return prepare_response(delta, parameters, engine)


def insert_rows(
    range_text: str,
    parameters: Mapping[str, str],
    engine: SpreadsheetEngine,
    *,
    after: bool = False,
) -> Delta:
    rows = parse_row_range_id(range_text)
    count = parse_count(parameters)
    delta = engine.insert_rows(rows.end if after else rows.begin, count, after)
    logger.debug("Rows inserted", extra={"range": str(rows), "count": count, "after": after})
    return prepare_response(delta, parameters, engine)


def delete_columns(range_text: str, parameters: Mapping[str, str], engine: SpreadsheetEngine) -> Delta:
    columns = parse_column_range_id(range_text)
    delta = engine.delete_columns(columns)
    logger.debug("Columns deleted", extra={"range": str(columns)})
    return prepare_response(delta, parameters, engine)


def delete_rows(range_text: str, parameters: Mapping[str, str], engine: SpreadsheetEngine) -> Delta:
    rows = parse_row_range_id(range_text)
    delta = engine.delete_rows(rows)
    logger.debug("Rows deleted", extra={"range": str(rows)})
    return prepare_response(delta, parameters, engine)
