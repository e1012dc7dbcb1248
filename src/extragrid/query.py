"""Query parameter parsing and serialising for viewports and windows.

Parameter names match the HTTP API, eg ``?home=A1&width=400&height=150``.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping

from extragrid.delta import Delta, require_closed_range
from extragrid.exceptions import MissingParametersError, ParseError, UnknownLabelError, ValidationError
from extragrid.reference import (
    CellRange,
    CellReference,
    ColumnRange,
    ColumnReference,
    LabelName,
    RowRange,
    RowReference,
)
from extragrid.selection import Anchor, AnchoredSelection, default_anchor, parse_selection, selection_type
from extragrid.viewport import Viewport, ViewportRectangle, navigations_text, parse_navigations
from extragrid.window import GridMetrics, Window, compute_window

HOME = "home"
WIDTH = "width"
HEIGHT = "height"
INCLUDE_FROZEN_COLUMNS_ROWS = "includeFrozenColumnsRows"
SELECTION_TYPE = "selectionType"
SELECTION = "selection"
SELECTION_ANCHOR = "selectionAnchor"
NAVIGATION = "navigation"
WINDOW = "window"
COUNT = "count"

# Largest width or height in pixels a request may ask for
MAX_DIMENSION = 20_000.0

VIEWPORT_PARAMETERS = (HOME, WIDTH, HEIGHT, INCLUDE_FROZEN_COLUMNS_ROWS)
SELECTION_PARAMETERS = (SELECTION_TYPE, SELECTION, SELECTION_ANCHOR, NAVIGATION)

LabelResolver = Callable[[LabelName], CellReference | CellRange]


def _require(parameters: Mapping[str, str], names: tuple[str, ...]) -> None:
    missing = [name for name in names if name not in parameters]
    if missing:
        raise MissingParametersError(missing)


def parse_home(text: str) -> CellReference:
    try:
        return CellReference.parse(text)
    except ParseError as e:
        raise ParseError(text, f'Invalid {HOME}="{text}"') from e


def parse_dimension(name: str, text: str) -> float:
    """Parse a width or height, which must be a number in ``(0, MAX_DIMENSION]``."""
    try:
        value = float(text)
    except ValueError:
        raise ValidationError(f'Invalid {name}="{text}"', (name,)) from None
    if math.isnan(value) or math.isinf(value):
        raise ValidationError(f'Invalid {name}="{text}"', (name,))
    if value <= 0:
        raise ValidationError(f'Invalid {name}="{text}" <= 0', (name,))
    if value > MAX_DIMENSION:
        raise ValidationError(f'Invalid {name}="{text}" > {format_number(MAX_DIMENSION)}', (name,))
    return value


def parse_count(parameters: Mapping[str, str]) -> int:
    """Parse the required ``count`` of columns or rows to insert."""
    _require(parameters, (COUNT,))
    text = parameters[COUNT]
    try:
        count = int(text)
    except ValueError:
        raise ValidationError(f'Invalid {COUNT}="{text}"', (COUNT,)) from None
    if count <= 0:
        raise ValidationError(f'Invalid {COUNT}="{text}" <= 0', (COUNT,))
    return count


def parse_boolean(name: str, text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValidationError(f'Invalid {name}="{text}", expected true or false', (name,))


def format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _parse_anchored_selection(
    parameters: Mapping[str, str],
    resolve_label: LabelResolver | None,
) -> AnchoredSelection | None:
    has_type = SELECTION_TYPE in parameters
    has_selection = SELECTION in parameters
    if not has_type and not has_selection:
        # A stray selectionAnchor has nothing to anchor and is ignored
        return None
    if not has_type:
        raise MissingParametersError([SELECTION_TYPE])
    if not has_selection:
        raise MissingParametersError([SELECTION])

    selection = parse_selection(parameters[SELECTION], parameters[SELECTION_TYPE])
    if isinstance(selection, LabelName):
        if resolve_label is None:
            raise UnknownLabelError(selection.name)
        selection = resolve_label(selection)

    anchor_text = parameters.get(SELECTION_ANCHOR)
    anchor = default_anchor(selection) if anchor_text is None else Anchor.parse(anchor_text)
    return AnchoredSelection(selection, anchor)


def parse_viewport(
    parameters: Mapping[str, str],
    include_navigation: bool = True,
    resolve_label: LabelResolver | None = None,
) -> Viewport | None:
    """Build a Viewport from query parameters.

    Returns None when none of the viewport or selection parameters are present.
    ``includeFrozenColumnsRows`` is optional here and defaults to true.

    Raises:
        MissingParametersError: listing every absent required parameter
        ValidationError: if width, height or a boolean is malformed
        ParseError: if home, the selection, anchor or a navigation is malformed
        UnknownLabelError: if a label selection does not resolve
    """
    if not any(name in parameters for name in VIEWPORT_PARAMETERS + SELECTION_PARAMETERS):
        return None

    _require(parameters, (HOME, WIDTH, HEIGHT))
    home = parse_home(parameters[HOME])
    width = parse_dimension(WIDTH, parameters[WIDTH])
    height = parse_dimension(HEIGHT, parameters[HEIGHT])

    include_frozen = True
    if INCLUDE_FROZEN_COLUMNS_ROWS in parameters:
        include_frozen = parse_boolean(INCLUDE_FROZEN_COLUMNS_ROWS, parameters[INCLUDE_FROZEN_COLUMNS_ROWS])

    anchored_selection = _parse_anchored_selection(parameters, resolve_label)

    navigations = ()
    if include_navigation and NAVIGATION in parameters:
        navigations = parse_navigations(parameters[NAVIGATION])

    return Viewport(
        ViewportRectangle(home, width, height),
        include_frozen_columns_rows=include_frozen,
        anchored_selection=anchored_selection,
        navigations=navigations,
    )


def parse_window(
    parameters: Mapping[str, str],
    metrics: GridMetrics,
    delta: Delta | None = None,
) -> Window:
    """Work out the window a request should be filtered through.

    An explicit ``window`` parameter wins. Otherwise when any of home, width,
    height or includeFrozenColumnsRows is given all four are required and the
    window is computed. Failing both, the delta's window (or an empty window)
    is used.
    """
    if WINDOW in parameters:
        return Window.parse(parameters[WINDOW])

    if any(name in parameters for name in VIEWPORT_PARAMETERS):
        _require(parameters, VIEWPORT_PARAMETERS)
        rectangle = ViewportRectangle(
            parse_home(parameters[HOME]),
            parse_dimension(WIDTH, parameters[WIDTH]),
            parse_dimension(HEIGHT, parameters[HEIGHT]),
        )
        include_frozen = parse_boolean(INCLUDE_FROZEN_COLUMNS_ROWS, parameters[INCLUDE_FROZEN_COLUMNS_ROWS])
        return compute_window(rectangle, include_frozen, metrics)

    if delta is not None:
        return delta.window
    return Window.EMPTY


def viewport_to_parameters(viewport: Viewport) -> dict[str, str]:
    """Serialise ``viewport`` into the parameters ``parse_viewport`` reads back.

    Only viewports whose width and height lie in ``(0, MAX_DIMENSION]`` round
    trip. A zero-size rectangle is legal in memory but its parameters are
    rejected on the way back in.
    """
    rectangle = viewport.rectangle
    parameters = {
        HOME: str(rectangle.home),
        WIDTH: format_number(rectangle.width),
        HEIGHT: format_number(rectangle.height),
        INCLUDE_FROZEN_COLUMNS_ROWS: "true" if viewport.include_frozen_columns_rows else "false",
    }
    anchored = viewport.anchored_selection
    if anchored is not None:
        parameters[SELECTION_TYPE] = selection_type(anchored.selection)
        parameters[SELECTION] = str(anchored.selection)
        parameters[SELECTION_ANCHOR] = str(anchored.anchor)
    if viewport.navigations:
        parameters[NAVIGATION] = navigations_text(viewport.navigations)
    return parameters


def _split_id_range(text: str) -> tuple[str | None, str | None]:
    """Split ``B:D``, ``B:``, ``:D``, ``B`` or ``*`` into its two ends."""
    if text == "*":
        return None, None
    if ":" not in text:
        return text, text
    first, _, second = text.partition(":")
    return first or None, second or None


def parse_column_range_id(text: str) -> ColumnRange:
    """Parse a column id or range from a URL path; both ends must be given."""
    first, second = _split_id_range(text)
    require_closed_range(text, first, second, "columns")
    return ColumnRange(ColumnReference.parse(first), ColumnReference.parse(second))


def parse_row_range_id(text: str) -> RowRange:
    """Parse a row id or range from a URL path; both ends must be given."""
    first, second = _split_id_range(text)
    require_closed_range(text, first, second, "rows")
    return RowRange(RowReference.parse(first), RowReference.parse(second))


def parse_cell_range_id(text: str) -> CellRange:
    return CellRange.parse(text)
