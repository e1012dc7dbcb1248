"""extragrid - spreadsheet viewport navigation and window filtering.

Given a home cell, a pixel-sized viewport, an anchored selection and a list of
navigations, works out where the selection and home end up, which cell ranges
are visible, and trims deltas down to what the client can see.
"""

__version__ = "0.1.0"

from extragrid.delta import (
    Cell,
    Column,
    Delta,
    LabelMapping,
    Row,
    filter_by_window,
    validate_delta_patch_scope,
    validate_patch_scope,
)
from extragrid.exceptions import (
    InvalidAnchorError,
    MissingParametersError,
    ParseError,
    ScopeError,
    UnknownLabelError,
    ValidationError,
    ViewportError,
)
from extragrid.navigation import NavigationResult, apply_navigations, navigate
from extragrid.reference import (
    CellRange,
    CellReference,
    ColumnRange,
    ColumnReference,
    Direction,
    LabelName,
    RowRange,
    RowReference,
)
from extragrid.selection import Anchor, AnchoredSelection, extend, move
from extragrid.viewport import Viewport, ViewportRectangle, parse_navigations
from extragrid.window import GridMetrics, UniformGridMetrics, Window, compute_window

__all__ = [
    "Anchor",
    "AnchoredSelection",
    "Cell",
    "CellRange",
    "CellReference",
    "Column",
    "ColumnRange",
    "ColumnReference",
    "Delta",
    "Direction",
    "GridMetrics",
    "InvalidAnchorError",
    "LabelMapping",
    "LabelName",
    "MissingParametersError",
    "NavigationResult",
    "ParseError",
    "Row",
    "RowRange",
    "RowReference",
    "ScopeError",
    "UniformGridMetrics",
    "UnknownLabelError",
    "ValidationError",
    "Viewport",
    "ViewportError",
    "ViewportRectangle",
    "Window",
    "__version__",
    "apply_navigations",
    "compute_window",
    "extend",
    "filter_by_window",
    "move",
    "navigate",
    "parse_navigations",
    "validate_delta_patch_scope",
    "validate_patch_scope",
]
