"""REST API endpoints for extragrid.

Viewport, selection and navigation travel as query parameters; the work is
delegated to ``extragrid.handlers`` and the resulting delta is marshalled to
JSON here.

Endpoints:
- GET   /api/health                 - Health check
- GET   /api/cells                  - Load the cells visible in a viewport or window
- PATCH /api/cells/{range}          - Save cells inside a cell or cell range
- PATCH /api/columns/{range}        - Update columns inside a column range
- PATCH /api/rows/{range}           - Update rows inside a row range
- POST  /api/columns/{range}/clear  - Delete every cell in a column range
- POST  /api/rows/{range}/clear     - Delete every cell in a row range
- POST  /api/columns/{range}/insert-before, insert-after - Insert ?count= columns
- POST  /api/rows/{range}/insert-before, insert-after    - Insert ?count= rows
- DELETE /api/columns/{range}       - Delete columns, shifting later columns left
- DELETE /api/rows/{range}          - Delete rows, shifting later rows up
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from extragrid import handlers
from extragrid.delta import Cell, Column, Delta, LabelMapping, Row
from extragrid.engine import SpreadsheetEngine
from extragrid.query import viewport_to_parameters
from extragrid.rate_limit import grid_rate_limit, limiter
from extragrid.reference import CellReference, ColumnReference, RowReference

router = APIRouter()


class CellBody(BaseModel):
    """A cell in a patch body, keyed by its reference."""

    formula: str = ""
    value: Any = None


class HiddenBody(BaseModel):
    hidden: bool = False


class DeltaPatch(BaseModel):
    """PATCH body: cells, columns and rows keyed by their text reference."""

    cells: dict[str, CellBody] = Field(default_factory=dict)
    columns: dict[str, HiddenBody] = Field(default_factory=dict)
    rows: dict[str, HiddenBody] = Field(default_factory=dict)

    def to_delta(self) -> Delta:
        """Parse every key into a reference, raising ParseError on the first bad one."""
        return Delta(
            cells=tuple(
                Cell(CellReference.parse(ref), body.formula, body.value) for ref, body in self.cells.items()
            ),
            columns=tuple(Column(ColumnReference.parse(ref), body.hidden) for ref, body in self.columns.items()),
            rows=tuple(Row(RowReference.parse(ref), body.hidden) for ref, body in self.rows.items()),
        )


def _label_json(mapping: LabelMapping) -> dict[str, str]:
    return {"label": str(mapping.label), "reference": str(mapping.target)}


def delta_to_json(delta: Delta) -> dict[str, Any]:
    """Marshal a delta, leaving out empty members."""
    result: dict[str, Any] = {}
    if delta.viewport is not None:
        result["viewport"] = viewport_to_parameters(delta.viewport)
    if delta.cells:
        result["cells"] = {str(c.reference): {"formula": c.formula, "value": c.value} for c in delta.cells}
    if delta.columns:
        result["columns"] = {str(c.reference): {"hidden": c.hidden} for c in delta.columns}
    if delta.rows:
        result["rows"] = {str(r.reference): {"hidden": r.hidden} for r in delta.rows}
    if delta.labels:
        result["labels"] = [_label_json(m) for m in delta.labels]
    if delta.deleted_cells:
        result["deletedCells"] = [str(c) for c in delta.deleted_cells]
    if delta.deleted_columns:
        result["deletedColumns"] = [str(c) for c in delta.deleted_columns]
    if delta.deleted_rows:
        result["deletedRows"] = [str(r) for r in delta.deleted_rows]
    if delta.deleted_labels:
        result["deletedLabels"] = [_label_json(m) for m in delta.deleted_labels]
    if delta.column_widths:
        result["columnWidths"] = {str(c): w for c, w in delta.column_widths.items()}
    if delta.row_heights:
        result["rowHeights"] = {str(r): h for r, h in delta.row_heights.items()}
    if delta.column_count is not None:
        result["columnCount"] = delta.column_count
    if delta.row_count is not None:
        result["rowCount"] = delta.row_count
    if not delta.window.is_empty:
        result["window"] = str(delta.window)
    return result


def get_engine(request: Request) -> SpreadsheetEngine:
    """FastAPI dependency returning the engine stored in app.state during lifespan."""
    return request.app.state.engine


# =============================================================================
# Health Endpoints
# =============================================================================


@router.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "extragrid"}


# =============================================================================
# Grid Endpoints
# =============================================================================


@router.get("/cells")
@limiter.limit(grid_rate_limit)
async def load_cells(request: Request, engine: SpreadsheetEngine = Depends(get_engine)) -> dict:
    """Load the cells visible in the requested viewport or window."""
    delta = handlers.load_viewport(dict(request.query_params), engine)
    return delta_to_json(delta)


@router.patch("/cells/{cell_range}")
@limiter.limit(grid_rate_limit)
async def patch_cells(
    request: Request,
    cell_range: str,
    patch: DeltaPatch,
    engine: SpreadsheetEngine = Depends(get_engine),
) -> dict:
    delta = handlers.patch_cells(cell_range, patch.to_delta(), dict(request.query_params), engine)
    return delta_to_json(delta)


@router.patch("/columns/{column_range}")
@limiter.limit(grid_rate_limit)
async def patch_columns(
    request: Request,
    column_range: str,
    patch: DeltaPatch,
    engine: SpreadsheetEngine = Depends(get_engine),
) -> dict:
    delta = handlers.patch_columns(column_range, patch.to_delta(), dict(request.query_params), engine)
    return delta_to_json(delta)


@router.patch("/rows/{row_range}")
@limiter.limit(grid_rate_limit)
async def patch_rows(
    request: Request,
    row_range: str,
    patch: DeltaPatch,
    engine: SpreadsheetEngine = Depends(get_engine),
) -> dict:
    delta = handlers.patch_rows(row_range, patch.to_delta(), dict(request.query_params), engine)
    return delta_to_json(delta)


@router.post("/columns/{column_range}/clear")
@limiter.limit(grid_rate_limit)
async def clear_columns(
    request: Request,
    column_range: str,
    engine: SpreadsheetEngine = Depends(get_engine),
) -> dict:
    delta = handlers.clear_columns(column_range, dict(request.query_params), engine)
    return delta_to_json(delta)


@router.post("/rows/{row_range}/clear")
@limiter.limit(grid_rate_limit)
async def clear_rows(
    request: Request,
    row_range: str,
    engine: SpreadsheetEngine = Depends(get_engine),
) -> dict:
    delta = handlers.clear_rows(row_range, dict(request.query_params), engine)
    return delta_to_json(delta)


@router.post("/columns/{column_range}/insert-before")
@limiter.limit(grid_rate_limit)
async def insert_columns_before(
    request: Request,
    column_range: str,
    engine: SpreadsheetEngine = Depends(get_engine),
) -> dict:
    delta = handlers.insert_columns(column_range, dict(request.query_params), engine)
    return delta_to_json(delta)


@router.post("/columns/{column_range}/insert-after")
@limiter.limit(grid_rate_limit)
async def insert_columns_after(
    request: Request,
    column_range: str,
    engine: SpreadsheetEngine = Depends(get_engine),
) -> dict:
    delta = handlers.insert_columns(column_range, dict(request.query_params), engine, after=True)
    return delta_to_json(delta)


@router.post("/rows/{row_range}/insert-before")
@limiter.limit(grid_rate_limit)
async def insert_rows_before(
    request: Request,
    row_range: str,
    engine: SpreadsheetEngine = Depends(get_engine),
) -> dict:
    delta = handlers.insert_rows(row_range, dict(request.query_params), engine)
    return delta_to_json(delta)


@router.post("/rows/{row_range}/insert-after")
@limiter.limit(grid_rate_limit)
async def insert_rows_after(
    request: Request,
    row_range: str,
    engine: SpreadsheetEngine = Depends(get_engine),
) -> dict:
    delta = handlers.insert_rows(row_range, dict(request.query_params), engine, after=True)
    return delta_to_json(delta)


@router.delete("/columns/{column_range}")
@limiter.limit(grid_rate_limit)
async def delete_columns(
    request: Request,
    column_range: str,
    engine: SpreadsheetEngine = Depends(get_engine),
) -> dict:
    delta = handlers.delete_columns(column_range, dict(request.query_params), engine)
    return delta_to_json(delta)


@router.delete("/rows/{row_range}")
@limiter.limit(grid_rate_limit)
async def delete_rows(
    request: Request,
    row_range: str,
    engine: SpreadsheetEngine = Depends(get_engine),
) -> dict:
    delta = handlers.delete_rows(row_range, dict(request.query_params), engine)
    return delta_to_json(delta)
