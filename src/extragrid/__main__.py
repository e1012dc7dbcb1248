"""CLI entry point for extragrid.

Usage:
    python -m extragrid window --home A1 --width 400 --height 150 [--navigation ...]
    python -m extragrid serve [--port 8002]
"""

from __future__ import annotations

import argparse
import json
import sys

from extragrid.exceptions import ViewportError
from extragrid.navigation import navigate
from extragrid.query import (
    HEIGHT,
    HOME,
    INCLUDE_FROZEN_COLUMNS_ROWS,
    NAVIGATION,
    SELECTION,
    SELECTION_ANCHOR,
    SELECTION_TYPE,
    WIDTH,
    format_number,
    parse_viewport,
)
from extragrid.window import UniformGridMetrics, compute_window


def cmd_window(args: argparse.Namespace) -> int:
    """Navigate a viewport over a uniform grid and print the result as JSON."""
    parameters = {
        HOME: args.home,
        WIDTH: args.width,
        HEIGHT: args.height,
        INCLUDE_FROZEN_COLUMNS_ROWS: "false" if args.exclude_frozen else "true",
    }
    if args.selection_type is not None:
        parameters[SELECTION_TYPE] = args.selection_type
    if args.selection is not None:
        parameters[SELECTION] = args.selection
    if args.anchor is not None:
        parameters[SELECTION_ANCHOR] = args.anchor
    if args.navigation:
        parameters[NAVIGATION] = args.navigation

    metrics = UniformGridMetrics(
        default_column_width=args.column_width,
        default_row_height=args.row_height,
        frozen_columns=args.frozen_columns,
        frozen_rows=args.frozen_rows,
    )

    try:
        viewport = navigate(parse_viewport(parameters), metrics)
    except ViewportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    anchored = viewport.anchored_selection
    window = compute_window(
        viewport.rectangle,
        viewport.include_frozen_columns_rows,
        metrics,
        anchored.selection if anchored else None,
    )
    output = {
        "home": str(viewport.home),
        "width": format_number(viewport.rectangle.width),
        "height": format_number(viewport.rectangle.height),
        "selection": str(anchored.selection) if anchored else None,
        "anchor": str(anchored.anchor) if anchored else None,
        "window": str(window),
    }
    print(json.dumps(output, indent=2))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP server."""
    import uvicorn

    from extragrid.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "extragrid.main:app",
        host=args.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="extragrid",
        description="Spreadsheet viewport navigation and window computation",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # window subcommand
    window_parser = subparsers.add_parser(
        "window",
        help="Apply navigations to a viewport and print the visible window",
    )
    window_parser.add_argument("--home", default="A1", help="Top-left cell of the viewport (default: A1)")
    window_parser.add_argument("--width", required=True, help="Viewport width in pixels")
    window_parser.add_argument("--height", required=True, help="Viewport height in pixels")
    window_parser.add_argument(
        "--column-width",
        type=float,
        default=100.0,
        help="Width of every column in pixels (default: 100)",
    )
    window_parser.add_argument(
        "--row-height",
        type=float,
        default=30.0,
        help="Height of every row in pixels (default: 30)",
    )
    window_parser.add_argument("--frozen-columns", type=int, default=0, help="Number of frozen leading columns")
    window_parser.add_argument("--frozen-rows", type=int, default=0, help="Number of frozen leading rows")
    window_parser.add_argument(
        "--exclude-frozen",
        action="store_true",
        help="Ignore frozen columns and rows",
    )
    window_parser.add_argument(
        "--selection-type",
        help="cell, cell-range, column, column-range, row or row-range",
    )
    window_parser.add_argument("--selection", help="Selection text, eg B2 or A1:C3")
    window_parser.add_argument("--anchor", help="Selection anchor, eg top-left")
    window_parser.add_argument(
        "--navigation",
        help="Comma separated navigations, eg 'extend-right-column,down-pixel 50'",
    )
    window_parser.set_defaults(func=cmd_window)

    # serve subcommand
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: from settings)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
