"""Grid coordinate model for extragrid.

Column, row and cell references plus the inclusive ranges built from them.
All arithmetic saturates at the grid edges instead of raising, so moving left
from column A stays on column A.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from extragrid.exceptions import ParseError

# Zero-based maxima: column XFD and row 1048576.
MAX_COLUMN_INDEX = 16383
MAX_ROW_INDEX = 1048575

_COLUMN_PATTERN = re.compile(r"^[A-Za-z]{1,3}$")
_ROW_PATTERN = re.compile(r"^[0-9]{1,7}$")
_CELL_PATTERN = re.compile(r"^([A-Za-z]{1,3})([0-9]{1,7})$")
_LABEL_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]{0,254}$")


def column_index_to_letter(index: int) -> str:
    """Convert a zero-based column index to A1 notation letter(s).

    Examples:
        0 -> A, 1 -> B, 25 -> Z, 26 -> AA, 27 -> AB, 702 -> AAA
    """
    result = ""
    while True:
        result = chr(ord("A") + (index % 26)) + result
        index = index // 26 - 1
        if index < 0:
            break
    return result


def letter_to_column_index(letter: str) -> int:
    """Convert A1 notation letter(s) to a zero-based column index.

    Examples:
        A -> 0, B -> 1, Z -> 25, AA -> 26, AB -> 27, AAA -> 702
    """
    result = 0
    for char in letter.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def clamp(value: int, maximum: int) -> int:
    """Clamp ``value`` into ``[0, maximum]``."""
    return max(0, min(value, maximum))


class Direction(Enum):
    """A navigation direction on the grid."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction.LEFT, Direction.RIGHT)

    @property
    def is_vertical(self) -> bool:
        return self in (Direction.UP, Direction.DOWN)

    @property
    def column_delta(self) -> int:
        return {Direction.LEFT: -1, Direction.RIGHT: 1}.get(self, 0)

    @property
    def row_delta(self) -> int:
        return {Direction.UP: -1, Direction.DOWN: 1}.get(self, 0)

    def opposite(self) -> Direction:
        return {
            Direction.UP: Direction.DOWN,
            Direction.DOWN: Direction.UP,
            Direction.LEFT: Direction.RIGHT,
            Direction.RIGHT: Direction.LEFT,
        }[self]


@dataclass(frozen=True, order=True)
class ColumnReference:
    """A zero-based column index, printed as letters."""

    SELECTION_TYPE: ClassVar[str] = "column"

    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index <= MAX_COLUMN_INDEX:
            raise ValueError(f"Column index {self.index} out of range 0..{MAX_COLUMN_INDEX}")

    @classmethod
    def parse(cls, text: str) -> ColumnReference:
        if not _COLUMN_PATTERN.match(text):
            raise ParseError(text, f"Invalid column {text!r}")
        index = letter_to_column_index(text)
        if index > MAX_COLUMN_INDEX:
            raise ParseError(text, f"Invalid column {text!r} beyond {column_index_to_letter(MAX_COLUMN_INDEX)}")
        return cls(index)

    def add_saturating(self, delta: int) -> ColumnReference:
        return ColumnReference(clamp(self.index + delta, MAX_COLUMN_INDEX))

    def step(self, direction: Direction) -> ColumnReference:
        return self.add_saturating(direction.column_delta)

    def __str__(self) -> str:
        return column_index_to_letter(self.index)


@dataclass(frozen=True, order=True)
class RowReference:
    """A zero-based row index, printed one-based."""

    SELECTION_TYPE: ClassVar[str] = "row"

    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index <= MAX_ROW_INDEX:
            raise ValueError(f"Row index {self.index} out of range 0..{MAX_ROW_INDEX}")

    @classmethod
    def parse(cls, text: str) -> RowReference:
        if not _ROW_PATTERN.match(text):
            raise ParseError(text, f"Invalid row {text!r}")
        number = int(text)
        if not 1 <= number <= MAX_ROW_INDEX + 1:
            raise ParseError(text, f"Invalid row {text!r} not between 1 and {MAX_ROW_INDEX + 1}")
        return cls(number - 1)

    def add_saturating(self, delta: int) -> RowReference:
        return RowReference(clamp(self.index + delta, MAX_ROW_INDEX))

    def step(self, direction: Direction) -> RowReference:
        return self.add_saturating(direction.row_delta)

    def __str__(self) -> str:
        return str(self.index + 1)


@dataclass(frozen=True, order=True)
class CellReference:
    """A single cell, ordered by column then row."""

    SELECTION_TYPE: ClassVar[str] = "cell"

    column: ColumnReference
    row: RowReference

    @classmethod
    def at(cls, column_index: int, row_index: int) -> CellReference:
        """Build a cell from zero-based column and row indices."""
        return cls(ColumnReference(column_index), RowReference(row_index))

    @classmethod
    def parse(cls, text: str) -> CellReference:
        """Parse A1 notation such as ``B2`` (case-insensitive)."""
        match = _CELL_PATTERN.match(text)
        if not match:
            raise ParseError(text, f"Invalid cell {text!r}")
        letters, digits = match.groups()
        return cls(ColumnReference.parse(letters), RowReference.parse(digits))

    def add_saturating(self, columns: int = 0, rows: int = 0) -> CellReference:
        return CellReference(self.column.add_saturating(columns), self.row.add_saturating(rows))

    def step(self, direction: Direction) -> CellReference:
        return self.add_saturating(direction.column_delta, direction.row_delta)

    def set_column(self, column: ColumnReference) -> CellReference:
        return CellReference(column, self.row)

    def set_row(self, row: RowReference) -> CellReference:
        return CellReference(self.column, row)

    def __str__(self) -> str:
        return f"{self.column}{self.row}"


@dataclass(frozen=True)
class CellRange:
    """An inclusive rectangle of cells, normalised to top-left/bottom-right."""

    SELECTION_TYPE: ClassVar[str] = "cell-range"

    begin: CellReference
    end: CellReference

    def __post_init__(self) -> None:
        # Normalise so begin is the top-left and end the bottom-right corner
        left = min(self.begin.column, self.end.column)
        right = max(self.begin.column, self.end.column)
        top = min(self.begin.row, self.end.row)
        bottom = max(self.begin.row, self.end.row)
        object.__setattr__(self, "begin", CellReference(left, top))
        object.__setattr__(self, "end", CellReference(right, bottom))

    @classmethod
    def parse(cls, text: str) -> CellRange:
        """Parse ``A1:B2`` or a single cell ``A1``."""
        if ":" in text:
            first, _, second = text.partition(":")
            try:
                return cls(CellReference.parse(first), CellReference.parse(second))
            except ParseError as e:
                raise ParseError(text, f"Invalid cell-range {text!r}") from e
        cell = CellReference.parse(text)
        return cls(cell, cell)

    @property
    def left(self) -> ColumnReference:
        return self.begin.column

    @property
    def right(self) -> ColumnReference:
        return self.end.column

    @property
    def top(self) -> RowReference:
        return self.begin.row

    @property
    def bottom(self) -> RowReference:
        return self.end.row

    @property
    def width(self) -> int:
        return self.right.index - self.left.index + 1

    @property
    def height(self) -> int:
        return self.bottom.index - self.top.index + 1

    @property
    def is_single(self) -> bool:
        return self.begin == self.end

    def column_range(self) -> ColumnRange:
        return ColumnRange(self.left, self.right)

    def row_range(self) -> RowRange:
        return RowRange(self.top, self.bottom)

    def contains(self, item: Selection) -> bool:
        return contains(self, item)

    def intersect(self, other: CellRange) -> CellRange | None:
        columns = self.column_range().intersect(other.column_range())
        rows = self.row_range().intersect(other.row_range())
        if columns is None or rows is None:
            return None
        return CellRange(CellReference(columns.begin, rows.begin), CellReference(columns.end, rows.end))

    def __str__(self) -> str:
        if self.is_single:
            return str(self.begin)
        return f"{self.begin}:{self.end}"


@dataclass(frozen=True)
class ColumnRange:
    """An inclusive span of whole columns."""

    SELECTION_TYPE: ClassVar[str] = "column-range"

    begin: ColumnReference
    end: ColumnReference

    def __post_init__(self) -> None:
        if self.end < self.begin:
            begin, end = self.end, self.begin
            object.__setattr__(self, "begin", begin)
            object.__setattr__(self, "end", end)

    @classmethod
    def parse(cls, text: str) -> ColumnRange:
        """Parse ``B:D`` or a single column ``B``."""
        if ":" in text:
            first, _, second = text.partition(":")
            try:
                return cls(ColumnReference.parse(first), ColumnReference.parse(second))
            except ParseError as e:
                raise ParseError(text, f"Invalid column-range {text!r}") from e
        column = ColumnReference.parse(text)
        return cls(column, column)

    @property
    def count(self) -> int:
        return self.end.index - self.begin.index + 1

    @property
    def is_single(self) -> bool:
        return self.begin == self.end

    def contains(self, item: Selection) -> bool:
        return contains(self, item)

    def intersect(self, other: ColumnRange) -> ColumnRange | None:
        begin = max(self.begin, other.begin)
        end = min(self.end, other.end)
        if end < begin:
            return None
        return ColumnRange(begin, end)

    def __iter__(self):
        for index in range(self.begin.index, self.end.index + 1):
            yield ColumnReference(index)

    def __str__(self) -> str:
        if self.is_single:
            return str(self.begin)
        return f"{self.begin}:{self.end}"


@dataclass(frozen=True)
class RowRange:
    """An inclusive span of whole rows."""

    SELECTION_TYPE: ClassVar[str] = "row-range"

    begin: RowReference
    end: RowReference

    def __post_init__(self) -> None:
        if self.end < self.begin:
            begin, end = self.end, self.begin
            object.__setattr__(self, "begin", begin)
            object.__setattr__(self, "end", end)

    @classmethod
    def parse(cls, text: str) -> RowRange:
        """Parse ``2:5`` or a single row ``2``."""
        if ":" in text:
            first, _, second = text.partition(":")
            try:
                return cls(RowReference.parse(first), RowReference.parse(second))
            except ParseError as e:
                raise ParseError(text, f"Invalid row-range {text!r}") from e
        row = RowReference.parse(text)
        return cls(row, row)

    @property
    def count(self) -> int:
        return self.end.index - self.begin.index + 1

    @property
    def is_single(self) -> bool:
        return self.begin == self.end

    def contains(self, item: Selection) -> bool:
        return contains(self, item)

    def intersect(self, other: RowRange) -> RowRange | None:
        begin = max(self.begin, other.begin)
        end = min(self.end, other.end)
        if end < begin:
            return None
        return RowRange(begin, end)

    def __iter__(self):
        for index in range(self.begin.index, self.end.index + 1):
            yield RowReference(index)

    def __str__(self) -> str:
        if self.is_single:
            return str(self.begin)
        return f"{self.begin}:{self.end}"


@dataclass(frozen=True)
class LabelName:
    """A named reference that must be resolved before any coordinate arithmetic."""

    SELECTION_TYPE: ClassVar[str] = "label"

    name: str

    @classmethod
    def parse(cls, text: str) -> LabelName:
        if not _LABEL_PATTERN.match(text) or _CELL_PATTERN.match(text):
            raise ParseError(text, f"Invalid label {text!r}")
        return cls(text)

    def __str__(self) -> str:
        return self.name


Selection = CellReference | CellRange | ColumnReference | ColumnRange | RowReference | RowRange


def column_span(item: Selection) -> tuple[int, int] | None:
    """Inclusive column indices covered by ``item``, None when it spans every column."""
    if isinstance(item, CellReference):
        return item.column.index, item.column.index
    if isinstance(item, CellRange):
        return item.left.index, item.right.index
    if isinstance(item, ColumnReference):
        return item.index, item.index
    if isinstance(item, ColumnRange):
        return item.begin.index, item.end.index
    if isinstance(item, RowReference | RowRange):
        return None
    raise TypeError(f"Unsupported selection {item!r}")


def row_span(item: Selection) -> tuple[int, int] | None:
    """Inclusive row indices covered by ``item``, None when it spans every row."""
    if isinstance(item, CellReference):
        return item.row.index, item.row.index
    if isinstance(item, CellRange):
        return item.top.index, item.bottom.index
    if isinstance(item, RowReference):
        return item.index, item.index
    if isinstance(item, RowRange):
        return item.begin.index, item.end.index
    if isinstance(item, ColumnReference | ColumnRange):
        return None
    raise TypeError(f"Unsupported selection {item!r}")


def _span_contains(outer: tuple[int, int] | None, inner: tuple[int, int] | None) -> bool:
    if outer is None:
        return True
    if inner is None:
        return False
    return outer[0] <= inner[0] and inner[1] <= outer[1]


def _span_overlaps(a: tuple[int, int] | None, b: tuple[int, int] | None) -> bool:
    if a is None or b is None:
        return True
    return a[0] <= b[1] and b[0] <= a[1]


def contains(container: Selection, item: Selection) -> bool:
    """Check whether every cell of ``item`` lies within ``container``."""
    return _span_contains(column_span(container), column_span(item)) and _span_contains(
        row_span(container), row_span(item)
    )


def intersects(a: Selection, b: Selection) -> bool:
    """Check whether ``a`` and ``b`` share at least one cell."""
    return _span_overlaps(column_span(a), column_span(b)) and _span_overlaps(row_span(a), row_span(b))


def is_adjacent(a: Selection, b: Selection) -> bool:
    """Check whether two references of the same kind are direct neighbours.

    Cells are adjacent when they share an edge (no diagonals).
    """
    if isinstance(a, ColumnReference) and isinstance(b, ColumnReference):
        return abs(a.index - b.index) == 1
    if isinstance(a, RowReference) and isinstance(b, RowReference):
        return abs(a.index - b.index) == 1
    if isinstance(a, CellReference) and isinstance(b, CellReference):
        distance = abs(a.column.index - b.column.index) + abs(a.row.index - b.row.index)
        return distance == 1
    return False
