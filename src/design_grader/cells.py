"""Cell Accessor - Phase 1 of the Grading Engine.

Resolves sheet references to raw cell values and coerces them to numbers.
Handles the messy reality of spreadsheet exports: ragged rows, empty cells,
numeric text and Excel error codes.

Every downstream check works on the numeric projection only: a value is
either a finite float or NaN.
"""

import math
import re
from enum import Enum
from typing import Optional, Union

from openpyxl.utils import get_column_letter
from openpyxl.utils.cell import coordinate_to_tuple
from openpyxl.utils.exceptions import CellCoordinatesException
from pydantic import StrictBool, StrictFloat, StrictInt, StrictStr

# Strict members keep booleans from being coerced to 0/1 during validation
CellValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr, None]
Row = list[CellValue]
Sheet = list[Row]

ERROR_MARKER_PATTERN = re.compile(r"^#(DIV/0!|VALUE!|REF!|NAME\?|NUM!|NULL!|N/A)$", re.IGNORECASE)


class CellKind(str, Enum):
    """Closed set of cell value kinds seen at the accessor boundary."""
    NUMBER = "number"
    TEXT = "text"
    ERROR = "error"  # Excel error code or non-finite number
    ABSENT = "absent"


def classify(value: CellValue) -> CellKind:
    """Classify a raw cell value."""
    if value is None:
        return CellKind.ABSENT
    if isinstance(value, bool):
        return CellKind.TEXT
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return CellKind.ERROR
        return CellKind.NUMBER if math.isfinite(number) else CellKind.ERROR
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return CellKind.ABSENT
        if ERROR_MARKER_PATTERN.match(stripped):
            return CellKind.ERROR
        return CellKind.TEXT
    return CellKind.TEXT


def is_error_marker(value: CellValue) -> bool:
    """Check if a value is an Excel error code or a non-finite number."""
    return classify(value) == CellKind.ERROR


def as_number(value: CellValue) -> float:
    """Coerce a cell value to a float.

    Returns NaN for absent, non-numeric, boolean and error-marker values.
    Numeric text such as ``" 12.5 "`` is accepted.
    """
    kind = classify(value)
    if kind == CellKind.NUMBER:
        return float(value)
    if kind == CellKind.TEXT and isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return math.nan
        return number if math.isfinite(number) else math.nan
    return math.nan


def column_letter(col_idx: int) -> str:
    """Convert a 0-based column index to letters (0 -> A, 26 -> AA)."""
    return get_column_letter(col_idx + 1)


def cell_ref(row_idx: int, col_idx: int) -> str:
    """Convert 0-based row/column indices to an A1 reference."""
    return f"{column_letter(col_idx)}{row_idx + 1}"


def parse_ref(reference: str) -> tuple[int, int]:
    """Parse an A1 reference into 0-based (row, column) indices.

    Raises:
        ValueError: If the reference is not valid A1 notation.
    """
    coordinate = reference.strip().upper()
    if not coordinate:
        raise ValueError("empty cell reference")
    try:
        row, col = coordinate_to_tuple(coordinate)
    except CellCoordinatesException as e:
        raise ValueError(str(e)) from e
    return row - 1, col - 1


def _cell_at(sheet: Optional[Sheet], row_idx: int, col_idx: int) -> CellValue:
    """Return the raw value at 0-based indices, or None when out of range."""
    if not sheet or row_idx < 0 or col_idx < 0 or row_idx >= len(sheet):
        return None
    row = sheet[row_idx]
    if not row or col_idx >= len(row):
        return None
    return row[col_idx]


def get_cell(sheet: Optional[Sheet], reference: str) -> CellValue:
    """Resolve an A1 reference (e.g. ``"B32"``) to its raw value."""
    try:
        row_idx, col_idx = parse_ref(reference)
    except ValueError:
        return None
    return _cell_at(sheet, row_idx, col_idx)


def get_cell_by_index(sheet: Optional[Sheet], row: int, column: int) -> CellValue:
    """Resolve a cell by 1-based row and 1-based column (A = 1)."""
    return _cell_at(sheet, row - 1, column - 1)


def get_number(sheet: Optional[Sheet], reference: str) -> float:
    """Shortcut for ``as_number(get_cell(sheet, reference))``."""
    return as_number(get_cell(sheet, reference))


def get_number_by_index(sheet: Optional[Sheet], row: int, column: int) -> float:
    """Shortcut for ``as_number(get_cell_by_index(sheet, row, column))``."""
    return as_number(get_cell_by_index(sheet, row, column))


def get_numbers(sheet: Optional[Sheet], row: int, first_column: int, last_column: int) -> list[float]:
    """Read a horizontal run of numbers (1-based row, inclusive 1-based columns)."""
    return [get_number_by_index(sheet, row, col) for col in range(first_column, last_column + 1)]


def find_error_cells(sheet: Optional[Sheet]) -> list[str]:
    """List A1 references of every error-marker cell in a sheet, row-major."""
    invalid = []
    for row_idx, row in enumerate(sheet or []):
        if not row:
            continue
        for col_idx, value in enumerate(row):
            if is_error_marker(value):
                invalid.append(cell_ref(row_idx, col_idx))
    return invalid


def is_finite(value: float) -> bool:
    """NaN-safe finiteness check used by the rule checkers."""
    return isinstance(value, (int, float)) and classify(value) == CellKind.NUMBER


def within(value: float, expected: float, tolerance: float) -> bool:
    """Check ``|value - expected| <= tolerance``; non-finite values never match."""
    return is_finite(value) and abs(value - expected) <= tolerance


def round_to_tenth(value: float) -> float:
    """Round half-up to one decimal; non-finite values round to 0."""
    if not is_finite(value):
        return 0.0
    return math.floor(value * 10 + 0.5) / 10


def format_found(value: float) -> str:
    """Render a found value to one decimal, or ``missing`` when non-finite."""
    if not is_finite(value):
        return "missing"
    return f"{round_to_tenth(value):.1f}"
