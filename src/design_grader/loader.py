"""Workbook loading.

Reads design workbooks from Excel files (cached formula values only) or
from JSON snapshots and maps worksheet titles onto the logical sheet keys
the rubric uses.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import openpyxl
from pydantic import ValidationError

from .cells import CellValue, Row, Sheet
from .config import GraderConfig
from .schema import Workbook

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
JSON_SUFFIXES = {".json"}


class WorkbookLoadError(ValueError):
    """Raised when a workbook file cannot be read."""


def _to_cell_value(value: Any) -> CellValue:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return value
    # Dates, times and anything else are only ever text to the rubric
    return str(value)


def _trim(row: Row) -> Row:
    end = len(row)
    while end > 0 and row[end - 1] is None:
        end -= 1
    return row[:end]


def _sheet_key(title: str, lookup: dict[str, str]) -> str:
    normalized = title.strip().lower()
    return lookup.get(normalized, normalized)


def _add_sheet(sheets: dict[str, Sheet], key: str, rows: Sheet, title: str) -> None:
    if key in sheets:
        logger.warning("Ignoring worksheet %r: sheet %r already loaded", title, key)
        return
    sheets[key] = rows


def load_excel(path: Path, config: Optional[GraderConfig] = None) -> Workbook:
    """Load an Excel workbook using the values cached by Excel."""
    cfg = config or GraderConfig()
    lookup = cfg.sheets.lookup()
    try:
        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except Exception as e:
        raise WorkbookLoadError(f"Cannot open workbook {path}: {e}") from e

    sheets: dict[str, Sheet] = {}
    try:
        for ws in wb.worksheets:
            rows = [
                _trim([_to_cell_value(v) for v in row])
                for row in ws.iter_rows(values_only=True)
            ]
            _add_sheet(sheets, _sheet_key(ws.title, lookup), rows, ws.title)
    finally:
        wb.close()

    logger.debug("Loaded %d sheet(s) from %s: %s", len(sheets), path, ", ".join(sheets))
    return Workbook(sheets=sheets, file_name=path.name)


def load_json(path: Path, config: Optional[GraderConfig] = None) -> Workbook:
    """Load a JSON workbook snapshot: ``{"sheets": {name: rows}, "file_name": ...}``."""
    cfg = config or GraderConfig()
    lookup = cfg.sheets.lookup()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except UnicodeDecodeError as e:
        raise WorkbookLoadError(f"JSON snapshot {path} is not UTF-8 text: {e}") from e
    except json.JSONDecodeError as e:
        raise WorkbookLoadError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("sheets"), dict):
        raise WorkbookLoadError(f"Expected an object with a 'sheets' mapping in {path}")

    sheets: dict[str, Sheet] = {}
    for title, rows in data["sheets"].items():
        if not isinstance(rows, list) or not all(isinstance(r, list) for r in rows):
            raise WorkbookLoadError(f"Sheet {title!r} in {path} must be a list of rows")
        _add_sheet(sheets, _sheet_key(title, lookup), [[_to_cell_value(v) for v in r] for r in rows], title)

    try:
        return Workbook(sheets=sheets, file_name=data.get("file_name") or path.name)
    except ValidationError as e:
        raise WorkbookLoadError(f"Invalid workbook snapshot in {path}: {e}") from e


def load_workbook(file_path: Union[str, Path], config: Optional[GraderConfig] = None) -> Workbook:
    """Load a design workbook from disk.

    Args:
        file_path: Path to an .xlsx/.xlsm workbook or a .json snapshot.
        config: Configuration to use for sheet name matching.

    Returns:
        The loaded Workbook.

    Raises:
        WorkbookLoadError: If the file is missing, unsupported or unreadable.
    """
    path = Path(file_path)
    if not path.exists():
        raise WorkbookLoadError(f"Workbook file not found: {file_path}")

    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        workbook = load_excel(path, config)
    elif suffix in JSON_SUFFIXES:
        workbook = load_json(path, config)
    else:
        raise WorkbookLoadError(f"Unsupported workbook format: {path.suffix or '(none)'}")

    if "main" not in workbook.sheets:
        logger.info("Workbook %s has no main sheet; every check will see missing values", path.name)
    return workbook
