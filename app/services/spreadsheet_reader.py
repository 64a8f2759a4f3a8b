"""Read uploaded spreadsheets into rows of named fields.

Supports:
- .xlsx / .xlsm via openpyxl (first worksheet only)
- .xls via xlrd (first sheet only)
- .csv via the csv module (UTF-8, optional BOM)

The first row is the header. Every returned row carries every non-blank
header as a key; empty cells are None. Fully empty rows are skipped.
"""

import csv
import io
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import xlrd
from openpyxl import load_workbook

from app.exceptions import SpreadsheetReadError

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = {".xlsx", ".xlsm"}
LEGACY_EXCEL_EXTENSIONS = {".xls"}
CSV_EXTENSIONS = {".csv"}
SUPPORTED_EXTENSIONS = EXCEL_EXTENSIONS | LEGACY_EXCEL_EXTENSIONS | CSV_EXTENSIONS

_INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')

Row = Dict[str, Any]


def _normalize_cell(value: Any) -> Any:
    """Blank strings become None, integral floats become int."""
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _csv_cell(value: Optional[str]) -> Any:
    """Plain integers become int, like a spreadsheet number cell."""
    if value is None or not value.strip():
        return None
    stripped = value.strip()
    if _INTEGER_PATTERN.match(stripped):
        return int(stripped)
    return value


def _rows_from_table(table: Iterable[Sequence[Any]]) -> List[Row]:
    """Convert header + data rows into dicts keyed by header text."""
    iterator = iter(table)
    try:
        header_row = next(iterator)
    except StopIteration:
        return []

    columns = [
        (index, str(header))
        for index, header in enumerate(header_row)
        if header is not None and str(header).strip()
    ]

    rows: List[Row] = []
    for values in iterator:
        row = {
            header: values[index] if index < len(values) else None
            for index, header in columns
        }
        if all(value is None for value in row.values()):
            continue
        rows.append(row)
    return rows


def _read_excel(content: bytes) -> List[Row]:
    workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        worksheet = workbook.worksheets[0]
        table = (
            [_normalize_cell(cell) for cell in values]
            for values in worksheet.iter_rows(values_only=True)
        )
        return _rows_from_table(table)
    finally:
        workbook.close()


def _read_xls(content: bytes) -> List[Row]:
    book = xlrd.open_workbook(file_contents=content)
    try:
        sheet = book.sheet_by_index(0)
        table = (
            [_normalize_cell(value) for value in sheet.row_values(index)]
            for index in range(sheet.nrows)
        )
        return _rows_from_table(table)
    finally:
        book.release_resources()


def _read_csv(content: bytes) -> List[Row]:
    text = content.decode("utf-8-sig")
    reader = csv.reader(io.StringIO(text))
    table = ([_csv_cell(cell) for cell in values] for values in reader)
    return _rows_from_table(table)


def read_rows(content: bytes, filename: str) -> List[Row]:
    """
    Parse spreadsheet bytes into rows.

    Args:
        content: Raw file bytes
        filename: Original filename, used to pick the parser

    Returns:
        Data rows in sheet order, header -> cell value

    Raises:
        SpreadsheetReadError: Unsupported extension or unreadable content
    """
    extension = Path(filename).suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise SpreadsheetReadError(
            f"Unsupported file type '{extension or filename}'. "
            f"Expected one of: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )

    try:
        if extension in EXCEL_EXTENSIONS:
            rows = _read_excel(content)
        elif extension in LEGACY_EXCEL_EXTENSIONS:
            rows = _read_xls(content)
        else:
            rows = _read_csv(content)
    except UnicodeDecodeError as e:
        raise SpreadsheetReadError(f"CSV file is not valid UTF-8: {e.reason}") from e
    except Exception as e:
        raise SpreadsheetReadError(f"Could not read spreadsheet: {str(e)}") from e

    logger.info(f"Read {len(rows)} row(s) from {filename}")
    return rows
