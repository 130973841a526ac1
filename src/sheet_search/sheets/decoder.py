"""Spreadsheet file decoding.

CSV files yield exactly one table; workbooks yield one table per
non-empty worksheet. The first row of every table is its header row.
"""

import csv
import io
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

from openpyxl import load_workbook

from sheet_search.exceptions import EmptySheetError, UnsupportedFileTypeError
from sheet_search.sheets.models import SheetTable
from sheet_search.utils.logging import get_logger

logger = get_logger(__name__)

CSV_EXTENSIONS = frozenset({"csv"})
WORKBOOK_EXTENSIONS = frozenset({"xlsx", "xlsm"})
SUPPORTED_EXTENSIONS = CSV_EXTENSIONS | WORKBOOK_EXTENSIONS


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and strip any leading dot."""
    return extension.lower().lstrip(".")


def decode(data: bytes, extension: str) -> list[SheetTable]:
    """Decode spreadsheet bytes into tables.

    Args:
        data: Raw file content.
        extension: Declared file extension ('csv', '.xlsx', ...).

    Returns:
        One table per worksheet (workbooks) or a single table (CSV).

    Raises:
        UnsupportedFileTypeError: If the extension is not supported.
        EmptySheetError: If no rows could be read.
    """
    ext = normalize_extension(extension)
    if ext in CSV_EXTENSIONS:
        return [decode_csv(data)]
    if ext in WORKBOOK_EXTENSIONS:
        return decode_workbook(data)
    raise UnsupportedFileTypeError(f"Unsupported file type: {ext or '(none)'}")


def decode_file(path: Path) -> list[SheetTable]:
    """Decode a spreadsheet file from disk."""
    return decode(path.read_bytes(), path.suffix)


def decode_csv_text(text: str) -> SheetTable:
    """Parse CSV text into a single table.

    Blank lines are skipped.
    """
    try:
        rows = [row for row in csv.reader(io.StringIO(text)) if any(row)]
    except csv.Error as e:
        raise EmptySheetError(
            f"Could not parse CSV: {e}",
            user_message="File could not be read as CSV",
        ) from e
    if not rows:
        raise EmptySheetError("File appears to be empty")
    return SheetTable(headers=list(rows[0]), rows=[list(r) for r in rows[1:]])


def decode_csv(data: bytes) -> SheetTable:
    """Parse CSV bytes, honouring a UTF-8 BOM when present."""
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = data.decode("utf-8", errors="replace")
    return decode_csv_text(text)


def decode_workbook(data: bytes) -> list[SheetTable]:
    """Read every worksheet of an xlsx workbook."""
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as e:
        raise EmptySheetError(
            f"Could not read workbook: {e}",
            user_message="File could not be read as a workbook",
        ) from e

    tables: list[SheetTable] = []
    try:
        for name in workbook.sheetnames:
            rows = [
                [_cell_value(v) for v in row]
                for row in workbook[name].iter_rows(values_only=True)
            ]
            rows = [row for row in rows if any(v != "" for v in row)]
            if not rows:
                logger.debug("Skipping empty worksheet %r", name)
                continue
            headers = [str(v) for v in rows[0]]
            tables.append(SheetTable(headers=headers, rows=rows[1:], name=name))
    except Exception as e:
        raise EmptySheetError(
            f"Could not read worksheet data: {e}",
            user_message="File could not be read as a workbook",
        ) from e
    finally:
        workbook.close()

    if not tables:
        raise EmptySheetError()
    return tables


def _cell_value(value: Any) -> Any:
    """Convert an openpyxl cell value to a string, number or ''."""
    if value is None:
        return ""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
