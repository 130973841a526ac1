"""Record flattening.

Turns each data row of a sheet into a flat, query-ready record whose
``searchable_text`` is the single string the fuzzy index scores against.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from sheet_search.sheets.models import Sheet, SheetSource


@dataclass(frozen=True)
class FlattenOptions:
    """Which optional row fields are folded into the searchable text."""

    include_tags: bool = True
    include_metadata: bool = True


@dataclass
class SearchableRecord:
    """The flattened representation of one data row."""

    id: str
    spreadsheet_id: str
    spreadsheet_name: str
    spreadsheet_source: SheetSource
    row_index: int
    data: dict[str, Any]
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    searchable_text: str = ""


def stringify(value: Any) -> str:
    """Render a cell or metadata value as text.

    Integral floats drop their fractional part and booleans are lower-case,
    so numbers read the same as they do in the sheet.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def column_name(headers: list[str], index: int) -> str:
    """Header for a column, generated when blank or missing."""
    if index < len(headers):
        header = headers[index]
        if header is not None and str(header).strip():
            return str(header)
    return f"Column {index + 1}"


def row_mapping(headers: list[str], row: list[Any]) -> dict[str, Any]:
    """Map a raw row onto its headers.

    Short rows are padded with ''. Cells beyond the last header get a
    generated column name. Duplicate headers keep the last value.
    """
    data: dict[str, Any] = {}
    for index in range(max(len(headers), len(row))):
        value = row[index] if index < len(row) else ""
        data[column_name(headers, index)] = "" if value is None else value
    return data


def build_searchable_text(
    data: dict[str, Any],
    tags: list[str],
    metadata: dict[str, Any],
    options: FlattenOptions,
) -> str:
    """Join row values, then tags, then metadata values with single spaces."""
    values = [stringify(v) for v in data.values() if v is not None]
    if options.include_tags:
        values.extend(str(tag) for tag in tags)
    if options.include_metadata:
        values.extend(stringify(v) for v in metadata.values() if v is not None)
    return " ".join(values)


def flatten_sheet(
    sheet: Sheet,
    options: FlattenOptions | None = None,
) -> list[SearchableRecord]:
    """Produce one searchable record per data row of a sheet."""
    options = options or FlattenOptions()
    records: list[SearchableRecord] = []

    for row_index, row in enumerate(sheet.data):
        data = row_mapping(sheet.headers, list(row or []))
        tags = sheet.row_tags(row_index)
        metadata = sheet.row_metadata(row_index)

        records.append(
            SearchableRecord(
                id=f"{sheet.id}-{row_index}",
                spreadsheet_id=sheet.id,
                spreadsheet_name=sheet.name,
                spreadsheet_source=sheet.source,
                row_index=row_index,
                data=data,
                tags=tags,
                metadata=metadata,
                searchable_text=build_searchable_text(data, tags, metadata, options),
            )
        )

    return records


def flatten_sheets(
    sheets: Iterable[Sheet],
    options: FlattenOptions | None = None,
) -> list[SearchableRecord]:
    """Flatten all sheets, in sheet order then row order."""
    records: list[SearchableRecord] = []
    for sheet in sheets:
        records.extend(flatten_sheet(sheet, options))
    return records
