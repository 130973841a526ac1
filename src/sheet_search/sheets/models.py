"""Sheet data model.

A sheet is one logical table: a worksheet of a workbook, a CSV file, or one
tab exported from a cloud spreadsheet. Tags and per-row metadata are keyed
by the 0-based row position inside ``data``.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sheet_search.utils.hashing import generate_id


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


class SheetSource(str, Enum):
    """Where a sheet was loaded from."""

    UPLOAD = "upload"
    SHAREPOINT = "sharepoint"
    ONEDRIVE = "onedrive"
    GOOGLE_SHEETS = "google-sheets"
    SHAREPOINT_DIRECT = "sharepoint-direct"

    @property
    def label(self) -> str:
        """Display label for the source."""
        return _SOURCE_LABELS[self]


_SOURCE_LABELS = {
    SheetSource.UPLOAD: "Upload",
    SheetSource.SHAREPOINT: "SharePoint",
    SheetSource.SHAREPOINT_DIRECT: "SharePoint (Direct)",
    SheetSource.ONEDRIVE: "OneDrive",
    SheetSource.GOOGLE_SHEETS: "Google Sheets",
}


@dataclass
class SheetTable:
    """Decoded table as produced by a file decoder or connector.

    Attributes:
        headers: Column names from the first row.
        rows: Remaining rows of raw cell values.
        name: Worksheet name, if the container has named worksheets.
    """

    headers: list[str]
    rows: list[list[Any]]
    name: str | None = None


@dataclass
class Sheet:
    """A spreadsheet loaded into the application."""

    id: str
    name: str
    headers: list[str]
    data: list[list[Any]]
    source: SheetSource = SheetSource.UPLOAD
    tags: dict[int, list[str]] = field(default_factory=dict)
    metadata: dict[Any, Any] = field(default_factory=dict)
    filename: str | None = None
    last_modified: int = field(default_factory=now_ms)

    @property
    def row_count(self) -> int:
        return len(self.data)

    @property
    def original_url(self) -> str | None:
        """Deep link back to the source document, if known."""
        url = self.metadata.get("originalUrl")
        return url if isinstance(url, str) and url else None

    def row_tags(self, row_index: int) -> list[str]:
        """Tags attached to a row, empty if none."""
        return list(self.tags.get(row_index) or [])

    def row_metadata(self, row_index: int) -> dict[str, Any]:
        """Per-row metadata for a row.

        ``metadata`` is either keyed by row index or a flat global mapping
        (cloud imports). Only a mapping stored under the row index counts;
        global metadata contributes nothing per row.
        """
        for key in (row_index, str(row_index)):
            value = self.metadata.get(key)
            if isinstance(value, dict):
                return value
        return {}

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation."""
        return {
            "id": self.id,
            "name": self.name,
            "filename": self.filename,
            "headers": list(self.headers),
            "data": [list(row) for row in self.data],
            "source": self.source.value,
            "tags": {str(k): list(v) for k, v in self.tags.items()},
            "metadata": {str(k): v for k, v in self.metadata.items()},
            "last_modified": self.last_modified,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Sheet":
        """Rebuild a sheet from :meth:`to_dict` output.

        Row-index keys that went through JSON come back as integers.
        """
        tags = {
            int(k): list(v)
            for k, v in (data.get("tags") or {}).items()
            if str(k).lstrip("-").isdigit()
        }
        metadata: dict[Any, Any] = {}
        for key, value in (data.get("metadata") or {}).items():
            if isinstance(value, dict) and str(key).isdigit():
                metadata[int(key)] = value
            else:
                metadata[key] = value
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            filename=data.get("filename"),
            headers=list(data.get("headers") or []),
            data=[list(row) for row in data.get("data") or []],
            source=SheetSource(data.get("source", SheetSource.UPLOAD.value)),
            tags=tags,
            metadata=metadata,
            last_modified=int(data.get("last_modified") or now_ms()),
        )


def sheets_from_tables(
    tables: list[SheetTable],
    *,
    base_name: str,
    source: SheetSource = SheetSource.UPLOAD,
    filename: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> list[Sheet]:
    """Wrap decoded tables into sheets with fresh ids.

    A table carrying a worksheet name becomes ``"<base_name> - <worksheet>"``
    and records its worksheet in the sheet's global metadata.
    """
    sheets: list[Sheet] = []
    for position, table in enumerate(tables):
        sheet_metadata: dict[Any, Any] = dict(metadata or {})
        name = base_name
        if table.name is not None:
            name = f"{base_name} - {table.name}"
            sheet_metadata.update(
                {
                    "worksheetName": table.name,
                    "worksheetIndex": position,
                }
            )
            if filename:
                sheet_metadata["originalFileName"] = filename
        sheets.append(
            Sheet(
                id=generate_id("sheet", source.value, name, position),
                name=name,
                filename=filename,
                headers=list(table.headers),
                data=table.rows,
                source=source,
                metadata=sheet_metadata,
            )
        )
    return sheets
