"""Batch loading of spreadsheets from files and URLs.

A failing item never aborts the batch: every input produces a
:class:`LoadOutcome` recording its sheets or its error.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sheet_search.exceptions import LoadError
from sheet_search.sheets.connectors import connector_for
from sheet_search.sheets.decoder import decode_file
from sheet_search.sheets.models import Sheet, SheetSource, sheets_from_tables
from sheet_search.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class LoadOutcome:
    """Result of loading one file or URL."""

    source: str
    success: bool
    sheets: list[Sheet] = field(default_factory=list)
    error: str | None = None

    @property
    def sheet_count(self) -> int:
        return len(self.sheets)


def load_file(path: Path | str) -> list[Sheet]:
    """Load every table in a local spreadsheet file.

    Raises:
        LoadError: If the file cannot be decoded.
    """
    path = Path(path)
    try:
        tables = decode_file(path)
    except OSError as e:
        raise LoadError(f"Failed to read file {path}: {e}") from e
    return sheets_from_tables(
        tables,
        base_name=path.stem,
        source=SheetSource.UPLOAD,
        filename=path.name,
    )


def load_files(paths: Iterable[Path | str]) -> list[LoadOutcome]:
    """Load several files, recording success or failure per file."""
    outcomes: list[LoadOutcome] = []
    for path in paths:
        try:
            sheets = load_file(path)
            outcomes.append(LoadOutcome(source=str(path), success=True, sheets=sheets))
        except LoadError as e:
            logger.warning("Failed to load %s: %s", path, e)
            outcomes.append(LoadOutcome(source=str(path), success=False, error=str(e)))
    return outcomes


def load_urls(urls: Iterable[str], **connector_kwargs: Any) -> list[LoadOutcome]:
    """Load several remote spreadsheets, recording success or failure per URL.

    Args:
        urls: Spreadsheet links. Surrounding whitespace is ignored.
        **connector_kwargs: Passed to the connector (client, timeout, ...).
    """
    outcomes: list[LoadOutcome] = []
    for raw_url in urls:
        url = raw_url.strip()
        if not url:
            continue
        try:
            sheets = connector_for(url, **connector_kwargs).load(url)
            outcomes.append(LoadOutcome(source=url, success=True, sheets=sheets))
        except LoadError as e:
            logger.warning("Failed to load sheet from %s: %s", url, e)
            outcomes.append(LoadOutcome(source=url, success=False, error=str(e)))
    return outcomes
