"""Sheet model, file decoding and remote connectors."""

from sheet_search.sheets.loader import LoadOutcome, load_file, load_files, load_urls
from sheet_search.sheets.models import Sheet, SheetSource, SheetTable, sheets_from_tables
from sheet_search.sheets.sample import create_sample_video_database

__all__ = [
    "LoadOutcome",
    "Sheet",
    "SheetSource",
    "SheetTable",
    "create_sample_video_database",
    "load_file",
    "load_files",
    "load_urls",
    "sheets_from_tables",
]
