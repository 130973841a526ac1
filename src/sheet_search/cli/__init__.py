"""CLI layer for sheet-search.

Usage:
    sheet-search load sales.xlsx
    sheet-search search "adobe summit"
"""

from sheet_search.cli.app import app, main
from sheet_search.cli.context import CLIContext, cli_context
from sheet_search.cli.options import (
    FormatChoice,
    FormatOption,
    MaxResultsOption,
    NoHighlightOption,
    SheetOption,
    ThresholdOption,
    VerboseOption,
)

__all__ = [
    # App
    "app",
    "main",
    # Context
    "CLIContext",
    "cli_context",
    # Options
    "FormatChoice",
    "FormatOption",
    "MaxResultsOption",
    "NoHighlightOption",
    "SheetOption",
    "ThresholdOption",
    "VerboseOption",
]
