"""Shared CLI options for sheet-search commands."""

from enum import Enum
from typing import Annotated

import typer

from sheet_search.config.schema import OutputFormat


class FormatChoice(str, Enum):
    """Output format choices for CLI."""

    PLAIN = "plain"
    JSON = "json"
    RICH = "rich"


# Type aliases for common CLI options
FormatOption = Annotated[
    FormatChoice | None,
    typer.Option(
        "--format",
        "-f",
        help="Output format (plain, json, rich). Defaults to config setting.",
        case_sensitive=False,
    ),
]

VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Show complete rows and timing.",
    ),
]

SheetOption = Annotated[
    str,
    typer.Option(
        "--sheet",
        "-s",
        help="Only return results from this spreadsheet id ('all' for every sheet).",
    ),
]

MaxResultsOption = Annotated[
    int | None,
    typer.Option(
        "--max-results",
        "-n",
        min=1,
        help="Maximum number of results. Defaults to the saved setting.",
    ),
]

ThresholdOption = Annotated[
    float | None,
    typer.Option(
        "--threshold",
        "-t",
        min=0.0,
        max=1.0,
        help="Fuzzy threshold for this query only (0 = exact, 1 = anything).",
    ),
]

NoHighlightOption = Annotated[
    bool,
    typer.Option(
        "--no-highlight",
        help="Do not mark matching text.",
    ),
]


def get_output_format(
    format_choice: FormatChoice | None, default: str = "rich"
) -> OutputFormat:
    """Convert CLI format choice to OutputFormat.

    Args:
        format_choice: CLI format choice or None.
        default: Default format if none specified.

    Returns:
        OutputFormat enum value.
    """
    if format_choice is None:
        return OutputFormat(default)
    return OutputFormat(format_choice.value)
