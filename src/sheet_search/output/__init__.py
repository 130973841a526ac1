"""Output formatting (rich, plain, JSON).

Usage:
    from sheet_search.output import build_report, get_formatter

    report = build_report(response, state.sheets)
    get_formatter("plain").print_results(report)
"""

from typing import Any

from sheet_search.config.schema import OutputFormat
from sheet_search.output.base import OutputData, OutputFormatter
from sheet_search.output.cards import (
    FieldView,
    GroupView,
    ResultCard,
    SearchReport,
    build_card,
    build_report,
    percentage_match,
    row_label,
)
from sheet_search.output.json_fmt import JSONFormatter
from sheet_search.output.plain import PlainFormatter
from sheet_search.output.rich_fmt import RichFormatter

__all__ = [
    # Base classes
    "OutputFormatter",
    "OutputData",
    "OutputFormat",
    # Formatters
    "PlainFormatter",
    "JSONFormatter",
    "RichFormatter",
    "get_formatter",
    # Result cards
    "FieldView",
    "GroupView",
    "ResultCard",
    "SearchReport",
    "build_card",
    "build_report",
    "percentage_match",
    "row_label",
]


def get_formatter(
    format_type: OutputFormat | str,
    verbose: bool = False,
    **kwargs: Any,
) -> OutputFormatter:
    """Get a formatter instance by format type.

    Args:
        format_type: The output format to use.
        verbose: Whether to enable verbose output.
        **kwargs: Additional formatter-specific options.

    Returns:
        An OutputFormatter instance.

    Raises:
        ValueError: If format_type is not recognized.
    """
    if isinstance(format_type, str):
        format_type = OutputFormat(format_type.lower())

    formatters: dict[OutputFormat, type[OutputFormatter]] = {
        OutputFormat.PLAIN: PlainFormatter,
        OutputFormat.JSON: JSONFormatter,
        OutputFormat.RICH: RichFormatter,
    }

    formatter_class = formatters.get(format_type)
    if formatter_class is None:
        raise ValueError(f"Unknown format type: {format_type}")

    return formatter_class(verbose=verbose, **kwargs)
