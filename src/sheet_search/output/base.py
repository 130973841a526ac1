"""Output formatter protocol and base classes."""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, TextIO

from sheet_search.config.schema import OutputFormat
from sheet_search.output.cards import SearchReport


@dataclass
class OutputData:
    """Container for output data to be formatted.

    Attributes:
        content: The main content to display.
        title: Optional title for the output.
        metadata: Additional metadata (counts, timing, etc.).
        error: Error message if operation failed.
        success: Whether the operation was successful.
    """

    content: str | list[str] | dict[str, Any]
    title: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    success: bool = True

    @classmethod
    def from_error(cls, error: str, title: str | None = None) -> "OutputData":
        """Create an OutputData instance for an error."""
        return cls(content="", title=title, error=error, success=False)

    @classmethod
    def from_content(
        cls,
        content: str | list[str] | dict[str, Any],
        title: str | None = None,
        **metadata: Any,
    ) -> "OutputData":
        """Create an OutputData instance for successful output."""
        return cls(content=content, title=title, metadata=metadata, success=True)


class OutputFormatter(ABC):
    """Abstract base class for output formatters.

    Formatters render search reports and simple command output to the
    terminal in different formats (plain text, JSON, rich formatted).
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        verbose: bool = False,
    ) -> None:
        """Initialize the formatter.

        Args:
            stream: Output stream (defaults to stdout).
            error_stream: Error stream (defaults to stderr).
            verbose: Whether to show verbose output.
        """
        self._stream = stream or sys.stdout
        self._error_stream = error_stream or sys.stderr
        self._verbose = verbose

    @property
    def stream(self) -> TextIO:
        return self._stream

    @property
    def error_stream(self) -> TextIO:
        return self._error_stream

    @property
    def verbose(self) -> bool:
        return self._verbose

    @property
    @abstractmethod
    def format_type(self) -> OutputFormat:
        """Get the format type of this formatter."""

    @abstractmethod
    def format(self, data: OutputData) -> str:
        """Format output data as a string."""

    @abstractmethod
    def format_results(self, report: SearchReport) -> str:
        """Format a grouped search report.

        Args:
            report: Report built from a search response.

        Returns:
            Formatted string representation.
        """

    @abstractmethod
    def format_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str] | None = None,
        title: str | None = None,
    ) -> str:
        """Format data as a table.

        Args:
            rows: List of row dictionaries.
            columns: Column names (inferred from rows if None).
            title: Optional title.

        Returns:
            Formatted string representation.
        """

    def print(self, data: OutputData) -> None:
        """Format and print output data."""
        formatted = self.format(data)
        if data.success:
            print(formatted, file=self._stream)
        else:
            print(formatted, file=self._error_stream)

    def print_error(self, message: str, title: str | None = None) -> None:
        self.print(OutputData.from_error(message, title))

    def print_content(
        self,
        content: str | list[str] | dict[str, Any],
        title: str | None = None,
        **metadata: Any,
    ) -> None:
        self.print(OutputData.from_content(content, title, **metadata))

    def print_results(self, report: SearchReport) -> None:
        print(self.format_results(report), file=self._stream)

    def print_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str] | None = None,
        title: str | None = None,
    ) -> None:
        print(self.format_table(rows, columns, title), file=self._stream)
