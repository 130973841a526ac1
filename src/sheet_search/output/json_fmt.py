"""JSON output formatter."""

import json
from typing import Any, TextIO

from sheet_search.config.schema import OutputFormat
from sheet_search.output.base import OutputData, OutputFormatter
from sheet_search.output.cards import SearchReport


class JSONFormatter(OutputFormatter):
    """JSON output formatter.

    Produces structured JSON output suitable for programmatic
    consumption and integration with other tools.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        verbose: bool = False,
        indent: int | None = 2,
        ensure_ascii: bool = False,
    ) -> None:
        """Initialize JSON formatter.

        Args:
            stream: Output stream.
            error_stream: Error stream.
            verbose: Whether to include full rows and timing.
            indent: JSON indentation (None for compact).
            ensure_ascii: Whether to escape non-ASCII characters.
        """
        super().__init__(stream, error_stream, verbose)
        self._indent = indent
        self._ensure_ascii = ensure_ascii

    @property
    def format_type(self) -> OutputFormat:
        return OutputFormat.JSON

    def _to_json(self, data: Any) -> str:
        return json.dumps(
            data,
            indent=self._indent,
            ensure_ascii=self._ensure_ascii,
            default=str,  # Handle non-serializable types
        )

    def format(self, data: OutputData) -> str:
        """Format output data as JSON."""
        output: dict[str, Any] = {"success": data.success}

        if data.title:
            output["title"] = data.title

        if data.success:
            output["content"] = data.content
        else:
            output["error"] = data.error

        if data.metadata:
            output["metadata"] = data.metadata

        return self._to_json(output)

    def format_results(self, report: SearchReport) -> str:
        """Format a search report as JSON with annotated spans."""
        output: dict[str, Any] = {"success": True, **report.to_dict()}
        if self._verbose:
            for group_out, view in zip(output["groups"], report.groups, strict=True):
                for card_out, card in zip(group_out["results"], view.cards, strict=True):
                    card_out["row"] = [f.to_dict() for f in card.row]
        else:
            output.pop("search_time_ms", None)
        return self._to_json(output)

    def format_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str] | None = None,
        title: str | None = None,
    ) -> str:
        """Format data as JSON table."""
        output: dict[str, Any] = {
            "success": True,
            "rows": rows,
            "count": len(rows),
        }
        if title:
            output["title"] = title
        if columns:
            output["columns"] = columns
        return self._to_json(output)
