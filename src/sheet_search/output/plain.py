"""Plain text output formatter."""

from typing import Any, TextIO

from sheet_search.config.schema import OutputFormat
from sheet_search.output.base import OutputData, OutputFormatter
from sheet_search.output.cards import FieldView, SearchReport
from sheet_search.search.highlight import Span, SpanKind


def render_spans(spans: list[Span]) -> str:
    """Render spans as text, bracketing highlights.

    Links print their label followed by the full URL when the label was
    shortened.
    """
    parts: list[str] = []
    for span in spans:
        if span.kind is SpanKind.HIGHLIGHT:
            parts.append(f"[{span.text}]")
        elif span.kind is SpanKind.LINK and span.href and span.href != span.text:
            parts.append(f"{span.text} <{span.href}>")
        else:
            parts.append(span.text)
    return "".join(parts)


class PlainFormatter(OutputFormatter):
    """Plain text output formatter.

    Produces simple, unformatted text output suitable for
    piping to other commands or basic terminal display.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        verbose: bool = False,
        show_metadata: bool = False,
    ) -> None:
        super().__init__(stream, error_stream, verbose)
        self._show_metadata = show_metadata

    @property
    def format_type(self) -> OutputFormat:
        return OutputFormat.PLAIN

    def format(self, data: OutputData) -> str:
        """Format output data as plain text."""
        lines: list[str] = []

        if data.title:
            lines.append(data.title)
            lines.append("-" * len(data.title))
            lines.append("")

        if not data.success and data.error:
            lines.append(f"Error: {data.error}")
            return "\n".join(lines)

        if isinstance(data.content, str):
            lines.append(data.content)
        elif isinstance(data.content, list):
            lines.extend(str(item) for item in data.content)
        elif isinstance(data.content, dict):
            for key, value in data.content.items():
                lines.append(f"{key}: {value}")

        if (self._verbose or self._show_metadata) and data.metadata:
            lines.append("")
            lines.append("---")
            for key, value in data.metadata.items():
                lines.append(f"{key}: {value}")

        return "\n".join(lines)

    def format_results(self, report: SearchReport) -> str:
        """Format a search report as indented plain text."""
        if not report.groups:
            return f'No results for "{report.query}"'

        lines = [report.summary, ""]
        for view in report.groups:
            group = view.group
            heading = f"{group.name} ({group.source.label}) - {group.match_label}"
            lines.append(heading)
            lines.append("=" * len(heading))
            if group.original_url:
                lines.append(f"Open: {group.original_url}")

            for card in view.cards:
                lines.append("")
                lines.append(f"  {card.subtitle}  {card.match_label}")
                lines.extend(self._field_lines(card.fields))
                if card.more_label:
                    lines.append(f"    {card.more_label}")
                if card.result.tags:
                    lines.append(f"    Tags: {', '.join(card.result.tags)}")
                if self._verbose:
                    lines.append("    Complete row:")
                    lines.extend(self._field_lines(card.row, indent="      "))
            lines.append("")

        if self._verbose or self._show_metadata:
            lines.append(
                f"{report.total_records} records searched in "
                f"{report.search_time_ms:.1f} ms"
            )
        return "\n".join(lines).rstrip()

    @staticmethod
    def _field_lines(fields: list[FieldView], indent: str = "    ") -> list[str]:
        return [f"{indent}{f.name}: {render_spans(f.spans)}" for f in fields]

    def format_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str] | None = None,
        title: str | None = None,
    ) -> str:
        """Format data as a plain text table."""
        if not rows:
            return ""

        if columns is None:
            columns = list(rows[0].keys())

        widths: dict[str, int] = {}
        for col in columns:
            widths[col] = len(col)
            for row in rows:
                widths[col] = max(widths[col], len(str(row.get(col, ""))))

        lines: list[str] = []
        if title:
            lines.append(title)
            lines.append("")

        lines.append("  ".join(col.ljust(widths[col]) for col in columns).rstrip())
        lines.append("  ".join("-" * widths[col] for col in columns))
        for row in rows:
            lines.append(
                "  ".join(str(row.get(col, "")).ljust(widths[col]) for col in columns).rstrip()
            )

        return "\n".join(lines)
