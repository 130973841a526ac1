"""Rich terminal output formatter."""

from io import StringIO
from typing import Any, TextIO

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from sheet_search.config.schema import OutputFormat
from sheet_search.output.base import OutputData, OutputFormatter
from sheet_search.output.cards import GroupView, ResultCard, SearchReport
from sheet_search.search.highlight import Span, SpanKind

HIGHLIGHT_STYLE = Style(bold=True, color="black", bgcolor="yellow")


def spans_to_text(spans: list[Span]) -> Text:
    """Build a Rich ``Text`` with highlight styling and clickable links."""
    text = Text()
    for span in spans:
        if span.kind is SpanKind.HIGHLIGHT:
            text.append(span.text, style=HIGHLIGHT_STYLE)
        elif span.kind is SpanKind.LINK:
            text.append(span.text, style=Style(color="blue", underline=True, link=span.href))
        else:
            text.append(span.text)
    return text


class RichFormatter(OutputFormatter):
    """Rich terminal output formatter.

    Groups results into panels per spreadsheet, with highlighted
    matches, match percentages and clickable source links.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        verbose: bool = False,
        color: bool = True,
        width: int | None = None,
    ) -> None:
        """Initialize rich formatter.

        Args:
            stream: Output stream.
            error_stream: Error stream.
            verbose: Whether to show the complete row under each result.
            color: Whether to emit colors and styles.
            width: Console width (None for auto-detect).
        """
        super().__init__(stream, error_stream, verbose)
        self._color = color
        self._width = width
        self._console: Console | None = None
        self._error_console: Console | None = None

    def _get_console(self) -> Console:
        if self._console is None:
            self._console = Console(
                file=self._stream,
                width=self._width,
                no_color=not self._color,
            )
        return self._console

    def _get_error_console(self) -> Console:
        if self._error_console is None:
            self._error_console = Console(
                file=self._error_stream,
                width=self._width,
                stderr=True,
                no_color=not self._color,
            )
        return self._error_console

    @property
    def format_type(self) -> OutputFormat:
        return OutputFormat.RICH

    def _capture(self, renderable: RenderableType) -> str:
        string_io = StringIO()
        temp_console = Console(file=string_io, width=self._width, force_terminal=False)
        temp_console.print(renderable)
        return string_io.getvalue().rstrip()

    # -------------------------------------------------------------------------
    # Generic output
    # -------------------------------------------------------------------------

    def _data_renderable(self, data: OutputData) -> RenderableType:
        if not data.success and data.error:
            error_text = Text(f"Error: {data.error}", style="bold red")
            if data.title:
                return Panel(error_text, title=data.title, border_style="red")
            return error_text

        content: RenderableType
        if isinstance(data.content, str):
            content = Text(data.content)
        elif isinstance(data.content, list):
            table = Table(show_header=False, box=None)
            table.add_column("Item")
            for item in data.content:
                table.add_row(str(item))
            content = table
        else:
            table = Table(show_header=False, box=None, padding=(0, 1))
            table.add_column("Key", style="bold cyan")
            table.add_column("Value")
            for key, value in data.content.items():
                table.add_row(str(key), str(value))
            content = table

        if self._verbose and data.metadata:
            meta = Table(title="Metadata", show_header=False, box=None)
            meta.add_column("Key", style="dim")
            meta.add_column("Value", style="dim")
            for key, value in data.metadata.items():
                meta.add_row(str(key), str(value))
            content = Group(content, Text(), meta)

        return Panel(content, title=data.title) if data.title else content

    def format(self, data: OutputData) -> str:
        return self._capture(self._data_renderable(data))

    def print(self, data: OutputData) -> None:
        """Print output using the Rich console directly."""
        console = self._get_console() if data.success else self._get_error_console()
        console.print(self._data_renderable(data), highlight=False)

    # -------------------------------------------------------------------------
    # Search results
    # -------------------------------------------------------------------------

    def _card_renderable(self, card: ResultCard) -> RenderableType:
        header = Text()
        header.append(card.subtitle, style="dim")
        header.append("  ")
        header.append(card.match_label, style="bold green")

        fields = Table(show_header=False, box=None, padding=(0, 1))
        fields.add_column("Field", style="bold cyan", no_wrap=True)
        fields.add_column("Value")
        for view in card.fields:
            fields.add_row(view.name, spans_to_text(view.spans))

        parts: list[RenderableType] = [header, fields]
        if card.more_label:
            parts.append(Text(card.more_label, style="italic dim"))
        if card.result.tags:
            tags = Text("Tags: ", style="dim")
            for position, tag in enumerate(card.result.tags):
                if position:
                    tags.append(" ")
                tags.append(f" {tag} ", style="reverse magenta")
            parts.append(tags)
        if self._verbose:
            row = Table(title="Complete Row Data", show_header=False, box=None)
            row.add_column("Field", style="dim")
            row.add_column("Value")
            for view in card.row:
                row.add_row(view.name, spans_to_text(view.spans))
            parts.append(row)
        return Group(*parts)

    def _group_renderable(self, view: GroupView) -> RenderableType:
        group = view.group
        title = Text()
        title.append(group.name, style="bold")
        title.append(f" ({group.source.label})", style="dim")
        subtitle: Text | None = None
        if group.original_url:
            subtitle = Text(
                "Open original",
                style=Style(color="blue", underline=True, link=group.original_url),
            )

        body: list[RenderableType] = []
        for position, card in enumerate(view.cards):
            if position:
                body.append(Text())
            body.append(self._card_renderable(card))

        return Panel(
            Group(*body),
            title=title,
            title_align="left",
            subtitle=subtitle or Text(group.match_label, style="dim"),
            subtitle_align="right",
        )

    def _report_renderable(self, report: SearchReport) -> RenderableType:
        if not report.groups:
            return Text(f'No results for "{report.query}"', style="yellow")

        summary = Text()
        summary.append("Showing ")
        summary.append(str(report.total_results), style="bold")
        noun = "match" if report.total_results == 1 else "matches"
        summary.append(f' {noun} for "{report.query}"')

        parts: list[RenderableType] = [summary]
        parts.extend(self._group_renderable(v) for v in report.groups)
        if self._verbose:
            parts.append(
                Text(
                    f"{report.total_records} records searched in "
                    f"{report.search_time_ms:.1f} ms",
                    style="dim",
                )
            )
        return Group(*parts)

    def format_results(self, report: SearchReport) -> str:
        return self._capture(self._report_renderable(report))

    def print_results(self, report: SearchReport) -> None:
        self._get_console().print(self._report_renderable(report), highlight=False)

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    def _table_renderable(
        self,
        rows: list[dict[str, Any]],
        columns: list[str] | None,
        title: str | None,
    ) -> Table:
        if columns is None:
            columns = list(rows[0].keys()) if rows else []
        table = Table(title=title)
        for col in columns:
            table.add_column(col, style="cyan")
        for row in rows:
            table.add_row(*[str(row.get(col, "")) for col in columns])
        return table

    def format_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str] | None = None,
        title: str | None = None,
    ) -> str:
        """Format data as a Rich table."""
        if not rows:
            return ""
        return self._capture(self._table_renderable(rows, columns, title))

    def print_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str] | None = None,
        title: str | None = None,
    ) -> None:
        if rows:
            self._get_console().print(self._table_renderable(rows, columns, title))
