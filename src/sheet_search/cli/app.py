"""Main CLI application for sheet-search."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from sheet_search import __version__
from sheet_search.cli.context import CLIContext, cli_context
from sheet_search.cli.options import (
    FormatOption,
    MaxResultsOption,
    NoHighlightOption,
    SheetOption,
    ThresholdOption,
    VerboseOption,
)
from sheet_search.config import get_config
from sheet_search.config.schema import SearchSettings
from sheet_search.exceptions import (
    ConfigValidationError,
    LoadError,
    SheetSearchError,
)
from sheet_search.output import build_report
from sheet_search.search.engine import ALL_SHEETS
from sheet_search.sheets import (
    LoadOutcome,
    create_sample_video_database,
    load_files,
    load_urls,
)
from sheet_search.sheets.sample import SAMPLE_SHEET_ID

# Create Typer app
app = typer.Typer(
    name="sheet-search",
    help="Fuzzy search across spreadsheets.",
    add_completion=True,
    no_args_is_help=True,
)

# Rich console for output
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"sheet-search version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Fuzzy search across spreadsheets."""
    pass


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn sheet-search errors into a message and exit status."""
    try:
        yield
    except SheetSearchError as e:
        err_console.print(f"[red]Error:[/red] {e.user_message}: {e}")
        raise typer.Exit(e.exit_code) from None


def _format_timestamp(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M")


def _report_outcomes(ctx: CLIContext, outcomes: list[LoadOutcome]) -> None:
    """Add loaded sheets to the state and print one row per input."""
    rows = []
    for outcome in outcomes:
        ctx.state.add_sheets(outcome.sheets)
        rows.append(
            {
                "Source": outcome.source,
                "Status": "ok" if outcome.success else "failed",
                "Sheets": str(outcome.sheet_count),
                "Detail": ", ".join(s.name for s in outcome.sheets) or outcome.error or "",
            }
        )
    ctx.formatter.print_table(rows, columns=["Source", "Status", "Sheets", "Detail"])

    loaded = sum(o.sheet_count for o in outcomes)
    failed = sum(1 for o in outcomes if not o.success)
    console.print(f"\n[dim]Loaded {loaded} sheet(s), {failed} failure(s)[/dim]")


def _exit_if_all_failed(outcomes: list[LoadOutcome]) -> None:
    if outcomes and not any(o.success for o in outcomes):
        raise typer.Exit(LoadError.exit_code)


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------


@app.command()
def load(
    files: Annotated[list[Path], typer.Argument(help="Spreadsheet files (.csv, .xlsx).")],
    format: FormatOption = None,
) -> None:
    """Load local spreadsheet files."""
    with handle_errors(), cli_context(format_choice=format) as ctx:
        outcomes = load_files(files)
        _report_outcomes(ctx, outcomes)
    _exit_if_all_failed(outcomes)


@app.command("load-url")
def load_url(
    urls: Annotated[list[str], typer.Argument(help="Google Sheets or shared file links.")],
    format: FormatOption = None,
) -> None:
    """Load spreadsheets from public links."""
    with handle_errors(), cli_context(format_choice=format) as ctx:
        outcomes = _fetch_urls(ctx, urls)
        _report_outcomes(ctx, outcomes)
    _exit_if_all_failed(outcomes)


def _fetch_urls(ctx: CLIContext, urls: list[str]) -> list[LoadOutcome]:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
        transient=True,
    ) as progress:
        progress.add_task(description=f"Fetching {len(urls)} link(s)...", total=None)
        return load_urls(
            urls,
            timeout=ctx.config.connectors.timeout,
            max_attempts=ctx.config.connectors.max_attempts,
        )


@app.command()
def sample() -> None:
    """Load the built-in Studio Video Database sample."""
    with handle_errors(), cli_context() as ctx:
        if ctx.state.get_sheet(SAMPLE_SHEET_ID) is not None:
            console.print("[dim]Sample data already loaded[/dim]")
            return
        sheet = create_sample_video_database()
        ctx.state.add_sheet(sheet)
        console.print(f"Loaded sample sheet '{sheet.name}' ({sheet.row_count} rows)")


@app.command()
def sheets(format: FormatOption = None) -> None:
    """List loaded spreadsheets."""
    with handle_errors(), cli_context(format_choice=format, save=False) as ctx:
        if not ctx.state.sheets:
            console.print("[dim]No spreadsheets loaded[/dim]")
            return
        rows = [
            {
                "ID": sheet.id,
                "Name": sheet.name,
                "Source": sheet.source.label,
                "Rows": str(sheet.row_count),
                "Tagged": str(len(sheet.tags)),
            }
            for sheet in ctx.state.sheets
        ]
        ctx.formatter.print_table(rows, columns=["ID", "Name", "Source", "Rows", "Tagged"])


@app.command()
def remove(sheet_id: str = typer.Argument(..., help="Spreadsheet id.")) -> None:
    """Remove a loaded spreadsheet."""
    with handle_errors(), cli_context() as ctx:
        sheet = ctx.state.require_sheet(sheet_id)
        ctx.state.remove_sheet(sheet_id)
        console.print(f"Removed '{sheet.name}'")


# -----------------------------------------------------------------------------
# Searching
# -----------------------------------------------------------------------------


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query."),
    sheet: SheetOption = ALL_SHEETS,
    max_results: MaxResultsOption = None,
    threshold: ThresholdOption = None,
    no_highlight: NoHighlightOption = False,
    format: FormatOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Fuzzy search every loaded spreadsheet."""
    with handle_errors(), cli_context(format_choice=format, verbose=verbose) as ctx:
        if sheet != ALL_SHEETS:
            ctx.state.require_sheet(sheet)

        settings = ctx.state.settings
        if threshold is not None:
            settings = settings.model_copy(update={"fuzzy_threshold": threshold})

        response = ctx.engine(settings).search(query, sheet, max_results)
        report = build_report(
            response,
            ctx.state.sheets,
            highlight=settings.highlight_results and not no_highlight,
            max_fields=ctx.config.output.max_foreground_fields,
            link_label_max=ctx.config.output.link_label_max,
        )
        ctx.formatter.print_results(report)


@app.command()
def tag(
    sheet_id: str = typer.Argument(..., help="Spreadsheet id."),
    row: int = typer.Argument(..., min=1, help="Row number (1-based)."),
    tags: Annotated[list[str] | None, typer.Argument(help="Tags to add.")] = None,
    replace: bool = typer.Option(
        False, "--replace", "-r", help="Replace existing tags instead of adding."
    ),
) -> None:
    """Tag a spreadsheet row."""
    with handle_errors(), cli_context() as ctx:
        row_index = row - 1
        existing = [] if replace else ctx.state.require_sheet(sheet_id).row_tags(row_index)
        ctx.state.update_sheet_tags(sheet_id, row_index, [*existing, *(tags or [])])
        current = ctx.state.require_sheet(sheet_id).row_tags(row_index)
        console.print(f"Row {row} tags: {', '.join(current) or '(none)'}")


@app.command()
def history(
    clear: bool = typer.Option(False, "--clear", help="Clear search history."),
    format: FormatOption = None,
) -> None:
    """Show recent searches, newest first."""
    with handle_errors(), cli_context(format_choice=format, save=clear) as ctx:
        if clear:
            ctx.state.clear_search_history()
            console.print("Search history cleared")
            return
        if not ctx.state.search_history:
            console.print("[dim]No searches yet[/dim]")
            return
        rows = [
            {
                "Query": entry.query,
                "Results": str(entry.results_count),
                "When": _format_timestamp(entry.timestamp),
            }
            for entry in ctx.state.search_history
        ]
        ctx.formatter.print_table(rows, columns=["Query", "Results", "When"])


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------

settings_app = typer.Typer(help="Show or change search settings.")
app.add_typer(settings_app, name="settings")


@settings_app.command("show")
def settings_show(format: FormatOption = None) -> None:
    """Show search settings."""
    with handle_errors(), cli_context(format_choice=format, save=False) as ctx:
        ctx.formatter.print_content(ctx.state.settings.model_dump(), title="Search settings")


@settings_app.command("set")
def settings_set(
    key: str = typer.Argument(..., help="Setting name, e.g. fuzzy_threshold."),
    value: str = typer.Argument(..., help="New value."),
) -> None:
    """Change a search setting."""
    field_name = key.replace("-", "_")
    if field_name not in SearchSettings.model_fields:
        valid = ", ".join(SearchSettings.model_fields)
        raise typer.BadParameter(f"Unknown setting '{key}'. Valid settings: {valid}")

    with handle_errors(), cli_context() as ctx:
        try:
            updated = ctx.state.update_search_settings(**{field_name: value})
        except ValidationError as e:
            raise ConfigValidationError(
                f"Invalid value {value!r} for {field_name}: {e.errors()[0]['msg']}"
            ) from e
        console.print(f"{field_name} = {getattr(updated, field_name)}")


# -----------------------------------------------------------------------------
# Saved searches
# -----------------------------------------------------------------------------

saved_app = typer.Typer(help="Manage saved searches.")
app.add_typer(saved_app, name="saved")


@saved_app.command("add")
def saved_add(
    name: str = typer.Argument(..., help="Name for the saved search."),
    query: str = typer.Argument(..., help="Search query."),
    sheet: SheetOption = ALL_SHEETS,
) -> None:
    """Save a query for later."""
    with handle_errors(), cli_context() as ctx:
        saved = ctx.state.add_saved_search(name, query, {"sheet": sheet})
        console.print(f"Saved search '{saved.name}' ({saved.id})")


@saved_app.command("list")
def saved_list(format: FormatOption = None) -> None:
    """List saved searches."""
    with handle_errors(), cli_context(format_choice=format, save=False) as ctx:
        if not ctx.state.saved_searches:
            console.print("[dim]No saved searches[/dim]")
            return
        rows = [
            {
                "ID": s.id,
                "Name": s.name,
                "Query": s.query,
                "Sheet": str(s.filters.get("sheet", ALL_SHEETS)),
                "Created": _format_timestamp(s.created_at),
            }
            for s in ctx.state.saved_searches
        ]
        ctx.formatter.print_table(rows, columns=["ID", "Name", "Query", "Sheet", "Created"])


@saved_app.command("remove")
def saved_remove(saved_id: str = typer.Argument(..., help="Saved search id.")) -> None:
    """Delete a saved search."""
    with handle_errors(), cli_context() as ctx:
        if not ctx.state.remove_saved_search(saved_id):
            raise SheetSearchError(f"No saved search with id {saved_id!r}")
        console.print(f"Removed saved search {saved_id}")


# -----------------------------------------------------------------------------
# Workspaces
# -----------------------------------------------------------------------------

workspace_app = typer.Typer(help="Manage named collections of links.")
app.add_typer(workspace_app, name="workspace")


@workspace_app.command("save")
def workspace_save(
    name: Annotated[str, typer.Argument(help="Workspace name.")],
    urls: Annotated[list[str], typer.Argument(help="Spreadsheet links.")],
) -> None:
    """Save a set of links as a workspace."""
    with handle_errors(), cli_context() as ctx:
        workspace = ctx.state.add_workspace(name, urls)
        console.print(
            f"Saved workspace '{workspace.name}' ({workspace.id}) "
            f"with {len(workspace.urls)} link(s)"
        )


@workspace_app.command("list")
def workspace_list(format: FormatOption = None) -> None:
    """List workspaces."""
    with handle_errors(), cli_context(format_choice=format, save=False) as ctx:
        if not ctx.state.workspaces:
            console.print("[dim]No workspaces[/dim]")
            return
        rows = [
            {
                "ID": w.id,
                "Name": w.name,
                "Links": str(len(w.urls)),
                "Last used": _format_timestamp(w.last_used),
            }
            for w in ctx.state.workspaces
        ]
        ctx.formatter.print_table(rows, columns=["ID", "Name", "Links", "Last used"])


@workspace_app.command("load")
def workspace_load(
    workspace_id: str = typer.Argument(..., help="Workspace id."),
    format: FormatOption = None,
) -> None:
    """Load every link in a workspace."""
    with handle_errors(), cli_context(format_choice=format) as ctx:
        urls = ctx.state.load_workspace(workspace_id)
        if not urls:
            raise SheetSearchError(f"No workspace with id {workspace_id!r}")
        outcomes = _fetch_urls(ctx, urls)
        _report_outcomes(ctx, outcomes)
    _exit_if_all_failed(outcomes)


@workspace_app.command("remove")
def workspace_remove(workspace_id: str = typer.Argument(..., help="Workspace id.")) -> None:
    """Delete a workspace."""
    with handle_errors(), cli_context() as ctx:
        if not ctx.state.remove_workspace(workspace_id):
            raise SheetSearchError(f"No workspace with id {workspace_id!r}")
        console.print(f"Removed workspace {workspace_id}")


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------


@app.command("config")
def config_cmd(
    show_path: bool = typer.Option(
        False,
        "--path",
        "-p",
        help="Show config file path.",
    ),
) -> None:
    """Show current configuration."""
    from sheet_search.config.defaults import get_config_path, get_state_path

    if show_path:
        console.print(str(get_config_path()))
        return

    with handle_errors():
        config = get_config()

    console.print("[bold]sheet-search configuration[/bold]\n")
    console.print(f"Config file: {get_config_path()}")
    console.print(f"State database: {config.storage.path or get_state_path()}")
    console.print(f"Output format: {config.output.default_format}")
    console.print(f"Log level: {config.logging.level}")

    console.print("\n[bold]Search defaults:[/bold]")
    for key, value in config.search.model_dump().items():
        console.print(f"  {key}: {value}")

    console.print("\n[bold]Connectors:[/bold]")
    console.print(f"  timeout: {config.connectors.timeout}s")
    console.print(f"  max_attempts: {config.connectors.max_attempts}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
