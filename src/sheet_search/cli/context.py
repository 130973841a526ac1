"""Context factory for CLI commands.

Every command runs inside :func:`cli_context`, which loads configuration,
configures logging, opens the state store and hands the command a
ready-made :class:`CLIContext`. State is written back when the command
finishes without raising.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sheet_search.cli.options import FormatChoice, get_output_format
from sheet_search.config import get_config
from sheet_search.config.defaults import get_state_path
from sheet_search.config.schema import OutputFormat, SearchSettings, SheetSearchConfig
from sheet_search.output import get_formatter
from sheet_search.output.base import OutputFormatter
from sheet_search.search.engine import SearchEngine
from sheet_search.store.duckdb_store import DuckDBStateStore
from sheet_search.store.state import AppState
from sheet_search.utils.logging import setup_logging


@dataclass
class CLIContext:
    """Everything a command needs."""

    config: SheetSearchConfig
    store: DuckDBStateStore
    state: AppState
    formatter: OutputFormatter
    verbose: bool = False

    def engine(self, settings: SearchSettings | None = None) -> SearchEngine:
        return SearchEngine(self.state, settings)

    def save(self) -> None:
        self.store.save_state(self.state)


def create_formatter(
    format_choice: FormatChoice | None = None,
    verbose: bool = False,
    config: SheetSearchConfig | None = None,
) -> OutputFormatter:
    """Create an output formatter from configuration.

    Args:
        format_choice: CLI format choice override.
        verbose: Whether to enable verbose output.
        config: Configuration to use. If None, uses global config.

    Returns:
        Configured OutputFormatter instance.
    """
    if config is None:
        config = get_config()

    output_format = get_output_format(format_choice, config.output.default_format)
    if output_format == OutputFormat.RICH:
        return get_formatter(output_format, verbose=verbose, color=config.output.color)
    return get_formatter(output_format, verbose=verbose)


def create_store(config: SheetSearchConfig | None = None) -> DuckDBStateStore:
    """Open the state store configured for this process."""
    if config is None:
        config = get_config()
    return DuckDBStateStore(config.storage.path or get_state_path())


@contextmanager
def cli_context(
    *,
    format_choice: FormatChoice | None = None,
    verbose: bool = False,
    save: bool = True,
    config: SheetSearchConfig | None = None,
) -> Iterator[CLIContext]:
    """Build a CLIContext and persist its state afterwards.

    Args:
        format_choice: Output format override.
        verbose: Whether to enable verbose output.
        save: Whether to write state back on success.
        config: Configuration to use. If None, uses global config.
    """
    if config is None:
        config = get_config()

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        use_color=config.output.color,
    )

    store = create_store(config)
    try:
        state = store.load_state(config.search)
        ctx = CLIContext(
            config=config,
            store=store,
            state=state,
            formatter=create_formatter(format_choice, verbose, config),
            verbose=verbose,
        )
        yield ctx
        if save:
            ctx.save()
    finally:
        store.close()
