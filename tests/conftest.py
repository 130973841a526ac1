"""Pytest fixtures for sheet-search tests."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from sheet_search.config import reset_config
from sheet_search.config.schema import SearchSettings, SheetSearchConfig
from sheet_search.sheets.models import Sheet, SheetSource
from sheet_search.store.state import AppState


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def default_config() -> SheetSearchConfig:
    """Get default configuration."""
    return SheetSearchConfig()


@pytest.fixture(autouse=True)
def reset_config_fixture() -> Generator[None, None, None]:
    """Reset config singleton between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config_file(temp_dir: Path) -> Path:
    """Create a test config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""
[search]
fuzzy_threshold = 0.2
max_results = 25

[output]
default_format = "plain"
color = false
""")
    return config_path


@pytest.fixture
def summit_sheet() -> Sheet:
    """Two-row sheet used by the worked search examples."""
    return Sheet(
        id="videos",
        name="Videos",
        headers=["Title", "Year"],
        data=[["Adobe Summit", "2024"], ["Photoshop Demo", "2024"]],
    )


@pytest.fixture
def catalog_sheet() -> Sheet:
    """Sheet with tags, per-row metadata and a link column."""
    return Sheet(
        id="catalog",
        name="Catalog",
        headers=["Name", "Team", "Link"],
        data=[
            ["Brand Guidelines", "Design", "https://example.com/brand"],
            ["Quarterly Report", "Finance", ""],
            ["Design Review", "Design", "see https://example.com/review for notes"],
        ],
        source=SheetSource.GOOGLE_SHEETS,
        tags={0: ["featured"], 2: ["internal", "weekly"]},
        metadata={
            1: {"owner": "Dana"},
            "originalUrl": "https://docs.google.com/spreadsheets/d/abc123/edit",
        },
    )


@pytest.fixture
def settings() -> SearchSettings:
    return SearchSettings()


@pytest.fixture
def state(summit_sheet: Sheet, catalog_sheet: Sheet) -> AppState:
    """Application state holding both test sheets."""
    return AppState([summit_sheet, catalog_sheet])
