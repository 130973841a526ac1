"""Default configuration values and paths."""

from pathlib import Path
from typing import Final

# Default directories
DEFAULT_CONFIG_DIR: Final[Path] = Path.home() / ".config" / "sheet-search"
DEFAULT_CACHE_DIR: Final[Path] = Path.home() / ".cache" / "sheet-search"

# Default file paths
DEFAULT_CONFIG_FILE: Final[Path] = DEFAULT_CONFIG_DIR / "config.toml"
DEFAULT_STATE_DB: Final[Path] = DEFAULT_CACHE_DIR / "state.duckdb"

# Environment variable names
ENV_CONFIG_PATH: Final[str] = "SHEET_SEARCH_CONFIG"
ENV_DB_PATH: Final[str] = "SHEET_SEARCH_DB"
ENV_LOG_LEVEL: Final[str] = "SHEET_SEARCH_LOG_LEVEL"
ENV_FUZZY_THRESHOLD: Final[str] = "SHEET_SEARCH_FUZZY_THRESHOLD"
ENV_MAX_RESULTS: Final[str] = "SHEET_SEARCH_MAX_RESULTS"

# Default config content (TOML)
DEFAULT_CONFIG_TOML: Final[str] = """\
# sheet-search configuration

[search]
fuzzy_threshold = 0.4   # 0 = exact, 1 = match anything
search_in_tags = true
search_in_metadata = true
max_results = 1000
highlight_results = true
debounce_ms = 300
history_limit = 50

[storage]
# path = "~/.cache/sheet-search/state.duckdb"

[connectors]
timeout = 30.0
max_attempts = 3

[output]
default_format = "rich"
color = true
max_foreground_fields = 4
link_label_max = 50

[logging]
level = "INFO"
json_format = false
"""


def ensure_directories() -> None:
    """Ensure all default directories exist."""
    DEFAULT_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    DEFAULT_CACHE_DIR.mkdir(parents=True, exist_ok=True)


def get_config_path() -> Path:
    """Get the configuration file path."""
    import os

    env_path = os.environ.get(ENV_CONFIG_PATH)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_FILE


def get_state_path() -> Path:
    """Get the state database path."""
    import os

    env_path = os.environ.get(ENV_DB_PATH)
    if env_path:
        return Path(env_path)
    return DEFAULT_STATE_DB
