"""Configuration management."""

from sheet_search.config.loader import get_config, load_config, reload_config, reset_config
from sheet_search.config.schema import SearchSettings, SheetSearchConfig

__all__ = [
    "SearchSettings",
    "SheetSearchConfig",
    "get_config",
    "load_config",
    "reload_config",
    "reset_config",
]
