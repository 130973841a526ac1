"""Configuration loading from TOML files and environment variables."""

import contextlib
import os
from pathlib import Path

from sheet_search.config.defaults import (
    DEFAULT_CONFIG_TOML,
    ENV_DB_PATH,
    ENV_FUZZY_THRESHOLD,
    ENV_LOG_LEVEL,
    ENV_MAX_RESULTS,
    ensure_directories,
    get_config_path,
)
from sheet_search.config.schema import SheetSearchConfig
from sheet_search.exceptions import ConfigError, ConfigValidationError

# Global config instance (singleton)
_config: SheetSearchConfig | None = None


def load_config(
    config_path: Path | None = None,
    *,
    create_if_missing: bool = True,
) -> SheetSearchConfig:
    """Load configuration from TOML file and environment variables.

    Args:
        config_path: Path to config file. If None, uses default.
        create_if_missing: Create default config if file doesn't exist.

    Returns:
        Loaded and validated configuration.

    Raises:
        ConfigError: If configuration cannot be loaded.
        ConfigValidationError: If configuration is invalid.
    """
    # Use Python 3.11+ tomllib or fallback
    try:
        import tomllib
    except ImportError:
        try:
            import tomli as tomllib
        except ImportError as err:
            raise ConfigError(
                "tomllib not available. Install 'tomli' for Python < 3.11"
            ) from err

    path = config_path or get_config_path()

    # Create default config if missing
    if not path.exists():
        if create_if_missing:
            if config_path is None:
                ensure_directories()
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(DEFAULT_CONFIG_TOML)
        else:
            # Return default config without file
            return _apply_env_overrides(SheetSearchConfig())

    # Load TOML file
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    # Parse into Pydantic model
    try:
        config = SheetSearchConfig.model_validate(data)
    except Exception as e:
        raise ConfigValidationError(f"Invalid configuration: {e}") from e

    return _apply_env_overrides(config)


def _apply_env_overrides(config: SheetSearchConfig) -> SheetSearchConfig:
    """Apply environment variable overrides to configuration."""
    log_level = os.environ.get(ENV_LOG_LEVEL)
    if log_level:
        config.logging.level = log_level.upper()

    # Invalid numbers are ignored rather than failing startup
    threshold = os.environ.get(ENV_FUZZY_THRESHOLD)
    if threshold:
        with contextlib.suppress(ValueError):
            config.search.fuzzy_threshold = float(threshold)

    max_results = os.environ.get(ENV_MAX_RESULTS)
    if max_results:
        with contextlib.suppress(ValueError):
            config.search.max_results = int(max_results)

    db_path = os.environ.get(ENV_DB_PATH)
    if db_path:
        config.storage.path = Path(db_path)

    return config


def get_config() -> SheetSearchConfig:
    """Get the current configuration (singleton).

    Loads config on first access, caches for subsequent calls.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Path | None = None) -> SheetSearchConfig:
    """Reload configuration from disk."""
    global _config
    _config = load_config(config_path)
    return _config


def reset_config() -> None:
    """Reset the configuration singleton (mainly for testing)."""
    global _config
    _config = None
