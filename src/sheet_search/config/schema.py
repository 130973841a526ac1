"""Pydantic models for sheet-search configuration."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class OutputFormat(str, Enum):
    """Supported output formats."""

    RICH = "rich"
    PLAIN = "plain"
    JSON = "json"


class SearchSettings(BaseModel):
    """Search settings.

    The first three fields change what goes into the index, so any change
    to them forces a full rebuild.
    """

    model_config = ConfigDict(validate_assignment=True)

    fuzzy_threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    search_in_tags: bool = True
    search_in_metadata: bool = True
    max_results: int = Field(default=1000, ge=1)
    highlight_results: bool = True
    debounce_ms: int = Field(default=300, ge=0)
    history_limit: int = Field(default=50, ge=1)

    def index_key(self) -> tuple[float, bool, bool]:
        """Settings that the index depends on."""
        return (self.fuzzy_threshold, self.search_in_tags, self.search_in_metadata)


class StorageConfig(BaseModel):
    """State database configuration."""

    path: Path | None = None  # Default: ~/.cache/sheet-search/state.duckdb


class ConnectorsConfig(BaseModel):
    """Remote spreadsheet connector configuration."""

    timeout: float = 30.0
    max_attempts: int = Field(default=3, ge=1)


class OutputConfig(BaseModel):
    """Output configuration."""

    default_format: OutputFormat = OutputFormat.RICH
    color: bool = True
    max_foreground_fields: int = Field(default=4, ge=1)
    link_label_max: int = Field(default=50, ge=4)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: Path | None = None  # Default: no file logging
    json_format: bool = False


class SheetSearchConfig(BaseModel):
    """Root configuration for sheet-search."""

    model_config = ConfigDict(use_enum_values=True)

    search: SearchSettings = Field(default_factory=SearchSettings)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    connectors: ConnectorsConfig = Field(default_factory=ConnectorsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
