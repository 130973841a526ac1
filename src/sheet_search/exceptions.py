"""Exception hierarchy for sheet-search."""


class SheetSearchError(Exception):
    """Base exception for all sheet-search errors."""

    exit_code: int = 1
    user_message: str = "An error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        user_message: str | None = None,
    ) -> None:
        super().__init__(message or self.user_message)
        if user_message:
            self.user_message = user_message


# Config Errors
class ConfigError(SheetSearchError):
    """Configuration errors."""

    exit_code = 20
    user_message = "Configuration error"


class ConfigValidationError(ConfigError):
    """Configuration validation failed."""

    exit_code = 22
    user_message = "Invalid configuration"


# Search Errors
class SearchError(SheetSearchError):
    """Search-related errors."""

    exit_code = 30
    user_message = "Search error"


class IndexBuildError(SearchError):
    """The fuzzy index could not be constructed."""

    exit_code = 31
    user_message = "Could not build the search index"


class SheetNotFoundError(SearchError):
    """A sheet id does not exist in the loaded collection."""

    exit_code = 32
    user_message = "Spreadsheet not found. Run 'sheet-search sheets' to list ids."


class RowOutOfRangeError(SearchError):
    """A row index is outside a sheet's data."""

    exit_code = 33
    user_message = "Row number is out of range for this spreadsheet"


# Load Errors
class LoadError(SheetSearchError):
    """Errors while loading a spreadsheet from a file or URL."""

    exit_code = 40
    user_message = "Failed to load spreadsheet"


class UnsupportedFileTypeError(LoadError):
    """File extension is not a supported spreadsheet format."""

    exit_code = 41
    user_message = "Unsupported file type. Use .csv or .xlsx"


class EmptySheetError(LoadError):
    """File contains no rows."""

    exit_code = 42
    user_message = "File appears to be empty or contains no valid worksheets"


class ConnectorError(LoadError):
    """Remote spreadsheet could not be fetched."""

    exit_code = 43
    user_message = "Failed to fetch remote spreadsheet"


class PrivateResourceError(ConnectorError):
    """Remote spreadsheet requires authentication."""

    exit_code = 44
    user_message = (
        "Sheet is private. Make it publicly viewable or use a different "
        "sharing setting."
    )


class InvalidUrlError(ConnectorError):
    """URL is not a recognised spreadsheet link."""

    exit_code = 45
    user_message = "Invalid spreadsheet URL"


# Storage Errors
class StorageError(SheetSearchError):
    """Persistent state errors."""

    exit_code = 50
    user_message = "Storage error"


class StorageConnectionError(StorageError):
    """Cannot open the state database."""

    exit_code = 51
    user_message = "Cannot open the state database"
