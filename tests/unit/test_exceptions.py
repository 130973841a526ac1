"""Tests for exception hierarchy."""

import pytest

from sheet_search.exceptions import (
    ConfigError,
    ConfigValidationError,
    ConnectorError,
    EmptySheetError,
    IndexBuildError,
    InvalidUrlError,
    LoadError,
    PrivateResourceError,
    RowOutOfRangeError,
    SearchError,
    SheetNotFoundError,
    SheetSearchError,
    StorageConnectionError,
    StorageError,
    UnsupportedFileTypeError,
)


class TestSheetSearchError:
    """Tests for base SheetSearchError."""

    def test_default_message(self) -> None:
        """Test default error message."""
        error = SheetSearchError()
        assert str(error) == "An error occurred"
        assert error.user_message == "An error occurred"
        assert error.exit_code == 1

    def test_custom_message(self) -> None:
        """Test custom error message."""
        error = SheetSearchError("Custom error")
        assert str(error) == "Custom error"

    def test_custom_user_message(self) -> None:
        """Test custom user message."""
        error = SheetSearchError("Internal", user_message="User-friendly message")
        assert error.user_message == "User-friendly message"
        assert str(error) == "Internal"

    def test_subclass_default_message(self) -> None:
        """Test subclasses fall back to their own user message."""
        assert str(SearchError()) == "Search error"


class TestExitCodes:
    """Tests for per-category exit codes."""

    @pytest.mark.parametrize(
        ("error_class", "exit_code"),
        [
            (ConfigError, 20),
            (ConfigValidationError, 22),
            (SearchError, 30),
            (IndexBuildError, 31),
            (SheetNotFoundError, 32),
            (RowOutOfRangeError, 33),
            (LoadError, 40),
            (UnsupportedFileTypeError, 41),
            (EmptySheetError, 42),
            (ConnectorError, 43),
            (PrivateResourceError, 44),
            (InvalidUrlError, 45),
            (StorageError, 50),
            (StorageConnectionError, 51),
        ],
    )
    def test_exit_code(self, error_class: type[SheetSearchError], exit_code: int) -> None:
        """Test each error carries its exit code."""
        assert error_class().exit_code == exit_code


class TestHierarchy:
    """Tests for exception inheritance."""

    def test_connector_errors_are_load_errors(self) -> None:
        """Test batch loaders can catch every connector failure as LoadError."""
        for error_class in (ConnectorError, PrivateResourceError, InvalidUrlError):
            assert issubclass(error_class, LoadError)

    def test_private_resource_is_connector_error(self) -> None:
        """Test private resource errors are connector errors."""
        assert issubclass(PrivateResourceError, ConnectorError)

    def test_catch_base_error(self) -> None:
        """Test catching all errors with base class."""
        with pytest.raises(SheetSearchError):
            raise SheetNotFoundError("missing")

    def test_private_resource_message(self) -> None:
        """Test private resource errors point at sharing settings."""
        assert "public" in PrivateResourceError().user_message.lower()
