"""Unit tests for watcher exceptions."""

from config_watcher.models import (
    BaseError,
    ConfigurationError,
    InitializationError,
    NotificationSourceError,
    ReaderError,
    ShutdownError,
)


class TestExceptions:
    """Test cases for the exception hierarchy."""

    def test_base_error_string(self):
        """Test string forms with and without an error code."""
        assert str(BaseError("plain")) == "plain"
        assert str(BaseError("coded", error_code="X")) == "[X] coded"
        assert repr(BaseError("coded", error_code="X")) == "BaseError(message='coded', error_code='X', context={})"

    def test_initialization_error_context(self):
        """Test initialization error context and cause."""
        cause = FileNotFoundError("missing")
        error = InitializationError(
            "Cannot watch",
            path="/etc/app.yaml",
            component="notification_source",
            initialization_stage="validate_path",
            underlying_error=cause,
        )

        assert error.error_code == "INITIALIZATION_ERROR"
        assert error.context == {
            "path": "/etc/app.yaml",
            "component": "notification_source",
            "initialization_stage": "validate_path",
        }
        assert error.cause is cause

    def test_reader_error_context(self):
        """Test reader error records the failing reader and error type."""
        error = ReaderError("failed", reader="load_config", underlying_error=ValueError("bad"))

        assert str(error) == "[READER_ERROR] failed"
        assert error.context == {"reader": "load_config", "error_type": "ValueError"}

    def test_error_codes(self):
        """Test error codes of the remaining exception types."""
        assert NotificationSourceError("x").error_code == "SOURCE_ERROR"
        assert ShutdownError("x").error_code == "SHUTDOWN_ERROR"
        assert ConfigurationError("x", config_key="k", actual_value=0).context == {
            "config_key": "k",
            "actual_value": "0",
        }

    def test_all_errors_share_base(self):
        """Test that every error derives from BaseError."""
        for error_type in (
            ConfigurationError,
            InitializationError,
            NotificationSourceError,
            ReaderError,
            ShutdownError,
        ):
            assert issubclass(error_type, BaseError)
