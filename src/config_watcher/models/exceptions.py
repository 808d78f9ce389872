"""
Custom exception classes for the configuration watcher.

Provides specific exception types for the failure modes of a watch session so
callers and error handlers can tell initialization problems apart from
failures that are isolated and reported while watching continues.
"""

from typing import Any


class BaseError(Exception):
    """
    Base exception class for all configuration watcher errors.

    All custom exceptions in the package inherit from this base class
    to enable consistent error handling and logging.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        """
        Initialize the watcher error.

        Args:
            message: Human-readable error description
            error_code: Optional error code for programmatic handling
            context: Optional dictionary with error context information
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation including error code if present."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"context={self.context})"
        )


class ConfigurationError(BaseError):
    """Raised when there are configuration or settings issues."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        expected_type: str | None = None,
        actual_value: Any | None = None,
    ):
        context = {}
        if config_key:
            context["config_key"] = config_key
        if expected_type:
            context["expected_type"] = expected_type
        if actual_value is not None:
            context["actual_value"] = str(actual_value)

        super().__init__(message, error_code="CONFIG_ERROR", context=context)


class InitializationError(BaseError):
    """Raised when a watch session cannot be started."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        component: str | None = None,
        initialization_stage: str | None = None,
        underlying_error: Exception | None = None,
    ):
        context = {}
        if path:
            context["path"] = path
        if component:
            context["component"] = component
        if initialization_stage:
            context["initialization_stage"] = initialization_stage

        super().__init__(
            message,
            error_code="INITIALIZATION_ERROR",
            context=context,
            cause=underlying_error,
        )


class NotificationSourceError(BaseError):
    """Raised when the file notification source reports a failure while running."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        operation: str | None = None,
        underlying_error: Exception | None = None,
    ):
        context = {}
        if path:
            context["path"] = path
        if operation:
            context["operation"] = operation

        super().__init__(
            message,
            error_code="SOURCE_ERROR",
            context=context,
            cause=underlying_error,
        )


class ReaderError(BaseError):
    """Raised when the user-supplied configuration reader fails."""

    def __init__(
        self,
        message: str,
        reader: str | None = None,
        underlying_error: BaseException | None = None,
    ):
        context = {}
        if reader:
            context["reader"] = reader
        if underlying_error is not None:
            context["error_type"] = type(underlying_error).__name__

        super().__init__(message, error_code="READER_ERROR", context=context, cause=underlying_error)


class ShutdownError(BaseError):
    """Raised when a watch session fails to release its resources."""

    def __init__(
        self,
        message: str,
        component: str | None = None,
        shutdown_stage: str | None = None,
        underlying_error: Exception | None = None,
    ):
        context = {}
        if component:
            context["component"] = component
        if shutdown_stage:
            context["shutdown_stage"] = shutdown_stage

        super().__init__(
            message,
            error_code="SHUTDOWN_ERROR",
            context=context,
            cause=underlying_error,
        )
