"""Error handling for the Plate Spotter application.

This module provides:
- Exception classes for catalog, collection, file system and network failures
- User-friendly error messages with suggested actions
- A centralized error handling service with a bounded error history
"""

import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()


class ErrorCategory(Enum):
    """Categories of errors for classification and handling."""
    CATALOG = "catalog"
    CAPACITY = "capacity"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    FILE_SYSTEM = "file_system"
    NETWORK = "network"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    UNEXPECTED = "unexpected"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(frozen=True)
class UserFriendlyError:
    """User-facing error representation with suggested actions."""
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    suggested_actions: list[str]
    technical_details: str | None = None
    recoverable: bool = True


class AppError(Exception):
    """Base exception class for application errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNEXPECTED,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        suggested_actions: list[str] | None = None,
        technical_details: str | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.suggested_actions = suggested_actions or []
        self.technical_details = technical_details
        self.recoverable = recoverable

    def to_user_friendly(self) -> UserFriendlyError:
        """Convert to user-friendly error representation."""
        return UserFriendlyError(
            message=self.message,
            category=self.category,
            severity=self.severity,
            suggested_actions=self.suggested_actions,
            technical_details=self.technical_details,
            recoverable=self.recoverable,
        )


class CatalogParseError(AppError):
    """Raised when a plate catalog yields no usable rows or cannot be found."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        line: int | None = None,
    ) -> None:
        technical_details = None
        if source:
            technical_details = f"Source: {source}"
        if line is not None:
            technical_details = (technical_details or "") + f"\nLine: {line}"

        super().__init__(
            message=message,
            category=ErrorCategory.CATALOG,
            severity=ErrorSeverity.ERROR,
            suggested_actions=[
                "Check that the catalog has state, plate_title and plate_img columns",
                "Verify the catalog path in settings",
            ],
            technical_details=technical_details,
            recoverable=False,
        )
        self.source = source
        self.line = line


class CapacityError(AppError):
    """Raised when creating a game would exceed the configured maximum."""

    def __init__(self, max_games: int) -> None:
        super().__init__(
            message=f"You can have at most {max_games} games at a time.",
            category=ErrorCategory.CAPACITY,
            severity=ErrorSeverity.WARNING,
            suggested_actions=[
                "Delete a finished game to make room",
                "Keep collecting in an existing game",
            ],
            technical_details=f"max_games={max_games}",
        )
        self.max_games = max_games


class DuplicateError(AppError):
    """Raised by callers that treat an already collected plate as an error."""

    def __init__(self, region: str, title: str) -> None:
        super().__init__(
            message=f"'{title}' from {region} is already in this game.",
            category=ErrorCategory.DUPLICATE,
            severity=ErrorSeverity.WARNING,
            suggested_actions=["Pick a different plate", "Remove the plate first to log it again"],
            technical_details=f"Key: ({region}, {title})",
        )
        self.region = region
        self.title = title


class GameNotFoundError(AppError):
    """Raised when a game id does not match any saved game."""

    def __init__(self, game_id: str) -> None:
        super().__init__(
            message="That game no longer exists.",
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.WARNING,
            suggested_actions=["Return to the games list and pick another game"],
            technical_details=f"Game: {game_id}",
        )
        self.game_id = game_id


class FileSystemError(AppError):
    """Exception for file system-related errors."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        path: str | None = None,
    ) -> None:
        if isinstance(original_error, PermissionError):
            suggested_actions = [
                "Check file/directory permissions",
                "Choose a different data directory",
            ]
        elif isinstance(original_error, FileNotFoundError):
            suggested_actions = [
                "Verify the file path is correct",
                "Check if the file was moved or deleted",
            ]
        else:
            suggested_actions = [
                "Check the file path and permissions",
                "Ensure sufficient disk space",
            ]

        technical_details = None
        if original_error:
            technical_details = f"{type(original_error).__name__}: {original_error}"
        if path:
            technical_details = f"Path: {path}" + (f"\n{technical_details}" if technical_details else "")

        super().__init__(
            message=message,
            category=ErrorCategory.FILE_SYSTEM,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
        )
        self.original_error = original_error
        self.path = path


class NetworkError(AppError):
    """Exception for network-related errors while fetching plate images."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        suggested_actions = [
            "Check your internet connection",
            "Verify the image base URL in settings",
        ]
        if status_code == 404:
            suggested_actions = ["The image may not exist on the server"]
        elif status_code is not None and status_code >= 500:
            suggested_actions = ["The image server is having issues", "Try again later"]

        technical_details = None
        if original_error:
            technical_details = f"{type(original_error).__name__}: {original_error}"
        if url:
            technical_details = f"URL: {url}" + (f"\n{technical_details}" if technical_details else "")
        if status_code:
            technical_details = f"Status: {status_code}" + (f"\n{technical_details}" if technical_details else "")

        super().__init__(
            message=message,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.WARNING,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
        )
        self.original_error = original_error
        self.url = url
        self.status_code = status_code


class ValidationError(AppError):
    """Exception for invalid input."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        technical_details = None
        if field:
            technical_details = f"Field: {field}"
        if value is not None:
            technical_details = (technical_details or "") + f"\nValue: {str(value)[:100]}"

        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.WARNING,
            suggested_actions=["Review the input requirements"],
            technical_details=technical_details,
        )
        self.field = field
        self.value = value


class ConfigurationError(AppError):
    """Exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        expected: str | None = None,
    ) -> None:
        suggested_actions = [
            "Check the configuration settings",
            "Reset to default values if needed",
        ]
        if expected:
            suggested_actions.append(f"Expected: {expected}")

        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details=f"Setting: {setting}" if setting else None,
        )
        self.setting = setting
        self.expected = expected


class ErrorHandlingService:
    """Centralized error handling service.

    Converts arbitrary exceptions into `AppError` instances, logs the
    technical details and keeps a bounded history for the UI.
    """

    def __init__(self, max_history_size: int = 100) -> None:
        self._error_history: list[tuple[float, AppError]] = []
        self._max_history_size = max_history_size
        log.info("Error handling service initialized")

    def handle_error(
        self,
        error: Exception,
        operation: str,
        component: str,
        context: dict[str, Any] | None = None,
    ) -> UserFriendlyError:
        """Handle an error and return a user-friendly representation.

        Args:
            error: The exception that occurred
            operation: The operation being performed
            component: The component where the error occurred
            context: Additional context information

        Returns:
            User-friendly error representation
        """
        app_error = self._convert_to_app_error(error, context)
        self._log_error(app_error, operation, component, context)

        self._error_history.append((time.time(), app_error))
        if len(self._error_history) > self._max_history_size:
            self._error_history.pop(0)

        return app_error.to_user_friendly()

    def _convert_to_app_error(
        self,
        error: Exception,
        context: dict[str, Any] | None,
    ) -> AppError:
        """Convert a standard exception to an AppError."""
        context = context or {}

        if isinstance(error, AppError):
            return error

        if isinstance(error, httpx.HTTPStatusError):
            return NetworkError(
                message="The image server returned an error.",
                original_error=error,
                url=str(error.request.url) if error.request else None,
                status_code=error.response.status_code,
            )
        if isinstance(error, httpx.TimeoutException):
            return NetworkError(
                message="Fetching the plate image timed out.",
                original_error=error,
                url=context.get("url"),
            )
        if isinstance(error, httpx.RequestError):
            return NetworkError(
                message="Unable to reach the image server.",
                original_error=error,
                url=context.get("url"),
            )

        if isinstance(error, PermissionError):
            return FileSystemError(
                message="Permission denied while accessing saved data.",
                original_error=error,
                path=context.get("path"),
            )
        if isinstance(error, FileNotFoundError):
            return FileSystemError(
                message="The file or directory was not found.",
                original_error=error,
                path=context.get("path"),
            )
        if isinstance(error, OSError):
            return FileSystemError(
                message=f"A file system error occurred: {error}",
                original_error=error,
                path=context.get("path"),
            )

        # JSONDecodeError is a ValueError, check it first
        if isinstance(error, json.JSONDecodeError):
            return ValidationError(
                message="Saved data is not valid JSON.",
                field="json_content",
            )
        if isinstance(error, ValueError):
            return ValidationError(
                message=str(error),
                field=context.get("field"),
                value=context.get("value"),
            )

        return AppError(
            message="An unexpected error occurred. Please try again.",
            technical_details=f"{type(error).__name__}: {error}",
        )

    def _log_error(
        self,
        error: AppError,
        operation: str,
        component: str,
        context: dict[str, Any] | None,
    ) -> None:
        log_method = log.warning if error.severity == ErrorSeverity.WARNING else log.error
        log_method(
            "Error occurred",
            error_message=error.message,
            category=error.category.value,
            severity=error.severity.value,
            operation=operation,
            component=component,
            technical_details=error.technical_details,
            recoverable=error.recoverable,
            context=context,
        )

    def get_recent_errors(self, count: int = 10) -> list[AppError]:
        """Return up to `count` most recent errors, oldest first."""
        recent = self._error_history[-count:] if count > 0 else []
        return [error for _, error in recent]

    def get_error_count_by_category(self) -> dict[ErrorCategory, int]:
        counts: dict[ErrorCategory, int] = {}
        for _, error in self._error_history:
            counts[error.category] = counts.get(error.category, 0) + 1
        return counts

    def create_user_message(
        self,
        error: UserFriendlyError,
        include_suggestions: bool = True,
    ) -> str:
        """Format an error for display, with up to three suggested actions."""
        parts = [error.message]

        if include_suggestions and error.suggested_actions:
            parts.append("\nSuggested actions:")
            for action in error.suggested_actions[:3]:
                parts.append(f"  • {action}")

        return "\n".join(parts)


_error_service: ErrorHandlingService | None = None


def get_error_service() -> ErrorHandlingService:
    """Get the global error handling service instance."""
    global _error_service
    if _error_service is None:
        _error_service = ErrorHandlingService()
    return _error_service


def handle_error(
    error: Exception,
    operation: str,
    component: str,
    context: dict[str, Any] | None = None,
) -> UserFriendlyError:
    """Handle an error using the global error service."""
    return get_error_service().handle_error(error, operation, component, context)
