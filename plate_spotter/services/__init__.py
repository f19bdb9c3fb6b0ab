"""Service layer for catalog loading, collection tracking and images."""

from .catalog import CatalogService
from .config import ConfigurationService, ValidationResult
from .errors import (
    AppError,
    CapacityError,
    CatalogParseError,
    ConfigurationError,
    DuplicateError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    FileSystemError,
    GameNotFoundError,
    NetworkError,
    UserFriendlyError,
    ValidationError,
    get_error_service,
    handle_error,
)
from .filesystem import FileSystemService
from .game_manager import GameManagerService
from .http_client import HttpClientService
from .images import ImageSource, PlateImage, PlateImageCache, PlateImageService

__all__ = [
    "AppError",
    "CapacityError",
    "CatalogParseError",
    "CatalogService",
    "ConfigurationError",
    "ConfigurationService",
    "DuplicateError",
    "ErrorCategory",
    "ErrorHandlingService",
    "ErrorSeverity",
    "FileSystemError",
    "FileSystemService",
    "GameManagerService",
    "GameNotFoundError",
    "HttpClientService",
    "ImageSource",
    "NetworkError",
    "PlateImage",
    "PlateImageCache",
    "PlateImageService",
    "UserFriendlyError",
    "ValidationError",
    "ValidationResult",
    "get_error_service",
    "handle_error",
]
