"""Custom exception classes."""
from typing import Any, Dict, Optional


class PackTrackError(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(PackTrackError):
    """Malformed reminder or subscription input."""
    pass


class RepositoryError(PackTrackError):
    """Persistence layer failures."""
    pass


class PushConfigurationError(PackTrackError):
    """Web Push cannot be used with the current settings."""
    pass
