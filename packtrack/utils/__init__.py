"""Utility helpers package."""

from packtrack.utils.exceptions import (
    PackTrackError,
    PushConfigurationError,
    RepositoryError,
    ValidationError,
)

__all__ = ["PackTrackError", "PushConfigurationError", "RepositoryError", "ValidationError"]
