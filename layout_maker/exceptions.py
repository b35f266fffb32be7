"""Custom exception hierarchy for the Layout Maker engine."""

from __future__ import annotations

from typing import Any


class LayoutMakerError(Exception):
    """Base exception for all Layout Maker errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(LayoutMakerError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(LayoutMakerError):
    """Base class for validation errors."""
    pass


class GeometryValidationError(ValidationError):
    """Raised when a mutation carries invalid geometry (non-positive size, non-finite coordinates)."""
    pass


class ElementNotFoundError(LayoutMakerError):
    """Raised when an element id does not exist in the active scene."""
    pass


class SceneNotFoundError(LayoutMakerError):
    """Raised when a scene/project id does not exist in the workspace."""
    pass


class ToolStateError(LayoutMakerError):
    """Raised when an intent does not apply to the current tool state."""
    pass


class PersistenceError(LayoutMakerError):
    """Base class for snapshot encoding/decoding errors."""
    pass


class MalformedSceneError(PersistenceError):
    """Raised when a persisted scene snapshot cannot be decoded."""
    pass


class StorageError(LayoutMakerError):
    """Raised when the durable key-value store fails."""
    pass


__all__ = [
    "LayoutMakerError",
    "ConfigurationError",
    "ValidationError",
    "GeometryValidationError",
    "ElementNotFoundError",
    "SceneNotFoundError",
    "ToolStateError",
    "PersistenceError",
    "MalformedSceneError",
    "StorageError",
]
