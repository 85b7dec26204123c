"""Custom exception classes for the combo engine."""

from typing import Any


class ComboEngineError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Validation Errors
class ValidationError(ComboEngineError):
    """Caller-supplied metadata or options failed validation."""

    pass


class MissingTitleError(ValidationError):
    """The title field is mandatory."""

    def __init__(self) -> None:
        super().__init__("App title is required for combo analysis", {"field": "title"})


class InvalidWeightsError(ValidationError):
    """Scoring weights cannot be normalized."""

    def __init__(self, weights: dict[str, float]) -> None:
        super().__init__("Scoring weights must contain at least one positive value", {"weights": weights})


# Configuration Errors
class ConfigurationError(ComboEngineError):
    """Engine configuration is inconsistent."""

    pass
