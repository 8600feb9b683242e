"""Domain exception hierarchy for the chat launcher."""

from __future__ import annotations


class LauncherError(RuntimeError):
    """Base class for all launcher errors."""


class BackendError(LauncherError):
    """Raised when a backend command reports a failure."""

    def __init__(self, command: str, message: str) -> None:
        super().__init__(f"{command}: {message}")
        self.command = command
        self.reason = message


class BackendUnavailableError(BackendError):
    """Raised when the backend cannot be reached at all."""


class ConfigValidationError(LauncherError):
    """Raised when configuration cannot be validated safely."""
