"""Top-level package for chat-launcher."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import LauncherApp
    from .config import ensure_config_dir, load_config
    from .controller import ControllerOptions, SubmissionController
    from .exceptions import (
        BackendError,
        BackendUnavailableError,
        ConfigValidationError,
        LauncherError,
    )
    from .gateway import HttpBackendGateway, Settings
    from .settings_sync import SettingsSync
    from .state import SubmissionState, SubmitOutcome

__all__ = [
    "BackendError",
    "BackendUnavailableError",
    "ConfigValidationError",
    "ControllerOptions",
    "HttpBackendGateway",
    "LauncherApp",
    "LauncherError",
    "Settings",
    "SettingsSync",
    "SubmissionController",
    "SubmissionState",
    "SubmitOutcome",
    "ensure_config_dir",
    "load_config",
]

_LAZY_EXPORTS: dict[str, str] = {
    "LauncherApp": ".app",
    "ensure_config_dir": ".config",
    "load_config": ".config",
    "ControllerOptions": ".controller",
    "SubmissionController": ".controller",
    "BackendError": ".exceptions",
    "BackendUnavailableError": ".exceptions",
    "ConfigValidationError": ".exceptions",
    "LauncherError": ".exceptions",
    "HttpBackendGateway": ".gateway",
    "Settings": ".gateway",
    "SettingsSync": ".settings_sync",
    "SubmissionState": ".state",
    "SubmitOutcome": ".state",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols so the UI stack loads only when it is used."""
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
