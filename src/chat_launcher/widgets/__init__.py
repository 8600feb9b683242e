"""Launcher widgets."""

from .input_box import LauncherInputBox

__all__ = ["LauncherInputBox"]
