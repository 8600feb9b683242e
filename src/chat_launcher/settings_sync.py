"""Local view of backend settings and the new-chat mode flag."""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictBool, ValidationError

from .exceptions import BackendError
from .gateway import BackendGateway, Settings

LOGGER = logging.getLogger(__name__)

ModeListener = Callable[[bool], Any]


class SettingsPush(BaseModel):
    """Shape of a ``settings-changed`` payload."""

    model_config = ConfigDict(extra="ignore")

    new_chat_default: StrictBool
    notifications_enabled: StrictBool | None = None


class SettingsSync:
    """Cache backend settings and own the new-chat mode.

    The mode has three writers: the user toggle, a ``settings-changed``
    push and a reload. The last writer wins.
    """

    def __init__(self, gateway: BackendGateway) -> None:
        self._gateway = gateway
        self._settings = Settings()
        self._new_chat_mode = self._settings.new_chat_default
        self._listeners: list[ModeListener] = []

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def new_chat_mode(self) -> bool:
        return self._new_chat_mode

    @property
    def notifications_enabled(self) -> bool:
        return self._settings.notifications_enabled

    def on_change(self, callback: ModeListener) -> None:
        """Register a callback invoked with the new mode after every write."""
        self._listeners.append(callback)

    async def load(self) -> bool:
        """Fetch settings from the backend; keep current values on failure."""
        try:
            settings = await self._gateway.get_settings()
        except BackendError as exc:
            LOGGER.warning(
                "settings.load_failed",
                extra={
                    "event": "settings.load_failed",
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            return False
        self._settings = settings
        LOGGER.info(
            "settings.loaded",
            extra={
                "event": "settings.loaded",
                "new_chat_default": settings.new_chat_default,
                "notifications_enabled": settings.notifications_enabled,
            },
        )
        self._set_mode(settings.new_chat_default)
        return True

    def apply_push(self, payload: Mapping[str, Any]) -> bool:
        """Apply a ``settings-changed`` payload; malformed ones are ignored whole."""
        try:
            push = SettingsPush.model_validate(dict(payload))
        except (TypeError, ValueError, ValidationError):
            LOGGER.warning(
                "settings.push_ignored",
                extra={"event": "settings.push_ignored"},
            )
            return False

        update: dict[str, bool] = {"new_chat_default": push.new_chat_default}
        if push.notifications_enabled is not None:
            update["notifications_enabled"] = push.notifications_enabled
        self._settings = self._settings.model_copy(update=update)
        self._set_mode(push.new_chat_default)
        return True

    def toggle(self) -> bool:
        """Flip the new-chat mode locally and return the new value."""
        self._set_mode(not self._new_chat_mode)
        return self._new_chat_mode

    def _set_mode(self, value: bool) -> None:
        self._new_chat_mode = value
        for callback in list(self._listeners):
            try:
                callback(value)
            except Exception as exc:
                LOGGER.error(
                    "settings.listener_failed",
                    extra={
                        "event": "settings.listener_failed",
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                )
