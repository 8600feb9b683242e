"""Modal settings page for the launcher."""

from __future__ import annotations

import logging
from typing import Any

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Checkbox, Static

from .exceptions import BackendError
from .gateway import BackendGateway, Settings

LOGGER = logging.getLogger(__name__)


class SettingsScreen(ModalScreen[None]):
    """Edit backend settings; every change is saved immediately.

    The backend answers a save with a ``settings-changed`` push, so the
    launcher itself learns about the change through the event bus.
    """

    CSS = """
    SettingsScreen {
        align: center middle;
    }

    #settings-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    #settings-title {
        padding-bottom: 1;
        text-style: bold;
    }

    #settings-help {
        padding-top: 1;
    }
    """

    def __init__(self, gateway: BackendGateway) -> None:
        super().__init__()
        self._gateway = gateway

    def compose(self) -> ComposeResult:
        with Container(id="settings-dialog"):
            yield Static("Settings", id="settings-title")
            yield Checkbox("Start a new chat by default", True, id="new-chat-default")
            yield Checkbox(
                "Notify when a response is ready", True, id="notifications-enabled"
            )
            yield Static("Space to toggle | Esc to close", id="settings-help")

    async def on_mount(self) -> None:
        self.query_one("#new-chat-default", Checkbox).focus()
        await self.load_settings()

    def current_settings(self) -> Settings:
        return Settings(
            new_chat_default=self.query_one("#new-chat-default", Checkbox).value,
            notifications_enabled=self.query_one("#notifications-enabled", Checkbox).value,
        )

    async def load_settings(self) -> Settings:
        """Populate the checkboxes from the backend; keep them as-is on failure."""
        try:
            settings = await self._gateway.get_settings()
        except BackendError as exc:
            LOGGER.warning(
                "settings_page.load_failed",
                extra={"event": "settings_page.load_failed", "error": str(exc)},
            )
            return self.current_settings()
        with self.prevent(Checkbox.Changed):
            self.query_one("#new-chat-default", Checkbox).value = settings.new_chat_default
            self.query_one(
                "#notifications-enabled", Checkbox
            ).value = settings.notifications_enabled
        return settings

    async def save_settings(self) -> bool:
        settings = self.current_settings()
        try:
            await self._gateway.save_settings(settings)
        except BackendError as exc:
            LOGGER.warning(
                "settings_page.save_failed",
                extra={"event": "settings_page.save_failed", "error": str(exc)},
            )
            return False
        LOGGER.info(
            "settings_page.saved",
            extra={"event": "settings_page.saved", **settings.model_dump()},
        )
        return True

    async def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        event.stop()
        await self.save_settings()

    def on_key(self, event: Any) -> None:  # noqa: ANN401
        if str(getattr(event, "key", "")).lower() == "escape":
            event.stop()
            self.dismiss(None)
