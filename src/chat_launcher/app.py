"""Textual quick-launcher overlay that forwards messages to the chat backend."""

from __future__ import annotations

import logging
from pathlib import Path
import sys
from typing import Any

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.events import AppFocus, Key
from textual.widgets import Input

from .config import load_config
from .controller import SETTINGS_RELOAD, ControllerOptions, SubmissionController
from .events.bus import Event, EventBus
from .events.domain import RESPONSE_COMPLETE
from .events.stream import EventStreamListener
from .gateway import BackendGateway, HttpBackendGateway
from .logging_utils import configure_logging
from .screens import SettingsScreen
from .settings_sync import SettingsSync
from .task_manager import TaskManager
from .widgets.input_box import LauncherInputBox

LOGGER = logging.getLogger(__name__)

EVENT_STREAM_TASK = "event_stream"


class LauncherApp(App[None]):
    """Single-line launcher. The app is also the controller's view."""

    CSS = """
    Screen {
        layout: vertical;
        background: $background;
    }

    #launcher-root {
        height: auto;
        padding: 1 1;
        background: $surface;
        border: round $panel;
    }
    """

    def __init__(
        self,
        config: dict[str, dict[str, Any]] | None = None,
        gateway: BackendGateway | None = None,
        bus: EventBus | None = None,
        config_path: Path | None = None,
    ) -> None:
        super().__init__()
        self.config = config or load_config(config_path)
        self.title = str(self.config["app"]["title"])
        configure_logging(self.config["logging"])
        LOGGER.info(
            "app.python",
            extra={
                "event": "app.python",
                "executable": sys.executable,
                "version": sys.version.split()[0],
            },
        )

        backend_cfg = self.config["backend"]
        self._owns_gateway = gateway is None
        self.gateway: BackendGateway = gateway or HttpBackendGateway(
            str(backend_cfg["url"]),
            timeout=float(backend_cfg["request_timeout_seconds"]),
        )
        self.event_bus = bus or EventBus()
        self._task_manager = TaskManager()
        self.settings_sync = SettingsSync(self.gateway)
        self.controller = SubmissionController(
            self,
            self.gateway,
            self.settings_sync,
            self._task_manager,
            ControllerOptions.from_config(self.config),
        )
        self.controller.attach(self.event_bus)
        self.event_bus.subscribe(RESPONSE_COMPLETE, self._on_response_complete)

        # Cached widget refs, populated in on_mount().
        self._w_input: Input | None = None
        self._w_box: LauncherInputBox | None = None

    def compose(self) -> ComposeResult:
        with Container(id="launcher-root"):
            yield LauncherInputBox(placeholder=self.controller.placeholder, id="launcher_box")

    async def on_mount(self) -> None:
        self._w_box = self.query_one("#launcher_box", LauncherInputBox)
        self._w_input = self.query_one("#launcher_input", Input)
        self.controller.sync_view()
        self._w_input.focus()
        self._task_manager.spawn(self.settings_sync.load(), name=SETTINGS_RELOAD)

        backend_cfg = self.config["backend"]
        if backend_cfg["event_stream"] and isinstance(self.gateway, HttpBackendGateway):
            listener = EventStreamListener(
                self.gateway.client,
                self.event_bus,
                reconnect_delay=float(backend_cfg["reconnect_delay_seconds"]),
            )
            self._task_manager.spawn(listener.run(), name=EVENT_STREAM_TASK)
        LOGGER.info("app.mounted", extra={"event": "app.mounted"})

    async def on_unmount(self) -> None:
        await self._task_manager.cancel_all()
        if self._owns_gateway and isinstance(self.gateway, HttpBackendGateway):
            await self.gateway.aclose()

    # LauncherView

    def _input(self) -> Input:
        return self._w_input or self.query_one("#launcher_input", Input)

    def _box(self) -> LauncherInputBox:
        return self._w_box or self.query_one("#launcher_box", LauncherInputBox)

    def get_input(self) -> str:
        return self._input().value

    def set_input(self, text: str) -> None:
        input_widget = self._input()
        input_widget.value = text
        input_widget.cursor_position = len(text)

    def set_busy(self, busy: bool) -> None:
        self._box().set_busy(busy)
        self.sub_title = "Sending..." if busy else ""

    def set_placeholder(self, text: str) -> None:
        self._input().placeholder = text

    def set_error(self, active: bool) -> None:
        self._input().set_class(active, "-error")

    def set_new_chat_active(self, active: bool) -> None:
        self._box().set_new_chat_active(active)

    def focus_input(self) -> None:
        self._input().focus()

    def select_input(self) -> None:
        self._input().action_select_all()

    def input_is_active(self) -> bool:
        return self.focused is self._input()

    # Input routing

    def on_key(self, event: Key) -> None:
        """Route launcher keys while no modal screen is open."""
        if len(self.screen_stack) > 1:
            return
        # Plain enter reaches us as Input.Submitted.
        if event.key == "enter":
            return
        if self.controller.handle_key(event.key):
            event.stop()
            event.prevent_default()
            return
        if event.key == self.config["keybinds"]["open_settings"]:
            event.stop()
            self.action_open_settings()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "launcher_input":
            event.stop()
            self.controller.handle_key("enter")

    def on_launcher_input_box_submit_requested(
        self, _event: LauncherInputBox.SubmitRequested
    ) -> None:
        self._task_manager.spawn(self.controller.submit())

    def on_launcher_input_box_new_chat_toggle_requested(
        self, _event: LauncherInputBox.NewChatToggleRequested
    ) -> None:
        self.settings_sync.toggle()

    def on_app_focus(self, _event: AppFocus) -> None:
        self.controller.on_window_focus()

    def action_open_settings(self) -> None:
        self.push_screen(SettingsScreen(self.gateway))

    def _on_response_complete(self, _event: Event) -> None:
        if self.settings_sync.notifications_enabled:
            self.notify(str(self.config["ui"]["notify_on_response"]))
