"""Launcher row: message field, new-chat toggle and submit button."""

from __future__ import annotations

from textual.containers import Horizontal
from textual.message import Message
from textual.widgets import Button, Input


class LauncherInputBox(Horizontal):
    """Single-line entry with the two affordances that act on it."""

    DEFAULT_CSS = """
    LauncherInputBox {
        height: auto;
    }
    LauncherInputBox #launcher_input {
        width: 1fr;
    }
    LauncherInputBox #new_chat_toggle, LauncherInputBox #submit_button {
        margin-left: 1;
        min-width: 10;
    }
    LauncherInputBox.-busy #launcher_input {
        border: tall $warning;
    }
    LauncherInputBox #launcher_input.-error {
        border: tall $error;
    }
    """

    class SubmitRequested(Message):
        """Posted when the user clicks the submit button."""

    class NewChatToggleRequested(Message):
        """Posted when the user clicks the new-chat toggle."""

    def __init__(self, placeholder: str = "", **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(**kwargs)
        self._initial_placeholder = placeholder

    def compose(self):  # type: ignore[override]
        yield Input(placeholder=self._initial_placeholder, id="launcher_input")
        yield Button("New chat", id="new_chat_toggle", variant="default")
        yield Button("Send", id="submit_button", variant="success")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Translate button clicks into launcher messages."""
        if event.button.id == "submit_button":
            event.stop()
            self.post_message(self.SubmitRequested())
        elif event.button.id == "new_chat_toggle":
            event.stop()
            self.post_message(self.NewChatToggleRequested())

    def set_new_chat_active(self, active: bool) -> None:
        toggle = self.query_one("#new_chat_toggle", Button)
        toggle.variant = "primary" if active else "default"
        toggle.set_class(active, "-active")

    def set_busy(self, busy: bool) -> None:
        self.set_class(busy, "-busy")
        self.query_one("#submit_button", Button).disabled = busy
