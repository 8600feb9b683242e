"""Submission controller: validation, in-flight guard, timeout race and UI reconciliation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
from typing import Any, Protocol

from .events.bus import Event, EventBus
from .events.domain import INJECT_RESULT, LAUNCHER_SHOWN, SETTINGS_CHANGED, InjectResult
from .exceptions import BackendError
from .gateway import BackendGateway
from .settings_sync import SettingsSync
from .state import StateManager, SubmissionState, SubmitOutcome
from .task_manager import RaceOutcome, TaskManager

LOGGER = logging.getLogger(__name__)

FOCUS_TIMER = "focus"
SUBMIT_TIMER = "submit_timeout"
ERROR_TIMER = "error_revert"
SETTINGS_RELOAD = "settings_reload"


class LauncherView(Protocol):
    """The UI surface the controller drives."""

    def get_input(self) -> str: ...

    def set_input(self, text: str) -> None: ...

    def set_busy(self, busy: bool) -> None: ...

    def set_placeholder(self, text: str) -> None: ...

    def set_error(self, active: bool) -> None: ...

    def set_new_chat_active(self, active: bool) -> None: ...

    def focus_input(self) -> None: ...

    def select_input(self) -> None: ...

    def input_is_active(self) -> bool: ...


@dataclass(frozen=True)
class ControllerOptions:
    """Tunables for :class:`SubmissionController`, in characters and seconds."""

    max_length: int = 5000
    submit_timeout: float = 10.0
    focus_debounce: float = 0.1
    error_revert: float = 2.5
    submit_key: str = "enter"
    cancel_key: str = "escape"
    toggle_key: str = "ctrl+n"
    placeholder_new_chat: str = "Ask anything in a new chat..."
    placeholder_continue: str = "Continue the current chat..."
    delivery_error_prefix: str = "Delivery failed:"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> ControllerOptions:
        submission = config["submission"]
        keybinds = config["keybinds"]
        ui = config["ui"]
        return cls(
            max_length=int(submission["max_length"]),
            submit_timeout=float(submission["timeout_seconds"]),
            focus_debounce=float(submission["focus_debounce_seconds"]),
            error_revert=float(submission["error_revert_seconds"]),
            cancel_key=str(keybinds["cancel"]),
            toggle_key=str(keybinds["toggle_new_chat"]),
            placeholder_new_chat=str(ui["placeholder_new_chat"]),
            placeholder_continue=str(ui["placeholder_continue"]),
            delivery_error_prefix=str(ui["delivery_error_prefix"]),
        )


class SubmissionController:
    """Own the single in-flight submission and the input field's transient state.

    ``submit()`` is guarded rather than queued: while a submission is in
    flight every further trigger is dropped. The guard is checked and set
    before the first ``await``, which is what makes it race-free on a single
    event loop.
    """

    def __init__(
        self,
        view: LauncherView,
        gateway: BackendGateway,
        settings: SettingsSync,
        tasks: TaskManager | None = None,
        options: ControllerOptions | None = None,
    ) -> None:
        self._view = view
        self._gateway = gateway
        self._settings = settings
        self._tasks = tasks or TaskManager()
        self.options = options or ControllerOptions()
        self.state = StateManager()
        self._error_active = False
        settings.on_change(self._on_mode_changed)

    @property
    def placeholder(self) -> str:
        """Placeholder matching the current new-chat mode."""
        if self._settings.new_chat_mode:
            return self.options.placeholder_new_chat
        return self.options.placeholder_continue

    @property
    def error_active(self) -> bool:
        return self._error_active

    def attach(self, bus: EventBus) -> None:
        """Subscribe to the backend push topics this controller reacts to."""
        bus.subscribe(LAUNCHER_SHOWN, self._on_launcher_shown_event)
        bus.subscribe(SETTINGS_CHANGED, self._on_settings_changed_event)
        bus.subscribe(INJECT_RESULT, self._on_inject_result_event)

    def sync_view(self) -> None:
        """Push the current mode into the toggle and placeholder."""
        self._view.set_new_chat_active(self._settings.new_chat_mode)
        if not self._error_active:
            self._view.set_placeholder(self.placeholder)

    # Keys

    def handle_key(self, key: str) -> bool:
        """Route a key press; return True when the key was consumed."""
        try:
            if key == self.options.cancel_key:
                self._tasks.spawn(self._hide_launcher())
                return True
            if key == self.options.toggle_key:
                mode = self._settings.toggle()
                LOGGER.info(
                    "launcher.new_chat.toggled",
                    extra={"event": "launcher.new_chat.toggled", "new_chat": mode},
                )
                return True
            if key == self.options.submit_key:
                self._tasks.spawn(self.submit())
                return True
        except Exception:
            LOGGER.exception(
                "launcher.key.failed",
                extra={"event": "launcher.key.failed", "key": key},
            )
        return False

    async def _hide_launcher(self) -> None:
        try:
            await self._gateway.hide_launcher()
        except BackendError as exc:
            LOGGER.warning(
                "launcher.hide_failed",
                extra={"event": "launcher.hide_failed", "error": str(exc)},
            )

    # Submission

    async def submit(self) -> SubmitOutcome:
        """Validate the input and dispatch it, unless a submission is in flight."""
        if self.state.is_submitting:
            LOGGER.debug("launcher.submit.dropped", extra={"event": "launcher.submit.dropped"})
            return SubmitOutcome.BUSY

        message = self._view.get_input().strip()
        if not message:
            return SubmitOutcome.EMPTY
        if len(message) > self.options.max_length:
            LOGGER.warning(
                "launcher.submit.too_long",
                extra={
                    "event": "launcher.submit.too_long",
                    "length": len(message),
                    "max_length": self.options.max_length,
                },
            )
            return SubmitOutcome.TOO_LONG

        self.state.transition_if(SubmissionState.IDLE, SubmissionState.SUBMITTING)
        new_chat = self._settings.new_chat_mode
        try:
            self._view.set_busy(True)
            self._view.set_input("")
            LOGGER.info(
                "launcher.submit.started",
                extra={
                    "event": "launcher.submit.started",
                    "length": len(message),
                    "new_chat": new_chat,
                },
            )
            result = await self._tasks.race(
                SUBMIT_TIMER,
                self._gateway.submit_message(message, new_chat),
                self.options.submit_timeout,
            )
            if result.outcome is RaceOutcome.COMPLETED:
                LOGGER.info("launcher.submit.sent", extra={"event": "launcher.submit.sent"})
                return SubmitOutcome.SENT

            if result.outcome is RaceOutcome.TIMED_OUT:
                outcome = SubmitOutcome.TIMEOUT
                reason = f"no response within {self.options.submit_timeout}s"
            else:
                outcome = SubmitOutcome.TRANSPORT_ERROR
                reason = str(result.error)
            self._view.set_input(message)
            LOGGER.warning(
                "launcher.submit.failed",
                extra={
                    "event": "launcher.submit.failed",
                    "kind": outcome.value,
                    "error_type": type(result.error).__name__ if result.error else None,
                    "reason": reason,
                },
            )
            return outcome
        finally:
            self._view.set_busy(False)
            self.state.reset()

    # Delivery errors

    async def show_delivery_error(self, message: str) -> bool:
        """Re-show the overlay and flash a self-clearing error; False if it stayed hidden."""
        try:
            await self._gateway.show_launcher()
        except BackendError as exc:
            LOGGER.warning(
                "launcher.delivery_error.show_failed",
                extra={
                    "event": "launcher.delivery_error.show_failed",
                    "error": str(exc),
                    "delivery_error": message,
                },
            )
            return False

        LOGGER.warning(
            "launcher.delivery_error",
            extra={"event": "launcher.delivery_error", "delivery_error": message},
        )
        self._error_active = True
        self._view.set_placeholder(f"{self.options.delivery_error_prefix} {message}")
        self._view.set_error(True)
        self._tasks.schedule(ERROR_TIMER, self.options.error_revert, self._clear_error)
        return True

    def _clear_error(self) -> None:
        self._error_active = False
        self._view.set_error(False)
        self._view.set_placeholder(self.placeholder)

    # Focus

    def on_window_focus(self) -> None:
        """Debounce bursts of focus-gained events into one focus pass."""
        self._tasks.schedule(FOCUS_TIMER, self.options.focus_debounce, self._apply_focus)

    def _apply_focus(self) -> None:
        self._view.focus_input()
        if self._view.get_input() and self._view.input_is_active():
            self._view.select_input()

    # Push events

    def on_launcher_shown(self) -> None:
        """Start a fresh session: empty field, no error, settings refetched."""
        self._tasks.cancel(ERROR_TIMER)
        self._error_active = False
        self._view.set_error(False)
        self._view.set_input("")
        self._view.set_placeholder(self.placeholder)
        self._view.focus_input()
        self._tasks.spawn(self._settings.load(), name=SETTINGS_RELOAD)

    def on_inject_result(self, payload: Mapping[str, Any]) -> None:
        result = InjectResult.from_payload(payload)
        if result is None:
            LOGGER.warning(
                "launcher.inject_result.ignored",
                extra={"event": "launcher.inject_result.ignored"},
            )
            return
        if result.success:
            LOGGER.info(
                "launcher.inject_result.delivered",
                extra={"event": "launcher.inject_result.delivered"},
            )
            return
        if not result.is_delivery_failure:
            LOGGER.warning(
                "launcher.inject_result.failed_without_reason",
                extra={"event": "launcher.inject_result.failed_without_reason"},
            )
            return
        self._tasks.spawn(self.show_delivery_error(result.error or ""))

    def _on_launcher_shown_event(self, _event: Event) -> None:
        self.on_launcher_shown()

    def _on_settings_changed_event(self, event: Event) -> None:
        self._settings.apply_push(event.data)

    def _on_inject_result_event(self, event: Event) -> None:
        self.on_inject_result(event.data)

    def _on_mode_changed(self, new_chat: bool) -> None:
        self._view.set_new_chat_active(new_chat)
        # The error text owns the placeholder until it reverts.
        if not self._error_active:
            self._view.set_placeholder(self.placeholder)
