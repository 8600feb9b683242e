"""Submission state machine and outcome discriminants."""

from __future__ import annotations

from enum import Enum


class SubmissionState(str, Enum):
    """Lifecycle of the single in-flight submission."""

    IDLE = "IDLE"
    SUBMITTING = "SUBMITTING"


class SubmitOutcome(str, Enum):
    """Result of one ``submit()`` call."""

    SENT = "sent"
    BUSY = "busy"
    EMPTY = "empty"
    TOO_LONG = "too_long"
    TRANSPORT_ERROR = "transport_error"
    TIMEOUT = "timeout"

    @property
    def restores_input(self) -> bool:
        """True when the typed message went back into the input field."""
        return self in (SubmitOutcome.TRANSPORT_ERROR, SubmitOutcome.TIMEOUT)


class StateManager:
    """Guard submission transitions.

    All mutation happens on the event loop thread, so a plain check-and-set
    is atomic as long as no ``await`` separates the check from the set.
    """

    def __init__(self) -> None:
        self._state = SubmissionState.IDLE

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def is_submitting(self) -> bool:
        return self._state == SubmissionState.SUBMITTING

    def transition_if(
        self,
        expected_state: SubmissionState,
        new_state: SubmissionState,
    ) -> bool:
        """Transition only when current state matches expected state."""
        if self._state != expected_state:
            return False
        self._state = new_state
        return True

    def reset(self) -> None:
        """Return to IDLE; safe to call when already idle."""
        self._state = SubmissionState.IDLE
