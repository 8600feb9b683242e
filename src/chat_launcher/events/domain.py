from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

LAUNCHER_SHOWN = "launcher-shown"
SETTINGS_CHANGED = "settings-changed"
INJECT_RESULT = "inject-result"
RESPONSE_COMPLETE = "response-complete"

TOPICS: frozenset[str] = frozenset(
    {LAUNCHER_SHOWN, SETTINGS_CHANGED, INJECT_RESULT, RESPONSE_COMPLETE}
)


@dataclass(frozen=True)
class InjectResult:
    success: bool
    error: str | None = None

    @property
    def is_delivery_failure(self) -> bool:
        return not self.success and bool(self.error)

    @classmethod
    def from_payload(cls, payload: Any) -> InjectResult | None:
        """Parse an ``inject-result`` payload, or return None when malformed."""
        if not isinstance(payload, Mapping):
            return None
        success = payload.get("success")
        if not isinstance(success, bool):
            return None
        error = payload.get("error")
        if error is not None and not isinstance(error, str):
            return None
        return cls(success=success, error=error)
