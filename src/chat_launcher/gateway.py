"""Backend command gateway: protocol, settings model and HTTP binding."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, StrictBool, ValidationError

from .exceptions import BackendError, BackendUnavailableError

LOGGER = logging.getLogger(__name__)


class Settings(BaseModel):
    """Backend-owned launcher settings. Missing fields default to ``True``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    new_chat_default: StrictBool = True
    notifications_enabled: StrictBool = True

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Settings:
        """Build settings from a JSON object, treating ``null`` as missing.

        Raises ``pydantic.ValidationError`` when a present field is not a bool.
        """
        present = {key: value for key, value in payload.items() if value is not None}
        return cls.model_validate(present)


class BackendGateway(Protocol):
    """Commands exposed by the backend process."""

    async def submit_message(self, message: str, new_chat: bool) -> None: ...

    async def get_settings(self) -> Settings: ...

    async def save_settings(self, settings: Settings) -> None: ...

    async def hide_launcher(self) -> None: ...

    async def show_launcher(self) -> None: ...


class HttpBackendGateway:
    """Invoke backend commands as ``POST {base_url}/invoke/{command}``.

    The client applies its own request timeout; callers that need a tighter
    bound (such as message submission) race the call themselves.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _invoke(self, command: str, arguments: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._client.post(
                f"/invoke/{command}", json=arguments or {}
            )
        except httpx.HTTPError as exc:
            LOGGER.warning(
                "backend.unreachable",
                extra={
                    "event": "backend.unreachable",
                    "command": command,
                    "error_type": type(exc).__name__,
                },
            )
            raise BackendUnavailableError(
                command, f"Unable to reach backend at {self.base_url}."
            ) from exc

        if response.is_error:
            raise BackendError(command, self._error_reason(response))
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError(command, "Backend returned invalid JSON.") from exc

    @staticmethod
    def _error_reason(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), str):
            return body["error"]
        return f"HTTP {response.status_code}"

    async def submit_message(self, message: str, new_chat: bool) -> None:
        await self._invoke("submit_message", {"message": message, "new_chat": new_chat})

    async def get_settings(self) -> Settings:
        payload = await self._invoke("get_settings")
        if payload is None:
            return Settings()
        if not isinstance(payload, dict):
            raise BackendError("get_settings", "Settings payload must be an object.")
        try:
            return Settings.from_payload(payload)
        except ValidationError as exc:
            raise BackendError("get_settings", f"Invalid settings payload: {exc}") from exc

    async def save_settings(self, settings: Settings) -> None:
        await self._invoke("save_settings", {"settings": settings.model_dump()})

    async def hide_launcher(self) -> None:
        await self._invoke("hide_launcher")

    async def show_launcher(self) -> None:
        await self._invoke("show_launcher")
