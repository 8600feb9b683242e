"""Tests for the HTTP backend gateway."""

from __future__ import annotations

import json
import unittest

import httpx
from pydantic import ValidationError

from chat_launcher.exceptions import BackendError, BackendUnavailableError
from chat_launcher.gateway import HttpBackendGateway, Settings


class _Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, responses: dict[str, httpx.Response] | None = None) -> None:
        self.requests: list[tuple[str, dict]] = []
        self.responses = responses or {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else {}
        self.requests.append((request.url.path, body))
        command = request.url.path.rsplit("/", 1)[-1]
        return self.responses.get(command, httpx.Response(204))


def _gateway(handler) -> HttpBackendGateway:
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://backend.test"
    )
    return HttpBackendGateway("http://backend.test", client=client)


class SettingsModelTests(unittest.TestCase):
    def test_missing_fields_default_to_true(self) -> None:
        settings = Settings.from_payload({})
        self.assertTrue(settings.new_chat_default)
        self.assertTrue(settings.notifications_enabled)

    def test_null_is_treated_as_missing(self) -> None:
        settings = Settings.from_payload(
            {"new_chat_default": None, "notifications_enabled": False}
        )
        self.assertTrue(settings.new_chat_default)
        self.assertFalse(settings.notifications_enabled)

    def test_non_bool_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings.from_payload({"new_chat_default": "yes"})
        with self.assertRaises(ValidationError):
            Settings.from_payload({"notifications_enabled": 1})


class HttpBackendGatewayTests(unittest.IsolatedAsyncioTestCase):
    """Validate command encoding and error mapping."""

    async def test_submit_message_posts_message_and_mode(self) -> None:
        recorder = _Recorder()
        gateway = _gateway(recorder)
        await gateway.submit_message("hello", False)
        await gateway.aclose()
        self.assertEqual(
            recorder.requests,
            [("/invoke/submit_message", {"message": "hello", "new_chat": False})],
        )

    async def test_launcher_visibility_commands(self) -> None:
        recorder = _Recorder()
        gateway = _gateway(recorder)
        await gateway.hide_launcher()
        await gateway.show_launcher()
        await gateway.aclose()
        self.assertEqual(
            [path for path, _ in recorder.requests],
            ["/invoke/hide_launcher", "/invoke/show_launcher"],
        )

    async def test_get_settings_parses_payload(self) -> None:
        recorder = _Recorder(
            {
                "get_settings": httpx.Response(
                    200, json={"new_chat_default": False, "theme": "dark"}
                )
            }
        )
        gateway = _gateway(recorder)
        settings = await gateway.get_settings()
        await gateway.aclose()
        self.assertFalse(settings.new_chat_default)
        self.assertTrue(settings.notifications_enabled)

    async def test_get_settings_rejects_malformed_payload(self) -> None:
        for response in (
            httpx.Response(200, json=["not", "an", "object"]),
            httpx.Response(200, json={"new_chat_default": "no"}),
            httpx.Response(200, content=b"{oops"),
        ):
            gateway = _gateway(_Recorder({"get_settings": response}))
            with self.assertRaises(BackendError):
                await gateway.get_settings()
            await gateway.aclose()

    async def test_save_settings_sends_full_object(self) -> None:
        recorder = _Recorder()
        gateway = _gateway(recorder)
        await gateway.save_settings(
            Settings(new_chat_default=False, notifications_enabled=True)
        )
        await gateway.aclose()
        self.assertEqual(
            recorder.requests,
            [
                (
                    "/invoke/save_settings",
                    {
                        "settings": {
                            "new_chat_default": False,
                            "notifications_enabled": True,
                        }
                    },
                )
            ],
        )

    async def test_error_status_maps_to_backend_error(self) -> None:
        gateway = _gateway(
            _Recorder(
                {
                    "submit_message": httpx.Response(
                        500, json={"error": "chat window not found"}
                    )
                }
            )
        )
        with self.assertRaises(BackendError) as ctx:
            await gateway.submit_message("hi", True)
        await gateway.aclose()
        self.assertEqual(ctx.exception.command, "submit_message")
        self.assertEqual(ctx.exception.reason, "chat window not found")
        self.assertNotIsInstance(ctx.exception, BackendUnavailableError)

    async def test_error_status_without_body_uses_status_code(self) -> None:
        gateway = _gateway(_Recorder({"show_launcher": httpx.Response(503)}))
        with self.assertRaises(BackendError) as ctx:
            await gateway.show_launcher()
        await gateway.aclose()
        self.assertEqual(ctx.exception.reason, "HTTP 503")

    async def test_transport_failure_maps_to_unavailable(self) -> None:
        def _refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway = _gateway(_refuse)
        with self.assertRaises(BackendUnavailableError):
            await gateway.submit_message("hi", True)
        await gateway.aclose()


if __name__ == "__main__":
    unittest.main()
