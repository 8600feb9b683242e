"""Read the backend's newline-delimited JSON event stream into an EventBus."""

from __future__ import annotations

import asyncio
import json
import logging

import httpx

from .bus import EventBus
from .domain import TOPICS

LOGGER = logging.getLogger(__name__)


class EventStreamListener:
    """Consume ``GET /events`` and publish each record on the bus.

    Each line is ``{"event": <topic>, "payload": {...}}``. The connection is
    re-opened after ``reconnect_delay`` seconds whenever it drops.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        bus: EventBus,
        path: str = "/events",
        reconnect_delay: float = 2.0,
    ) -> None:
        self._client = client
        self._bus = bus
        self._path = path
        self._reconnect_delay = reconnect_delay

    async def run(self) -> None:
        """Listen until cancelled."""
        while True:
            try:
                await self.listen_once()
            except httpx.HTTPError as exc:
                LOGGER.warning(
                    "events.stream.disconnected",
                    extra={
                        "event": "events.stream.disconnected",
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                )
            await asyncio.sleep(self._reconnect_delay)

    async def listen_once(self) -> int:
        """Read one connection to the end; return how many events were published."""
        published = 0
        async with self._client.stream("GET", self._path, timeout=None) as response:
            response.raise_for_status()
            LOGGER.info("events.stream.connected", extra={"event": "events.stream.connected"})
            async for line in response.aiter_lines():
                if self.dispatch_line(line):
                    published += 1
        return published

    def dispatch_line(self, line: str) -> bool:
        """Publish one stream line; malformed or unknown records are skipped."""
        text = line.strip()
        if not text:
            return False
        try:
            record = json.loads(text)
        except json.JSONDecodeError:
            LOGGER.warning("events.stream.invalid_json", extra={"event": "events.stream.invalid_json"})
            return False
        if not isinstance(record, dict):
            LOGGER.warning("events.stream.invalid_record", extra={"event": "events.stream.invalid_record"})
            return False

        topic = record.get("event")
        if topic not in TOPICS:
            LOGGER.warning(
                "events.stream.unknown_topic",
                extra={"event": "events.stream.unknown_topic", "topic": str(topic)},
            )
            return False
        payload = record.get("payload")
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            LOGGER.warning(
                "events.stream.invalid_payload",
                extra={"event": "events.stream.invalid_payload", "topic": topic},
            )
            return False
        self._bus.publish(topic, payload, source="backend")
        return True
