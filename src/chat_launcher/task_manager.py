"""Lifecycle manager for background tasks, named timers and timeout races."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any

LOGGER = logging.getLogger(__name__)


class RaceOutcome(str, Enum):
    """Which side settled a :meth:`TaskManager.race`."""

    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class RaceResult:
    outcome: RaceOutcome
    value: Any = None
    error: BaseException | None = None


class TaskManager:
    """Manage named and anonymous background asyncio tasks.

    Named tasks double as timers: at most one task lives under a name, and
    scheduling a new one cancels its predecessor first.
    """

    def __init__(self) -> None:
        self._named: dict[str, asyncio.Task[Any]] = {}
        self._anonymous: set[asyncio.Task[Any]] = set()

    def add(self, task: asyncio.Task[Any], name: str | None = None) -> None:
        """Register a task, optionally under a unique name.

        A named task replaces (and cancels) any prior task with the same
        name. Anonymous tasks self-clean when they complete.
        """
        if name is not None:
            self.cancel(name)
            self._named[name] = task
        else:
            self._anonymous.add(task)
            task.add_done_callback(self._anonymous.discard)
            task.add_done_callback(self._log_anonymous_exception)

    def spawn(self, coro: Awaitable[Any], name: str | None = None) -> asyncio.Task[Any]:
        """Create a task from ``coro`` and track it."""
        task = asyncio.ensure_future(coro)
        self.add(task, name=name)
        return task

    def _log_anonymous_exception(self, task: asyncio.Task[Any]) -> None:
        """Log unhandled exceptions from anonymous tasks so they are not silently lost."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.warning(
                "task.anonymous.exception",
                extra={
                    "event": "task.anonymous.exception",
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )

    def pending(self, name: str) -> bool:
        """Return True while a named task is registered and not done."""
        task = self._named.get(name)
        return task is not None and not task.done()

    def schedule(
        self, name: str, delay: float, callback: Callable[[], Any]
    ) -> asyncio.Task[None]:
        """Run ``callback`` after ``delay`` seconds, replacing any pending timer."""
        self.cancel(name)
        task = asyncio.create_task(
            self._fire_after(name, delay, callback), name=f"timer:{name}"
        )
        self._named[name] = task
        return task

    async def _fire_after(
        self, name: str, delay: float, callback: Callable[[], Any]
    ) -> None:
        await asyncio.sleep(delay)
        # Unregister before the callback so it may schedule the same name again.
        if self._named.get(name) is asyncio.current_task():
            del self._named[name]
        try:
            callback()
        except Exception:
            LOGGER.exception(
                "task.timer.callback_failed",
                extra={"event": "task.timer.callback_failed", "timer": name},
            )

    def cancel(self, name: str) -> None:
        """Cancel a named task without waiting for it to unwind."""
        task = self._named.pop(name, None)
        if task is not None and not task.done():
            task.cancel()

    async def race(
        self, name: str, awaitable: Awaitable[Any], timeout: float
    ) -> RaceResult:
        """Race ``awaitable`` against a timer registered under ``name``.

        Whichever side settles first decides the result. A call that loses
        to the timer keeps running as an anonymous task; its eventual result
        changes nothing.
        """
        loop = asyncio.get_running_loop()
        settled: asyncio.Future[RaceResult] = loop.create_future()

        def _settle(result: RaceResult) -> None:
            if not settled.done():
                settled.set_result(result)

        def _on_call_done(task: asyncio.Future[Any]) -> None:
            if task.cancelled():
                _settle(RaceResult(RaceOutcome.FAILED, error=asyncio.CancelledError()))
                return
            exc = task.exception()
            if exc is not None:
                _settle(RaceResult(RaceOutcome.FAILED, error=exc))
            else:
                _settle(RaceResult(RaceOutcome.COMPLETED, value=task.result()))

        call = asyncio.ensure_future(awaitable)
        call.add_done_callback(_on_call_done)
        self.schedule(name, timeout, lambda: _settle(RaceResult(RaceOutcome.TIMED_OUT)))
        try:
            result = await settled
        except asyncio.CancelledError:
            call.cancel()
            raise
        finally:
            self.cancel(name)
        if not call.done():
            LOGGER.info(
                "task.race.loser_pending",
                extra={"event": "task.race.loser_pending", "timer": name},
            )
            self.add(call)
        return result

    async def cancel_all(self) -> None:
        """Cancel every tracked task and await them all."""
        all_tasks: list[asyncio.Task[Any]] = list(self._named.values()) + [
            t for t in self._anonymous if not t.done()
        ]
        for task in all_tasks:
            if not task.done():
                task.cancel()
        # Anonymous failures are logged by their done callbacks.
        await asyncio.gather(*all_tasks, return_exceptions=True)
        self._named.clear()
        self._anonymous.clear()
