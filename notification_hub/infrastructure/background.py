"""Detached execution of best-effort coroutines."""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class BackgroundTaskRunner:
    """Run coroutines on a dedicated event loop thread without joining them.

    Callers get a future back but the request path never waits on it. Every
    task shares the same loop so network clients held by push transports
    stay bound to a single loop.
    """

    def __init__(self, name: str = "notification-fanout") -> None:
        self._name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    def spawn(
        self, func: Callable[..., Awaitable[Any]], *args: Any
    ) -> Future:
        """Schedule ``func(*args)`` and return immediately."""

        loop = self._ensure_loop()
        future = asyncio.run_coroutine_threadsafe(func(*args), loop)
        future.add_done_callback(self._log_failure)
        return future

    def shutdown(self, timeout: float = 5.0) -> None:
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout)

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is not None and not self._loop.is_closed():
                return self._loop
            loop = asyncio.new_event_loop()
            thread = threading.Thread(
                target=self._run_loop, args=(loop,), name=self._name, daemon=True
            )
            self._loop = loop
            self._thread = thread
            thread.start()
            return loop

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            loop.close()

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Background task failed", exc_info=exc)


background_runner = BackgroundTaskRunner()


__all__ = ["BackgroundTaskRunner", "background_runner"]
