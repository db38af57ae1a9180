"""Periodic tick sources for the phase timer."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol


Clock = Callable[[], float]
TickCallback = Callable[[], None]

TICK_INTERVAL_SEC = 0.1


class TickDriver(Protocol):
    """At most one registered callback; ``start`` replaces any previous one."""

    @property
    def is_active(self) -> bool: ...

    def start(self, callback: TickCallback) -> None: ...

    def stop(self) -> None: ...


class AsyncioTickDriver:
    """Fires the callback every ``interval_sec`` on an asyncio event loop.

    The loop is resolved on ``start`` so the driver can be built before the
    loop runs (CLI, NiceGUI). Pass ``loop`` explicitly to drive a timer from
    another thread's loop.
    """

    def __init__(
        self,
        interval_sec: float = TICK_INTERVAL_SEC,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._interval_sec = max(0.001, interval_sec)
        self._explicit_loop = loop
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._callback: Optional[TickCallback] = None
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def interval_sec(self) -> float:
        return self._interval_sec

    @property
    def is_active(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        self.stop()
        loop = self._explicit_loop or asyncio.get_running_loop()
        self._loop = loop
        self._callback = callback
        self._handle = loop.call_later(self._interval_sec, self._fire)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._callback = None

    def _fire(self) -> None:
        callback = self._callback
        if callback is None or self._loop is None:
            return
        # Re-arm before the callback so it may stop() or start() the driver.
        self._handle = self._loop.call_later(self._interval_sec, self._fire)
        callback()


class ManualTickDriver:
    """Driver pumped by the host: each ``fire()`` delivers one tick."""

    def __init__(self) -> None:
        self._callback: Optional[TickCallback] = None
        self.start_count = 0

    @property
    def is_active(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        self.stop()
        self._callback = callback
        self.start_count += 1

    def stop(self) -> None:
        self._callback = None

    def fire(self) -> bool:
        callback = self._callback
        if callback is None:
            return False
        callback()
        return True
