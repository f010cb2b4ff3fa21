"""Live usage broadcast hub.

One coordinating asyncio task owns the listener set. Callers never touch the
set directly: `register` and `unregister` enqueue events that the task applies
in order, interleaved with periodic broadcasts of the usage snapshot.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Literal, Protocol

from rephrase_ai.stats.counter import UsageCounter

logger = logging.getLogger(__name__)


class Listener(Protocol):
    """A push connection (Starlette's `WebSocket` satisfies this)."""

    async def send_text(self, data: str) -> None: ...

    async def close(self) -> None: ...


@dataclass(frozen=True, slots=True)
class _HubEvent:
    kind: Literal["register", "unregister"]
    listener: Listener


class BroadcastHub:
    def __init__(self, counter: UsageCounter, *, interval_seconds: float = 2.0) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._counter = counter
        self._interval = interval_seconds
        self._listeners: dict[int, Listener] = {}
        self._events: asyncio.Queue[_HubEvent] | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Spawn the coordinating task on the running event loop."""

        if self.running:
            return
        self._task = asyncio.create_task(self.run(), name="usage-broadcast-hub")
        logger.info("Broadcast hub started", extra={"interval_seconds": self._interval})

    async def stop(self) -> None:
        """Cancel the coordinating task and close every listener."""

        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        for listener in list(self._listeners.values()):
            await self._close(listener)
        self._listeners.clear()
        logger.info("Broadcast hub stopped")

    async def register(self, listener: Listener) -> None:
        """Hand an already-accepted connection to the hub."""

        await self._queue().put(_HubEvent("register", listener))

    async def unregister(self, listener: Listener) -> None:
        await self._queue().put(_HubEvent("unregister", listener))

    async def run(self) -> None:
        """Coordinating loop: apply events, broadcast on every tick."""

        events = self._queue()
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval

        while True:
            now = loop.time()
            if now >= next_tick:
                await self._broadcast()
                next_tick = loop.time() + self._interval
                continue

            try:
                event = await asyncio.wait_for(events.get(), next_tick - now)
            except TimeoutError:
                continue

            if event.kind == "register":
                self._listeners[id(event.listener)] = event.listener
                logger.info("Listener registered", extra={"listeners": len(self._listeners)})
                await self._broadcast()
            elif id(event.listener) in self._listeners:
                del self._listeners[id(event.listener)]
                await self._close(event.listener)
                logger.info("Listener unregistered", extra={"listeners": len(self._listeners)})

    def _queue(self) -> asyncio.Queue[_HubEvent]:
        if self._events is None:
            self._events = asyncio.Queue()
        return self._events

    async def _broadcast(self) -> None:
        if not self._listeners:
            return

        message = json.dumps(self._counter.snapshot().to_message())
        for listener in list(self._listeners.values()):
            try:
                await listener.send_text(message)
            except Exception:
                logger.warning("Dropping listener after failed send", exc_info=True)
                self._listeners.pop(id(listener), None)
                await self._close(listener)

    async def _close(self, listener: Listener) -> None:
        try:
            await listener.close()
        except Exception:
            # Already closed by the peer.
            logger.debug("Listener close failed", exc_info=True)
