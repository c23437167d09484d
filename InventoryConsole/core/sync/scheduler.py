"""
Periodic refresh timers for the console's polling consumers.

Each consumer (conversation list, open conversation, unread badge,
inventory table) gets its own timer on the shared event loop. A tick that
arrives while the previous refresh is still running is skipped, so a slow
backend never sees more than one request in flight per consumer.
"""
import asyncio
from typing import Awaitable, Callable, Dict, List, Optional

from InventoryConsole.core.client.utils.exceptions import ConsoleError
from InventoryConsole.core.logging import get_logger

logger = get_logger(__name__)

PollTask = Callable[[], Awaitable[None]]


class PollHandle:
    """A running timer bound to one consumer."""

    def __init__(self, consumer_id: str, interval: float, task: PollTask):
        self.consumer_id = consumer_id
        self.interval = interval
        self.task = task
        self.runs = 0
        self.skipped = 0
        self.failures = 0
        self._timer: Optional[asyncio.Task] = None
        self._in_flight: Optional[asyncio.Task] = None
        self._stopped = False

    @property
    def active(self) -> bool:
        return not self._stopped

    @property
    def busy(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    def __repr__(self) -> str:
        state = "active" if self.active else "stopped"
        return f"<PollHandle {self.consumer_id} every {self.interval}s {state}>"


class PollingScheduler:
    """Starts and stops independent poll timers per consumer."""

    def __init__(self):
        self._handles: Dict[str, List[PollHandle]] = {}

    def start(self, consumer_id: str, interval: float, task: PollTask,
              immediate: bool = True) -> PollHandle:
        """
        Run ``task`` every ``interval`` seconds for ``consumer_id``.

        Args:
            consumer_id: Owner of the timer; ``stop_consumer`` cancels all of its handles
            interval: Seconds between ticks
            task: Coroutine function performing one refresh
            immediate: Fire the first tick right away instead of after one interval
        """
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        loop = asyncio.get_running_loop()
        handle = PollHandle(consumer_id, interval, task)
        handle._timer = loop.create_task(self._run(handle, immediate))
        self._handles.setdefault(consumer_id, []).append(handle)
        logger.debug("Started poll %r", handle)
        return handle

    def stop(self, handle: Optional[PollHandle]) -> None:
        """Cancel ``handle``'s timer and any refresh it has in flight."""
        if handle is None or handle._stopped:
            return
        handle._stopped = True
        for t in (handle._timer, handle._in_flight):
            if t is not None and not t.done():
                t.cancel()
        handles = self._handles.get(handle.consumer_id, [])
        if handle in handles:
            handles.remove(handle)
        if not handles:
            self._handles.pop(handle.consumer_id, None)
        logger.debug("Stopped poll %r", handle)

    def stop_consumer(self, consumer_id: str) -> int:
        """Stop every handle owned by ``consumer_id``; returns how many were stopped."""
        handles = list(self._handles.get(consumer_id, []))
        for handle in handles:
            self.stop(handle)
        return len(handles)

    def stop_all(self) -> None:
        for consumer_id in list(self._handles):
            self.stop_consumer(consumer_id)

    def handles(self, consumer_id: Optional[str] = None) -> List[PollHandle]:
        if consumer_id is not None:
            return list(self._handles.get(consumer_id, []))
        return [h for hs in self._handles.values() for h in hs]

    def is_running(self, consumer_id: str) -> bool:
        return bool(self._handles.get(consumer_id))

    async def _run(self, handle: PollHandle, immediate: bool) -> None:
        if immediate:
            self._tick(handle)
        while not handle._stopped:
            await asyncio.sleep(handle.interval)
            self._tick(handle)

    def _tick(self, handle: PollHandle) -> None:
        if handle._stopped:
            return
        if handle.busy:
            handle.skipped += 1
            logger.debug("Skipping tick for %s: previous refresh still running", handle.consumer_id)
            return
        handle._in_flight = asyncio.get_running_loop().create_task(self._invoke(handle))

    @staticmethod
    async def _invoke(handle: PollHandle) -> None:
        handle.runs += 1
        try:
            await handle.task()
        except asyncio.CancelledError:
            raise
        except ConsoleError as exc:
            handle.failures += 1
            logger.warning("Poll %s failed: %s", handle.consumer_id, exc)
        except Exception:
            handle.failures += 1
            logger.exception("Poll %s raised unexpectedly", handle.consumer_id)
