"""Trailing debounce for persistence writes.

Each key has at most one pending write. Scheduling a write for a key that
already has one cancels the pending timer and starts a new one, so a burst of
mutations produces a single write once the burst has been quiet for
``delay`` seconds. The write callable is invoked at fire time and is expected
to read the latest state itself.

Writes are fire-and-forget: callers never await them, and a failing write is
logged rather than raised into the code that mutated state. ``flush()``
also waits for writes a timer has already started.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Set

logger = logging.getLogger(__name__)

WriteFn = Callable[[], Awaitable[None]]


class DebouncedWriter:
    """Per-key trailing-debounce scheduler on the running asyncio loop."""

    def __init__(self, delay: float = 0.1):
        self.delay = delay
        self._pending: Dict[str, WriteFn] = {}
        self._timers: Dict[str, asyncio.Task] = {}
        self._inflight: Set[asyncio.Task] = set()
        self.writes_performed = 0

    @property
    def pending_keys(self) -> List[str]:
        return list(self._pending.keys())

    def schedule(self, key: str, write: WriteFn) -> None:
        """(Re)start the quiet-period timer for ``key``.

        Without a running event loop the write stays pending until ``flush()``.
        """
        self._pending[key] = write

        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"[Persistence] No running loop, write for '{key}' deferred to flush")
            return

        self._timers[key] = loop.create_task(self._fire_after_delay(key))

    async def _fire_after_delay(self, key: str) -> None:
        await asyncio.sleep(self.delay)
        # Detach before writing so a new schedule() starts a fresh timer
        # instead of cancelling a write in progress.
        self._timers.pop(key, None)
        write = self._pending.pop(key, None)
        if write is None:
            return

        task = asyncio.current_task()
        self._inflight.add(task)
        try:
            await self._run(key, write)
        finally:
            self._inflight.discard(task)

    async def _run(self, key: str, write: WriteFn) -> None:
        try:
            await write()
            self.writes_performed += 1
            logger.debug(f"[Persistence] Wrote '{key}'")
        except Exception as e:
            logger.error(f"[Persistence] Write for '{key}' failed: {e}")

    async def flush(self) -> None:
        """Wait for writes already running, then perform every pending write
        now, in scheduling order.
        """
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

        pending = list(self._pending.items())
        self._pending.clear()
        for key, write in pending:
            await self._run(key, write)

    def cancel(self) -> None:
        """Drop all pending writes without performing them."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._pending.clear()
