"""Serialized progress reporting for the live status message.

Chunk translations finish concurrently, but the status message is a single shared handle. All
updates go through one queue consumed by one task, so edits never interleave and the rendered
percentage never goes backwards.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from types import TracebackType

logger = logging.getLogger(__name__)

RenderFn = Callable[[int], Awaitable[None]]

_STOP = object()


class ProgressReporter:
    """Single-writer progress channel.

    Usage:
        async with ProgressReporter(render) as reporter:
            await pipeline.generate(..., on_progress=reporter.report)
    """

    def __init__(self, render: RenderFn) -> None:
        self._render = render
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None
        self.last_rendered: int | None = None

    def report(self, percent: int) -> None:
        """Enqueue a progress value; safe to call from any coroutine on the loop."""

        self._queue.put_nowait(max(0, min(100, int(percent))))

    async def _consume(self) -> None:
        while True:
            item = await self._queue.get()
            stop = item is _STOP

            # Coalesce everything already queued into the newest value.
            while not self._queue.empty():
                nxt = self._queue.get_nowait()
                if nxt is _STOP:
                    stop = True
                else:
                    item = nxt

            if isinstance(item, int) and (self.last_rendered is None or item > self.last_rendered):
                try:
                    await self._render(item)
                    self.last_rendered = item
                except Exception:  # noqa: BLE001
                    # A failed edit must not abort the subtitle pipeline.
                    logger.warning("progress render failed percent=%d", item, exc_info=True)

            if stop:
                return

    async def __aenter__(self) -> ProgressReporter:
        self._task = asyncio.create_task(self._consume())
        return self

    async def __aexit__(
            self,
            exc_type: type[BaseException] | None,
            exc: BaseException | None,
            tb: TracebackType | None,
    ) -> None:
        self._queue.put_nowait(_STOP)
        if self._task is not None:
            await self._task
