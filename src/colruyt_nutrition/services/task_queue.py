"""Serialized task queue with a fixed delay between tasks."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)


@dataclass
class RateLimitedTaskQueue:
    """Run async tasks one at a time, ``delay_seconds`` apart.

    Each task starts only after the previous one has finished (successfully or
    not) and a further ``delay_seconds`` have elapsed. Start order follows the
    order of ``enqueue`` calls.
    """

    delay_seconds: float = 1.0
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    _tail: "asyncio.Future[None] | None" = field(default=None, init=False, repr=False)

    def enqueue(self, task: Callable[[], Awaitable[T]]) -> "asyncio.Task[T]":
        """Schedule ``task`` behind everything already queued.

        Must be called from a running event loop. The returned task resolves
        with the outcome of ``task``; cancelling it drops this entry without
        stalling the ones queued after it.
        """
        loop = asyncio.get_running_loop()
        previous = self._tail
        gate: asyncio.Future[None] = loop.create_future()
        self._tail = gate
        link = loop.create_task(self._run(task, previous))
        link.add_done_callback(lambda _: _open_after(previous, gate))
        return link

    async def _run(
        self,
        task: Callable[[], Awaitable[T]],
        previous: "asyncio.Future[None] | None",
    ) -> T:
        if previous is not None and not previous.done():
            await asyncio.shield(previous)
        await self.sleep(self.delay_seconds)
        try:
            return await task()
        except Exception:
            _logger.warning("Queued task failed", exc_info=True)
            raise


def _open_after(
    previous: "asyncio.Future[None] | None", gate: "asyncio.Future[None]"
) -> None:
    """Resolve ``gate`` once ``previous`` has resolved."""

    def _release(_: object = None) -> None:
        if not gate.done():
            gate.set_result(None)

    if previous is None or previous.done():
        _release()
    else:
        previous.add_done_callback(_release)
