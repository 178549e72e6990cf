"""One-shot timers for the delayed reveal."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol


class Scheduler(Protocol):
    """Runs a callback once after a delay.

    Implementations must not hand back a handle: a scheduled reveal cannot be
    cancelled.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> None: ...


class AsyncioScheduler:
    """Schedule callbacks on an asyncio event loop.

    Parameters
    ----------
    loop : Optional[asyncio.AbstractEventLoop], default: None
        Loop to schedule on. When omitted the currently running loop is
        captured.

    Raises
    ------
    RuntimeError
        If no loop is given and none is running.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise RuntimeError(
                    "AsyncioScheduler needs an event loop; pass one explicitly "
                    "or create the scheduler from a coroutine"
                ) from exc
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self._loop.call_later(delay, callback)


__all__ = ["AsyncioScheduler", "Scheduler"]
