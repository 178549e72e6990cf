"""Readiness gate between the host page and the wheel."""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class ActivationGate:
    """One-shot readiness signal.

    The host (for example the contact form after a successful submission)
    calls :meth:`signal_ready`; subscribers registered through
    :meth:`on_ready` are notified exactly once. Later signals are ignored and a
    callback registered after readiness runs immediately.
    """

    def __init__(self) -> None:
        self._ready = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_ready(self) -> bool:
        return self._ready

    def on_ready(self, callback: Callable[[], None]) -> None:
        if self._ready:
            callback()
            return
        self._callbacks.append(callback)

    def signal_ready(self) -> bool:
        """Mark the gate ready and notify subscribers.

        Returns ``True`` for the first signal and ``False`` for repeats.
        """
        if self._ready:
            logger.debug("Readiness already signalled; ignoring repeat")
            return False
        self._ready = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()
        return True


__all__ = ["ActivationGate"]
