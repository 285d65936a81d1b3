"""Completion gate for background token acquisition"""

import asyncio

from ..core.exceptions import AcquisitionTimeout


class CompletionGate:
    """One-shot signal that any number of coroutines can wait on.

    ``open()`` fires the signal for the current acquisition; ``rearm()``
    releases everyone still waiting on the previous one and starts a new,
    closed signal.
    """

    def __init__(self):
        self._event = asyncio.Event()

    def open(self) -> None:
        self._event.set()

    def rearm(self) -> None:
        self._event.set()
        self._event = asyncio.Event()

    async def wait(self, timeout_ms: float) -> None:
        """Block until opened or rearmed; raise AcquisitionTimeout after timeout_ms"""
        event = self._event
        if event.is_set():
            return
        try:
            await asyncio.wait_for(event.wait(), timeout=max(timeout_ms, 0) / 1000)
        except asyncio.TimeoutError:
            raise AcquisitionTimeout(timeout_ms) from None
