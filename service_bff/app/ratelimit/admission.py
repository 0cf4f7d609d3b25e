"""
Process-wide admission controller for the BFF gateway.
"""

import asyncio
import threading
from typing import Callable, Optional

from shared.logging import get_logger


class AdmissionController:
    """Single shared capacity counter, reset to its ceiling on a fixed period.

    Not per tenant and not per route: every request draws from the same
    budget. ``try_admit`` is a guarded decrement-if-positive so concurrent
    callers can never drive the counter below zero.
    """

    def __init__(self, ceiling: int, refill_interval_seconds: float,
                 ceiling_provider: Optional[Callable[[], int]] = None):
        if refill_interval_seconds <= 0:
            raise ValueError("refill_interval_seconds must be positive")
        self.refill_interval_seconds = refill_interval_seconds
        self._ceiling_provider = ceiling_provider or (lambda: ceiling)
        self._ceiling = max(0, ceiling)
        self._remaining = self._ceiling
        self._lock = threading.Lock()
        self._task: Optional[asyncio.Task] = None
        self.logger = get_logger("bff.admission")

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def ceiling(self) -> int:
        return self._ceiling

    def try_admit(self) -> bool:
        """Consume one unit of capacity; False when none is left."""
        with self._lock:
            if self._remaining <= 0:
                return False
            self._remaining -= 1
            return True

    def refill(self) -> None:
        """Reset capacity to the ceiling, re-reading it from the provider."""
        try:
            ceiling = max(0, int(self._ceiling_provider()))
        except (TypeError, ValueError) as e:
            self.logger.warning("Invalid admission ceiling, keeping previous value", error=str(e))
            ceiling = self._ceiling

        with self._lock:
            if ceiling != self._ceiling:
                self.logger.info("Admission ceiling changed", previous=self._ceiling, ceiling=ceiling)
            self._ceiling = ceiling
            self._remaining = ceiling

    async def _refill_loop(self) -> None:
        while True:
            await asyncio.sleep(self.refill_interval_seconds)
            self.refill()

    def start(self) -> None:
        """Start the background refill task on the running loop."""
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.get_running_loop().create_task(self._refill_loop())
        self.logger.info(
            "Admission refill started",
            ceiling=self._ceiling,
            interval_seconds=self.refill_interval_seconds
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

