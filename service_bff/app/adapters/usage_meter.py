"""
Best-effort usage metering for write operations.
"""

import asyncio
from typing import Optional, Set

import httpx

from shared.logging import get_logger
from shared.metrics import MetricsCollector


class UsageMeter:
    """Reports write counts to the metering service off the response path."""

    def __init__(self, metering_url: str, client: httpx.AsyncClient,
                 metrics: Optional[MetricsCollector] = None):
        self.increment_url = f"{metering_url.rstrip('/')}/usage/increment"
        self.client = client
        self.metrics = metrics
        self.logger = get_logger("bff.usage_meter")
        self._pending: Set[asyncio.Task] = set()

    def record(self, tenant_id: str, metric: str) -> asyncio.Task:
        """Schedule a detached increment and return immediately."""
        task = asyncio.get_running_loop().create_task(self.send(tenant_id, metric))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def send(self, tenant_id: str, metric: str) -> bool:
        """Deliver one increment; failures are logged, never raised."""
        payload = {"tenantId": tenant_id, "metric": metric, "value": 1}
        try:
            response = await self.client.post(self.increment_url, json=payload)
        except Exception as e:
            self.logger.warning("Usage increment failed", metric=metric, tenant_id=tenant_id, error=str(e))
            self._record_failure()
            return False

        if response.status_code >= 400:
            self.logger.warning(
                "Usage increment rejected",
                metric=metric,
                tenant_id=tenant_id,
                status_code=response.status_code
            )
            self._record_failure()
            return False
        return True

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for in-flight increments, used on shutdown."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _record_failure(self):
        if self.metrics is not None:
            self.metrics.record_usage_meter_failure()
