"""
Aggregated readiness probing across downstream services.
"""

import asyncio
from typing import Dict, Mapping, Tuple

import httpx

from shared.logging import get_logger


class ReadinessProbe:
    """Calls ``<base>/ready`` on each service concurrently."""

    def __init__(self, service_urls: Mapping[str, str], client: httpx.AsyncClient):
        self.service_urls = dict(service_urls)
        self.client = client
        self.logger = get_logger("bff.readiness")

    async def _probe(self, service: str, base_url: str) -> Tuple[str, bool]:
        try:
            response = await self.client.get(f"{base_url.rstrip('/')}/ready")
        except httpx.HTTPError as e:
            self.logger.warning("Readiness probe failed", service=service, error=str(e))
            return service, False
        if not response.is_success:
            self.logger.warning("Service not ready", service=service, status_code=response.status_code)
        return service, response.is_success

    async def check(self) -> Dict[str, bool]:
        """Return a per-service readiness map; waits for every probe."""
        results = await asyncio.gather(
            *(self._probe(name, url) for name, url in self.service_urls.items())
        )
        return dict(results)
