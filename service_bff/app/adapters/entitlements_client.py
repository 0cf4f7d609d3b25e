"""
Entitlements service client for the BFF gateway.
"""

from typing import Optional
from urllib.parse import quote

import httpx

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..domain.entitlements import EntitlementSet


class EntitlementsClient:
    """Resolves a tenant's entitlement set, failing open to the empty set."""

    def __init__(self, url_template: str, client: httpx.AsyncClient,
                 metrics: Optional[MetricsCollector] = None):
        self.url_template = url_template
        self.client = client
        self.metrics = metrics
        self.logger = get_logger("bff.entitlements_client")

    def url_for(self, tenant_id: str) -> str:
        return self.url_template.format(tenant_id=quote(tenant_id, safe=""))

    async def resolve(self, tenant_id: str) -> EntitlementSet:
        """Fetch entitlements for a tenant.

        Never raises: transport errors, timeouts, non-2xx statuses and
        undecodable bodies all resolve to the empty set, under which every
        module and feature is enabled.
        """
        try:
            response = await self.client.get(self.url_for(tenant_id))
        except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
            self.logger.warning("Entitlements lookup failed", tenant_id=tenant_id, error=str(e))
            return self._fallback()

        if not response.is_success:
            self.logger.warning(
                "Entitlements service error",
                tenant_id=tenant_id,
                status_code=response.status_code
            )
            return self._fallback()

        try:
            payload = response.json()
        except ValueError as e:
            self.logger.warning("Entitlements response not JSON", tenant_id=tenant_id, error=str(e))
            return self._fallback()

        if not isinstance(payload, dict):
            self.logger.warning("Entitlements response not an object", tenant_id=tenant_id)
            return self._fallback()

        return EntitlementSet.from_payload(payload)

    def _fallback(self) -> EntitlementSet:
        if self.metrics is not None:
            self.metrics.record_entitlement_fallback()
        return EntitlementSet.empty()
