"""
Generic proxy dispatch for bound gateway routes.
"""

import json
from typing import Any, Dict, Mapping, Optional

import httpx
from fastapi import Request
from fastapi.responses import JSONResponse

from shared.errors import UpstreamUnavailableError, ValidationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..adapters.usage_meter import UsageMeter
from ..auth.identity import DEFAULT_TENANT_ID
from .bindings import RouteBinding

REQUEST_ID_HEADER = "x-request-id"
USER_ID_HEADER = "x-user-id"
JSON_MEDIA_TYPE = "application/json"


def _reject_constant(value: str):
    raise ValueError(f"Invalid JSON constant: {value}")


def decode_json(raw: bytes) -> Any:
    """Strict JSON decode: NaN and Infinity are rejected like any other bad token."""
    return json.loads(raw, parse_constant=_reject_constant)


class ProxyDispatcher:
    """Forwards a request to the one downstream service its binding names.

    The downstream status and JSON body are relayed unchanged. Any transport
    failure, or a body that does not decode as JSON, becomes a 502 labelled
    with the binding's service.
    """

    def __init__(self, service_urls: Mapping[str, str], client: httpx.AsyncClient,
                 usage_meter: Optional[UsageMeter] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.service_urls = dict(service_urls)
        self.client = client
        self.usage_meter = usage_meter
        self.metrics = metrics
        self.logger = get_logger("bff.dispatcher")

    def base_url(self, service: str) -> str:
        try:
            return self.service_urls[service]
        except KeyError:
            raise KeyError(f"No base address configured for service '{service}'") from None

    async def dispatch(self, binding: RouteBinding, request: Request) -> JSONResponse:
        """Proxy ``request`` according to ``binding`` and relay the outcome."""
        request_id = getattr(request.state, "request_id", None)
        url = binding.upstream_url(
            self.base_url(binding.service),
            request.path_params,
            request.url.query,
        )

        headers: Dict[str, str] = {}
        if request_id:
            headers[REQUEST_ID_HEADER] = request_id
        if binding.forward_user_id:
            principal = getattr(request.state, "principal", None)
            headers[USER_ID_HEADER] = (principal.user_id if principal else None) or ""

        body = await self._read_body(request) if binding.forward_body else None

        try:
            response = await self.client.request(binding.method, url, json=body, headers=headers)
            payload = decode_json(response.content)
        except (httpx.HTTPError, ValueError) as e:
            self.logger.warning(
                "Upstream call failed",
                service=binding.service,
                method=binding.method,
                route=binding.path,
                error=str(e)
            )
            self._record(binding.service, "unavailable")
            raise UpstreamUnavailableError(binding.service, details={"error": type(e).__name__}) from e

        self._record(binding.service, "relayed")

        if binding.metric and response.status_code < 500 and self.usage_meter is not None:
            tenant_id = getattr(request.state, "tenant_id", None) or DEFAULT_TENANT_ID
            self.usage_meter.record(tenant_id, binding.metric)

        return JSONResponse(status_code=response.status_code, content=payload)

    async def _read_body(self, request: Request) -> Any:
        """Decode a JSON request body; other content types forward as ``{}``."""
        media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
        if media_type != JSON_MEDIA_TYPE:
            return {}
        raw = await request.body()
        if not raw.strip():
            return {}
        try:
            return decode_json(raw)
        except ValueError as e:
            raise ValidationError("Malformed JSON body", details={"error": str(e)}) from e

    def _record(self, service: str, outcome: str):
        if self.metrics is not None:
            self.metrics.record_upstream_call(service, outcome)
