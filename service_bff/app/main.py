"""
Backend-for-frontend gateway service.
"""

from typing import Optional

import httpx
from fastapi import Request

from shared.base_service import BaseService
from shared.config import GatewaySettings, current_rate_ceiling, get_settings
from shared.errors import AggregateUnreadyError
from .adapters.entitlements_client import EntitlementsClient
from .adapters.usage_meter import UsageMeter
from .auth.identity import IdentityVerifier
from .domain.entitlements import GateEvaluator
from .domain.pipeline import AdmissionPipeline, AdmissionPipelineMiddleware
from .ratelimit.admission import AdmissionController
from .routing.bindings import ROUTE_BINDINGS, RouteBinding
from .routing.dispatcher import ProxyDispatcher
from .routing.readiness import ReadinessProbe


class GatewayService(BaseService):
    """BFF gateway: admission pipeline in front of the proxy route table."""

    def __init__(self, settings: Optional[GatewaySettings] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self._transport = transport
        super().__init__("gateway", self.settings)

        @self.app.on_event("startup")
        async def _startup():
            self.admission.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.admission.stop()
            await self.usage_meter.drain()
            await self.http_client.aclose()

        # Expose service instance via app state for introspection/testing
        self.app.state.gateway_service = self

    def _setup_components(self):
        settings = self.settings
        service_urls = settings.service_urls()

        # One pooled client for every outbound call; the timeout bounds each proxied request.
        self.http_client = httpx.AsyncClient(
            timeout=settings.upstream_timeout_seconds,
            transport=self._transport,
        )

        self.identity = IdentityVerifier(settings.jwt_secret, settings.jwt_algorithm)
        self.entitlements_client = EntitlementsClient(
            settings.entitlements_url, self.http_client, metrics=self.metrics
        )
        self.admission = AdmissionController(
            settings.rate_tokens,
            settings.refill_interval_seconds,
            ceiling_provider=lambda: current_rate_ceiling(settings),
        )
        self.gates = GateEvaluator()
        self.pipeline = AdmissionPipeline(
            self.identity,
            self.entitlements_client,
            self.admission,
            self.gates,
            metrics=self.metrics,
        )

        self.usage_meter = UsageMeter(settings.metering_service_url, self.http_client, metrics=self.metrics)
        self.dispatcher = ProxyDispatcher(
            service_urls, self.http_client, usage_meter=self.usage_meter, metrics=self.metrics
        )
        self.readiness = ReadinessProbe(
            {name: service_urls[name] for name in settings.readiness_service_names()},
            self.http_client,
        )

    def _setup_service_middleware(self):
        self.app.add_middleware(AdmissionPipelineMiddleware, pipeline=self.pipeline)

    def _setup_routes(self):
        self._setup_gateway_routes()
        self._setup_proxy_routes()

    def _setup_gateway_routes(self):
        """Set up health, readiness and identity routes."""

        @self.app.get("/healthz")
        async def healthz(request: Request):
            """Liveness endpoint."""
            return {"status": "ok", "requestId": request.state.request_id}

        @self.app.get("/readyz")
        async def readyz():
            """Readiness of the gateway process itself."""
            return {"status": "ready"}

        @self.app.get("/readyz/full")
        async def readyz_full():
            """Probe every configured downstream ``/ready`` endpoint."""
            status = await self.readiness.check()
            if not all(status.values()):
                raise AggregateUnreadyError(status)
            return {"ready": True, "status": status}

        @self.app.get("/api/v1/me")
        async def me(request: Request):
            """Echo the authenticated principal and its entitlements."""
            principal = getattr(request.state, "principal", None)
            entitlements = getattr(request.state, "entitlements", None)
            return {
                "user": principal.claims if principal else None,
                "entitlements": entitlements.to_dict() if entitlements else None,
                "requestId": request.state.request_id,
            }

    def _setup_proxy_routes(self):
        """Register one proxy endpoint per route binding."""
        for binding in ROUTE_BINDINGS:
            self.app.add_api_route(
                binding.path,
                self._make_proxy_endpoint(binding),
                methods=[binding.method],
                name=binding.name,
                tags=[binding.service],
            )

    def _make_proxy_endpoint(self, binding: RouteBinding):
        async def proxy(request: Request):
            return await self.dispatcher.dispatch(binding, request)

        proxy.__name__ = binding.name
        proxy.__doc__ = f"Proxy {binding.method} {binding.path} to {binding.service}-service."
        return proxy


def create_app(settings: Optional[GatewaySettings] = None,
               transport: Optional[httpx.AsyncBaseTransport] = None):
    """Create FastAPI application."""
    service = GatewayService(settings=settings, transport=transport)
    return service.app


def main():
    """Console entry point."""
    GatewayService().run()


if __name__ == "__main__":
    main()
