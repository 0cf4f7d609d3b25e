"""
Request-admission pipeline for the gateway.
"""

from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from shared.errors import GatewayException, RateLimitError
from shared.logging import get_logger, set_user_context
from shared.metrics import MetricsCollector
from ..adapters.entitlements_client import EntitlementsClient
from ..auth.identity import IdentityVerifier, is_open_path
from ..ratelimit.admission import AdmissionController
from .entitlements import EntitlementSet, GateEvaluator


class AdmissionPipeline:
    """Identity, entitlements, admission and gates, in that order.

    Each stage either passes or raises a GatewayException that ends the
    request. Results are stored on ``request.state`` (``principal``,
    ``tenant_id``, ``entitlements``) for the route handlers.
    """

    def __init__(self, identity: IdentityVerifier, entitlements: EntitlementsClient,
                 admission: AdmissionController, gates: GateEvaluator,
                 metrics: Optional[MetricsCollector] = None):
        self.identity = identity
        self.entitlements = entitlements
        self.admission = admission
        self.gates = gates
        self.metrics = metrics
        self.logger = get_logger("bff.pipeline")

    async def admit(self, request: Request) -> None:
        path = request.url.path
        request.state.entitlements = EntitlementSet.empty()

        if not is_open_path(path):
            principal = self._run_stage(
                "identity", self.identity.verify, request.headers.get("Authorization")
            )
            request.state.principal = principal
            request.state.tenant_id = principal.tenant_id
            set_user_context(principal.user_id, principal.tenant_id)

            request.state.entitlements = await self.entitlements.resolve(principal.tenant_id)

        self._run_stage("admission", self._admit_capacity)
        self._run_stage("gate", self.gates.check, path, request.state.entitlements)

    def _admit_capacity(self) -> None:
        if not self.admission.try_admit():
            raise RateLimitError("Too many requests")

    def _run_stage(self, stage: str, func, *args):
        try:
            return func(*args)
        except GatewayException as e:
            self.logger.warning("Request rejected", stage=stage, message=e.message)
            if self.metrics is not None:
                self.metrics.record_rejection(stage)
            raise


class AdmissionPipelineMiddleware(BaseHTTPMiddleware):
    """Runs the admission pipeline before any route handler executes."""

    def __init__(self, app, pipeline: AdmissionPipeline):
        super().__init__(app)
        self.pipeline = pipeline

    async def dispatch(self, request: Request, call_next):
        try:
            await self.pipeline.admit(request)
        except GatewayException as e:
            return e.to_response(getattr(request.state, "request_id", None))
        return await call_next(request)
