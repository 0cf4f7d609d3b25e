"""
Base service class for BFF gateway services.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import time

from shared.config import BaseConfig
from shared.logging import configure_logging, get_logger, set_request_id, clear_context
from shared.metrics import get_metrics_collector
from shared.errors import GatewayException, ErrorResponse

REQUEST_ID_HEADER = "x-request-id"


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, service_name: str, config: BaseConfig):
        self.service_name = service_name
        self.config = config
        self.port = config.port

        # Configure logging before the first logger is bound
        configure_logging(service_name, self.config.log_level)
        self.logger = get_logger(service_name)
        self.metrics = get_metrics_collector(service_name)
        self._setup_components()

        self.app = self._create_app()
        self._setup_middleware()
        self._setup_exception_handlers()
        self._setup_routes()

    def _setup_components(self):
        """Build service collaborators. Override in subclasses."""

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        return FastAPI(
            title=f"{self.service_name.title()} Service",
            description=f"Backend-for-frontend {self.service_name} service",
            version="1.0.0",
            docs_url="/docs" if self.config.environment == "local" else None,
            redoc_url="/redoc" if self.config.environment == "local" else None,
        )

    def _setup_service_middleware(self):
        """Install service-specific middleware. Override in subclasses.

        Runs before the common middleware is added, so anything installed
        here sits inside the request-context middleware and can rely on
        ``request.state.request_id``.
        """

    def _setup_middleware(self):
        """Set up middleware."""
        self._setup_service_middleware()

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self.config.environment == "local" else [],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Added last so it is the outermost middleware
        @self.app.middleware("http")
        async def request_context(request: Request, call_next):
            request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
            request.state.request_id = request_id
            start_time = time.time()

            try:
                try:
                    response = await call_next(request)
                except Exception as exc:
                    # 500s get the same request id header, metric and access log as any response
                    self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
                    response = self._internal_error_response(request_id)
                duration = time.time() - start_time

                self.metrics.record_http_request(
                    method=request.method,
                    endpoint=request.url.path,
                    status_code=response.status_code,
                    duration=duration
                )
                self.logger.info(
                    "HTTP request",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=round(duration * 1000, 2)
                )

                response.headers[REQUEST_ID_HEADER] = request_id
                return response
            finally:
                clear_context()

    def _setup_exception_handlers(self):
        """Register error handlers."""

        @self.app.exception_handler(GatewayException)
        async def gateway_exception_handler(request: Request, exc: GatewayException):
            """Render GatewayException as the uniform error envelope."""
            self.logger.warning(
                "Gateway error",
                code=exc.code,
                message=exc.message,
                details=exc.details
            )
            return exc.to_response(getattr(request.state, "request_id", None))

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            return self._internal_error_response(getattr(request.state, "request_id", None))

    @staticmethod
    def _internal_error_response(request_id) -> JSONResponse:
        body = ErrorResponse(message="Internal server error", request_id=request_id)
        return JSONResponse(status_code=500, content=body.model_dump(by_alias=True))

    def _setup_routes(self):
        """Set up routes. Override in subclasses."""

    def run(self):
        """Run the service."""
        import uvicorn

        if self.config.metrics_port:
            self.metrics.start_metrics_server(self.config.metrics_port)

        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
