"""
Shared utilities for the BFF gateway.

This package aggregates common building blocks consumed by the service:

- config: Gateway settings via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and the client error envelope
- base_service: FastAPI app scaffolding shared by services

Any cross-service logic should live here to avoid import cycles across
service packages. Do not import from service_* packages into shared/.
"""
