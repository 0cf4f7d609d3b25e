"""
Shared configuration management for the BFF gateway.
"""

import os
from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Secrets that shipped as development defaults and must never sign production tokens.
INSECURE_JWT_SECRETS = frozenset({"dev-secret", "secret", "changeme"})

PRODUCTION_ENVIRONMENTS = frozenset({"prod", "production"})


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = Field(default="local")
    log_level: str = Field(default="info")

    # Listener
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    metrics_port: Optional[int] = Field(default=None)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in PRODUCTION_ENVIRONMENTS


class GatewaySettings(BaseConfig):
    """Immutable gateway configuration assembled once at startup."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Security
    jwt_secret: str = Field(..., min_length=1)
    jwt_algorithm: str = Field(default="HS256")

    # Admission
    rate_tokens: int = Field(default=200, ge=0)
    rate_refill_ms: int = Field(default=1000, gt=0)

    # Outbound calls
    upstream_timeout_seconds: float = Field(default=10.0, gt=0)
    entitlements_url: str = Field(default="http://localhost:7002/entitlements/{tenant_id}")
    readiness_services: str = Field(default="org,forms,submissions,discounts,staff")

    # Downstream services
    org_service_url: str = Field(default="http://localhost:7003")
    forms_service_url: str = Field(default="http://localhost:7004")
    submissions_service_url: str = Field(default="http://localhost:3005")
    discounts_service_url: str = Field(default="http://localhost:3006")
    staff_service_url: str = Field(default="http://localhost:3007")
    notifications_service_url: str = Field(default="http://localhost:3008")
    reporting_service_url: str = Field(default="http://localhost:3009")
    translation_service_url: str = Field(default="http://localhost:3010")
    feature_flags_service_url: str = Field(default="http://localhost:3011")
    api_program_service_url: str = Field(default="http://localhost:3012")
    search_service_url: str = Field(default="http://localhost:3013")
    metering_service_url: str = Field(default="http://localhost:3014")
    integration_hub_service_url: str = Field(default="http://localhost:3015")
    export_sched_service_url: str = Field(default="http://localhost:3016")
    ai_ml_service_url: str = Field(default="http://localhost:3017")
    audit_service_url: str = Field(default="http://localhost:3018")
    tenant_isolation_service_url: str = Field(default="http://localhost:3019")

    @model_validator(mode="after")
    def _check_startup_invariants(self) -> "GatewaySettings":
        if self.is_production and self.jwt_secret in INSECURE_JWT_SECRETS:
            raise ValueError("JWT_SECRET uses a development default; refusing to start in production")
        unknown = [name for name in self.readiness_service_names() if name not in self.service_urls()]
        if unknown:
            raise ValueError(f"Unknown readiness services: {', '.join(unknown)}")
        try:
            self.entitlements_url_for("tenant")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(
                f"ENTITLEMENTS_URL may only use the {{tenant_id}} placeholder: {self.entitlements_url}"
            ) from e
        return self

    def readiness_service_names(self) -> List[str]:
        return [item.strip() for item in self.readiness_services.split(",") if item.strip()]

    @property
    def refill_interval_seconds(self) -> float:
        return self.rate_refill_ms / 1000.0

    def service_urls(self) -> Dict[str, str]:
        """Map service labels to their base addresses."""
        return {
            "org": self.org_service_url,
            "forms": self.forms_service_url,
            "submissions": self.submissions_service_url,
            "discounts": self.discounts_service_url,
            "staff": self.staff_service_url,
            "notifications": self.notifications_service_url,
            "reporting": self.reporting_service_url,
            "translation": self.translation_service_url,
            "feature-flags": self.feature_flags_service_url,
            "api-program": self.api_program_service_url,
            "search": self.search_service_url,
            "metering": self.metering_service_url,
            "integration-hub": self.integration_hub_service_url,
            "export-scheduler": self.export_sched_service_url,
            "ai-ml": self.ai_ml_service_url,
            "audit": self.audit_service_url,
            "tenant-isolation": self.tenant_isolation_service_url,
        }

    def entitlements_url_for(self, tenant_id: str) -> str:
        return self.entitlements_url.format(tenant_id=tenant_id)


def current_rate_ceiling(settings: GatewaySettings) -> int:
    """Read the admission ceiling fresh from the environment.

    Lets operators change RATE_TOKENS on a running process; the value takes
    effect on the next refill. Unparseable values fall back to the startup
    setting.
    """
    raw = os.getenv("RATE_TOKENS")
    if raw is None:
        return settings.rate_tokens
    try:
        return max(0, int(raw))
    except ValueError:
        return settings.rate_tokens


@lru_cache()
def get_settings() -> GatewaySettings:
    """Get the process-wide gateway settings."""
    return GatewaySettings()
