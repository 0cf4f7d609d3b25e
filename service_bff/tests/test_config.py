"""
Unit tests for gateway settings.
"""

import pydantic
import pytest

from shared.config import GatewaySettings, current_rate_ceiling
from shared.test_helpers import create_test_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("JWT_SECRET", "ENVIRONMENT", "RATE_TOKENS", "RATE_REFILL_MS",
                 "ORG_SERVICE_URL", "READINESS_SERVICES"):
        monkeypatch.delenv(name, raising=False)


class TestGatewaySettings:
    """Test cases for GatewaySettings."""

    def test_secret_is_required(self):
        with pytest.raises(pydantic.ValidationError):
            GatewaySettings(_env_file=None)

    def test_empty_secret_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            GatewaySettings(_env_file=None, jwt_secret="")

    def test_defaults(self):
        settings = GatewaySettings(_env_file=None, jwt_secret="s3cret")

        assert settings.rate_tokens == 200
        assert settings.rate_refill_ms == 1000
        assert settings.refill_interval_seconds == 1.0
        assert settings.org_service_url == "http://localhost:7003"
        assert settings.readiness_service_names() == ["org", "forms", "submissions", "discounts", "staff"]

    def test_environment_mapping(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "from-env")
        monkeypatch.setenv("ORG_SERVICE_URL", "http://org.internal:9000")
        monkeypatch.setenv("RATE_TOKENS", "25")
        monkeypatch.setenv("RATE_REFILL_MS", "250")

        settings = GatewaySettings(_env_file=None)

        assert settings.jwt_secret == "from-env"
        assert settings.service_urls()["org"] == "http://org.internal:9000"
        assert settings.rate_tokens == 25
        assert settings.refill_interval_seconds == 0.25

    def test_readiness_services_from_environment(self, monkeypatch):
        monkeypatch.setenv("READINESS_SERVICES", "org, audit")

        settings = GatewaySettings(_env_file=None, jwt_secret="s3cret")

        assert settings.readiness_service_names() == ["org", "audit"]

    def test_unknown_readiness_service_rejected(self):
        with pytest.raises(pydantic.ValidationError, match="Unknown readiness services"):
            GatewaySettings(_env_file=None, jwt_secret="s3cret", readiness_services="org,billing")

    def test_unknown_entitlements_placeholder_rejected(self):
        with pytest.raises(pydantic.ValidationError, match="tenant_id"):
            GatewaySettings(
                _env_file=None,
                jwt_secret="s3cret",
                entitlements_url="http://entitlements.test/e/{tenantId}",
            )

    def test_dev_secret_rejected_in_production(self):
        with pytest.raises(pydantic.ValidationError, match="development default"):
            GatewaySettings(_env_file=None, jwt_secret="dev-secret", environment="production")

    def test_dev_secret_allowed_locally(self):
        settings = GatewaySettings(_env_file=None, jwt_secret="dev-secret")
        assert not settings.is_production

    def test_settings_are_frozen(self):
        settings = create_test_settings()
        with pytest.raises(pydantic.ValidationError):
            settings.rate_tokens = 1

    def test_non_positive_refill_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            GatewaySettings(_env_file=None, jwt_secret="s3cret", rate_refill_ms=0)

    def test_service_urls_cover_all_services(self):
        assert len(create_test_settings().service_urls()) == 17

    def test_entitlements_url_for(self):
        settings = create_test_settings()
        assert settings.entitlements_url_for("org-1") == "http://entitlements.test/entitlements/org-1"


class TestCurrentRateCeiling:
    """Test cases for live ceiling reads."""

    def test_uses_setting_when_unset(self):
        assert current_rate_ceiling(create_test_settings(rate_tokens=7)) == 7

    def test_reads_environment(self, monkeypatch):
        settings = create_test_settings(rate_tokens=7)
        monkeypatch.setenv("RATE_TOKENS", "42")

        assert current_rate_ceiling(settings) == 42

    def test_invalid_value_falls_back(self, monkeypatch):
        settings = create_test_settings(rate_tokens=7)
        monkeypatch.setenv("RATE_TOKENS", "plenty")

        assert current_rate_ceiling(settings) == 7
