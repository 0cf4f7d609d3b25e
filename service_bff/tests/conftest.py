"""
Shared fixtures for gateway tests.
"""

import pytest
from fastapi.testclient import TestClient

from service_bff.app.main import create_app
from shared.test_helpers import UpstreamStub, create_mock_jwt_token, create_test_settings


@pytest.fixture
def upstream():
    """Fake downstream services behind an httpx.MockTransport."""
    return UpstreamStub()


@pytest.fixture
def settings():
    return create_test_settings()


@pytest.fixture
def app(settings, upstream):
    return create_app(settings=settings, transport=upstream.transport())


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def service(app):
    return app.state.gateway_service


@pytest.fixture
def token():
    return create_mock_jwt_token(user_id="user-1", org_id="org-1")


@pytest.fixture
def headers(token):
    return {"Authorization": f"Bearer {token}"}
