"""Pytest configuration and fixtures."""

import os
import secrets

import pytest

# Generate a unique test secret for this test run to prevent token forgery
_TEST_JWT_SECRET = f"test-only-{secrets.token_urlsafe(32)}"
os.environ.setdefault("JWT_SECRET_KEY", _TEST_JWT_SECRET)

from fastapi.testclient import TestClient  # noqa: E402
from helpers import MIN_CONFIRMATIONS, PAYMENT_ADDRESSES, StubAdapter  # noqa: E402

from txverify.api.main import app  # noqa: E402
from txverify.api.rate_limit import limiter  # noqa: E402
from txverify.api.routes import get_engine  # noqa: E402
from txverify.engine import VerificationEngine  # noqa: E402
from txverify.registry import ConfirmationPolicy, PaymentAddressRegistry  # noqa: E402


@pytest.fixture
def registry():
    return PaymentAddressRegistry(PAYMENT_ADDRESSES)


@pytest.fixture
def policy():
    return ConfirmationPolicy(MIN_CONFIRMATIONS)


@pytest.fixture
def stub_adapter():
    return StubAdapter()


@pytest.fixture
def engine(registry, policy, stub_adapter):
    """Engine whose every currency routes to the same stub adapter."""
    return VerificationEngine(
        registry=registry,
        policy=policy,
        adapters={code: stub_adapter for code in PAYMENT_ADDRESSES},
    )


@pytest.fixture
def client(engine):
    """Create a test client backed by the stub engine."""
    limiter.reset()
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.reset()


@pytest.fixture
def auth_headers():
    """Create auth headers with a test token."""
    from txverify.api.auth import create_access_token
    from txverify.config import get_settings

    # Use clearly invalid test ID that cannot collide with production IDs
    token = create_access_token("caller_TEST_ONLY_000000", get_settings())
    return {"Authorization": f"Bearer {token}"}
