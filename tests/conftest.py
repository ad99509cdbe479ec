"""Pytest configuration and fixtures for consultdesk tests."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from consultdesk.config import Settings
from consultdesk.context import AppContext
from consultdesk.domain.analytics.repository import RECORD_EVENT_QUERY
from consultdesk.main import create_app

WEBHOOK_SECRET = "whsec_test_secret"


# ============================================================================
# Helper Functions
# ============================================================================


def sign_stripe_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header the way Stripe signs webhooks."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.".encode("utf-8") + payload
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def make_http_response(status_code: int = 200, body: dict | None = None) -> MagicMock:
    """Create a mock httpx response."""
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.json.return_value = body if body is not None else {}
    response.text = json.dumps(body or {})
    return response


def make_result(**values) -> MagicMock:
    """Create a mock Neo4j EagerResult with a single record."""
    result = MagicMock()
    result.records = [values]
    return result


class FakeGraphDriver:
    """In-memory stand-in for the Neo4j driver that understands the event write."""

    def __init__(self):
        self.visitors: dict[str, dict] = {}
        self.events: list[dict] = []
        self.calls: list[tuple[str, dict]] = []

    async def execute_query(self, query, parameters=None, database_=None):
        parameters = parameters or {}
        self.calls.append((query, parameters))
        if query == RECORD_EVENT_QUERY:
            visitor = self.visitors.setdefault(
                parameters["sessionId"], {"firstSeen": parameters["timestamp"]}
            )
            visitor["lastSeen"] = parameters["timestamp"]
            self.events.append(
                {
                    "id": parameters["eventId"],
                    "type": parameters["eventType"],
                    "page": parameters["page"],
                    "timestamp": parameters["timestamp"],
                    "properties": parameters["properties"],
                    "sessionId": parameters["sessionId"],
                }
            )
        return MagicMock(records=[])

    async def close(self):
        pass


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def settings():
    """Fully configured settings for tests."""
    return Settings(
        success_url="https://example.com/success",
        cancel_url="https://example.com/cancel",
        stripe_secret_key="sk_test_123",
        stripe_retainer_price_id="price_123",
        stripe_success_sub_url="https://example.com/sub/success",
        stripe_cancel_sub_url="https://example.com/sub/cancel",
        stripe_webhook_secret=WEBHOOK_SECRET,
        timezone="America/New_York",
        google_calendar_id="calendar@example.com",
        meet_link="https://meet.example.com/intro",
        n8n_post_call_webhook="https://n8n.example.com/webhook/post-call",
        retainer_link="https://example.com/retainer",
        proposal_link="https://example.com/proposal",
    )


@pytest.fixture
def mock_stripe():
    """Mock StripeService."""
    stripe = MagicMock()
    stripe.create_checkout_session = AsyncMock(
        return_value=MagicMock(id="cs_test_1", url="https://checkout.stripe.com/c/cs_test_1")
    )
    stripe.get_or_create_customer = AsyncMock(return_value=MagicMock(id="cus_123"))
    stripe.create_portal_session = AsyncMock(
        return_value=MagicMock(url="https://billing.stripe.com/p/session_1")
    )
    return stripe


@pytest.fixture
def mock_calendar():
    """Mock GoogleCalendarClient."""
    calendar = MagicMock()
    calendar.insert_event = AsyncMock(return_value={"id": "evt_1"})
    return calendar


@pytest.fixture
def mock_http_client():
    """Mock shared httpx.AsyncClient."""
    client = MagicMock()
    client.post = AsyncMock(return_value=make_http_response(200, {}))
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def mock_graph_driver():
    """Mock Neo4j AsyncDriver."""
    driver = MagicMock()
    driver.execute_query = AsyncMock(return_value=MagicMock(records=[]))
    driver.close = AsyncMock()
    return driver


@pytest.fixture
def context(settings, mock_stripe, mock_calendar, mock_http_client, mock_graph_driver):
    """Application context wired with mocks."""
    return AppContext(
        settings=settings,
        stripe=mock_stripe,
        calendar=mock_calendar,
        graph_driver=mock_graph_driver,
        http_client=mock_http_client,
    )


@pytest.fixture
def client(context):
    """Test client for an app built around the mocked context."""
    return TestClient(create_app(context))
