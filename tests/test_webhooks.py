"""Tests for the Stripe webhook orchestrator."""

from __future__ import annotations

import json
import time
from unittest.mock import AsyncMock

import pytest

from conftest import WEBHOOK_SECRET, make_http_response, sign_stripe_payload
from consultdesk.domain.billing.webhooks import WebhookOrchestrator
from consultdesk.services.google_calendar_service import GoogleCalendarError
from consultdesk.webhook_security import WebhookSignatureError, construct_stripe_event


def checkout_completed_event(mode: str = "payment", **metadata) -> dict:
    """Create a checkout.session.completed event payload."""
    md = {
        "company": "Acme Co",
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "date": "2024-07-01",
        "time": "12:00",
        "focus": "Automation",
        "notes": "Wants a workflow audit",
    }
    md.update(metadata)
    return {
        "id": "evt_test_1",
        "type": "checkout.session.completed",
        "data": {"object": {"id": "cs_test_1", "mode": mode, "metadata": md}},
    }


def post_event(client, event: dict, secret: str = WEBHOOK_SECRET):
    payload = json.dumps(event).encode("utf-8")
    return client.post(
        "/stripe/webhook",
        content=payload,
        headers={
            "stripe-signature": sign_stripe_payload(payload, secret),
            "content-type": "application/json",
        },
    )


# ============================================================================
# Signature Verification
# ============================================================================


class TestSignatureVerification:
    """Tests for construct_stripe_event."""

    def test_valid_signature_returns_event(self):
        payload = json.dumps({"id": "evt_1", "type": "invoice.paid"}).encode("utf-8")
        event = construct_stripe_event(payload, sign_stripe_payload(payload), WEBHOOK_SECRET)
        assert event["type"] == "invoice.paid"

    def test_wrong_secret_fails(self):
        payload = b'{"id": "evt_1"}'
        header = sign_stripe_payload(payload, secret="whsec_other")
        with pytest.raises(WebhookSignatureError):
            construct_stripe_event(payload, header, WEBHOOK_SECRET)

    def test_tampered_payload_fails(self):
        payload = b'{"id": "evt_1"}'
        header = sign_stripe_payload(payload)
        with pytest.raises(WebhookSignatureError):
            construct_stripe_event(b'{"id": "evt_2"}', header, WEBHOOK_SECRET)

    def test_expired_timestamp_fails(self):
        payload = b'{"id": "evt_1"}'
        header = sign_stripe_payload(payload, timestamp=int(time.time()) - 3600)
        with pytest.raises(WebhookSignatureError):
            construct_stripe_event(payload, header, WEBHOOK_SECRET)

    def test_missing_header_fails(self):
        with pytest.raises(WebhookSignatureError) as exc_info:
            construct_stripe_event(b"{}", None, WEBHOOK_SECRET)
        assert "Stripe-Signature" in str(exc_info.value)

    def test_missing_secret_fails(self):
        payload = b"{}"
        with pytest.raises(WebhookSignatureError):
            construct_stripe_event(payload, sign_stripe_payload(payload), None)


# ============================================================================
# Webhook Endpoint
# ============================================================================


class TestWebhookEndpoint:
    """Tests for POST /stripe/webhook."""

    def test_bad_signature_returns_400_without_side_effects(
        self, client, mock_calendar, mock_http_client
    ):
        response = post_event(client, checkout_completed_event(), secret="whsec_wrong")

        assert response.status_code == 400
        assert response.text.startswith("Webhook Error:")
        mock_calendar.insert_event.assert_not_called()
        mock_http_client.post.assert_not_called()

    def test_missing_signature_returns_400(self, client, mock_calendar):
        response = client.post("/stripe/webhook", content=b"{}")

        assert response.status_code == 400
        mock_calendar.insert_event.assert_not_called()

    def test_payment_completed_books_call_and_notifies(
        self, client, mock_calendar, mock_http_client, settings
    ):
        response = post_event(client, checkout_completed_event())

        assert response.status_code == 200
        assert response.json() == {"received": True}

        mock_calendar.insert_event.assert_awaited_once()
        calendar_id, body = mock_calendar.insert_event.call_args.args
        assert calendar_id == settings.google_calendar_id
        assert body["summary"] == "Intro Call: Acme Co"
        assert body["start"] == {"dateTime": "2024-07-01T12:00:00", "timeZone": "America/New_York"}
        # 12:00 EDT + 25 minutes
        assert body["end"] == {
            "dateTime": "2024-07-01T16:25:00.000Z",
            "timeZone": "America/New_York",
        }
        assert body["attendees"] == [{"email": "ada@example.com"}]
        assert body["location"] == settings.meet_link
        assert "Requester: Ada Lovelace <ada@example.com>" in body["description"]

        mock_http_client.post.assert_awaited_once()
        url = mock_http_client.post.call_args.args[0]
        payload = mock_http_client.post.call_args.kwargs["json"]
        assert url == settings.n8n_post_call_webhook
        assert payload == {
            "email": "ada@example.com",
            "name": "Ada Lovelace",
            "company": "Acme Co",
            "focus": "Automation",
            "followup_at": "2024-07-01T16:30:00.000Z",
            "retainer_link": "https://example.com/retainer",
            "proposal_link": "https://example.com/proposal",
        }

    def test_booking_failure_still_acknowledges_and_skips_notification(
        self, client, mock_calendar, mock_http_client
    ):
        mock_calendar.insert_event.side_effect = GoogleCalendarError("quota exceeded")

        response = post_event(client, checkout_completed_event())

        assert response.status_code == 200
        assert response.json() == {"received": True}
        mock_http_client.post.assert_not_called()

    def test_notification_failure_still_acknowledges(self, client, mock_http_client):
        mock_http_client.post.side_effect = RuntimeError("connection refused")

        response = post_event(client, checkout_completed_event())

        assert response.status_code == 200
        assert response.json() == {"received": True}

    def test_subscription_checkout_has_no_side_effects(
        self, client, mock_calendar, mock_http_client
    ):
        response = post_event(client, checkout_completed_event(mode="subscription"))

        assert response.status_code == 200
        mock_calendar.insert_event.assert_not_called()
        mock_http_client.post.assert_not_called()

    @pytest.mark.parametrize(
        "event_type",
        [
            "customer.subscription.created",
            "customer.subscription.updated",
            "customer.subscription.deleted",
            "invoice.paid",
            "invoice.payment_failed",
        ],
    )
    def test_subscription_lifecycle_events_are_acknowledged(
        self, client, mock_calendar, event_type
    ):
        response = post_event(client, {"id": "evt_1", "type": event_type, "data": {"object": {}}})

        assert response.status_code == 200
        assert response.json() == {"received": True}
        mock_calendar.insert_event.assert_not_called()

    def test_unknown_event_is_acknowledged(self, client):
        response = post_event(client, {"id": "evt_1", "type": "charge.refunded"})

        assert response.status_code == 200
        assert response.json() == {"received": True}

    @pytest.mark.parametrize("data", [["x"], "object", None, {"object": ["x"]}])
    def test_malformed_checkout_data_is_acknowledged(self, client, mock_calendar, data):
        response = post_event(
            client, {"id": "evt_1", "type": "checkout.session.completed", "data": data}
        )

        assert response.status_code == 200
        assert response.json() == {"received": True}
        mock_calendar.insert_event.assert_not_called()


# ============================================================================
# Orchestrator
# ============================================================================


class TestWebhookOrchestrator:
    """Tests for WebhookOrchestrator step results."""

    @pytest.mark.asyncio
    async def test_notification_skipped_when_webhook_not_configured(
        self, context, mock_http_client
    ):
        context.settings = context.settings.model_copy(update={"n8n_post_call_webhook": None})

        results = await WebhookOrchestrator(context).handle_event(checkout_completed_event())

        assert results[0].ok is True
        assert results[1].skipped is True
        mock_http_client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_calendar_fails_booking_step(self, context, mock_http_client):
        context.calendar = None

        results = await WebhookOrchestrator(context).handle_event(checkout_completed_event())

        assert results[0].ok is False
        assert "not configured" in results[0].error
        assert results[1].skipped is True
        mock_http_client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_booking_date_is_swallowed(self, context, mock_calendar):
        results = await WebhookOrchestrator(context).handle_event(
            checkout_completed_event(date="not-a-date")
        )

        assert results[0].ok is False
        mock_calendar.insert_event.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_object_metadata_fails_booking_step(self, context, mock_calendar):
        event = checkout_completed_event()
        event["data"]["object"]["metadata"] = "company=Acme"

        results = await WebhookOrchestrator(context).handle_event(event)

        assert results[0].ok is False
        assert results[1].skipped is True
        mock_calendar.insert_event.assert_not_called()

    @pytest.mark.asyncio
    async def test_default_links_used_when_not_configured(self, context, mock_http_client):
        context.settings = context.settings.model_copy(
            update={"retainer_link": None, "proposal_link": None}
        )
        mock_http_client.post = AsyncMock(return_value=make_http_response(200))

        await WebhookOrchestrator(context).handle_event(checkout_completed_event())

        payload = mock_http_client.post.call_args.kwargs["json"]
        assert payload["retainer_link"].endswith("/site/pay/retainer.html")
        assert payload["proposal_link"].endswith("/proposal/proposal.html")
