"""
Stripe webhook handling

A completed one-time checkout books the intro call on the calendar and then
notifies the post-call automation webhook. Both side effects are best-effort:
their failures are logged and the webhook is still acknowledged, so Stripe
does not retry deliveries because a downstream integration is flaky.
"""

import logging
from datetime import datetime, timedelta
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from ...context import AppContext, get_context
from ...services.google_calendar_service import GoogleCalendarError, build_intro_call_event
from ...services.notification_service import build_followup_payload, send_followup_notification
from ...shared.best_effort import BestEffortStep, StepResult
from ...shared.datetime_utils import add_minutes, to_iso_instant
from ...webhook_security import WebhookSignatureError, verify_stripe_webhook

logger = logging.getLogger(__name__)

webhooks_router = APIRouter(prefix="/stripe", tags=["Webhooks"])

CHECKOUT_COMPLETED = "checkout.session.completed"
SUBSCRIPTION_EVENTS = frozenset(
    {
        "customer.subscription.created",
        "customer.subscription.updated",
        "customer.subscription.deleted",
        "invoice.paid",
        "invoice.payment_failed",
    }
)

INTRO_CALL_MINUTES = 25
FOLLOWUP_DELAY_MINUTES = 5


class WebhookOrchestrator:
    """Dispatches verified Stripe events to their side effects"""

    def __init__(self, context: AppContext):
        self.context = context
        self.settings = context.settings

    async def handle_event(self, event: dict[str, Any]) -> list[StepResult]:
        """Run the side effects for one event; never raises for downstream failures"""
        event_type = event.get("type")
        results: list[StepResult] = []

        if event_type == CHECKOUT_COMPLETED:
            data = event.get("data")
            session = data.get("object") if isinstance(data, dict) else None
            if not isinstance(session, dict):
                session = {}
            mode = session.get("mode")
            if mode == "payment":
                results = await self.handle_payment_completed(session)
            elif mode == "subscription":
                logger.info(f"Subscription checkout completed: {session.get('id')}")

        if event_type in SUBSCRIPTION_EVENTS:
            logger.info(f"Subscription event: {event_type}")
        elif event_type != CHECKOUT_COMPLETED:
            logger.debug(f"Unhandled event type: {event_type}")

        return results

    async def handle_payment_completed(self, session: dict[str, Any]) -> list[StepResult]:
        """Book the intro call, then schedule the follow-up"""
        metadata = session.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}

        booking = await BestEffortStep("Calendar booking", logger).run(
            self.book_intro_call, metadata
        )
        if not booking.ok:
            # The follow-up time is derived from the booking's end
            return [booking, StepResult.skip("Follow-up notification", "booking failed")]

        if not (self.settings.n8n_post_call_webhook and self.context.http_client):
            return [booking, StepResult.skip("Follow-up notification", "not configured")]

        notification = await BestEffortStep("Follow-up notification", logger).run(
            self.notify_followup, metadata, booking.value
        )
        return [booking, notification]

    async def book_intro_call(self, metadata: dict[str, Any]) -> str:
        """Insert the calendar event and return its end instant"""
        calendar = self.context.calendar
        if calendar is None:
            raise GoogleCalendarError("Google Calendar not configured")

        timezone = self.settings.timezone
        end_iso = add_minutes(
            metadata.get("date"), metadata.get("time"), INTRO_CALL_MINUTES, timezone
        )
        event_body = build_intro_call_event(metadata, end_iso, timezone, self.settings.meet_link)
        await calendar.insert_event(self.settings.google_calendar_id or "primary", event_body)
        return end_iso

    async def notify_followup(self, metadata: dict[str, Any], end_iso: str) -> int:
        """Tell the automation webhook when to follow up"""
        end = datetime.fromisoformat(end_iso.replace("Z", "+00:00"))
        followup_at = to_iso_instant(end + timedelta(minutes=FOLLOWUP_DELAY_MINUTES))
        payload = build_followup_payload(
            metadata,
            followup_at,
            retainer_link=self.settings.retainer_link,
            proposal_link=self.settings.proposal_link,
        )
        return await send_followup_notification(
            self.context.http_client, self.settings.n8n_post_call_webhook, payload
        )


@webhooks_router.post("/webhook")
async def handle_stripe_webhook(request: Request, context: AppContext = Depends(get_context)):
    """
    Handle Stripe webhook events

    Signature failures return 400 with the verification message. Once the
    signature is verified the event is always acknowledged with 200.
    """
    try:
        event = await verify_stripe_webhook(request, context.settings.stripe_webhook_secret)
    except WebhookSignatureError as e:
        logger.error(f"Webhook error: {e}")
        return PlainTextResponse(f"Webhook Error: {e}", status_code=400)

    await WebhookOrchestrator(context).handle_event(event)
    return {"received": True}
