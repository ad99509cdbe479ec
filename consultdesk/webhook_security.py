"""
Webhook Security Module

Signature verification for Stripe webhooks. Verification happens on the raw
request body before any JSON parsing; a payload is only parsed once its
signature and timestamp have been checked.
"""

import json
import logging
from typing import Any, Optional

import stripe
from fastapi import Request

logger = logging.getLogger(__name__)

# Maximum age of webhook in seconds (5 minutes)
MAX_WEBHOOK_AGE_SECONDS = 300

STRIPE_SIGNATURE_HEADER = "stripe-signature"


class WebhookSignatureError(Exception):
    """Raised when webhook signature verification fails"""

    pass


def construct_stripe_event(
    payload: bytes,
    signature_header: Optional[str],
    secret: Optional[str],
    tolerance: int = MAX_WEBHOOK_AGE_SECONDS,
) -> dict[str, Any]:
    """
    Verify a Stripe webhook payload and return the decoded event.

    Args:
        payload: Raw request body, byte-for-byte as received
        signature_header: Value of the Stripe-Signature header
        secret: Endpoint signing secret (whsec_...)
        tolerance: Maximum accepted age of the signed timestamp in seconds

    Returns:
        The event as a plain dict

    Raises:
        WebhookSignatureError: If the secret or header is missing, the
            signature does not match, or the payload is not valid JSON
    """
    if not secret:
        raise WebhookSignatureError("Webhook secret not configured")
    if not signature_header:
        raise WebhookSignatureError("Missing Stripe-Signature header")

    try:
        # Stripe signs the decoded text: "<timestamp>.<payload>"
        text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise WebhookSignatureError(f"Invalid payload: {e}") from e

    try:
        stripe.WebhookSignature.verify_header(text, signature_header, secret, tolerance)
    except stripe.SignatureVerificationError as e:
        raise WebhookSignatureError(str(e.user_message or e)) from e

    try:
        event = json.loads(text)
    except ValueError as e:
        raise WebhookSignatureError(f"Invalid payload: {e}") from e

    if not isinstance(event, dict):
        raise WebhookSignatureError("Invalid payload: expected a JSON object")
    return event


async def verify_stripe_webhook(request: Request, secret: Optional[str]) -> dict[str, Any]:
    """Read the raw body and signature header from a request and verify them"""
    raw_body = await request.body()
    signature_header = request.headers.get(STRIPE_SIGNATURE_HEADER)

    logger.info(f"📥 Stripe webhook received: {len(raw_body)} bytes")

    event = construct_stripe_event(raw_body, signature_header, secret)
    logger.info(f"✅ Stripe webhook signature verified: {event.get('id', 'unknown')}")
    return event
