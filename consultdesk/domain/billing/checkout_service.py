"""Checkout service - Builds Stripe sessions for consultations and retainers"""

import logging

from ...config import Settings
from ...errors import PaymentProviderError
from .schemas import CheckoutRequest, PortalRequest, SubscriptionRequest
from .stripe_service import StripeService

logger = logging.getLogger(__name__)

INTRO_CONSULTATION_AMOUNT = 10000  # cents
INTRO_CONSULTATION_CURRENCY = "usd"


class CheckoutService:
    """Service for hosted checkout, subscription and portal sessions"""

    def __init__(self, stripe: StripeService, settings: Settings):
        self.stripe = stripe
        self.settings = settings

    async def create_checkout_session(self, request: CheckoutRequest) -> dict:
        """Create a one-time payment session for an intro consultation"""
        try:
            session = await self.stripe.create_checkout_session(
                mode="payment",
                payment_method_types=["card"],
                customer_email=request.email,
                line_items=[
                    {
                        "price_data": {
                            "currency": INTRO_CONSULTATION_CURRENCY,
                            "unit_amount": INTRO_CONSULTATION_AMOUNT,
                            "product_data": {
                                "name": f"Intro Consultation ({request.focus or 'General'})"
                            },
                        },
                        "quantity": 1,
                    }
                ],
                success_url=self.settings.success_url,
                cancel_url=self.settings.cancel_url,
                metadata=request.to_metadata(),
            )
        except Exception as e:
            logger.error(f"❌ Checkout session failed for {request.email}: {e}")
            raise PaymentProviderError(str(e)) from e

        logger.info(f"✅ Checkout session created: {session.id}")
        return {"url": session.url}

    async def create_subscription_session(self, request: SubscriptionRequest) -> dict:
        """Create a retainer subscription session"""
        try:
            session = await self.stripe.create_checkout_session(
                mode="subscription",
                customer_email=request.email,
                line_items=[{"price": self.settings.stripe_retainer_price_id, "quantity": 1}],
                allow_promotion_codes=True,
                success_url=self.settings.stripe_success_sub_url,
                cancel_url=self.settings.stripe_cancel_sub_url,
                metadata=request.to_metadata(),
            )
        except Exception as e:
            logger.error(f"❌ Subscription session failed for {request.email}: {e}")
            raise PaymentProviderError(str(e)) from e

        logger.info(f"✅ Subscription session created: {session.id}")
        return {"url": session.url}

    async def create_portal_session(self, request: PortalRequest) -> dict:
        """Open the billing portal for the customer with this email, creating one if needed"""
        try:
            customer = await self.stripe.get_or_create_customer(request.email)
            portal = await self.stripe.create_portal_session(
                customer.id, self.settings.stripe_success_sub_url
            )
        except Exception as e:
            logger.error(f"❌ Billing portal failed for {request.email}: {e}")
            raise PaymentProviderError(str(e)) from e

        return {"url": portal.url}
