"""Stripe service - Integration with the Stripe API"""

import asyncio
import logging
from typing import Any, Optional

import stripe

logger = logging.getLogger(__name__)

STRIPE_API_VERSION = "2024-06-20"


class StripeService:
    """Service for Stripe API operations"""

    def __init__(self, api_key: Optional[str]):
        self.api_key = api_key

        if not self.api_key:
            logger.warning("STRIPE_SECRET_KEY not set; billing endpoints will fail until configured")
        else:
            logger.info("Stripe client initialized")

    def is_available(self) -> bool:
        """Check if the Stripe client has credentials"""
        return bool(self.api_key)

    def _ensure_available(self):
        if not self.api_key:
            raise Exception("Stripe client not initialized")

    async def _call(self, func, **params) -> Any:
        # The Stripe SDK is blocking; keep it off the event loop
        return await asyncio.to_thread(
            func, api_key=self.api_key, stripe_version=STRIPE_API_VERSION, **params
        )

    async def create_checkout_session(self, **params) -> Any:
        """Create a hosted Checkout session"""
        self._ensure_available()
        try:
            return await self._call(stripe.checkout.Session.create, **params)
        except Exception as e:
            logger.error(f"Failed to create checkout session: {e}")
            raise

    async def find_customer_by_email(self, email: Optional[str]) -> Optional[Any]:
        """Return the first customer with this email, if any"""
        self._ensure_available()
        customers = await self._call(stripe.Customer.list, email=email, limit=1)
        return customers.data[0] if customers.data else None

    async def create_customer(self, email: Optional[str]) -> Any:
        """Create a customer"""
        self._ensure_available()
        return await self._call(stripe.Customer.create, email=email)

    async def get_or_create_customer(self, email: Optional[str]) -> Any:
        """Find a customer by email or create one"""
        try:
            customer = await self.find_customer_by_email(email)
            if customer is None:
                customer = await self.create_customer(email)
                logger.info(f"Created Stripe customer {customer.id}")
            return customer
        except Exception as e:
            logger.error(f"Failed to resolve customer for {email}: {e}")
            raise

    async def create_portal_session(self, customer_id: str, return_url: Optional[str]) -> Any:
        """Create a billing-portal session"""
        self._ensure_available()
        try:
            return await self._call(
                stripe.billing_portal.Session.create,
                customer=customer_id,
                return_url=return_url,
            )
        except Exception as e:
            logger.error(f"Failed to create billing portal session for {customer_id}: {e}")
            raise
