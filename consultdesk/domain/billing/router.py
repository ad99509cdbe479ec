"""Billing router - FastAPI endpoints for Stripe hosted flows"""

import logging

from fastapi import APIRouter, Depends, Request

from ...context import AppContext, get_context
from ...shared.request_utils import parse_payload, read_json_object
from .checkout_service import CheckoutService
from .schemas import CheckoutRequest, PortalRequest, SessionUrlResponse, SubscriptionRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stripe", tags=["Billing"])


def get_checkout_service(context: AppContext = Depends(get_context)) -> CheckoutService:
    """Dependency injection for CheckoutService"""
    return CheckoutService(context.stripe, context.settings)


# Bodies are read leniently: an empty body is passed through as an empty form


@router.post("/checkout", response_model=SessionUrlResponse)
async def create_checkout_session(
    request: Request,
    service: CheckoutService = Depends(get_checkout_service),
):
    """Create a one-time intro consultation checkout"""
    body = parse_payload(CheckoutRequest, await read_json_object(request), "checkout request")
    return await service.create_checkout_session(body)


@router.post("/subscription", response_model=SessionUrlResponse)
async def create_subscription_session(
    request: Request,
    service: CheckoutService = Depends(get_checkout_service),
):
    """Create a retainer subscription checkout"""
    body = parse_payload(
        SubscriptionRequest, await read_json_object(request), "subscription request"
    )
    return await service.create_subscription_session(body)


@router.post("/portal", response_model=SessionUrlResponse)
async def create_portal_session(
    request: Request,
    service: CheckoutService = Depends(get_checkout_service),
):
    """Open the Stripe billing portal"""
    body = parse_payload(PortalRequest, await read_json_object(request), "portal request")
    return await service.create_portal_session(body)
