"""
Application context

Shared clients are built once per application and handed to request
handlers through FastAPI dependencies instead of module-level singletons.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Request
from neo4j import AsyncDriver

from .config import Settings
from .domain.billing.stripe_service import StripeService
from .graph import create_graph_driver
from .services.google_calendar_service import GoogleCalendarAuth, GoogleCalendarClient

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    stripe: StripeService
    calendar: Optional[GoogleCalendarClient] = None
    graph_driver: Optional[AsyncDriver] = None
    http_client: Optional[httpx.AsyncClient] = None

    async def aclose(self) -> None:
        """Release network resources on shutdown"""
        if self.graph_driver is not None:
            await self.graph_driver.close()
        if self.http_client is not None:
            await self.http_client.aclose()


def build_context(settings: Settings) -> AppContext:
    """Create the production clients from settings"""
    http_client = httpx.AsyncClient()

    calendar = None
    if settings.google_calendar_configured:
        try:
            auth = GoogleCalendarAuth(settings.google_client_email, settings.google_private_key)
            calendar = GoogleCalendarClient(auth, http_client)
            logger.info(f"Google Calendar client ready ({auth.service_account_email})")
        except Exception as e:
            logger.error(f"Failed to load Google service account credentials: {e}")
    else:
        logger.warning("Google service account not configured; intro calls will not be booked")

    return AppContext(
        settings=settings,
        stripe=StripeService(settings.stripe_secret_key),
        calendar=calendar,
        graph_driver=create_graph_driver(settings),
        http_client=http_client,
    )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the application context"""
    return request.app.state.context
