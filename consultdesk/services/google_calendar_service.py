"""
Google Calendar Service
Books intro calls on a shared calendar using a service account
"""

import asyncio
import logging
from typing import Any, Optional

import httpx
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar"]


class GoogleCalendarError(Exception):
    """Calendar API call failed"""

    pass


class GoogleCalendarAuth:
    """Service-account credentials for the Calendar API"""

    def __init__(self, client_email: str, private_key: str, scopes: Optional[list[str]] = None):
        self._credentials = service_account.Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": client_email,
                "private_key": private_key,
                "token_uri": GOOGLE_TOKEN_URL,
            },
            scopes=scopes or CALENDAR_SCOPES,
        )

    @property
    def service_account_email(self) -> str:
        return self._credentials.service_account_email

    async def authorize(self) -> str:
        """Return a valid access token, refreshing it when expired"""
        if not self._credentials.valid:
            logger.info("🔄 Google Calendar token expired, refreshing...")
            # google-auth refreshes synchronously
            await asyncio.to_thread(self._credentials.refresh, GoogleAuthRequest())
        return self._credentials.token


class GoogleCalendarClient:
    """Inserts events into a Google Calendar"""

    def __init__(self, auth: GoogleCalendarAuth, http_client: httpx.AsyncClient):
        self.auth = auth
        self.http_client = http_client

    async def insert_event(self, calendar_id: str, event_body: dict[str, Any]) -> dict[str, Any]:
        """
        Create a calendar event

        Returns:
            The created event resource

        Raises:
            GoogleCalendarError: If the API rejects the event
        """
        access_token = await self.auth.authorize()
        response = await self.http_client.post(
            f"{GOOGLE_CALENDAR_API}/calendars/{calendar_id}/events",
            headers={"Authorization": f"Bearer {access_token}"},
            json=event_body,
        )

        if response.status_code not in (200, 201):
            logger.error(f"❌ Failed to create calendar event: {response.text}")
            raise GoogleCalendarError(f"Calendar API returned {response.status_code}")

        event = response.json()
        logger.info(f"✅ Google Calendar event created: {event.get('id')}")
        return event


def build_intro_call_event(
    metadata: dict[str, Any],
    end_iso: str,
    timezone: str,
    meet_link: str = "",
) -> dict[str, Any]:
    """Build the Calendar API body for a booked intro call"""
    description = (
        f"Requester: {metadata.get('name')} <{metadata.get('email')}>\n"
        f"Focus: {metadata.get('focus')}\n"
        f"Notes:\n{metadata.get('notes') or ''}"
    )
    return {
        "summary": f"Intro Call: {metadata.get('company') or 'New Client'}",
        "description": description,
        "start": {
            "dateTime": f"{metadata.get('date')}T{metadata.get('time')}:00",
            "timeZone": timezone,
        },
        "end": {"dateTime": end_iso, "timeZone": timezone},
        "attendees": [{"email": metadata.get("email")}],
        "location": meet_link or "",
    }
