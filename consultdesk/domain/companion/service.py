"""Companion service - Relays chat messages to the companion webhook"""

import logging
from typing import Optional

import httpx

from ...errors import CompanionServiceError, InvalidRequestError

logger = logging.getLogger(__name__)

DEFAULT_REPLY = "Response received."
NOT_CONFIGURED_REPLY = "Your workspace is ready once the companion backend URL is configured."


class CompanionProxy:
    """Forwards a message to the companion backend and returns its reply"""

    def __init__(self, webhook_url: Optional[str], http_client: Optional[httpx.AsyncClient]):
        self.webhook_url = webhook_url
        self.http_client = http_client

    def is_configured(self) -> bool:
        return bool(self.webhook_url and self.http_client)

    async def relay(self, message: Optional[str]) -> str:
        """
        Relay a message

        Raises:
            InvalidRequestError: If the message is empty
            CompanionServiceError: If the companion backend fails
        """
        if not message:
            raise InvalidRequestError("Message is required")

        if not self.is_configured():
            return NOT_CONFIGURED_REPLY

        try:
            response = await self.http_client.post(self.webhook_url, json={"message": message})
            if not response.is_success:
                raise CompanionServiceError(f"Companion webhook failed ({response.status_code})")
            data = response.json()
        except Exception as e:
            logger.error(f"Companion webhook error: {e}")
            raise CompanionServiceError() from e

        reply = data.get("reply") if isinstance(data, dict) else None
        return reply or DEFAULT_REPLY
