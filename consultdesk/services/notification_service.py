"""
Follow-up Notification Service
Posts post-call follow-up payloads to the automation webhook (n8n)
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_RETAINER_LINK = "https://YOUR_DOMAIN/site/pay/retainer.html"
DEFAULT_PROPOSAL_LINK = "https://YOUR_DOMAIN/proposal/proposal.html"


def build_followup_payload(
    metadata: dict[str, Any],
    followup_at: str,
    retainer_link: Optional[str] = None,
    proposal_link: Optional[str] = None,
) -> dict[str, Any]:
    """Build the follow-up notification sent after an intro call"""
    return {
        "email": metadata.get("email"),
        "name": metadata.get("name"),
        "company": metadata.get("company"),
        "focus": metadata.get("focus"),
        "followup_at": followup_at,
        "retainer_link": retainer_link or DEFAULT_RETAINER_LINK,
        "proposal_link": proposal_link or DEFAULT_PROPOSAL_LINK,
    }


async def send_followup_notification(
    http_client: httpx.AsyncClient, webhook_url: str, payload: dict[str, Any]
) -> int:
    """
    POST the follow-up payload to the automation webhook

    Returns:
        The webhook's HTTP status code
    """
    logger.info(f"📧 Sending follow-up notification for {payload.get('email')}")
    response = await http_client.post(webhook_url, json=payload)
    if response.status_code >= 400:
        logger.warning(f"⚠️ Follow-up webhook responded with {response.status_code}")
    return response.status_code
