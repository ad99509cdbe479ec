import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_PORT = 8081


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value if value else None


class Settings(BaseModel):
    """Runtime configuration read from the environment"""

    # CORS: comma-separated allow-list, empty allows every origin
    origin: str = ""

    # Stripe
    stripe_secret_key: Optional[str] = None
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None
    stripe_retainer_price_id: Optional[str] = None
    stripe_success_sub_url: Optional[str] = None
    stripe_cancel_sub_url: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None

    # Google Calendar (service account)
    timezone: str = DEFAULT_TIMEZONE
    google_calendar_id: Optional[str] = None
    google_client_email: Optional[str] = None
    google_private_key: Optional[str] = None
    meet_link: str = ""

    # Downstream webhooks
    n8n_post_call_webhook: Optional[str] = None
    companion_webhook: Optional[str] = None
    retainer_link: Optional[str] = None
    proposal_link: Optional[str] = None

    # Neo4j analytics storage
    neo4j_uri: Optional[str] = None
    neo4j_user: Optional[str] = None
    neo4j_password: Optional[str] = None
    neo4j_database: Optional[str] = None

    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables"""
        private_key = os.getenv("GOOGLE_PRIVATE_KEY", "")
        # Keys pasted into .env files usually carry literal "\n" sequences
        private_key = private_key.replace("\\n", "\n")

        return cls(
            origin=os.getenv("ORIGIN", ""),
            stripe_secret_key=_env("STRIPE_SECRET_KEY"),
            success_url=_env("SUCCESS_URL"),
            cancel_url=_env("CANCEL_URL"),
            stripe_retainer_price_id=_env("STRIPE_RETAINER_PRICE_ID"),
            stripe_success_sub_url=_env("STRIPE_SUCCESS_SUB_URL"),
            stripe_cancel_sub_url=_env("STRIPE_CANCEL_SUB_URL"),
            stripe_webhook_secret=_env("STRIPE_WEBHOOK_SECRET"),
            timezone=os.getenv("TIMEZONE") or DEFAULT_TIMEZONE,
            google_calendar_id=_env("GOOGLE_CALENDAR_ID"),
            google_client_email=_env("GOOGLE_CLIENT_EMAIL"),
            google_private_key=private_key or None,
            meet_link=os.getenv("MEET_LINK", ""),
            n8n_post_call_webhook=_env("N8N_POST_CALL_WEBHOOK"),
            companion_webhook=_env("COMPANION_WEBHOOK"),
            retainer_link=_env("RETAINER_LINK"),
            proposal_link=_env("PROPOSAL_LINK"),
            neo4j_uri=_env("NEO4J_URI"),
            neo4j_user=_env("NEO4J_USER"),
            neo4j_password=_env("NEO4J_PASSWORD"),
            neo4j_database=_env("NEO4J_DATABASE"),
            port=int(os.getenv("PORT", str(DEFAULT_PORT))),
        )

    @property
    def allowed_origins(self) -> list[str]:
        """CORS origins; ["*"] when no allow-list is configured"""
        origins = [o.strip() for o in self.origin.split(",") if o.strip()]
        return origins or ["*"]

    @property
    def neo4j_configured(self) -> bool:
        return bool(self.neo4j_uri and self.neo4j_user and self.neo4j_password)

    @property
    def google_calendar_configured(self) -> bool:
        return bool(self.google_client_email and self.google_private_key)
