"""Analytics service - Business logic for visitor/event tracking"""

import logging
import uuid
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from ...errors import InvalidRequestError, StorageError, StorageNotConfiguredError
from ...shared.datetime_utils import utc_now_iso
from ...shared.request_utils import parse_payload
from .repository import AnalyticsRepository
from .schemas import AnalyticsEventRequest, MetricsSnapshot

logger = logging.getLogger(__name__)

CONVERSION_EVENT_TYPE = "conversion"


def compute_conversion_rate(conversions: int, visitors: int) -> float:
    """conversions / visitors rounded half-up to 3 decimals; 0 without visitors"""
    if not visitors:
        return 0
    rate = Decimal(conversions) / Decimal(visitors)
    return float(rate.quantize(Decimal("0.001"), rounding=ROUND_HALF_UP))


def parse_event_payload(payload: Any) -> AnalyticsEventRequest:
    """
    Validate a raw analytics payload

    Raises:
        InvalidRequestError: If eventType/sessionId are missing or properties
            is not a mapping
    """
    if not isinstance(payload, Mapping):
        payload = {}

    if not payload.get("eventType") or not payload.get("sessionId"):
        raise InvalidRequestError("eventType and sessionId are required")

    properties = payload.get("properties")
    if properties is None:
        properties = {}
    if not isinstance(properties, Mapping):
        raise InvalidRequestError("properties must be an object")

    return parse_payload(
        AnalyticsEventRequest, {**payload, "properties": dict(properties)}, "analytics event"
    )


class AnalyticsService:
    """Service for analytics recording and metrics"""

    def __init__(self, repository: Optional[AnalyticsRepository]):
        self.repo = repository

    def is_available(self) -> bool:
        return self.repo is not None

    def _require_storage(self) -> AnalyticsRepository:
        if self.repo is None:
            raise StorageNotConfiguredError()
        return self.repo

    async def record_event(self, payload: Any) -> dict:
        """Validate and persist one visitor event"""
        repo = self._require_storage()
        event = parse_event_payload(payload)

        # One instant for lastSeen/firstSeen and the event timestamp
        timestamp = utc_now_iso()
        event_id = str(uuid.uuid4())

        try:
            await repo.record_event(
                session_id=event.session_id,
                event_id=event_id,
                event_type=event.event_type,
                page=event.page,
                properties=event.properties,
                timestamp=timestamp,
            )
        except Exception as e:
            logger.error(f"Failed to persist analytics event: {e}")
            raise StorageError("Failed to persist analytics event") from e

        logger.debug(f"Recorded {event.event_type} event {event_id} for session {event.session_id}")
        return {"ok": True}

    async def get_metrics(self) -> MetricsSnapshot:
        """Aggregate visitor, conversion and event counts"""
        repo = self._require_storage()

        try:
            counts = await repo.get_counts()
        except Exception as e:
            logger.error(f"Failed to load analytics metrics: {e}")
            raise StorageError("Failed to load analytics metrics") from e

        return MetricsSnapshot(
            visitors=counts["visitors"],
            conversions=counts["conversions"],
            total_events=counts["total_events"],
            conversion_rate=compute_conversion_rate(counts["conversions"], counts["visitors"]),
        )
