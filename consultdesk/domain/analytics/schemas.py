"""Analytics domain schemas - Pydantic models for validation"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.request_utils import coerce_scalar


class AnalyticsEventRequest(BaseModel):
    """Schema for a tracked visitor event"""

    event_type: str = Field(alias="eventType")
    session_id: str = Field(alias="sessionId")
    page: Optional[str] = None
    properties: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)

    # Client-generated ids are sometimes numeric
    @field_validator("event_type", "session_id", "page", mode="before")
    @classmethod
    def coerce_numbers(cls, v):
        return coerce_scalar(v)


class MetricsSnapshot(BaseModel):
    """Schema for aggregated analytics metrics"""

    visitors: int = 0
    conversions: int = 0
    total_events: int = Field(default=0, alias="totalEvents")
    conversion_rate: float = Field(default=0, alias="conversionRate")

    model_config = ConfigDict(populate_by_name=True)
