"""Billing domain schemas - Pydantic models for checkout requests"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.request_utils import coerce_scalar

NOTES_MAX_LENGTH = 4500


def truncate_notes(notes: Optional[str]) -> str:
    """Stripe metadata values are capped; keep notes within the limit"""
    return (notes or "")[:NOTES_MAX_LENGTH]


def _compact(values: dict) -> dict:
    return {key: value for key, value in values.items() if value is not None}


class CheckoutRequest(BaseModel):
    """Schema for booking a paid intro consultation"""

    company: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    date: Optional[str] = None  # YYYY-MM-DD
    time: Optional[str] = None  # HH:MM
    focus: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_numbers(cls, v):
        return coerce_scalar(v)

    def to_metadata(self) -> dict:
        return _compact(
            {
                "company": self.company,
                "name": self.name,
                "email": self.email,
                "date": self.date,
                "time": self.time,
                "focus": self.focus,
                "notes": truncate_notes(self.notes),
            }
        )


class SubscriptionRequest(BaseModel):
    """Schema for starting a retainer subscription"""

    email: Optional[str] = None
    company: Optional[str] = None
    name: Optional[str] = None
    focus: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_numbers(cls, v):
        return coerce_scalar(v)

    def to_metadata(self) -> dict:
        return _compact(
            {
                "company": self.company,
                "name": self.name,
                "email": self.email,
                "focus": self.focus,
                "notes": truncate_notes(self.notes),
            }
        )


class PortalRequest(BaseModel):
    """Schema for opening the billing portal"""

    email: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_numbers(cls, v):
        return coerce_scalar(v)


class SessionUrlResponse(BaseModel):
    """Hosted flow URL returned to the browser"""

    url: Optional[str] = None
