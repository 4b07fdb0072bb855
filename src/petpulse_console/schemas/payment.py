"""
Payment schemas for the checkout flow.
"""

from typing import List, Optional

from pydantic import Field, field_validator

from .base import ConsoleRecord, ConsoleSchema


class PaymentIntentRequest(ConsoleSchema):
    """Body of ``POST /payments/create-intent``."""

    appointment_ids: List[str] = Field(
        ..., description="Appointments being paid for", min_length=1
    )
    currency: str = Field("usd", description="ISO currency code, lower-case")

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.lower()


class PaymentIntent(ConsoleRecord):
    """Payment intent handed to the card form."""

    client_secret: str = Field(..., description="Secret the payment form confirms with")
    currency: Optional[str] = Field(None, description="Currency of the intent")
