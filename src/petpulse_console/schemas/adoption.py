"""
Adoption and pet Pydantic schemas for API validation and serialization.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator

from ..models.adoption import AdoptionStatus
from .base import ConsoleRecord, ConsoleSchema, Money, lenient_date


class Pet(ConsoleRecord):
    """A pet listed for adoption and managed by caretakers."""

    species: Optional[str] = Field(None, description="Species, e.g. Dog")
    breed: Optional[str] = Field(None, description="Breed")
    gender: Optional[str] = Field(None, description="Gender")
    color: Optional[str] = Field(None, description="Coat color")
    age: Optional[str] = Field(None, description="Age in years")
    weight: Optional[str] = Field(None, description="Weight in kg")
    price: Optional[Money] = Field(None, description="Adoption fee")
    diet: Optional[str] = Field(None, description="Diet notes")
    medical: Optional[str] = Field(None, description="Medical notes")
    born: Optional[str] = Field(None, description="Birth date as entered")
    good_with_kids: Optional[str] = Field(None, description="Yes/No")
    good_with_pets: Optional[str] = Field(None, description="Yes/No")
    image: Optional[str] = Field(None, description="Image URL")

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        try:
            Decimal(str(v))
        except ArithmeticError:
            return None
        return v

    @field_validator("good_with_kids", "good_with_pets", mode="before")
    @classmethod
    def validate_flags(cls, v: Any) -> Any:
        if isinstance(v, bool):
            return "Yes" if v else "No"
        return v


class Adoption(ConsoleRecord):
    """An adoption request together with the requested pet."""

    pet: Optional[Pet] = Field(None, description="Requested pet")
    name: Optional[str] = Field(None, description="Adopter name")
    age: Optional[str] = Field(None, description="Adopter age")
    phone: Optional[str] = Field(None, description="Adopter phone")
    occupation: Optional[str] = None
    experience: Optional[str] = None
    living_space: Optional[str] = None
    other_pets: Optional[str] = None
    time_commitment: Optional[str] = None
    child: Optional[str] = None
    emergency_contact: Optional[str] = None
    address: Optional[str] = None
    reason: Optional[str] = None
    requested_on: Optional[date] = Field(
        None,
        validation_alias=AliasChoices("date", "requestedOn", "requested_on"),
        serialization_alias="date",
        description="Request date",
    )
    visit: Optional[date] = Field(None, description="Scheduled visit date")
    status: Optional[str] = Field(
        AdoptionStatus.PENDING.value, description="Workflow status"
    )
    is_paid: bool = Field(False, description="Whether the adoption fee is paid")

    @field_validator("requested_on", "visit", mode="before")
    @classmethod
    def validate_dates(cls, v: Any) -> Optional[date]:
        return lenient_date(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Any:
        if v is None or v == "":
            return AdoptionStatus.PENDING.value
        return str(v).lower()

    @field_validator("is_paid", mode="before")
    @classmethod
    def validate_is_paid(cls, v: Any) -> bool:
        return v is True

    @property
    def species(self) -> Optional[str]:
        return self.pet.species if self.pet else None


class AdoptionStatusChange(ConsoleSchema):
    """Body of ``PUT /admin/change-status``."""

    adoption_id: str = Field(..., description="Adoption identifier", min_length=1)
    status: AdoptionStatus = Field(..., description="New status")
    visit: Optional[date] = Field(None, description="Visit date to schedule")

    def to_payload(self) -> dict:
        # the backend expects the key even when no visit is scheduled
        payload = super().to_payload()
        payload.setdefault("visit", None)
        return payload
