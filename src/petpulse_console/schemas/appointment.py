"""
Appointment Pydantic schemas for API validation and serialization.

Appointment documents differ between the vet, grooming and daycare services
(the package field alone appears as ``packageId``, ``packageName``,
``selectedService`` or ``title``). ``Appointment`` accepts all of them and
exposes one consistent view for filtering, pricing and reports.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator

from ..models.appointment import AppointmentStatus, PaymentStatus, ServiceType
from ..utils.datetime_utils import format_time_window, parse_datetime
from .base import ConsoleRecord, ConsoleSchema, Extra, Money, lenient_date

# Keys a backend may store an appointment's amount under, in priority order
AMOUNT_KEYS = ("price", "packagePrice", "selectedPrice", "amount")


class Appointment(ConsoleRecord):
    """An appointment as returned by any of the three service backends."""

    service: Optional[str] = Field(
        None, description="Service line: vet, grooming or daycare"
    )
    package_id: Optional[str] = Field(None, description="Package slug")
    package_name: Optional[str] = Field(None, description="Package display name")
    selected_service: Optional[str] = Field(
        None, description="Package chosen on the vet booking form"
    )
    title: Optional[str] = Field(None, description="Free-form package title")

    date_iso: Optional[date] = Field(
        None,
        validation_alias=AliasChoices("dateISO", "date_iso", "date"),
        serialization_alias="dateISO",
        description="Appointment day",
    )
    time_slot_minutes: Optional[int] = Field(
        None, description="Start time in minutes since midnight", ge=0
    )
    duration_min: Optional[int] = Field(None, description="Duration in minutes", gt=0)
    drop_off_minutes: Optional[int] = Field(
        None, description="Daycare drop-off, minutes since midnight", ge=0
    )
    pick_up_minutes: Optional[int] = Field(
        None, description="Daycare pick-up, minutes since midnight", ge=0
    )

    # Plain strings: a status the console does not know still shows in lists
    status: str = Field(
        AppointmentStatus.PENDING.value, description="Workflow status"
    )
    payment_status: str = Field(
        PaymentStatus.UNPAID.value, description="Payment state"
    )
    extras: List[Extra] = Field(default_factory=list, description="Priced add-ons")

    owner_name: Optional[str] = Field(None, description="Pet owner's name")
    owner_email: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("ownerEmail", "owner_email", "email"),
        description="Pet owner's email",
    )
    owner_phone: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("ownerPhone", "owner_phone", "phone"),
        description="Pet owner's phone",
    )
    pet_type: Optional[str] = Field(None, description="Species of the pet")
    notes: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("notes", "specialNotes", "special_notes"),
        description="Booking notes",
    )
    amount: Optional[Money] = Field(
        None, description="Amount stored on the record by the backend, if any"
    )
    created_at: Optional[datetime] = Field(None, description="Booking timestamp")

    @model_validator(mode="before")
    @classmethod
    def collect_amount(cls, data: Any) -> Any:
        """Stored amount is the first non-null of the backend's price keys."""
        if isinstance(data, dict):
            data = dict(data)
            data["amount"] = next(
                (data[key] for key in AMOUNT_KEYS if data.get(key) is not None),
                None,
            )
        return data

    @field_validator("service", mode="before")
    @classmethod
    def normalize_service(cls, v: Any) -> Optional[str]:
        """Lower-case the service name; blank means unknown."""
        if v is None:
            return None
        text = str(v).strip().lower()
        return text or None

    @field_validator("date_iso", mode="before")
    @classmethod
    def validate_date(cls, v: Any) -> Optional[date]:
        return lenient_date(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def validate_created_at(cls, v: Any) -> Optional[datetime]:
        """Unparseable timestamps are treated as missing."""
        return parse_datetime(v)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v: Any) -> Any:
        if v is None or v == "":
            return AppointmentStatus.PENDING.value
        return str(v).lower()

    @field_validator("payment_status", mode="before")
    @classmethod
    def default_payment_status(cls, v: Any) -> Any:
        if v is None or v == "":
            return PaymentStatus.UNPAID.value
        return str(v).lower()

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Any:
        """Non-numeric stored amounts are dropped rather than rejected."""
        if v is None or v == "":
            return None
        try:
            Decimal(str(v))
        except ArithmeticError:
            return None
        return v

    @field_validator("extras", mode="before")
    @classmethod
    def validate_extras(cls, v: Any) -> Any:
        return v if isinstance(v, list) else []

    @property
    def service_type(self) -> Optional[ServiceType]:
        """The service as an enum, or None when it is not one we know."""
        try:
            return ServiceType(self.service)
        except ValueError:
            return None

    @property
    def display_title(self) -> str:
        """Package name for lists: first of the known title fields."""
        for candidate in (
            self.package_name,
            self.package_id,
            self.selected_service,
            self.title,
        ):
            if candidate:
                return candidate
        service_type = self.service_type
        return service_type.label if service_type else "Appointment"

    @property
    def time_label(self) -> str:
        """Booked time window as shown in tables."""
        if self.drop_off_minutes is not None or self.pick_up_minutes is not None:
            return format_time_window(self.drop_off_minutes, self.pick_up_minutes)
        if self.time_slot_minutes is None:
            return ""
        end = self.time_slot_minutes + (self.duration_min or 30)
        return format_time_window(self.time_slot_minutes, end)

    @property
    def extras_total(self) -> Decimal:
        return sum((extra.price for extra in self.extras), Decimal("0"))

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value

    def record_key(self, index: int) -> str:
        """
        Stable key for rendering lists.

        Records without an identifier get ``<service>-<title>-<index>``.
        """
        if self.id:
            return self.id
        return f"{self.service or 'svc'}-{self.title or 'item'}-{index}"


class AppointmentStatusUpdate(ConsoleSchema):
    """Body of ``PATCH /{service}/:id/status``."""

    status: AppointmentStatus = Field(..., description="New status")
    rejection_reason: Optional[str] = Field(
        None, description="Why the appointment was rejected", max_length=500
    )
    staff_name: Optional[str] = Field(
        None, description="Doctor or caretaker making the change", exclude=True
    )

    @model_validator(mode="after")
    def drop_reason_unless_rejected(self) -> "AppointmentStatusUpdate":
        """Only rejections carry a reason."""
        if self.status != AppointmentStatus.REJECTED and self.rejection_reason:
            object.__setattr__(self, "rejection_reason", None)
        return self

    def to_service_payload(self, service: ServiceType) -> dict:
        """Payload with the staff name under the key the service expects."""
        payload = self.to_payload()
        if self.status == AppointmentStatus.REJECTED:
            payload["rejectionReason"] = self.rejection_reason or ""
        if self.staff_name:
            payload[ServiceType(service).staff_name_field] = self.staff_name
        return payload
