"""
Appointment enumerations for the petpulse-console package.

Appointments are owned by the backend; the console only needs the closed sets
of values it filters on and sends back in status updates.
"""

import enum


class ServiceType(str, enum.Enum):
    """Bookable service lines. Each has its own backend resource path."""

    VET = "vet"
    GROOMING = "grooming"
    DAYCARE = "daycare"

    @property
    def label(self) -> str:
        """Human-readable name used in lists and reports."""
        return SERVICE_LABELS[self]

    @property
    def staff_name_field(self) -> str:
        """Payload key naming the staff member who changed the status."""
        return "doctorName" if self is ServiceType.VET else "caretakerName"


SERVICE_LABELS = {
    ServiceType.VET: "Veterinary Care",
    ServiceType.GROOMING: "Grooming",
    ServiceType.DAYCARE: "Daycare",
}


class AppointmentStatus(str, enum.Enum):
    """Enumeration of appointment statuses."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, enum.Enum):
    """Payment state of an appointment. Missing values mean unpaid."""

    PAID = "paid"
    UNPAID = "unpaid"


class AppointmentView(str, enum.Enum):
    """Preset views of the doctor's appointment list."""

    ALL = "all"
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    TODAY = "today"
    NEXT_7_DAYS = "next7"

    @property
    def label(self) -> str:
        return VIEW_LABELS[self]


VIEW_LABELS = {
    AppointmentView.ALL: "All appointments",
    AppointmentView.PENDING: "Pending only",
    AppointmentView.ACCEPTED: "Accepted",
    AppointmentView.REJECTED: "Rejected",
    AppointmentView.TODAY: "Today",
    AppointmentView.NEXT_7_DAYS: "Next 7 days",
}
