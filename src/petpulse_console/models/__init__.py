"""
Domain enumerations for the petpulse-console package.

The backend owns and persists every entity; these enums describe the closed
value sets the console filters on and writes back.
"""

from .adoption import AdoptionStatus
from .appointment import (
    AppointmentStatus,
    AppointmentView,
    PaymentStatus,
    ServiceType,
)
from .inventory import ExpiryStatus, StockOperation, StockStatus

__all__ = [
    "AdoptionStatus",
    "AppointmentStatus",
    "AppointmentView",
    "PaymentStatus",
    "ServiceType",
    "ExpiryStatus",
    "StockOperation",
    "StockStatus",
]
