"""
Adoption enumerations for the petpulse-console package.
"""

import enum


class AdoptionStatus(str, enum.Enum):
    """Enumeration of adoption request statuses."""

    PENDING = "pending"
    APPROVED = "approved"
    COMPLETED = "completed"
    REJECTED = "rejected"
