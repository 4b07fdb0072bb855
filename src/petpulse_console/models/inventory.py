"""
Inventory enumerations for the petpulse-console package.
"""

import enum


class StockStatus(str, enum.Enum):
    """
    Stock level buckets.

    ``LOW`` includes out-of-stock items: a product is low when its quantity
    is at or below its own threshold.
    """

    LOW = "low"
    OUT = "out"
    ADEQUATE = "adequate"


class ExpiryStatus(str, enum.Enum):
    """Expiry buckets relative to today."""

    NEAR = "near"
    EXPIRED = "expired"


class StockOperation(str, enum.Enum):
    """Direction of a manual stock adjustment."""

    ADD = "add"
    DEDUCT = "deduct"
