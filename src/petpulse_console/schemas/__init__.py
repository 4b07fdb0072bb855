"""
Pydantic schemas for backend records and request bodies.

Records read from the backend tolerate missing and extra keys; request bodies
validate the form rules before anything is sent.
"""

from .base import (
    ConsoleRecord,
    ConsoleSchema,
    Extra,
    Money,
    parse_record,
    parse_records,
)

from .appointment import Appointment, AppointmentStatusUpdate

from .inventory import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    Category,
    CategoryCreate,
    DashboardStats,
    DiscountUpdate,
    Order,
    Product,
    ProductCreate,
    ProductUpdate,
    SaleRecord,
    StockAdjustment,
    Supplier,
    SupplierCreate,
)

from .adoption import Adoption, AdoptionStatusChange, Pet

from .auth import LoginRequest, LoginResponse

from .payment import PaymentIntent, PaymentIntentRequest

__all__ = [
    # Base schemas
    "ConsoleRecord",
    "ConsoleSchema",
    "Extra",
    "Money",
    "parse_record",
    "parse_records",
    # Appointment schemas
    "Appointment",
    "AppointmentStatusUpdate",
    # Inventory schemas
    "DEFAULT_LOW_STOCK_THRESHOLD",
    "Category",
    "CategoryCreate",
    "DashboardStats",
    "DiscountUpdate",
    "Order",
    "Product",
    "ProductCreate",
    "ProductUpdate",
    "SaleRecord",
    "StockAdjustment",
    "Supplier",
    "SupplierCreate",
    # Adoption schemas
    "Adoption",
    "AdoptionStatusChange",
    "Pet",
    # Auth schemas
    "LoginRequest",
    "LoginResponse",
    # Payment schemas
    "PaymentIntent",
    "PaymentIntentRequest",
]
