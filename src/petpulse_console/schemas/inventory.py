"""
Inventory Pydantic schemas for API validation and serialization.

This module contains schemas for products, categories, suppliers and sales,
including create/update bodies that carry the product form rules.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from ..models.inventory import StockOperation
from ..utils.validation import (
    validate_discount_percent,
    validate_expiry_date,
    validate_phone,
    validate_price,
)
from .base import ConsoleRecord, ConsoleSchema, Money, lenient_date, lenient_money

DEFAULT_LOW_STOCK_THRESHOLD = 10


class Product(ConsoleRecord):
    """An inventory item."""

    name: str = Field("", description="Product name")
    category: Optional[str] = Field(None, description="Category name")
    sub_category: Optional[str] = Field(None, description="Sub-category name")
    description: Optional[str] = Field(None, description="Product description")
    price: Money = Field(Decimal("0"), description="List price")
    discount_price: Optional[Money] = Field(
        None, description="Discounted price, when a discount is active"
    )
    manual_discount_percent: Optional[Decimal] = Field(
        None, description="Manually set discount percentage"
    )
    quantity: int = Field(0, description="Units in stock")
    low_stock_threshold: int = Field(
        DEFAULT_LOW_STOCK_THRESHOLD, description="Quantity at or below which stock is low"
    )
    expiry_date: Optional[date] = Field(None, description="Expiry date, if perishable")
    image: Optional[str] = Field(None, description="Image URL or data URI")
    is_active: bool = Field(True, description="Whether the product is listed")

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v: Any) -> Any:
        return lenient_money(v)

    @field_validator("discount_price", mode="before")
    @classmethod
    def validate_discount_price(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        return v

    @field_validator("quantity", "low_stock_threshold", mode="before")
    @classmethod
    def validate_counts(cls, v: Any, info) -> Any:
        if v is None or v == "":
            return 0 if info.field_name == "quantity" else DEFAULT_LOW_STOCK_THRESHOLD
        return v

    @field_validator("expiry_date", mode="before")
    @classmethod
    def validate_expiry(cls, v: Any) -> Optional[date]:
        return lenient_date(v)

    @property
    def effective_price(self) -> Decimal:
        """Price a unit actually sells for: the discount price when one is set."""
        return self.discount_price if self.discount_price else self.price

    @property
    def stock_value(self) -> Decimal:
        return self.effective_price * self.quantity

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold

    @property
    def is_out_of_stock(self) -> bool:
        return self.quantity == 0

    @property
    def stock_label(self) -> str:
        """Status tag shown next to the quantity."""
        if self.is_out_of_stock:
            return "Out of Stock"
        if self.is_low_stock:
            return "Low Stock"
        return "In Stock"

    @property
    def discount_percent(self) -> Optional[int]:
        """Whole-number discount implied by ``discount_price``, if any."""
        if not self.discount_price or not self.price:
            return None
        ratio = (self.price - self.discount_price) / self.price * 100
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class ProductCreate(ConsoleSchema):
    """Body of ``POST /inventory``; applies the add-product form rules."""

    name: str = Field(..., description="Product name", min_length=1, max_length=200)
    category: str = Field(..., description="Category name", min_length=1)
    sub_category: Optional[str] = Field(None, description="Sub-category name")
    price: Money = Field(..., description="List price")
    quantity: int = Field(..., description="Initial quantity", ge=0)
    description: str = Field(..., description="Product description", min_length=1)
    expiry_date: Optional[date] = Field(None, description="Expiry date")
    image: Optional[str] = Field(None, description="Image data URI")
    low_stock_threshold: Optional[int] = Field(
        None, description="Low-stock threshold override", ge=0
    )

    @field_validator("price", mode="before")
    @classmethod
    def validate_price_format(cls, v: Any) -> Decimal:
        result = validate_price(v)
        if not result.is_valid:
            raise ValueError(result.errors[0].message)
        return result.value

    @field_validator("expiry_date", mode="before")
    @classmethod
    def validate_expiry(cls, v: Any) -> Optional[date]:
        return lenient_date(v)

    @model_validator(mode="after")
    def validate_perishable_expiry(self) -> "ProductCreate":
        """Perishable categories need an expiry date that is not in the past."""
        result = validate_expiry_date(self.category, self.expiry_date)
        if not result.is_valid:
            raise ValueError(result.errors[0].message)
        return self


class ProductUpdate(ConsoleSchema):
    """Body of ``PATCH /inventory/:id``; every field optional."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[str] = None
    sub_category: Optional[str] = None
    price: Optional[Money] = Field(None, ge=0, le=Decimal("1000000"))
    discount_price: Optional[Money] = Field(None, ge=0)
    manual_discount_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    quantity: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    expiry_date: Optional[date] = None
    image: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("expiry_date", mode="before")
    @classmethod
    def validate_expiry(cls, v: Any) -> Optional[date]:
        return lenient_date(v)

    @classmethod
    def for_discount(cls, price: Decimal, percent: Any) -> "ProductUpdate":
        """
        Update setting a manual discount percentage on a product.

        The discounted price is derived from ``price`` and rounded to cents.
        """
        result = validate_discount_percent(percent)
        if not result.is_valid:
            raise ValueError(result.errors[0].message)
        discounted = Decimal(price) * (1 - result.value / 100)
        return cls(
            manual_discount_percent=result.value,
            discount_price=discounted.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
        )

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if "manualDiscountPercent" in payload:
            payload["manualDiscountPercent"] = float(payload["manualDiscountPercent"])
        return payload


class StockAdjustment(ConsoleSchema):
    """Body of ``PATCH /inventory/:id/stock``."""

    operation: StockOperation = Field(..., description="add or deduct")
    quantity: int = Field(..., description="Units to add or deduct", gt=0)


class DiscountUpdate(ConsoleSchema):
    """
    Body of ``PATCH /inventory/:id/discount``.

    Exactly one of ``discount`` (percent) or ``discount_price`` is sent.
    """

    discount: Optional[Decimal] = Field(None, description="Discount percentage")
    discount_price: Optional[Money] = Field(
        None, description="Absolute discounted price", ge=0
    )

    @field_validator("discount", mode="before")
    @classmethod
    def validate_discount(cls, v: Any) -> Any:
        if v is None:
            return v
        result = validate_discount_percent(v)
        if not result.is_valid:
            raise ValueError(result.errors[0].message)
        return result.value

    @model_validator(mode="after")
    def validate_exactly_one(self) -> "DiscountUpdate":
        if (self.discount is None) == (self.discount_price is None):
            raise ValueError("Provide either a discount percentage or a discount price")
        return self

    def to_payload(self) -> dict:
        payload = super().to_payload()
        # percentages go over the wire as plain numbers
        if "discount" in payload:
            payload["discount"] = float(payload["discount"])
        return payload


class Category(ConsoleRecord):
    """A product category."""

    name: str = Field("", description="Category name")
    sub_category: Optional[str] = Field(None, description="Sub-category name")
    description: Optional[str] = Field(None, description="Category description")


class CategoryCreate(ConsoleSchema):
    """Body of ``POST /categories`` and ``PATCH /categories/:id``."""

    name: str = Field(..., description="Category name", min_length=1, max_length=100)
    sub_category: Optional[str] = Field(None, description="Sub-category name")
    description: Optional[str] = Field(None, description="Category description")


class Supplier(ConsoleRecord):
    """A supplier and the categories/products it delivers."""

    name: str = Field("", description="Supplier name")
    email: Optional[str] = Field(None, description="Contact email")
    phone: Optional[str] = Field(None, description="Contact phone")
    address: Optional[str] = Field(None, description="Postal address")
    product_categories: List[str] = Field(
        default_factory=list, description="Categories supplied"
    )
    products_supplied: List[str] = Field(
        default_factory=list, description="Products supplied"
    )

    @field_validator("product_categories", "products_supplied", mode="before")
    @classmethod
    def validate_lists(cls, v: Any) -> List[Any]:
        if v is None:
            return []
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


class SupplierCreate(ConsoleSchema):
    """Body of ``POST /suppliers`` and ``PATCH /suppliers/:id``."""

    name: str = Field(..., description="Supplier name", min_length=1, max_length=200)
    email: EmailStr = Field(..., description="Contact email")
    phone: str = Field(..., description="Contact phone")
    address: Optional[str] = Field(None, description="Postal address")
    product_categories: List[str] = Field(default_factory=list)
    products_supplied: List[str] = Field(default_factory=list)

    @field_validator("phone")
    @classmethod
    def validate_phone_number(cls, v: str) -> str:
        result = validate_phone(v)
        if not result.is_valid:
            raise ValueError(result.errors[0].message)
        return result.value


class SaleRecord(Product):
    """Row of the sales screen: a product with its discount state."""

    sold_quantity: Optional[int] = Field(None, description="Units sold")
    revenue: Optional[Money] = Field(None, description="Revenue from this product")


class DashboardStats(ConsoleRecord):
    """Payload of ``GET /dashboard/stats``."""

    total_products: int = 0
    low_stock: int = 0
    total_suppliers: int = 0
    discounted_products: int = 0
    products: List[Product] = Field(default_factory=list)


class Order(ConsoleRecord):
    """A product order."""

    status: Optional[str] = Field(None, description="Order status")
    items: List[Dict[str, Any]] = Field(default_factory=list)
    total: Optional[Money] = Field(None, description="Order total")
