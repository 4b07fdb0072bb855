"""
Validation and data processing utilities for console forms.

This module provides the client-side form rules applied before a request is
sent (product, supplier and checkout forms), data sanitization functions and
error message standardization utilities. These checks are advisory: the
backend re-validates everything it receives.
"""

import re
import unicodedata
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

from .datetime_utils import parse_date

# Type variable for generic validation functions
T = TypeVar("T")


class ValidationError(Exception):
    """Custom validation error with structured error information."""

    def __init__(
        self, message: str, field: Optional[str] = None, code: Optional[str] = None
    ):
        self.message = message
        self.field = field
        self.code = code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary format."""
        return {"message": self.message, "field": self.field, "code": self.code}


class ValidationResult(Generic[T]):
    """Result of a validation operation."""

    def __init__(
        self, value: Optional[T] = None, errors: Optional[List[ValidationError]] = None
    ):
        self.value = value
        self.errors = errors or []
        self.is_valid = len(self.errors) == 0

    def add_error(self, error: ValidationError) -> None:
        """Add an error to the result."""
        self.errors.append(error)
        self.is_valid = False


# Same loose rule the checkout form uses
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9\s\-()]{6,18}[0-9]$")

# Digits with at most two decimals, no sign, no letters
PRICE_PATTERN = re.compile(r"^[0-9]+(\.[0-9]{1,2})?$")

MAX_PRICE = Decimal("1000000")

# Categories whose products must carry a future expiry date
PERISHABLE_CATEGORIES = frozenset({"Food", "Medication"})

MAX_IMAGE_BYTES = 2 * 1024 * 1024


def sanitize_string(value: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize a string by normalizing unicode and trimming whitespace.

    Args:
        value: The string to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized string
    """
    normalized = unicodedata.normalize("NFKC", value)
    sanitized = re.sub(r"\s+", " ", normalized.strip())

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length].rstrip()

    return sanitized


def validate_email(email: Optional[str]) -> ValidationResult[str]:
    """
    Validate an email address.

    Returns:
        ValidationResult with the sanitized, lower-cased email or errors
    """
    result = ValidationResult[str]()

    if not email:
        result.add_error(ValidationError("Email is required", "email", "required"))
        return result

    sanitized_email = sanitize_string(email).lower()

    if not EMAIL_PATTERN.match(sanitized_email):
        result.add_error(
            ValidationError("Enter a valid email address.", "email", "invalid_format")
        )
        return result

    result.value = sanitized_email
    return result


def validate_payer_name(name: Optional[str]) -> ValidationResult[str]:
    """Validate the name on card: at least two characters after trimming."""
    result = ValidationResult[str]()
    sanitized = sanitize_string(name or "")

    if len(sanitized) < 2:
        result.add_error(
            ValidationError(
                "Enter the name as it appears on the card.", "full_name", "too_short"
            )
        )
        return result

    result.value = sanitized
    return result


def validate_phone(phone: Optional[str]) -> ValidationResult[str]:
    """Validate a contact phone number, keeping the caller's formatting."""
    result = ValidationResult[str]()

    if not phone:
        result.add_error(
            ValidationError("Phone number is required", "phone", "required")
        )
        return result

    sanitized = sanitize_string(phone)
    if not PHONE_PATTERN.match(sanitized):
        result.add_error(
            ValidationError("Invalid phone number format", "phone", "invalid_format")
        )
        return result

    result.value = sanitized
    return result


def validate_price(price: Union[str, int, float, Decimal, None]) -> ValidationResult[Decimal]:
    """
    Validate a product price as typed into the product form.

    The value must be plain digits with at most two decimals, and no larger
    than ``MAX_PRICE``.
    """
    result = ValidationResult[Decimal]()

    if price is None or str(price).strip() == "":
        result.add_error(ValidationError("Please enter price", "price", "required"))
        return result

    text = str(price).strip()
    if not PRICE_PATTERN.match(text):
        result.add_error(
            ValidationError(
                "Price must be numeric only (no letters allowed)",
                "price",
                "invalid_format",
            )
        )
        return result

    try:
        amount = Decimal(text)
    except InvalidOperation:
        result.add_error(
            ValidationError("Price must be a valid number", "price", "invalid_number")
        )
        return result

    if amount > MAX_PRICE:
        result.add_error(
            ValidationError("Maximum price is 1,000,000", "price", "too_high")
        )
        return result

    result.value = amount
    return result


def validate_quantity(quantity: Any, field: str = "quantity") -> ValidationResult[int]:
    """Validate a stock quantity: a whole number, zero or more."""
    result = ValidationResult[int]()

    if quantity is None or str(quantity).strip() == "":
        result.add_error(ValidationError("Please enter quantity", field, "required"))
        return result

    try:
        as_decimal = Decimal(str(quantity).strip())
    except InvalidOperation:
        result.add_error(
            ValidationError("Quantity must be a whole number", field, "invalid_number")
        )
        return result

    if as_decimal != as_decimal.to_integral_value():
        result.add_error(
            ValidationError("Quantity must be a whole number", field, "invalid_number")
        )
        return result

    if as_decimal < 0:
        result.add_error(
            ValidationError("Quantity cannot be negative", field, "too_low")
        )
        return result

    result.value = int(as_decimal)
    return result


def validate_expiry_date(
    category: Optional[str], expiry: Any, today: Optional[date] = None
) -> ValidationResult[Optional[date]]:
    """
    Validate a product's expiry date against its category.

    Perishable categories require a date that is not in the past; other
    categories accept any date or none.
    """
    result = ValidationResult[Optional[date]]()
    if today is None:
        today = date.today()

    parsed = parse_date(expiry)
    if expiry not in (None, "") and parsed is None:
        result.add_error(
            ValidationError("Invalid expiry date", "expiry_date", "invalid_format")
        )
        return result

    if category in PERISHABLE_CATEGORIES:
        if parsed is None:
            result.add_error(
                ValidationError(
                    "Expiry date is required for this category",
                    "expiry_date",
                    "required",
                )
            )
            return result
        if parsed < today:
            result.add_error(
                ValidationError(
                    "Expiry date cannot be in the past", "expiry_date", "past_date"
                )
            )
            return result

    result.value = parsed
    return result


def validate_discount_percent(percent: Any) -> ValidationResult[Decimal]:
    """Validate a manual discount percentage in the 0-100 range."""
    result = ValidationResult[Decimal]()

    try:
        value = Decimal(str(percent))
    except (InvalidOperation, ValueError):
        result.add_error(
            ValidationError("Discount must be a number", "discount", "invalid_number")
        )
        return result

    if value < 0 or value > 100:
        result.add_error(
            ValidationError(
                "Discount must be between 0 and 100", "discount", "out_of_range"
            )
        )
        return result

    result.value = value
    return result


def validate_image_upload(content_type: str, size_bytes: int) -> ValidationResult[str]:
    """Validate an uploaded product image: an image type under 2MB."""
    result = ValidationResult[str]()

    if not (content_type or "").startswith("image/"):
        result.add_error(
            ValidationError(
                "You can only upload image files!", "image", "invalid_type"
            )
        )
        return result

    if size_bytes >= MAX_IMAGE_BYTES:
        result.add_error(
            ValidationError("Image must be smaller than 2MB!", "image", "too_large")
        )
        return result

    result.value = content_type
    return result


def validate_required(value: Any, field: str, message: Optional[str] = None) -> ValidationResult[Any]:
    """Validate that a form value is present and not blank."""
    result = ValidationResult[Any]()

    if value is None or (isinstance(value, str) and not value.strip()):
        result.add_error(
            ValidationError(message or f"{field} is required", field, "required")
        )
        return result

    result.value = value.strip() if isinstance(value, str) else value
    return result


class ErrorMessageFormatter:
    """Utility class for standardizing error messages."""

    @staticmethod
    def format_validation_errors(errors: List[ValidationError]) -> Dict[str, Any]:
        """
        Format a list of validation errors into a standardized response.

        Args:
            errors: List of ValidationError objects

        Returns:
            Formatted error response
        """
        formatted_errors: Dict[str, List[Dict[str, str]]] = {}
        general_errors: List[Dict[str, str]] = []

        for error in errors:
            entry = {"message": error.message, "code": error.code or ""}
            if error.field:
                formatted_errors.setdefault(error.field, []).append(entry)
            else:
                general_errors.append(entry)

        result: Dict[str, Any] = {"success": False, "errors": formatted_errors}

        if general_errors:
            result["general_errors"] = general_errors

        return result

    @staticmethod
    def first_message(errors: List[ValidationError]) -> Optional[str]:
        """The message a form shows first, or None when there are no errors."""
        return errors[0].message if errors else None


def batch_validate(
    validators: Dict[str, Callable], data: Dict[str, Any]
) -> ValidationResult[Dict[str, Any]]:
    """
    Validate multiple fields using their respective validators.

    Missing fields are passed to their validator as None so that "required"
    rules fire.

    Args:
        validators: Dictionary mapping field names to validator functions
        data: Dictionary of data to validate

    Returns:
        ValidationResult with validated data or accumulated errors
    """
    result = ValidationResult[Dict[str, Any]]()
    validated_data = {}

    for field_name, validator in validators.items():
        try:
            field_result = validator(data.get(field_name))
        except ValidationError as e:
            e.field = field_name
            result.add_error(e)
            continue

        if isinstance(field_result, ValidationResult):
            if field_result.is_valid:
                validated_data[field_name] = field_result.value
            else:
                for error in field_result.errors:
                    result.add_error(error)
        else:
            validated_data[field_name] = field_result

    if result.is_valid:
        result.value = validated_data

    return result


def validate_product_form(
    data: Dict[str, Any], today: Optional[date] = None
) -> ValidationResult[Dict[str, Any]]:
    """
    Run the add/edit product form rules over raw form values.

    Keys follow the backend payload (``name``, ``category``, ``price``,
    ``quantity``, ``description``, ``expiryDate``).
    """
    category = data.get("category")
    return batch_validate(
        {
            "name": lambda v: validate_required(v, "name", "Please enter product name"),
            "category": lambda v: validate_required(
                v, "category", "Please select a category"
            ),
            "price": validate_price,
            "quantity": validate_quantity,
            "description": lambda v: validate_required(
                v, "description", "Please enter description"
            ),
            "expiryDate": lambda v: validate_expiry_date(category, v, today),
        },
        data,
    )
