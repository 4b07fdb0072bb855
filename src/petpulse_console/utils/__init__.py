"""
Utility functions and helper modules.

This module provides common utility functions for datetime handling,
form validation, configuration management, and other shared functionality.
"""

from .datetime_utils import (
    DateRange,
    get_current_utc,
    get_today,
    parse_date,
    parse_datetime,
    days_until,
    subtract_months,
    date_range_start,
    month_key,
    minutes_to_label,
    format_time_window,
    format_display_date,
)

from .validation import (
    ValidationError,
    ValidationResult,
    sanitize_string,
    validate_email,
    validate_payer_name,
    validate_phone,
    validate_price,
    validate_quantity,
    validate_expiry_date,
    validate_discount_percent,
    validate_image_upload,
    validate_required,
    validate_product_form,
    ErrorMessageFormatter,
    batch_validate,
)

from .config import (
    ConfigError,
    LogLevel,
    ConsoleConfig,
    EnvironmentConfig,
    LoggingConfigurator,
    validate_api_base_url,
)

__all__ = [
    # DateTime utilities
    "DateRange",
    "get_current_utc",
    "get_today",
    "parse_date",
    "parse_datetime",
    "days_until",
    "subtract_months",
    "date_range_start",
    "month_key",
    "minutes_to_label",
    "format_time_window",
    "format_display_date",
    # Validation helpers
    "ValidationError",
    "ValidationResult",
    "sanitize_string",
    "validate_email",
    "validate_payer_name",
    "validate_phone",
    "validate_price",
    "validate_quantity",
    "validate_expiry_date",
    "validate_discount_percent",
    "validate_image_upload",
    "validate_required",
    "validate_product_form",
    "ErrorMessageFormatter",
    "batch_validate",
    # Configuration utilities
    "ConfigError",
    "LogLevel",
    "ConsoleConfig",
    "EnvironmentConfig",
    "LoggingConfigurator",
    "validate_api_base_url",
]
