"""
Custom exceptions for the petpulse-console package.

This module defines the exception hierarchy and custom exceptions
used throughout the PetPulse administrative console.
"""

from .core_exceptions import (  # Utility functions
    ApiException,
    AuthenticationException,
    ConfigurationException,
    LoginFailedException,
    NotFoundException,
    PetPulseException,
    SchemaValidationException,
    SessionException,
    ValidationException,
    create_error_response,
    format_validation_errors,
    log_exception_context,
)

__all__ = [
    # Exception classes
    "PetPulseException",
    "ApiException",
    "AuthenticationException",
    "NotFoundException",
    "LoginFailedException",
    "SessionException",
    "ValidationException",
    "SchemaValidationException",
    "ConfigurationException",
    # Utility functions
    "format_validation_errors",
    "create_error_response",
    "log_exception_context",
]
