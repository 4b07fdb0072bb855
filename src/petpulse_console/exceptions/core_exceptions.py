"""
Core exceptions for the petpulse-console package.

This module defines the exception hierarchy and custom exceptions
used throughout the PetPulse administrative console.
"""

import logging
import time
import traceback
from typing import Any, Dict, List, Optional


class PetPulseException(Exception):
    """
    Base exception class for all petpulse-console exceptions.

    Provides a consistent interface for error handling across the package.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": time.time(),
        }

    def get_debug_info(self) -> Dict[str, Any]:
        """Get debug information for the exception, including the traceback."""
        debug_info = self.to_dict()
        formatted = traceback.format_exc()
        debug_info.update(
            {
                "traceback": (
                    formatted if formatted.strip() != "NoneType: None" else None
                ),
                "module": self.__class__.__module__,
                "class_name": self.__class__.__name__,
            }
        )
        return debug_info

    def log_error(
        self, logger: Optional[logging.Logger] = None, level: int = logging.ERROR
    ) -> None:
        """
        Log the exception with appropriate level and context.

        Args:
            logger: Logger instance to use (creates default if None)
            level: Logging level to use
        """
        if logger is None:
            logger = logging.getLogger(__name__)

        log_data = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

        logger.log(
            level,
            f"Exception occurred: {self.message}",
            extra={"exception_data": log_data},
        )

    def __str__(self) -> str:
        """String representation of the exception."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ApiException(PetPulseException):
    """Base exception for failed calls to the PetPulse REST backend."""

    def __init__(
        self,
        message: str = "Request to backend failed",
        status_code: Optional[int] = None,
        method: Optional[str] = None,
        endpoint: Optional[str] = None,
        error_code: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize API exception.

        Args:
            message: Human-readable error message, usually the backend's own
            status_code: HTTP status code, None for transport failures
            method: HTTP method of the failed request
            endpoint: Path of the failed request relative to the API base URL
            error_code: Machine-readable error code
            original_error: Underlying transport or decoding error
        """
        details: Dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        if method:
            details["method"] = method
        if endpoint:
            details["endpoint"] = endpoint
        if original_error is not None:
            details["original_error"] = str(original_error)

        super().__init__(message, error_code or "API_ERROR", details)
        self.status_code = status_code
        self.method = method
        self.endpoint = endpoint
        self.original_error = original_error

    @property
    def is_client_error(self) -> bool:
        """Whether the backend rejected the request (4xx)."""
        return self.status_code is not None and 400 <= self.status_code < 500


class AuthenticationException(ApiException):
    """
    Raised when the backend answers 401.

    The stored session is cleared before this is raised; callers are expected
    to send the user back to ``redirect_to``.
    """

    def __init__(
        self,
        message: str = "Session expired or invalid credentials",
        method: Optional[str] = None,
        endpoint: Optional[str] = None,
        redirect_to: str = "/login",
    ):
        super().__init__(
            message=message,
            status_code=401,
            method=method,
            endpoint=endpoint,
            error_code="AUTHENTICATION_ERROR",
        )
        self.redirect_to = redirect_to
        self.details["redirect_to"] = redirect_to


class NotFoundException(ApiException):
    """Raised when the backend answers 404 for a resource."""

    def __init__(
        self,
        message: str = "Resource not found",
        method: Optional[str] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            status_code=404,
            method=method,
            endpoint=endpoint,
            error_code="NOT_FOUND",
        )


class LoginFailedException(PetPulseException):
    """Raised when a login call returns ``success: false``."""

    def __init__(self, message: str = "Login failed", role: Optional[str] = None):
        details = {"role": role} if role else {}
        super().__init__(message, "LOGIN_FAILED", details)
        self.role = role


class SessionException(PetPulseException):
    """Raised when the persisted session cannot be read or is not usable."""

    def __init__(
        self,
        message: str = "No active session",
        session_file: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {}
        if session_file:
            details["session_file"] = session_file
        if original_error is not None:
            details["original_error"] = str(original_error)
        super().__init__(message, "SESSION_ERROR", details)
        self.original_error = original_error


class ValidationException(PetPulseException):
    """Base exception for data validation errors."""

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        validation_errors: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize validation exception.

        Args:
            message: Error message
            field: Field that failed validation
            value: Value that failed validation
            validation_errors: Detailed validation errors
        """
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if validation_errors:
            details["validation_errors"] = validation_errors

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class SchemaValidationException(ValidationException):
    """Exception raised when a backend record fails Pydantic schema validation."""

    def __init__(
        self,
        message: str = "Schema validation failed",
        schema_name: Optional[str] = None,
        validation_errors: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            field=None,
            value=None,
            validation_errors=validation_errors,
        )
        self.error_code = "SCHEMA_VALIDATION_ERROR"
        if schema_name:
            self.details["schema_name"] = schema_name


class ConfigurationException(PetPulseException):
    """Base exception for configuration-related errors."""

    def __init__(
        self,
        message: str = "Configuration error",
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        """
        Initialize configuration exception.

        Args:
            message: Error message
            config_key: Configuration key that caused the error
            config_value: Configuration value (will be sanitized)
        """
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value:
            details["config_value"] = self._sanitize_config_value(
                config_key, config_value
            )

        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=details,
        )

    @staticmethod
    def _sanitize_config_value(key: Optional[str], value: str) -> str:
        """Sanitize configuration values to avoid exposing secrets."""
        if not key:
            return "[REDACTED]"

        sensitive_keys = ["password", "secret", "key", "token", "credential"]
        if any(sensitive in key.lower() for sensitive in sensitive_keys):
            return "[REDACTED]"

        return value


# Utility functions for exception handling and error formatting


def format_validation_errors(errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """
    Format Pydantic validation errors into a user-friendly structure.

    Args:
        errors: List of Pydantic validation errors

    Returns:
        Dictionary mapping field names to lists of error messages
    """
    formatted_errors: Dict[str, List[str]] = {}

    for error in errors:
        field_path = ".".join(str(loc) for loc in error.get("loc", []))
        if not field_path:
            field_path = "root"

        message = error.get("msg", "Validation error")
        error_type = error.get("type", "unknown")

        if error_type == "value_error":
            formatted_message = message
        elif error_type == "missing":
            formatted_message = "This field is required"
        else:
            formatted_message = f"{message} (type: {error_type})"

        formatted_errors.setdefault(field_path, []).append(formatted_message)

    return formatted_errors


def create_error_response(
    exception: PetPulseException,
    include_debug: bool = False,
    include_traceback: bool = False,
) -> Dict[str, Any]:
    """
    Create a standardized error response from an exception.

    The shape mirrors the backend's own ``{success, message}`` envelope so the
    console can show either one the same way.

    Args:
        exception: The exception to format
        include_debug: Whether to include debug information
        include_traceback: Whether to include traceback information

    Returns:
        Standardized error response dictionary
    """
    response: Dict[str, Any] = {
        "success": False,
        "message": exception.message,
        "error": {
            "type": exception.__class__.__name__,
            "code": exception.error_code,
            "message": exception.message,
        },
    }

    if exception.details:
        response["error"]["details"] = exception.details

    if include_debug:
        debug_info = exception.get_debug_info()
        response["debug"] = {
            "timestamp": debug_info["timestamp"],
            "module": debug_info["module"],
            "class_name": debug_info["class_name"],
        }

        if include_traceback and debug_info.get("traceback"):
            response["debug"]["traceback"] = debug_info["traceback"]

    return response


def log_exception_context(
    exception: Exception,
    context: Dict[str, Any],
    logger: Optional[logging.Logger] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with additional context information.

    Args:
        exception: The exception to log
        context: Additional context information
        logger: Logger instance to use
        level: Logging level
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    if isinstance(exception, PetPulseException):
        log_data = exception.to_dict()
        log_data["context"] = context
        logger.log(
            level,
            f"Exception with context: {exception.message}",
            extra={"exception_data": log_data},
        )
    else:
        logger.log(
            level,
            f"Unexpected exception: {str(exception)}",
            extra={
                "exception_type": exception.__class__.__name__,
                "exception_message": str(exception),
                "context": context,
            },
        )
