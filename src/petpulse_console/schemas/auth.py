"""
Authentication schemas for the role login endpoints.
"""

from typing import Optional

from pydantic import EmailStr, Field, field_validator

from .base import ConsoleRecord, ConsoleSchema


class LoginRequest(ConsoleSchema):
    """Body of ``POST /{role}/login``."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., description="Account password", min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class LoginResponse(ConsoleRecord):
    """Login result. ``token`` is only present when ``success`` is true."""

    success: bool = Field(False, description="Whether the credentials were accepted")
    token: Optional[str] = Field(None, description="Bearer token for the role")
    message: Optional[str] = Field(None, description="Server message")
