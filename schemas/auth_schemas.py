from typing import List, Optional
from pydantic import EmailStr, Field, field_validator
import re

from schemas.common import CamelModel


def _validate_password(value: str) -> str:
    """
    Password must be at least 8 characters and contain:
    - At least one letter
    - At least one digit
    """
    if len(value) < 8:
        raise ValueError('Password must be at least 8 characters')

    if not re.search(r'[A-Za-z]', value):
        raise ValueError('Password must contain at least one letter')

    if not re.search(r'\d', value):
        raise ValueError('Password must contain at least one digit')

    return value


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _require_token(value: str) -> str:
    if not value or not value.strip():
        raise ValueError('Token cannot be empty')
    return value


class AuthResult(CamelModel):
    """Body of every auth response: a token pair on success, reasons on failure."""
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    success: bool
    errors: List[str] = Field(default_factory=list)


class CreateUserRequest(CamelModel):
    email: EmailStr
    username: str = Field(min_length=1, max_length=256)
    password: str

    @field_validator('email', mode='before')
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        return _validate_password(value)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str

    @field_validator('email', mode='before')
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)


class TokenRequest(CamelModel):
    token: str
    refresh_token: str

    @field_validator('token', 'refresh_token')
    @classmethod
    def validate_token(cls, value):
        return _require_token(value)


class RevokeTokenRequest(CamelModel):
    refresh_token: str

    @field_validator('refresh_token')
    @classmethod
    def validate_token(cls, value):
        return _require_token(value)
