"""
Pydantic schemas for request validation.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from reviewly.constants import Gender, Roles
from reviewly.validation import (
    validate_gender,
    validate_password,
    validate_role,
)


class _RequestModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class LoginRequest(_RequestModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class CreateAccountRequest(_RequestModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str
    role: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v):
        validate_password(v)
        return v

    @field_validator("role")
    @classmethod
    def validate_role_value(cls, v):
        validate_role(v)
        return v


class RegisterRequest(CreateAccountRequest):
    role: str = Field(default=Roles.ADMIN.value)


class UpdateAccountRequest(_RequestModel):
    username: str | None = Field(None, min_length=3, max_length=50)
    email: EmailStr | None = None
    password: str | None = None
    role: str | None = None
    is_active: bool | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower() if v is not None else v

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v):
        if v:
            validate_password(v)
        return v

    @field_validator("role")
    @classmethod
    def validate_role_value(cls, v):
        if v is not None:
            validate_role(v)
        return v


class CreateStaffRequest(_RequestModel):
    name: str = Field(..., min_length=2, max_length=100)
    photo_url: str | None = None
    gender: str = Field(default=Gender.MESERA.value)
    is_active: bool = Field(default=True)

    @field_validator("gender")
    @classmethod
    def validate_gender_value(cls, v):
        validate_gender(v)
        return v


class UpdateStaffRequest(_RequestModel):
    name: str | None = Field(None, min_length=2, max_length=100)
    photo_url: str | None = None
    gender: str | None = None
    is_active: bool | None = None

    @field_validator("gender")
    @classmethod
    def validate_gender_value(cls, v):
        if v is not None:
            validate_gender(v)
        return v


class CreateCustomerRequest(_RequestModel):
    name: str = Field(..., min_length=2, max_length=120)
    document: str | None = Field(None, max_length=50)
    phone: str | None = Field(None, max_length=30)
    email: EmailStr | None = None

    @field_validator("document", "phone", "email", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower() if v is not None else v


class UpdateCustomerRequest(CreateCustomerRequest):
    name: str | None = Field(None, min_length=2, max_length=120)


class WeekStateRequest(_RequestModel):
    state: str


def schema_error_details(exc: PydanticValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic errors into JSON-safe ``{field, message}`` pairs."""
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
