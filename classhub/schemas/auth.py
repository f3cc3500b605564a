# classhub/schemas/auth.py
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

_email_adapter = TypeAdapter(EmailStr)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: str | None = None
    phone: str | None = None
    password: str

    @property
    def identifier(self) -> str | None:
        value = self.email or self.phone
        return value.strip() if value else None


class RegisterRequest(BaseModel):
    name: str
    # checked as an address but stored exactly as typed, so login can match it
    email: str | None = None
    phone: str | None = None
    university: str | None = None
    college: str | None = None
    student_id: str | None = None
    role: Literal["student", "teacher"]
    password: str

    @field_validator("name", "email", "phone", "university", "college", "student_id", "password", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                _email_adapter.validate_python(v)
            except ValidationError:
                raise ValueError("Invalid email address")
        return v

    @model_validator(mode="after")
    def check_required(self):
        if not self.name or not self.password or not (self.email or self.phone):
            raise ValueError("Missing required fields")
        if self.role == "student" and not self.student_id:
            raise ValueError("Student ID required")
        return self


class UserPublic(BaseModel):
    """Compact user view returned alongside a fresh token."""

    id: int
    name: str
    role: str
    email: str | None = None
    phone: str | None = None
    college: str = ""

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    token: str
    user: UserPublic


class SuccessResponse(BaseModel):
    success: bool = True
