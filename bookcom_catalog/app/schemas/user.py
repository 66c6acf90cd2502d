"""
Pydantic models for user data.

Passwords are accepted on input only; ``UserRead`` never carries them.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def _check_email(v: str) -> str:
    local, _, domain = v.partition("@")
    if not local or "." not in domain:
        raise ValueError("Invalid email format")
    return v


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: str = Field(..., description="Unique e-mail address")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def email_format(cls, v: str) -> str:
        return _check_email(v)


class UserCreate(UserBase):
    """Schema for registering a user."""

    password: str = Field(..., min_length=6, description="Plain text password, stored hashed")


class UserUpdate(BaseModel):
    """Schema for updating a user; omitted fields keep their value."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)

    @field_validator("email")
    @classmethod
    def email_format(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v) if v is not None else v


class UserRead(UserBase):
    """Schema for reading a user."""

    id: int
    book_ids: List[int] = Field(default_factory=list)
    comment_ids: List[int] = Field(default_factory=list)
