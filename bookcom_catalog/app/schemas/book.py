"""
Pydantic models for book data.

``BookCreate`` doubles as the candidate description of the bulk
authorship merge: every rule a candidate must satisfy (non-blank title,
non-negative chapter count and year, known status) is declared here.
``BookStatus`` values are accepted case-insensitively, so ``"Completed"``
and ``"COMPLETED"`` are the same status.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models import BookStatus


def _normalise_status(value: Any) -> Any:
    if isinstance(value, str) and not isinstance(value, BookStatus):
        return value.strip().upper()
    return value


class BookBase(BaseModel):
    title: str = Field(..., description="Book title; must not be blank")
    count_chapters: int = Field(0, ge=0, description="Number of chapters")
    public_year: int = Field(0, ge=0, description="Year of publication")
    status: BookStatus = Field(..., description="Publication status")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title must not be blank")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def status_case_insensitive(cls, v: Any) -> Any:
        return _normalise_status(v)


class BookCreate(BookBase):
    """Schema for creating a book (and for bulk-merge candidates)."""

    pass


class BookUpdate(BaseModel):
    """Schema for updating a book.

    All fields are optional; only provided fields are changed.  When
    ``author_ids`` is given it replaces the author set.
    """

    title: Optional[str] = None
    count_chapters: Optional[int] = Field(None, ge=0)
    public_year: Optional[int] = Field(None, ge=0)
    status: Optional[BookStatus] = None
    author_ids: Optional[List[int]] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Title must not be blank")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def status_case_insensitive(cls, v: Any) -> Any:
        return _normalise_status(v)


class BookRead(BookBase):
    """Schema for reading a book."""

    id: int
    author_ids: List[int] = Field(default_factory=list)
    comment_ids: List[int] = Field(default_factory=list)

    model_config = {
        "from_attributes": True,
    }
