"""Pydantic models for comments."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, description="Comment text")
    book_id: int
    user_id: int


class CommentUpdate(BaseModel):
    text: str = Field(..., min_length=1)


class CommentRead(BaseModel):
    id: int
    text: str
    created_at: Optional[datetime] = None
    book_id: int
    user_id: int

    model_config = {
        "from_attributes": True,
    }
