"""Schemas for the book catalog."""

import re
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ISBN_STRIP = re.compile(r"[\s-]")
_ISBN10 = re.compile(r"^\d{9}[\dX]$")
_ISBN13 = re.compile(r"^\d{13}$")


def normalize_isbn(value: str) -> str:
    """Strip an optional ISBN/ISBN-13 prefix, hyphens and spaces; validate the digit shape."""
    s = value.strip().upper()
    for prefix in ("ISBN-13:", "ISBN-10:", "ISBN-13", "ISBN-10", "ISBN:", "ISBN"):
        if s.startswith(prefix):
            s = s[len(prefix):]
            break
    s = _ISBN_STRIP.sub("", s)
    if not (_ISBN10.match(s) or _ISBN13.match(s)):
        raise ValueError("Invalid ISBN format")
    return s


class BookIn(BaseModel):
    """Catalog fields of a book, parsed from multipart form values."""

    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=10)
    category: str = Field(..., min_length=1, max_length=64)
    pages: int = Field(..., gt=0, description="Page count")
    price: float = Field(default=0.0, ge=0, description="Price; 0 for free books")
    isbn: str | None = Field(default=None, description="ISBN-10 or ISBN-13")
    is_premium: bool = Field(default=False)

    @field_validator("title", "author", "category", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return normalize_isbn(v)


class BookOut(BaseModel):
    """Book as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    author: str
    description: str
    category: str
    pages: int
    price: float
    isbn: str | None = None
    is_premium: bool
    cover_image_url: str
    has_file: bool = Field(default=False, description="Whether a PDF is stored for download")
    publication_date: date
    created_at: datetime | None = None
    updated_at: datetime | None = None
