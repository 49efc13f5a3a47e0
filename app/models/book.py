"""ORM model for catalog books."""

import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, Float, Integer, String, Text, func

from app.models.base import Base


def _new_book_id() -> str:
    return str(uuid.uuid4())


class Book(Base):
    """
    A catalog entry with its stored cover image and (for free books) PDF.

    cover_image_url is served publicly under /uploads/covers. file_url locates the
    PDF in storage and is never exposed; premium books may have none since they
    cannot be downloaded.
    """

    __tablename__ = "books"

    id = Column(String(36), primary_key=True, default=_new_book_id)
    title = Column(String(255), nullable=False, index=True)
    author = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(64), nullable=False, index=True)
    pages = Column(Integer, nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    isbn = Column(String(17), nullable=True)
    is_premium = Column(Boolean, nullable=False, default=False)
    cover_image_url = Column(String(1024), nullable=False)
    file_url = Column(String(1024), nullable=True)
    publication_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def has_file(self) -> bool:
        return bool(self.file_url)
