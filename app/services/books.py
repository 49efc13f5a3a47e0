"""Book catalog: CRUD with stored cover/PDF files and download gating."""

import logging
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.models.book import Book
from app.schemas.books import BookIn
from app.services.storage import delete_stored_file, resolve_stored_path, save_upload

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def list_books(db: Session) -> list[Book]:
    return db.query(Book).order_by(Book.created_at.desc(), Book.title.asc()).all()


def get_book(db: Session, book_id: str) -> Book:
    book = db.get(Book, book_id)
    if book is None:
        raise NotFoundError("Book not found.")
    return book


def _has_file(upload: UploadFile | None) -> bool:
    return upload is not None and bool(upload.filename)


def _discard(root: Path, urls: list[str]) -> None:
    for url in urls:
        delete_stored_file(root, url)


async def create_book(
    db: Session,
    fields: BookIn,
    cover: UploadFile | None,
    book_file: UploadFile | None,
    settings: "Settings",
) -> Book:
    """Store the uploaded files and persist the book. Stored files are removed on failure."""
    if not _has_file(cover):
        raise ValidationError.for_field("coverImage", "Cover image is required.")
    if not fields.is_premium and not _has_file(book_file):
        raise ValidationError.for_field("bookFile", "Book file (PDF) is required for free books.")

    root = settings.UPLOAD_DIR
    saved: list[str] = []
    try:
        cover_url = await save_upload(cover, root, "cover", settings.MAX_UPLOAD_BYTES)
        saved.append(cover_url)
        file_url = None
        if _has_file(book_file):
            file_url = await save_upload(book_file, root, "pdf", settings.MAX_UPLOAD_BYTES)
            saved.append(file_url)

        book = Book(
            **fields.model_dump(),
            cover_image_url=cover_url,
            file_url=file_url,
            publication_date=date.today(),
        )
        db.add(book)
        db.commit()
    except Exception:
        db.rollback()
        _discard(root, saved)
        raise
    db.refresh(book)
    logger.info("Book created", extra={"book_id": book.id})
    return book


async def update_book(
    db: Session,
    book_id: str,
    fields: BookIn,
    cover: UploadFile | None,
    book_file: UploadFile | None,
    settings: "Settings",
) -> Book:
    """
    Replace a book's fields and, when given, its files.

    Without a new PDF a free book must already have one, and a premium book
    drops its stored PDF.
    """
    book = get_book(db, book_id)
    root = settings.UPLOAD_DIR

    if not _has_file(book_file) and not fields.is_premium and not book.file_url:
        raise ValidationError.for_field(
            "bookFile",
            "Book file (PDF) is required for free books if not already present and no new file uploaded.",
        )

    saved: list[str] = []
    obsolete: list[str] = []
    try:
        cover_url = book.cover_image_url
        if _has_file(cover):
            cover_url = await save_upload(cover, root, "cover", settings.MAX_UPLOAD_BYTES)
            saved.append(cover_url)
            obsolete.append(book.cover_image_url)

        file_url = book.file_url
        if _has_file(book_file):
            file_url = await save_upload(book_file, root, "pdf", settings.MAX_UPLOAD_BYTES)
            saved.append(file_url)
            if book.file_url:
                obsolete.append(book.file_url)
        elif fields.is_premium and book.file_url:
            obsolete.append(book.file_url)
            file_url = None

        for key, value in fields.model_dump().items():
            setattr(book, key, value)
        book.cover_image_url = cover_url
        book.file_url = file_url
        db.commit()
    except Exception:
        db.rollback()
        _discard(root, saved)
        raise
    _discard(root, obsolete)
    db.refresh(book)
    logger.info("Book updated", extra={"book_id": book.id})
    return book


def delete_book(db: Session, book_id: str, settings: "Settings") -> None:
    book = get_book(db, book_id)
    urls = [book.cover_image_url, book.file_url]
    db.delete(book)
    db.commit()
    _discard(settings.UPLOAD_DIR, [u for u in urls if u])
    logger.info("Book deleted", extra={"book_id": book_id})


def resolve_download(db: Session, book_id: str, settings: "Settings") -> tuple[Path, str]:
    """
    Return (path on disk, download filename) for a free book's PDF.

    Premium books are refused; purchasing is not supported.
    """
    book = db.get(Book, book_id)
    if book is None or not book.file_url:
        raise NotFoundError("Book file not found or not available for download.")
    if book.is_premium:
        raise ForbiddenError("This is a premium book. Please purchase it to download.")
    path = resolve_stored_path(settings.UPLOAD_DIR, book.file_url)
    if path is None or not path.is_file():
        logger.error("Book file missing on disk", extra={"book_id": book_id, "file_url": book.file_url})
        raise NotFoundError("Book file does not exist on server.")
    return path, f"{book.title}{path.suffix}"
