"""Book catalog endpoints: public browsing, admin CRUD with multipart uploads, gated download."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.api.v1.auth import get_app_settings, get_current_user, require_admin
from app.core.config import Settings
from app.core.database import get_db
from app.core.errors import ValidationError
from app.schemas.auth import CurrentUser
from app.schemas.books import BookIn, BookOut
from app.schemas.common import MessageResponse
from app.services import books as book_service

router = APIRouter()

FormField = Annotated[str | None, Form()]


def book_form(
    title: FormField = None,
    author: FormField = None,
    description: FormField = None,
    category: FormField = None,
    pages: FormField = None,
    price: FormField = None,
    isbn: FormField = None,
    is_premium: FormField = None,
) -> BookIn:
    """Dependency: validate multipart book fields into BookIn (400 with per-field errors)."""
    raw = {
        "title": title,
        "author": author,
        "description": description,
        "category": category,
        "pages": pages,
        "price": price if price not in (None, "") else 0,
        "isbn": isbn,
        "is_premium": is_premium if is_premium not in (None, "") else False,
    }
    try:
        return BookIn.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


@router.get("", response_model=list[BookOut])
def list_books(db: Annotated[Session, Depends(get_db)]) -> list[BookOut]:
    """List all books, newest first."""
    return [BookOut.model_validate(b) for b in book_service.list_books(db)]


@router.get("/download/{book_id}")
def download_book(
    book_id: str,
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> FileResponse:
    """Download a free book's PDF. Any authenticated user; premium books are refused."""
    path, filename = book_service.resolve_download(db, book_id, settings)
    return FileResponse(path, media_type="application/pdf", filename=filename)


@router.get("/{book_id}", response_model=BookOut)
def get_book(book_id: str, db: Annotated[Session, Depends(get_db)]) -> BookOut:
    return BookOut.model_validate(book_service.get_book(db, book_id))


@router.post("", response_model=BookOut, status_code=201)
async def create_book(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    fields: Annotated[BookIn, Depends(book_form)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
    book_file: Annotated[UploadFile | None, File(alias="bookFile")] = None,
) -> BookOut:
    """
    Create a book from a multipart form.

    - **coverImage**: required image file.
    - **bookFile**: PDF, required unless `is_premium` is true.
    """
    book = await book_service.create_book(db, fields, cover_image, book_file, settings)
    return BookOut.model_validate(book)


@router.put("/{book_id}", response_model=BookOut)
async def update_book(
    book_id: str,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    fields: Annotated[BookIn, Depends(book_form)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
    book_file: Annotated[UploadFile | None, File(alias="bookFile")] = None,
) -> BookOut:
    """Replace a book's fields; new files replace the stored ones."""
    book = await book_service.update_book(db, book_id, fields, cover_image, book_file, settings)
    return BookOut.model_validate(book)


@router.delete("/{book_id}", response_model=MessageResponse)
def delete_book(
    book_id: str,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> MessageResponse:
    book_service.delete_book(db, book_id, settings)
    return MessageResponse(message="Book deleted successfully.")
