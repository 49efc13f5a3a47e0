"""Local-disk storage for uploaded book covers and PDFs; covers are served under /uploads/covers."""

import logging
import uuid
from pathlib import Path
from typing import Literal

from fastapi import UploadFile

from app.core.errors import ValidationError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"
COVERS_DIR = "covers"
PDFS_DIR = "pdfs"

ALLOWED_COVER_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})
ALLOWED_PDF_EXTENSIONS = frozenset({".pdf"})

FileKind = Literal["cover", "pdf"]

_KIND_CONFIG: dict[str, tuple[str, str, frozenset[str]]] = {
    # kind: (subdirectory, form field, allowed extensions)
    "cover": (COVERS_DIR, "coverImage", ALLOWED_COVER_EXTENSIONS),
    "pdf": (PDFS_DIR, "bookFile", ALLOWED_PDF_EXTENSIONS),
}


def ensure_upload_dirs(root: Path) -> None:
    """Create the upload root and its covers/pdfs subdirectories if missing."""
    for sub in (COVERS_DIR, PDFS_DIR):
        (root / sub).mkdir(parents=True, exist_ok=True)


def _check_type(upload: UploadFile, kind: FileKind, field: str, allowed: frozenset[str]) -> str:
    """Validate content type and extension; return the normalized extension."""
    filename = upload.filename or ""
    ext = Path(filename).suffix.lower()
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    if kind == "cover":
        if ext not in allowed or (content_type and not content_type.startswith("image/")):
            raise ValidationError.for_field(
                field,
                "Only image files (jpg, jpeg, png, gif, webp) are allowed for the cover image.",
            )
    else:
        if ext not in allowed or (content_type and content_type not in ("application/pdf", "application/octet-stream")):
            raise ValidationError.for_field(field, "Only PDF files are allowed for the book file.")
    return ext


async def save_upload(upload: UploadFile, root: Path, kind: FileKind, max_bytes: int) -> str:
    """
    Validate and write an uploaded file under root; return its public URL path.

    Filenames are generated ({field}-{uuid}{ext}); the client's name is only used
    for its extension.
    """
    subdir, field, allowed = _KIND_CONFIG[kind]
    ext = _check_type(upload, kind, field, allowed)
    content = await upload.read()
    if not content:
        raise ValidationError.for_field(field, "Uploaded file is empty.")
    if len(content) > max_bytes:
        raise ValidationError.for_field(
            field,
            f"File size must not exceed {max_bytes // (1024 * 1024)} MB.",
        )
    name = f"{field}-{uuid.uuid4().hex}{ext}"
    target = root / subdir / name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    logger.info("Stored upload", extra={"kind": kind, "stored_name": name, "size": len(content)})
    return f"{PUBLIC_PREFIX}/{subdir}/{name}"


def resolve_stored_path(root: Path, url: str | None) -> Path | None:
    """Map a public /uploads URL back to a file under root. None for external or escaping paths."""
    if not url or not url.startswith(PUBLIC_PREFIX + "/"):
        return None
    relative = url[len(PUBLIC_PREFIX) + 1:]
    base = root.resolve()
    candidate = (base / relative).resolve()
    if not candidate.is_relative_to(base):
        logger.warning("Refusing stored path outside upload root: %s", url)
        return None
    return candidate


def delete_stored_file(root: Path, url: str | None) -> None:
    """Remove a stored upload if it exists. External URLs are left alone."""
    path = resolve_stored_path(root, url)
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
        logger.info("Deleted stored file %s", url)
    except OSError:
        logger.warning("Could not delete stored file %s", url, exc_info=True)
