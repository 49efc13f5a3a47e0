"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.book import Book
from app.models.user import AdminBootstrap, Role, User, UserStatus

__all__ = ["AdminBootstrap", "Base", "Book", "Role", "User", "UserStatus"]
