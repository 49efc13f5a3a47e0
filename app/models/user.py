"""ORM models for application users (auth and RBAC) and the bootstrap admin claim."""

import enum

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String, func

from app.models.base import Base


class Role(str, enum.Enum):
    """Action surface of a user."""

    USER = "USER"
    ADMIN = "ADMIN"


class UserStatus(str, enum.Enum):
    """Account status; gates login, session use and role elevation."""

    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"
    PENDING_ADMIN_APPROVAL = "PENDING_ADMIN_APPROVAL"
    REJECTED = "REJECTED"


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    A user asking for ADMIN at registration is stored as role USER with status
    PENDING_ADMIN_APPROVAL until an administrator approves or rejects the request.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(Role, name="user_role", native_enum=False, length=32),
        nullable=False,
        default=Role.USER,
    )
    status = Column(
        Enum(UserStatus, name="user_status", native_enum=False, length=32),
        nullable=False,
        default=UserStatus.ACTIVE,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class AdminBootstrap(Base):
    """
    Single-row claim on the bootstrap admin slot.

    Inserted in the same transaction as the first user; the fixed primary key
    lets exactly one concurrent first registration win.
    """

    __tablename__ = "admin_bootstrap"
    __table_args__ = (CheckConstraint("id = 1", name="single_row"),)

    id = Column(Integer, primary_key=True, autoincrement=False, default=1)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    claimed_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
