"""User ORM model, the identity store.

Every other table references ``users.id``. Passwords are stored as bcrypt
hashes; the role decides which route families a user may call.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from app.models.enums import UserRoleEnum


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Farmer or scientist account. ``created_at`` doubles as registration date."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(
        String(320), unique=True, nullable=False, index=True
    )
    hashed_password: Mapped[str] = mapped_column(
        String(128), nullable=False
    )
    role: Mapped[UserRoleEnum] = mapped_column(
        pg_enum(UserRoleEnum, "user_role"),
        nullable=False,
        default=UserRoleEnum.farmer,
        server_default=UserRoleEnum.farmer.value,
    )
    crop: Mapped[str] = mapped_column(
        String(255), nullable=False, default="", server_default=""
    )
    location: Mapped[str] = mapped_column(
        String(255), nullable=False, default="", server_default=""
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"
