"""User model and schema."""

from datetime import datetime, UTC
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import DateTime, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 72
# bcrypt's input limit
PASSWORD_MAX_BYTES = 72
USERNAME_MIN_LENGTH = 1


class User(Base):
    """User ORM model."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
    )

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    username: Mapped[str] = mapped_column(String, nullable=False)
    full_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    def __repr__(self) -> str:
        # never include password_hash
        return f"<User id={self.id} username={self.username!r}>"


# Pydantic schemas
class UserCreate(BaseModel):
    """Validated, normalized registration data."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)
    full_name: str = ""


class UserResponse(BaseModel):
    """Public view of a user; serialized as {id, username, fullName}."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    username: str
    full_name: str = Field(alias="fullName")
