"""Database models."""

from db import Base

# Import all models so Alembic can detect them
from models.user import User

__all__ = [
    "Base",
    "User",
]
