"""User model."""

from sqlalchemy import Column, Integer, String

from yappy.database import Base
from yappy.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """A chat participant, identified by display name."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    # Lowercased, trimmed name; enforces case-insensitive uniqueness
    normalized_name = Column(String(50), unique=True, nullable=False, index=True)
