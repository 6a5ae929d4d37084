"""User model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, String

from app.database import Base


class UserRow(Base):
    """Application user."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    username = Column(String(256), unique=True, nullable=False, index=True)
    password = Column(String(256), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
