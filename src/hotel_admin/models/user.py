from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from hotel_admin.db import Base


def _utc_now():
    """Helper function for SQLAlchemy default/onupdate."""
    return datetime.now(UTC)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(150), unique=True, index=True, nullable=False)
    password_hash = Column(String(256), nullable=False)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    role_name = Column(String(64), nullable=False, default="Reservation Officer")  # user_roles.role_name
    is_active = Column(Boolean, default=True)
    token_version = Column(Integer, default=1, nullable=False)
    last_login = Column(DateTime, nullable=True)  # Track last login time
    created_at = Column(DateTime, default=_utc_now, nullable=False)
    updated_at = Column(DateTime, default=_utc_now, onupdate=_utc_now, nullable=False)
