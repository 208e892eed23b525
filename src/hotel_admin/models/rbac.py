from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer, String

from hotel_admin.db import Base


def _utc_now():
    return datetime.now(UTC)


class Role(Base):
    """Selectable staff role, e.g. 'Reservation Officer' or 'Sales Manager'."""

    __tablename__ = "user_roles"
    id = Column(Integer, primary_key=True)
    role_name = Column(String(64), unique=True, nullable=False, index=True)
    description = Column(String(256), default="")
    created_at = Column(DateTime, default=_utc_now, nullable=False)
    updated_at = Column(DateTime, default=_utc_now, onupdate=_utc_now, nullable=False)
