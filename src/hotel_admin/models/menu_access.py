"""
Menu Access Models for Role-Based Menu Visibility Control.

Stores the configured navigation entries and which roles can see each of them.
"""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from hotel_admin.db import Base


def _utc_now():
    return datetime.now(UTC)


class MenuDefinition(Base):
    """
    Defines all available menu items in the back office.
    Parents are pure groupings (usually no href); children point at a screen.
    """

    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True)
    menu_id = Column(String(100), unique=True, nullable=False, index=True)  # e.g. 'room-operation', 'room-type'
    label = Column(String(128), nullable=False)
    icon = Column(String(64), nullable=True)  # Symbolic icon name, resolved by the frontend
    href = Column(String(256), nullable=True)  # Route path e.g. '/room-type'
    parent_id = Column(String(100), nullable=True, index=True)  # menu_id of the parent entry
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=_utc_now, nullable=False)
    updated_at = Column(DateTime, default=_utc_now, onupdate=_utc_now, nullable=False)

    permissions = relationship("MenuPermission", back_populates="menu", cascade="all, delete-orphan")


class MenuPermission(Base):
    """
    One (role, menu item) visibility row. Absent rows mean hidden.
    """

    __tablename__ = "menu_permissions"

    id = Column(Integer, primary_key=True)
    menu_id = Column(String(100), ForeignKey("menu_items.menu_id", ondelete="CASCADE"), nullable=False, index=True)
    role_name = Column(String(64), nullable=False, index=True)
    can_view = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime, default=_utc_now, onupdate=_utc_now, nullable=False)

    menu = relationship("MenuDefinition", back_populates="permissions")

    __table_args__ = (UniqueConstraint("role_name", "menu_id", name="uq_role_menu"),)
