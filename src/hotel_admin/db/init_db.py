"""
Database initialization helper.
"""

from hotel_admin.db import Base, get_engine


def init_db() -> None:
    """
    Create database tables for all registered models.
    """
    Base.metadata.create_all(bind=get_engine())


def drop_db() -> None:
    """
    Drop every table known to the models. Used by tests.
    """
    Base.metadata.drop_all(bind=get_engine())
