"""
Base model class for all SQLAlchemy models.

WHY: A single declarative base gives Alembic one metadata object to
compare against and keeps every table in the same registry.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    WHY: DeclarativeBase provides the foundation for SQLAlchemy 2.0 models
    with improved type hints and async support.
    """

    pass
