"""Database package"""

from buildtrack.db.session import AsyncSessionLocal, engine, get_db
from buildtrack.models.base import Base

__all__ = ["Base", "AsyncSessionLocal", "engine", "get_db"]
