"""
Data Access Object (DAO) package.

WHY: DAOs provide a clean separation between database operations and business logic,
making the codebase more testable and maintainable.
"""

from buildtrack.dao.base import BaseDAO
from buildtrack.dao.project import ProjectDAO
from buildtrack.dao.estimate import EstimateDAO

__all__ = [
    "BaseDAO",
    "ProjectDAO",
    "EstimateDAO",
]
