"""
Database models package.

WHY: Centralizing model imports ensures Alembic can discover all models
for migration generation and makes it easier to import models elsewhere.
"""

from buildtrack.models.base import Base
from buildtrack.models.project import Project, ProjectStatus
from buildtrack.models.estimate import Estimate, EstimateRevision, EstimateStatus

__all__ = [
    "Base",
    "Project",
    "ProjectStatus",
    "Estimate",
    "EstimateRevision",
    "EstimateStatus",
]
