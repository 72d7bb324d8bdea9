"""
Project model for construction projects.

WHAT: SQLAlchemy model representing a construction project.

WHY: Projects are the parent of every estimate. Estimates are listed,
revised and scoped by their project.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, TYPE_CHECKING
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    Numeric,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship, Mapped

from buildtrack.models.base import Base

if TYPE_CHECKING:
    from buildtrack.models.estimate import Estimate


class ProjectStatus(str, Enum):
    """
    Project lifecycle status.

    - PLANNING: Scoping and estimating
    - ACTIVE: Work under way on site
    - ON_HOLD: Temporarily paused
    - COMPLETED: Work finished
    """

    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"


class Project(Base):
    """
    Construction project model.

    Attributes:
        id: Primary key
        name: Project name
        description: Scope summary
        status: Current project status
        budget: Planned budget
        location: Site address
        start_date: Planned start
        end_date: Planned completion
        created_at: Record creation timestamp
        updated_at: Last modification timestamp
    """

    __tablename__ = "projects"

    id: Mapped[int] = Column(Integer, primary_key=True, index=True)

    name: Mapped[str] = Column(
        String(255),
        nullable=False,
        comment="Project name",
    )
    description: Mapped[Optional[str]] = Column(
        Text,
        nullable=True,
        comment="Scope summary",
    )

    # WHY: values_callable stores the lowercase value, not the member name
    status: Mapped[ProjectStatus] = Column(
        SQLEnum(
            ProjectStatus,
            name="projectstatus",
            values_callable=lambda enum: [e.value for e in enum],
        ),
        nullable=False,
        default=ProjectStatus.PLANNING,
        comment="Current project status",
    )

    budget: Mapped[Decimal] = Column(
        Numeric(12, 2),
        nullable=False,
        default=0,
        comment="Planned budget",
    )
    location: Mapped[Optional[str]] = Column(
        String(500),
        nullable=True,
        comment="Site address",
    )

    start_date: Mapped[Optional[datetime]] = Column(
        DateTime,
        nullable=True,
        comment="Planned start date",
    )
    end_date: Mapped[Optional[datetime]] = Column(
        DateTime,
        nullable=True,
        comment="Planned completion date",
    )

    # Timestamps
    created_at: Mapped[datetime] = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        comment="Record creation timestamp",
    )
    updated_at: Mapped[datetime] = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        comment="Last modification timestamp",
    )

    # Relationships
    estimates: Mapped[list["Estimate"]] = relationship(
        "Estimate",
        back_populates="project",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Project(id={self.id}, name={self.name}, status={self.status})>"
