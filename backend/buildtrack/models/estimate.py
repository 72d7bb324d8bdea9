"""
Estimate model for project pricing and its revision history.

WHAT: SQLAlchemy models for an estimate and the immutable snapshots
recorded each time its line items are revised.

WHY: Estimates are the priced scope of a construction project:
1. Line items define what is being priced
2. The amount is always the sum of the line item totals
3. A status workflow tracks sending, approval and rejection
4. Every revision preserves the item set it replaced

HOW: Uses SQLAlchemy 2.0 with:
- JSON for ordered line items (JSONB on PostgreSQL)
- A separate append-only revisions table keyed by (estimate_id, version)
- Status enum for the approval workflow
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict, Any, TYPE_CHECKING
from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    Numeric,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship, Mapped

from buildtrack.models.base import Base

if TYPE_CHECKING:
    from buildtrack.models.project import Project


# WHY: JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
LineItemsType = JSON().with_variant(JSONB(), "postgresql")


class EstimateStatus(str, Enum):
    """
    Estimate workflow status.

    - DRAFT: Being prepared, or reopened by a revision
    - SENT: Sent to the client for review
    - APPROVED: Client accepted the estimate
    - REJECTED: Client declined the estimate
    """

    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"


class Estimate(Base):
    """
    Project estimate model.

    Attributes:
        id: Primary key
        project_id: Owning project (immutable)
        title: Estimate title
        description: Scope description
        amount: Sum of line item totals
        items: Ordered line items [{description, quantity, unit_price, total}]
        status: Current workflow status
        valid_until: Expiration date
        notes: Free-text notes
        terms: Terms and conditions
        approved_by: Who approved (only while approved)
        approved_at: When approved (only while approved)
        rejection_reason: Why rejected (only while rejected)
        revisions: Prior item sets, oldest first
        created_at: Record creation timestamp
        updated_at: Last modification timestamp
    """

    __tablename__ = "estimates"

    id: Mapped[int] = Column(Integer, primary_key=True, index=True)

    project_id: Mapped[int] = Column(
        Integer,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning project",
    )

    title: Mapped[str] = Column(
        String(255),
        nullable=False,
        comment="Estimate title",
    )
    description: Mapped[str] = Column(
        Text,
        nullable=False,
        comment="Scope description",
    )

    amount: Mapped[Decimal] = Column(
        Numeric(12, 2),
        nullable=False,
        default=0,
        comment="Sum of line item totals",
    )
    # Format: [{"description": str, "quantity": int, "unit_price": float, "total": float}]
    items: Mapped[List[Dict[str, Any]]] = Column(
        LineItemsType,
        nullable=False,
        default=list,
        comment="Line items in display order",
    )

    status: Mapped[EstimateStatus] = Column(
        SQLEnum(
            EstimateStatus,
            name="estimatestatus",
            values_callable=lambda enum: [e.value for e in enum],
        ),
        nullable=False,
        default=EstimateStatus.DRAFT,
        comment="Current workflow status",
    )

    valid_until: Mapped[datetime] = Column(
        DateTime,
        nullable=False,
        comment="Estimate expiration date",
    )

    notes: Mapped[Optional[str]] = Column(
        Text,
        nullable=True,
        comment="Free-text notes",
    )
    terms: Mapped[Optional[str]] = Column(
        Text,
        nullable=True,
        comment="Terms and conditions",
    )

    # Approval / rejection metadata
    approved_by: Mapped[Optional[str]] = Column(
        String(64),
        nullable=True,
        comment="Approver identity",
    )
    approved_at: Mapped[Optional[datetime]] = Column(
        DateTime,
        nullable=True,
        comment="When approved",
    )
    rejection_reason: Mapped[Optional[str]] = Column(
        Text,
        nullable=True,
        comment="Reason for rejection",
    )

    # Timestamps
    created_at: Mapped[datetime] = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        index=True,
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
    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="estimates",
    )
    # WHY: selectin loading keeps revisions available without lazy loads,
    # which are not allowed on async sessions
    revisions: Mapped[list["EstimateRevision"]] = relationship(
        "EstimateRevision",
        back_populates="estimate",
        order_by="EstimateRevision.version",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Estimate(id={self.id}, title={self.title}, status={self.status})>"

    @property
    def is_expired(self) -> bool:
        """True if valid_until has passed."""
        if not self.valid_until:
            return False
        return datetime.utcnow() > self.valid_until


class EstimateRevision(Base):
    """
    Immutable snapshot of an estimate's items before a revision.

    WHY: Revisions are append-only. The unique (estimate_id, version)
    constraint means two concurrent revisions can never both commit the
    same version number; the loser fails and rolls back.

    Attributes:
        id: Primary key
        estimate_id: Estimate this snapshot belongs to
        version: 1-based, gap-free position in the history
        amount: Estimate amount when the snapshot was taken
        items: Item set that was replaced
        notes: Notes that were replaced
        created_at: Snapshot timestamp
    """

    __tablename__ = "estimate_revisions"
    __table_args__ = (
        UniqueConstraint("estimate_id", "version", name="uq_estimate_revisions_estimate_version"),
    )

    id: Mapped[int] = Column(Integer, primary_key=True, index=True)

    estimate_id: Mapped[int] = Column(
        Integer,
        ForeignKey("estimates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Revised estimate",
    )
    version: Mapped[int] = Column(
        Integer,
        nullable=False,
        comment="Revision number, starting at 1",
    )
    amount: Mapped[Decimal] = Column(
        Numeric(12, 2),
        nullable=False,
        comment="Amount of the replaced item set",
    )
    items: Mapped[List[Dict[str, Any]]] = Column(
        LineItemsType,
        nullable=False,
        default=list,
        comment="Replaced line items",
    )
    notes: Mapped[Optional[str]] = Column(
        Text,
        nullable=True,
        comment="Replaced notes",
    )
    created_at: Mapped[datetime] = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        comment="Snapshot timestamp",
    )

    estimate: Mapped["Estimate"] = relationship(
        "Estimate",
        back_populates="revisions",
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<EstimateRevision(estimate_id={self.estimate_id}, version={self.version})>"
