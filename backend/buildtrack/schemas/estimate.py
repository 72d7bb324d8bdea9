"""
Pydantic schemas for estimate endpoints.

WHAT: Request/response schemas for the estimate API.

WHY: Schemas define API contracts for estimate operations:
1. Validate incoming request data including line items
2. Document API for OpenAPI/Swagger
3. Shape responses (camelCase, revision history included)

HOW: Uses Pydantic v2 with Field constraints, nested models for line
items and revisions. Line item totals sent by clients are accepted but
ignored; the service recomputes them.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import ConfigDict, Field

from buildtrack.schemas.base import CamelModel
from buildtrack.services.pricing import MAX_AMOUNT, MAX_QUANTITY


class EstimateStatus(str, Enum):
    """
    Estimate workflow status.

    WHY: Mirrors the SQLAlchemy enum for API consistency.
    """

    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"


class LineItemInput(CamelModel):
    """
    Line item as sent by a client.

    WHAT: Description, whole-number quantity and unit price. ``total`` is
    optional and never trusted.
    """

    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Line item description",
    )
    quantity: int = Field(
        ...,
        ge=1,
        le=MAX_QUANTITY,
        description="Quantity (whole units)",
    )
    unit_price: float = Field(
        ...,
        ge=0,
        le=float(MAX_AMOUNT),
        description="Price per unit",
    )
    total: Optional[float] = Field(
        default=None,
        description="Ignored; recomputed as quantity * unit_price",
    )


class LineItemResponse(CamelModel):
    """Stored line item with its computed total."""

    description: str
    quantity: int
    unit_price: float
    total: float


class EstimateCreate(CamelModel):
    """
    Estimate creation request schema.

    WHAT: Validates data for creating a new estimate.

    WHY: Estimates start in DRAFT. When ``items`` is omitted or empty the
    estimate gets a single "Project Total" line priced at ``amount``.
    """

    project_id: int = Field(
        ...,
        gt=0,
        description="Owning project ID",
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Estimate title",
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        description="Scope description",
    )
    amount: float = Field(
        ...,
        ge=0,
        le=float(MAX_AMOUNT),
        description="Estimate amount (used only when no items are given)",
    )
    items: Optional[List[LineItemInput]] = Field(
        default=None,
        description="Line items in display order",
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=10000,
        description="Free-text notes",
    )
    terms: Optional[str] = Field(
        default=None,
        max_length=10000,
        description="Terms and conditions",
    )
    valid_until: Optional[datetime] = Field(
        default=None,
        description="Expiration date (defaults to 30 days from now)",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "projectId": 1,
                "title": "Kitchen remodel",
                "description": "Cabinets, counters and fixtures",
                "amount": 2500,
                "items": [
                    {"description": "Labor", "quantity": 10, "unitPrice": 100},
                    {"description": "Materials", "quantity": 1, "unitPrice": 1500},
                ],
            }
        }
    )


class EstimateTransition(CamelModel):
    """
    Estimate status change request schema.

    WHAT: Target status plus the metadata the status needs.

    WHY: ``userId`` is recorded as the approver; when it is omitted the
    caller identity header is used instead.
    """

    estimate_id: int = Field(
        ...,
        gt=0,
        description="Estimate to update",
    )
    status: EstimateStatus = Field(
        ...,
        description="New status",
    )
    rejection_reason: Optional[str] = Field(
        default=None,
        max_length=2000,
        description="Reason, recorded when rejecting",
    )
    user_id: Optional[str] = Field(
        default=None,
        max_length=64,
        description="Approver, recorded when approving",
    )
    project_id: Optional[int] = Field(
        default=None,
        gt=0,
        description="If given, the estimate must belong to this project",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "estimateId": 1,
                "status": "rejected",
                "rejectionReason": "Over budget",
            }
        }
    )


class EstimateRevise(CamelModel):
    """
    Estimate revision request schema.

    WHAT: New line items (at least one) and notes for an estimate.
    """

    estimate_id: int = Field(
        ...,
        gt=0,
        description="Estimate to revise",
    )
    items: List[LineItemInput] = Field(
        ...,
        description="Replacement line items",
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=10000,
        description="Replacement notes",
    )


class RevisionResponse(CamelModel):
    """Snapshot of a replaced item set."""

    version: int
    amount: float
    items: List[LineItemResponse]
    notes: Optional[str]
    created_at: datetime


class EstimateResponse(CamelModel):
    """
    Estimate response schema.

    WHAT: Structure for estimate data in API responses, including the
    full revision history (oldest first).
    """

    id: int
    project_id: int
    title: str
    description: str
    amount: float
    items: List[LineItemResponse]
    status: EstimateStatus
    valid_until: datetime
    notes: Optional[str]
    terms: Optional[str]
    approved_by: Optional[str]
    approved_at: Optional[datetime]
    rejection_reason: Optional[str]
    revisions: List[RevisionResponse]
    is_expired: bool
    created_at: datetime
    updated_at: datetime
