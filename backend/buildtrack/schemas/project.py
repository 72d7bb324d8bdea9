"""
Pydantic schemas for project endpoints.

WHAT: Request/response schemas for the project API.

WHY: Schemas define API contracts for project operations:
1. Validate incoming request data
2. Document API for OpenAPI/Swagger
3. Control which fields are exposed in responses

HOW: Uses Pydantic v2 with Field constraints and camelCase aliases.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import ConfigDict, Field, field_validator

from buildtrack.schemas.base import CamelModel
from buildtrack.services.pricing import MAX_AMOUNT


class ProjectStatus(str, Enum):
    """
    Project lifecycle status.

    WHY: Mirrors the SQLAlchemy enum for API consistency.
    """

    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"


class ProjectCreate(CamelModel):
    """
    Project creation request schema.

    WHAT: Validates data for creating a new project.
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Project name",
    )
    description: Optional[str] = Field(
        default=None,
        max_length=5000,
        description="Scope summary",
    )
    status: ProjectStatus = Field(
        default=ProjectStatus.PLANNING,
        description="Initial project status",
    )
    budget: float = Field(
        default=0,
        ge=0,
        le=float(MAX_AMOUNT),
        description="Planned budget",
    )
    location: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Site address",
    )
    start_date: Optional[datetime] = Field(
        default=None,
        description="Planned start date (ISO 8601 format)",
    )
    end_date: Optional[datetime] = Field(
        default=None,
        description="Planned completion date (ISO 8601 format)",
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        """Reject names made only of whitespace."""
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

    @field_validator("end_date")
    @classmethod
    def end_date_after_start_date(cls, v: Optional[datetime], info) -> Optional[datetime]:
        """
        Validate end_date is not before start_date.

        WHY: A project can't finish before it starts.
        """
        if v is not None and info.data.get("start_date") is not None:
            if v < info.data["start_date"]:
                raise ValueError("end_date must be after start_date")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Maple Street Renovation",
                "description": "Kitchen and bath remodel",
                "budget": 85000,
                "location": "12 Maple Street",
                "startDate": "2025-03-01T00:00:00",
                "endDate": "2025-06-30T00:00:00",
            }
        }
    )


class ProjectUpdate(CamelModel):
    """
    Project update request schema.

    WHAT: Validates data for updating an existing project.

    WHY: Allows partial updates - only provided fields are modified.
    The start/end order is checked again against the stored dates.
    """

    name: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=255,
        description="Project name",
    )
    description: Optional[str] = Field(
        default=None,
        max_length=5000,
        description="Scope summary",
    )
    status: Optional[ProjectStatus] = Field(
        default=None,
        description="Project status",
    )
    budget: Optional[float] = Field(
        default=None,
        ge=0,
        le=float(MAX_AMOUNT),
        description="Planned budget",
    )
    location: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Site address",
    )
    start_date: Optional[datetime] = Field(
        default=None,
        description="Planned start date (ISO 8601 format)",
    )
    end_date: Optional[datetime] = Field(
        default=None,
        description="Planned completion date (ISO 8601 format)",
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("name must not be blank")
        return v.strip() if v is not None else v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "active",
                "budget": 92000,
            }
        }
    )


class ProjectResponse(CamelModel):
    """
    Project response schema.

    WHAT: Structure for project data in API responses.
    """

    id: int
    name: str
    description: Optional[str]
    status: ProjectStatus
    budget: float
    location: Optional[str]
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime
