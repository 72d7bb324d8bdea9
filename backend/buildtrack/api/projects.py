"""
Project API endpoints.

WHAT: Create, list, fetch, update and delete construction projects.

WHY: Every estimate belongs to a project; these endpoints give clients
the project ids that estimate routes are scoped by.

HOW: FastAPI router over ProjectDAO. Listing is newest first.
"""

from datetime import timezone
from typing import List
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildtrack.core.exceptions import ProjectNotFoundError, ValidationError
from buildtrack.db.session import get_db
from buildtrack.dao.project import ProjectDAO
from buildtrack.models.project import ProjectStatus as ProjectStatusModel
from buildtrack.schemas.project import (
    ProjectCreate,
    ProjectResponse,
    ProjectStatus,
    ProjectUpdate,
)


router = APIRouter(prefix="/projects", tags=["projects"])


def _project_to_response(project) -> ProjectResponse:
    """
    Convert Project model to ProjectResponse schema.

    Args:
        project: Project model instance

    Returns:
        ProjectResponse schema instance
    """
    return ProjectResponse(
        id=project.id,
        name=project.name,
        description=project.description,
        status=ProjectStatus(project.status.value),
        budget=float(project.budget or 0),
        location=project.location,
        start_date=project.start_date,
        end_date=project.end_date,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
)
async def create_project(
    data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
) -> ProjectResponse:
    """
    Create a new project.

    Raises:
        ValidationError (400): If data validation fails
    """
    project_dao = ProjectDAO(db)
    project = await project_dao.create(
        name=data.name,
        description=data.description,
        status=ProjectStatusModel(data.status.value),
        budget=data.budget,
        location=data.location,
        start_date=data.start_date,
        end_date=data.end_date,
    )
    await db.commit()
    return _project_to_response(project)


@router.get(
    "",
    response_model=List[ProjectResponse],
    summary="List projects",
    description="All projects, newest first",
)
async def list_projects(
    db: AsyncSession = Depends(get_db),
) -> List[ProjectResponse]:
    """List projects, newest first."""
    project_dao = ProjectDAO(db)
    projects = await project_dao.get_recent()
    return [_project_to_response(p) for p in projects]


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Get project",
)
async def get_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
) -> ProjectResponse:
    """
    Get a project by ID.

    Raises:
        ProjectNotFoundError (404): If project doesn't exist
    """
    project_dao = ProjectDAO(db)
    project = await project_dao.get_by_id(project_id)
    if not project:
        raise ProjectNotFoundError(project_id=project_id)
    return _project_to_response(project)


@router.put(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Update project",
    description="Update project details (partial update)",
)
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProjectResponse:
    """
    Update project details.

    WHAT: Only fields present in the body are changed.

    Raises:
        ValidationError (400): If the resulting end date is before the start date
        ProjectNotFoundError (404): If project doesn't exist
    """
    project_dao = ProjectDAO(db)
    project = await project_dao.get_by_id(project_id)
    if not project:
        raise ProjectNotFoundError(project_id=project_id)

    update_data = data.model_dump(exclude_unset=True)
    # Required columns: an explicit null leaves them unchanged
    for field in ("name", "status", "budget"):
        if field in update_data and update_data[field] is None:
            del update_data[field]
    if "status" in update_data:
        update_data["status"] = ProjectStatusModel(update_data["status"].value)
    for field in ("start_date", "end_date"):
        value = update_data.get(field)
        if value is not None and value.tzinfo is not None:
            update_data[field] = value.astimezone(timezone.utc).replace(tzinfo=None)

    start_date = update_data.get("start_date", project.start_date)
    end_date = update_data.get("end_date", project.end_date)
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ValidationError(message="end_date must be after start_date", field="endDate")

    if update_data:
        project = await project_dao.update(project_id, **update_data)
    await db.commit()
    return _project_to_response(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete project",
    description="Delete a project and its estimates",
)
async def delete_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """
    Delete a project.

    CAUTION: Cascades to the project's estimates and their revisions.

    Raises:
        ProjectNotFoundError (404): If project doesn't exist
    """
    project_dao = ProjectDAO(db)
    if not await project_dao.delete(project_id):
        raise ProjectNotFoundError(project_id=project_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
