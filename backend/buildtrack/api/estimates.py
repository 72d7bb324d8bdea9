"""
Estimate API endpoints.

WHAT: RESTful API for the estimate lifecycle.

WHY: Estimates are the priced scope of a project:
1. Created per project with line items (or a single total)
2. Revised with the replaced items kept as history
3. Moved through draft, sent, approved and rejected

HOW: Two routers over EstimateService:
- ``router`` (/estimates): create, status change, fetch
- ``project_router`` (/projects/{project_id}/estimates): list, revise
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildtrack.core.deps import get_caller_id
from buildtrack.db.session import get_db
from buildtrack.models.estimate import EstimateStatus as EstimateStatusModel
from buildtrack.schemas.estimate import (
    EstimateCreate,
    EstimateResponse,
    EstimateRevise,
    EstimateStatus,
    EstimateTransition,
    LineItemResponse,
    RevisionResponse,
)
from buildtrack.services.estimate_service import EstimateService


router = APIRouter(prefix="/estimates", tags=["estimates"])
project_router = APIRouter(prefix="/projects/{project_id}/estimates", tags=["estimates"])


def _items_to_response(items) -> List[LineItemResponse]:
    return [
        LineItemResponse(
            description=item["description"],
            quantity=item["quantity"],
            unit_price=item["unit_price"],
            total=item["total"],
        )
        for item in items or []
    ]


def _estimate_to_response(estimate) -> EstimateResponse:
    """
    Convert Estimate model to EstimateResponse schema.

    WHY: Centralized conversion ensures consistent response format,
    Decimal amounts as floats and revisions oldest first.

    Args:
        estimate: Estimate model instance with revisions loaded

    Returns:
        EstimateResponse schema instance
    """
    return EstimateResponse(
        id=estimate.id,
        project_id=estimate.project_id,
        title=estimate.title,
        description=estimate.description,
        amount=float(estimate.amount),
        items=_items_to_response(estimate.items),
        status=EstimateStatus(estimate.status.value),
        valid_until=estimate.valid_until,
        notes=estimate.notes,
        terms=estimate.terms,
        approved_by=estimate.approved_by,
        approved_at=estimate.approved_at,
        rejection_reason=estimate.rejection_reason,
        revisions=[
            RevisionResponse(
                version=revision.version,
                amount=float(revision.amount),
                items=_items_to_response(revision.items),
                notes=revision.notes,
                created_at=revision.created_at,
            )
            for revision in estimate.revisions
        ],
        is_expired=estimate.is_expired,
        created_at=estimate.created_at,
        updated_at=estimate.updated_at,
    )


def _dump_items(items) -> Optional[List[dict]]:
    if items is None:
        return None
    return [item.model_dump(exclude={"total"}) for item in items]


@router.post(
    "",
    response_model=EstimateResponse,
    status_code=status.HTTP_200_OK,
    summary="Create estimate",
    description="Create a draft estimate for a project",
)
async def create_estimate(
    data: EstimateCreate,
    caller_id: Optional[str] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
) -> EstimateResponse:
    """
    Create a new estimate.

    WHAT: Creates a draft estimate. The amount is the sum of the item
    totals; with no items a single "Project Total" line carries ``amount``.

    Raises:
        ValidationError (400): If a required field is missing or invalid
        ProjectNotFoundError (404): If the project doesn't exist
    """
    service = EstimateService(db)
    estimate = await service.create_estimate(
        project_id=data.project_id,
        title=data.title,
        description=data.description,
        amount=data.amount,
        items=_dump_items(data.items),
        notes=data.notes,
        terms=data.terms,
        valid_until=data.valid_until,
        actor_id=caller_id,
    )
    await db.commit()
    return _estimate_to_response(estimate)


@router.patch(
    "",
    response_model=EstimateResponse,
    summary="Change estimate status",
    description="Send, approve, reject or reopen an estimate",
)
async def transition_estimate(
    data: EstimateTransition,
    caller_id: Optional[str] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
) -> EstimateResponse:
    """
    Change an estimate's status.

    WHAT: approved stamps approver and time, rejected records the reason,
    draft and sent clear both.

    Raises:
        ValidationError (400): If estimateId or status is missing/invalid
        InvalidStateTransitionError (400): If strict transitions reject it
        EstimateNotFoundError (404): If the estimate doesn't exist
    """
    service = EstimateService(db)
    estimate = await service.transition_estimate(
        estimate_id=data.estimate_id,
        new_status=EstimateStatusModel(data.status.value),
        rejection_reason=data.rejection_reason,
        user_id=data.user_id,
        project_id=data.project_id,
        actor_id=caller_id,
    )
    await db.commit()
    return _estimate_to_response(estimate)


@router.get(
    "/{estimate_id}",
    response_model=EstimateResponse,
    summary="Get estimate",
)
async def get_estimate(
    estimate_id: int,
    db: AsyncSession = Depends(get_db),
) -> EstimateResponse:
    """
    Get an estimate with its revision history.

    Raises:
        EstimateNotFoundError (404): If the estimate doesn't exist
    """
    service = EstimateService(db)
    estimate = await service.get_estimate(estimate_id)
    return _estimate_to_response(estimate)


@project_router.get(
    "",
    response_model=List[EstimateResponse],
    summary="List project estimates",
    description="All estimates of a project, newest first",
)
async def list_project_estimates(
    project_id: int,
    db: AsyncSession = Depends(get_db),
) -> List[EstimateResponse]:
    """
    List a project's estimates.

    Raises:
        ProjectNotFoundError (404): If the project doesn't exist
    """
    service = EstimateService(db)
    estimates = await service.list_estimates(project_id)
    return [_estimate_to_response(e) for e in estimates]


@project_router.post(
    "",
    response_model=EstimateResponse,
    status_code=status.HTTP_200_OK,
    summary="Revise estimate",
    description="Replace an estimate's line items, keeping the old set as a revision",
)
async def revise_estimate(
    project_id: int,
    data: EstimateRevise,
    caller_id: Optional[str] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
) -> EstimateResponse:
    """
    Revise an estimate.

    WHAT: Records the current items as the next revision, stores the new
    items with a recomputed amount and reopens the estimate as a draft.

    Raises:
        ValidationError (400): If items are empty or invalid
        EstimateNotFoundError (404): If the estimate isn't in this project
    """
    service = EstimateService(db)
    estimate = await service.revise_estimate(
        estimate_id=data.estimate_id,
        project_id=project_id,
        items=_dump_items(data.items),
        notes=data.notes,
        actor_id=caller_id,
    )
    await db.commit()
    return _estimate_to_response(estimate)
