"""
Grievance API Endpoints

Record grievances and list recent and weekly activity.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from disciplinetracker.api.deps import get_repository
from disciplinetracker.config import settings
from disciplinetracker.core.errors import PolicyRejectedError, StudentNotFoundError, TransportError
from disciplinetracker.core.schemas import GrievanceCreate, GrievanceSchema, WeeklyStat
from disciplinetracker.core.validation import ValidationError
from disciplinetracker.grievances.repository import GrievanceRepository
from disciplinetracker.grievances.stats import week_window, weekly_stats
from disciplinetracker.grievances.types import GRIEVANCE_TYPES

router = APIRouter()


def _unavailable(e: TransportError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.get("/types", response_model=list[str])
async def list_grievance_types() -> list[str]:
    """The fixed set of grievance types."""
    return GRIEVANCE_TYPES


@router.get("/recent", response_model=list[GrievanceSchema])
async def list_recent_grievances(
    limit: int | None = Query(None, ge=1, le=100),
    repo: GrievanceRepository = Depends(get_repository),
) -> list[GrievanceSchema]:
    """Most recently recorded grievances, newest first."""
    try:
        return await repo.list_recent_grievances(limit)
    except TransportError as e:
        raise _unavailable(e) from e


@router.get("/weekly", response_model=list[WeeklyStat])
async def get_weekly_stats(
    day: date | None = Query(None, description="Any day of the week to summarize"),
    repo: GrievanceRepository = Depends(get_repository),
) -> list[WeeklyStat]:
    """Per-student grievance counts for the current (or given) week."""
    start, end = week_window(day or date.today(), settings.WEEK_START)
    try:
        records = await repo.list_grievances_in_range(start, end)
    except TransportError as e:
        raise _unavailable(e) from e
    return weekly_stats(records)


@router.get("/", response_model=list[GrievanceSchema])
async def list_grievances_in_range(
    start: date,
    end: date,
    repo: GrievanceRepository = Depends(get_repository),
) -> list[GrievanceSchema]:
    """All grievances dated within [start, end]."""
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="end must not be before start",
        )
    try:
        return await repo.list_grievances_in_range(start, end)
    except TransportError as e:
        raise _unavailable(e) from e


@router.post("/", response_model=GrievanceSchema, status_code=status.HTTP_201_CREATED)
async def create_grievance(
    grievance_data: GrievanceCreate,
    repo: GrievanceRepository = Depends(get_repository),
) -> GrievanceSchema:
    """Record a grievance in the caller's name."""
    try:
        return await repo.insert_grievance(
            student_id=grievance_data.student_id,
            grievance_type=grievance_data.type,
            description=grievance_data.description,
            occurred_on=grievance_data.date,
            created_by=grievance_data.created_by,
        )
    except PolicyRejectedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    except StudentNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Student not found with ID: {grievance_data.student_id}",
        ) from e
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from e
    except TransportError as e:
        raise _unavailable(e) from e
