"""
Student API Endpoints

Read-only lookup of provisioned students.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends, HTTPException, status

from disciplinetracker.api.deps import get_repository
from disciplinetracker.core.errors import StudentNotFoundError
from disciplinetracker.core.models import Student
from disciplinetracker.core.schemas import StudentSchema
from disciplinetracker.grievances.repository import GrievanceRepository

router = APIRouter()


@router.get("/by-code/{code}", response_model=StudentSchema)
async def get_student_by_code(
    code: str, repo: GrievanceRepository = Depends(get_repository)
) -> Student:
    """Look up a student by the code printed on their ID card."""
    try:
        return await repo.find_student_by_code(code)
    except StudentNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=StudentNotFoundError.user_message,
        ) from e
