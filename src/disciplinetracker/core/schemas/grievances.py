"""
Grievance Schemas

Pydantic models for grievance records, submissions and weekly statistics.
"""

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from disciplinetracker.grievances.types import GrievanceType

from .students import StudentSummary


class GrievanceCreate(BaseModel):
    """Schema for recording a new grievance."""

    student_id: UUID = Field(..., description="Internal id of the student")
    type: GrievanceType
    description: str | None = Field(None, max_length=2000)
    date: dt.date | None = Field(None, description="Occurrence date (defaults to today)")
    created_by: UUID | None = Field(
        None, description="Recording staff member; must be the caller when given"
    )


class GrievanceSchema(BaseModel):
    """A grievance joined with its (optional) student projection.

    ``student`` is None when the join produced nothing; consumers must handle
    that case rather than assume the student is present.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    type: str
    description: str | None = None
    date: dt.date
    created_at: dt.datetime
    created_by: UUID | None = None
    student: StudentSummary | None = None


class WeeklyStat(BaseModel):
    """Per-student grievance summary for the current week."""

    student_name: str
    count: int = Field(..., ge=0)
    types: list[str] = Field(default_factory=list)
