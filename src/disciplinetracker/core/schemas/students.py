"""
Student Schemas

Pydantic models for API request/response validation.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class StudentSummary(BaseModel):
    """Student projection embedded in grievance listings."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    class_name: str = Field(..., description="Class label (column 'class')")
    section: str


class StudentSchema(StudentSummary):
    """Full student schema for responses."""

    id: UUID
    student_id: str = Field(..., description="External student code (QR payload)")
    created_at: datetime
