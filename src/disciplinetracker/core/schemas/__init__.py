"""Pydantic schemas for API validation."""

from .grievances import GrievanceCreate, GrievanceSchema, WeeklyStat
from .students import StudentSchema, StudentSummary

__all__ = [
    # Students
    "StudentSummary",
    "StudentSchema",
    # Grievances
    "GrievanceCreate",
    "GrievanceSchema",
    "WeeklyStat",
]
