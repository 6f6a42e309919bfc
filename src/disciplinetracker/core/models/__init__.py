"""
Discipline Tracker SQLAlchemy Models
"""

from sqlalchemy.orm import configure_mappers

from .base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin
from .grievances import Grievance
from .students import Student
from .users import StaffUser

# Init listeners assign mapped attributes, which needs configured mappers
configure_mappers()

__all__ = [
    # Base
    "Base",
    "UUIDPrimaryKeyMixin",
    "CreatedAtMixin",
    # Entities
    "Student",
    "Grievance",
    "StaffUser",
]
