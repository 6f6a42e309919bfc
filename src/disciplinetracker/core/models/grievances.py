"""
Grievance Models

Discipline observations recorded against a student. Insert-only.
"""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .students import Student

from sqlalchemy import Date, ForeignKey, Index, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class Grievance(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """A recorded disciplinary observation about one student.

    ``type`` is free text at the database level; the allowed values are
    enforced by :class:`disciplinetracker.grievances.types.GrievanceType`
    before insertion.
    """

    __tablename__ = "grievances"
    __table_args__ = (
        Index("idx_grievances_date", "date"),
        Index("idx_grievances_created_at", "created_at"),
    )

    student_id: Mapped[UUID] = mapped_column(ForeignKey("students.id"), nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime.date] = mapped_column(
        Date,
        nullable=False,
        default=datetime.date.today,
        server_default=func.current_date(),
        comment="Day the grievance occurred",
    )
    created_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("staff_users.id"),
        nullable=True,
        comment="Staff member who recorded it (must equal the inserting actor)",
    )

    student: Mapped[Student] = relationship(back_populates="grievances")
