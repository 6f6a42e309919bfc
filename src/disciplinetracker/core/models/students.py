"""
Student Models

Students are provisioned out of band (roster import) and never edited here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .grievances import Grievance

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class Student(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """A student whose ID card carries a scannable code."""

    __tablename__ = "students"

    student_id: Mapped[str] = mapped_column(
        Text,
        unique=True,
        nullable=False,
        comment="External student code printed on the ID card (QR payload)",
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    class_name: Mapped[str] = mapped_column("class", String(50), nullable=False)
    section: Mapped[str] = mapped_column(String(50), nullable=False)

    grievances: Mapped[list[Grievance]] = relationship(back_populates="student")

    def __repr__(self) -> str:
        return f"<Student {self.student_id} {self.name!r}>"
