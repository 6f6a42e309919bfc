"""
Grievance data access.

Queries and inserts against ``students`` and ``grievances`` on behalf of one
authenticated staff member. Every database failure is converted into a
tracker error so callers never see SQLAlchemy exceptions.
"""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from disciplinetracker.config import settings
from disciplinetracker.core.errors import StudentNotFoundError, TransportError
from disciplinetracker.core.models import Grievance, Student
from disciplinetracker.core.policies import bind_actor, check_can_insert_grievance, check_can_read
from disciplinetracker.core.schemas import GrievanceSchema
from disciplinetracker.core.validation import (
    ValidationError,
    validate_description,
    validate_grievance_type,
    validate_student_code,
)
from disciplinetracker.grievances.types import GrievanceType

logger = logging.getLogger(__name__)


class GrievanceRepository:
    """Data access for one actor within one database session."""

    def __init__(self, session: AsyncSession, actor_id: UUID):
        self.session = session
        self.actor_id = actor_id

    async def find_student_by_code(self, code: str) -> Student:
        """Look up exactly one student by external code.

        Raises:
            StudentNotFoundError: No match, more than one match, or the
                lookup itself failed
        """
        check_can_read(self.actor_id)
        try:
            cleaned = validate_student_code(code)
        except ValidationError as e:
            raise StudentNotFoundError() from e

        try:
            await bind_actor(self.session, self.actor_id)
            result = await self.session.execute(
                select(Student).where(Student.student_id == cleaned).limit(2)
            )
            students = result.scalars().all()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"Student lookup failed for code {cleaned!r}: {e}")
            raise StudentNotFoundError() from e

        if len(students) != 1:
            logger.info(f"No unique student for code {cleaned!r} ({len(students)} matches)")
            raise StudentNotFoundError()

        return students[0]

    async def list_recent_grievances(self, limit: int | None = None) -> list[GrievanceSchema]:
        """Most recently created grievances, newest first.

        Raises:
            ValueError: If ``limit`` is less than 1
            TransportError: If the query fails
        """
        check_can_read(self.actor_id)
        if limit is None:
            limit = settings.RECENT_GRIEVANCES_LIMIT
        if limit < 1:
            raise ValueError(f"Recent grievance limit must be at least 1, got {limit}")

        query = (
            select(Grievance)
            .options(selectinload(Grievance.student))
            .order_by(Grievance.created_at.desc())
            .limit(limit)
        )
        return await self._fetch(query, "recent grievances")

    async def list_grievances_in_range(self, start: date, end: date) -> list[GrievanceSchema]:
        """All grievances whose date falls in [start, end], unordered.

        Raises:
            TransportError: If the query fails
        """
        check_can_read(self.actor_id)
        query = (
            select(Grievance)
            .options(selectinload(Grievance.student))
            .where(Grievance.date >= start, Grievance.date <= end)
        )
        return await self._fetch(query, f"grievances {start}..{end}")

    async def insert_grievance(
        self,
        student_id: UUID,
        grievance_type: GrievanceType | str,
        description: str | None = None,
        occurred_on: date | None = None,
        created_by: UUID | None = None,
    ) -> GrievanceSchema:
        """Record a grievance in the actor's name.

        Args:
            student_id: Internal id of the student
            grievance_type: One of the fixed grievance types
            description: Optional free text
            occurred_on: Occurrence date (default: today)
            created_by: Creator to record; must equal the actor when given

        Raises:
            InvalidGrievanceTypeError: Type is not in the fixed set
            ValidationError: Description too long
            PolicyRejectedError: ``created_by`` is not the actor
            StudentNotFoundError: No student with that id
            TransportError: The insert failed; nothing was persisted
        """
        checked_type = validate_grievance_type(grievance_type)
        cleaned_description = validate_description(description)
        creator = self.actor_id if created_by is None else created_by
        check_can_insert_grievance(self.actor_id, creator)

        try:
            await bind_actor(self.session, self.actor_id)
            student = await self.session.get(Student, student_id)
            if student is None:
                raise StudentNotFoundError()

            grievance = Grievance(
                student=student,
                type=checked_type.value,
                description=cleaned_description,
                date=occurred_on or date.today(),
                created_by=creator,
            )
            self.session.add(grievance)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to insert grievance for student {student_id}: {e}")
            raise TransportError("Failed to submit grievance") from e

        logger.info(
            f"Grievance {grievance.id} ({checked_type.value}) recorded for "
            f"{student.student_id} by {creator}"
        )
        return GrievanceSchema.model_validate(grievance)

    async def _fetch(self, query: Select, what: str) -> list[GrievanceSchema]:
        try:
            await bind_actor(self.session, self.actor_id)
            result = await self.session.execute(query)
            grievances = result.scalars().all()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to load {what}: {e}")
            raise TransportError(f"Failed to load {what}") from e

        return [GrievanceSchema.model_validate(g) for g in grievances]
