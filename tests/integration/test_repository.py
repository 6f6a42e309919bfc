"""
Integration Tests for Grievance Data Access

Runs the repository against a real database session.
"""

from datetime import UTC, date, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from disciplinetracker.core.errors import (
    PolicyRejectedError,
    StudentNotFoundError,
    TransportError,
)
from disciplinetracker.core.models import Grievance, StaffUser, Student
from disciplinetracker.core.validation import InvalidGrievanceTypeError, ValidationError
from disciplinetracker.grievances.repository import GrievanceRepository
from disciplinetracker.grievances.types import GrievanceType


@pytest.fixture
def repo(db_session: AsyncSession, staff_user: StaffUser) -> GrievanceRepository:
    return GrievanceRepository(db_session, staff_user.id)


async def count_grievances(db_session: AsyncSession) -> int:
    return await db_session.scalar(select(func.count()).select_from(Grievance))


async def add_grievance(
    db_session: AsyncSession,
    student: Student,
    staff: StaffUser,
    *,
    grievance_type: str = "Uniform",
    on: date = date(2025, 2, 26),
    created_at: datetime | None = None,
) -> Grievance:
    grievance = Grievance(
        student_id=student.id,
        type=grievance_type,
        date=on,
        created_by=staff.id,
        created_at=created_at or datetime.now(UTC),
    )
    db_session.add(grievance)
    await db_session.commit()
    return grievance


def broken_session() -> MagicMock:
    """Session whose every query fails as if the database were unreachable."""
    session = MagicMock()
    session.get_bind.return_value.dialect.name = "sqlite"
    session.execute = AsyncMock(
        side_effect=OperationalError("SELECT 1", {}, Exception("connection refused"))
    )
    session.get = AsyncMock(
        side_effect=OperationalError("SELECT 1", {}, Exception("connection refused"))
    )
    session.rollback = AsyncMock()
    session.commit = AsyncMock()
    return session


class TestFindStudentByCode:
    async def test_exactly_one_match(self, repo: GrievanceRepository, student: Student):
        found = await repo.find_student_by_code("STU-1001")

        assert found.id == student.id
        assert found.name == "Alice Mensah"

    async def test_scanner_whitespace_ignored(self, repo: GrievanceRepository, student: Student):
        found = await repo.find_student_by_code("STU-1001\n")

        assert found.id == student.id

    async def test_no_match(self, repo: GrievanceRepository, student: Student):
        with pytest.raises(StudentNotFoundError, match="Student not found"):
            await repo.find_student_by_code("STU-9999")

    async def test_empty_code(self, repo: GrievanceRepository):
        with pytest.raises(StudentNotFoundError):
            await repo.find_student_by_code("   ")

    async def test_more_than_one_match(self):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = "sqlite"
        result = MagicMock()
        result.scalars.return_value.all.return_value = [
            Student(student_id="STU-1001", name="Alice Mensah", class_name="8", section="B"),
            Student(student_id="STU-1001", name="Alice Owusu", class_name="7", section="A"),
        ]
        session.execute = AsyncMock(return_value=result)
        repo = GrievanceRepository(session, uuid4())

        with pytest.raises(StudentNotFoundError, match="Student not found"):
            await repo.find_student_by_code("STU-1001")

    async def test_transport_error_reported_as_not_found(self):
        repo = GrievanceRepository(broken_session(), uuid4())

        with pytest.raises(StudentNotFoundError) as exc_info:
            await repo.find_student_by_code("STU-1001")
        assert isinstance(exc_info.value.__cause__, OperationalError)


class TestListRecentGrievances:
    async def test_newest_first_and_limited(
        self,
        repo: GrievanceRepository,
        db_session: AsyncSession,
        student: Student,
        staff_user: StaffUser,
    ):
        base = datetime(2025, 2, 24, 8, 0, tzinfo=UTC)
        for minutes in range(12):
            await add_grievance(
                db_session, student, staff_user, created_at=base + timedelta(minutes=minutes)
            )

        recent = await repo.list_recent_grievances(10)

        assert len(recent) == 10
        stamps = [g.created_at for g in recent]
        assert stamps == sorted(stamps, reverse=True)

    async def test_default_limit_is_ten(
        self,
        repo: GrievanceRepository,
        db_session: AsyncSession,
        student: Student,
        staff_user: StaffUser,
    ):
        for _ in range(11):
            await add_grievance(db_session, student, staff_user)

        assert len(await repo.list_recent_grievances()) == 10

    async def test_limit_below_one_rejected(
        self,
        repo: GrievanceRepository,
        db_session: AsyncSession,
        student: Student,
        staff_user: StaffUser,
    ):
        for _ in range(3):
            await add_grievance(db_session, student, staff_user)

        with pytest.raises(ValueError, match="at least 1"):
            await repo.list_recent_grievances(0)
        with pytest.raises(ValueError, match="at least 1"):
            await repo.list_recent_grievances(-1)

    async def test_limit_of_one(
        self,
        repo: GrievanceRepository,
        db_session: AsyncSession,
        student: Student,
        staff_user: StaffUser,
    ):
        for _ in range(3):
            await add_grievance(db_session, student, staff_user)

        assert len(await repo.list_recent_grievances(1)) == 1

    async def test_embeds_student(
        self,
        repo: GrievanceRepository,
        db_session: AsyncSession,
        student: Student,
        staff_user: StaffUser,
    ):
        await add_grievance(db_session, student, staff_user)

        [grievance] = await repo.list_recent_grievances()

        assert grievance.student is not None
        assert grievance.student.name == "Alice Mensah"
        assert grievance.student.class_name == "8"
        assert grievance.student.section == "B"

    async def test_empty(self, repo: GrievanceRepository):
        assert await repo.list_recent_grievances() == []

    async def test_transport_error(self):
        repo = GrievanceRepository(broken_session(), uuid4())

        with pytest.raises(TransportError):
            await repo.list_recent_grievances()


class TestListGrievancesInRange:
    async def test_inclusive_bounds(
        self,
        repo: GrievanceRepository,
        db_session: AsyncSession,
        student: Student,
        staff_user: StaffUser,
    ):
        for day in (22, 23, 26, 28):
            await add_grievance(db_session, student, staff_user, on=date(2025, 2, day))
        await add_grievance(db_session, student, staff_user, on=date(2025, 3, 1))
        await add_grievance(db_session, student, staff_user, on=date(2025, 3, 2))

        records = await repo.list_grievances_in_range(date(2025, 2, 23), date(2025, 3, 1))

        assert sorted(r.date for r in records) == [
            date(2025, 2, 23),
            date(2025, 2, 26),
            date(2025, 2, 28),
            date(2025, 3, 1),
        ]

    async def test_transport_error(self):
        repo = GrievanceRepository(broken_session(), uuid4())

        with pytest.raises(TransportError):
            await repo.list_grievances_in_range(date(2025, 2, 23), date(2025, 3, 1))


class TestInsertGrievance:
    async def test_records_in_actor_name(
        self,
        repo: GrievanceRepository,
        db_session: AsyncSession,
        student: Student,
        staff_user: StaffUser,
    ):
        created = await repo.insert_grievance(
            student_id=student.id,
            grievance_type=GrievanceType.LATE_ARRIVAL,
            description="  arrived 8:40 ",
            occurred_on=date(2025, 2, 26),
        )

        assert created.created_by == staff_user.id
        assert created.type == "Late Arrival"
        assert created.description == "arrived 8:40"
        assert created.student is not None
        assert created.student.name == "Alice Mensah"

        stored = await db_session.get(Grievance, created.id)
        assert stored is not None
        assert stored.created_by == staff_user.id

    async def test_defaults_to_today(self, repo: GrievanceRepository, student: Student):
        created = await repo.insert_grievance(student.id, "Shoes")

        assert created.date == date.today()
        assert created.description is None

    async def test_explicit_matching_creator_allowed(
        self, repo: GrievanceRepository, student: Student, staff_user: StaffUser
    ):
        created = await repo.insert_grievance(student.id, "Other", created_by=staff_user.id)

        assert created.created_by == staff_user.id

    async def test_creator_mismatch_rejected_and_nothing_persisted(
        self,
        repo: GrievanceRepository,
        db_session: AsyncSession,
        student: Student,
        other_staff: StaffUser,
    ):
        with pytest.raises(PolicyRejectedError):
            await repo.insert_grievance(student.id, "Uniform", created_by=other_staff.id)

        assert await count_grievances(db_session) == 0

    async def test_invalid_type_rejected(
        self, repo: GrievanceRepository, db_session: AsyncSession, student: Student
    ):
        with pytest.raises(InvalidGrievanceTypeError):
            await repo.insert_grievance(student.id, "Fighting")

        assert await count_grievances(db_session) == 0

    async def test_description_too_long(self, repo: GrievanceRepository, student: Student):
        with pytest.raises(ValidationError):
            await repo.insert_grievance(student.id, "Other", description="x" * 5000)

    async def test_unknown_student(self, repo: GrievanceRepository, db_session: AsyncSession):
        with pytest.raises(StudentNotFoundError):
            await repo.insert_grievance(uuid4(), "Uniform")

        assert await count_grievances(db_session) == 0

    async def test_transport_error_rolls_back(self, student: Student):
        session = broken_session()
        repo = GrievanceRepository(session, uuid4())

        with pytest.raises(TransportError, match="Failed to submit grievance"):
            await repo.insert_grievance(student.id, "Uniform")

        session.rollback.assert_awaited()
        session.commit.assert_not_awaited()

    async def test_inserted_rows_visible_in_recent(
        self, repo: GrievanceRepository, student: Student, second_student: Student
    ):
        await repo.insert_grievance(student.id, "Uniform")
        await repo.insert_grievance(second_student.id, "Hair Cut")

        recent = await repo.list_recent_grievances()

        assert {g.student.name for g in recent} == {"Alice Mensah", "Kofi Asante"}
