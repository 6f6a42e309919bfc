"""
Dashboard Orchestration

Per-staff state behind the dashboard page: scanning, the selected student, the
grievance form, and the two lists (recent grievances and weekly repeat
offenders). Every failure becomes a one-shot notification; nothing here raises
to the page.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Literal
from uuid import UUID

from disciplinetracker.config import settings
from disciplinetracker.core.errors import (
    CameraError,
    DisciplineTrackerError,
    StudentNotFoundError,
    TransportError,
)
from disciplinetracker.core.schemas import GrievanceSchema, StudentSchema, WeeklyStat
from disciplinetracker.core.validation import ValidationError, validate_grievance_type
from disciplinetracker.grievances.repository import GrievanceRepository
from disciplinetracker.grievances.stats import (
    WeekStart,
    repeat_offenders,
    week_window,
    weekly_stats,
)
from disciplinetracker.grievances.types import GrievanceType
from disciplinetracker.scanner import ScannerAdapter, ScanSession

logger = logging.getLogger(__name__)


class FormPhase(StrEnum):
    """Where the grievance form is in its lifecycle."""

    NO_STUDENT = "no_student"
    STUDENT_SELECTED = "student_selected"
    TYPE_SELECTED = "type_selected"
    SUBMITTING = "submitting"


@dataclass(frozen=True)
class Notification:
    """Transient message shown once to the staff member (a toast)."""

    level: Literal["success", "error", "info"]
    message: str


class DashboardController:
    """State and actions for one staff member's dashboard."""

    def __init__(
        self,
        scanner: ScannerAdapter | None = None,
        *,
        recent_limit: int | None = None,
        repeat_threshold: int | None = None,
        week_start: WeekStart | None = None,
    ):
        self.scanner = scanner or ScannerAdapter()
        if recent_limit is None:
            recent_limit = settings.RECENT_GRIEVANCES_LIMIT
        if repeat_threshold is None:
            repeat_threshold = settings.REPEAT_OFFENDER_THRESHOLD
        if recent_limit < 1:
            raise ValueError(f"recent_limit must be at least 1, got {recent_limit}")
        if repeat_threshold < 1:
            raise ValueError(f"repeat_threshold must be at least 1, got {repeat_threshold}")

        self.recent_limit = recent_limit
        self.repeat_threshold = repeat_threshold
        self.week_start: WeekStart = week_start or settings.WEEK_START

        self.selected_student: StudentSchema | None = None
        self.grievance_type: GrievanceType | None = None
        self.description: str = ""

        self.recent_grievances: list[GrievanceSchema] = []
        self.weekly_stats: list[WeeklyStat] = []

        self._notifications: list[Notification] = []
        self._submit_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def phase(self) -> FormPhase:
        if self._submit_lock.locked():
            return FormPhase.SUBMITTING
        if self.selected_student is None:
            return FormPhase.NO_STUDENT
        if self.grievance_type is None:
            return FormPhase.STUDENT_SELECTED
        return FormPhase.TYPE_SELECTED

    @property
    def can_submit(self) -> bool:
        return self.phase == FormPhase.TYPE_SELECTED

    @property
    def active_scan(self) -> ScanSession | None:
        return self.scanner.active_session

    @property
    def repeat_offenders(self) -> list[WeeklyStat]:
        """This week's students at or above the repeat threshold."""
        return repeat_offenders(self.weekly_stats, self.repeat_threshold)

    def is_repeat_offender(self, stat: WeeklyStat) -> bool:
        return stat in self.repeat_offenders

    def notify(self, level: Literal["success", "error", "info"], message: str) -> None:
        self._notifications.append(Notification(level=level, message=message))

    def drain_notifications(self) -> list[Notification]:
        """Return pending notifications and forget them."""
        pending, self._notifications = self._notifications, []
        return pending

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, repo: GrievanceRepository, today: date | None = None) -> None:
        """Reload both lists.

        The two fetches are independent: a failure in one keeps that section's
        previous contents and adds its own notification, the other still
        updates. They run one after the other because they share a session.
        """
        await self.reload_recent(repo)
        await self.reload_weekly(repo, today)

    async def reload_recent(self, repo: GrievanceRepository) -> None:
        try:
            self.recent_grievances = await repo.list_recent_grievances(self.recent_limit)
        except TransportError:
            self.notify("error", "Failed to load recent grievances")

    async def reload_weekly(self, repo: GrievanceRepository, today: date | None = None) -> None:
        start, end = week_window(today or date.today(), self.week_start)
        try:
            records = await repo.list_grievances_in_range(start, end)
        except TransportError:
            self.notify("error", "Failed to load weekly statistics")
            return
        self.weekly_stats = weekly_stats(records)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def start_scan(self) -> ScanSession | None:
        try:
            return self.scanner.start()
        except CameraError:
            self.notify("error", CameraError.user_message)
            return None

    def cancel_scan(self, session_id: str) -> None:
        self.scanner.cancel(session_id)

    def scan_failed(self, session_id: str, reason: str = "") -> None:
        self.scanner.fail(session_id, reason)
        self.notify("error", CameraError.user_message)

    async def scan_decoded(self, repo: GrievanceRepository, session_id: str, code: str) -> bool:
        """Handle decoded text from the reader.

        On a match the student becomes selected and scanning stops. An unknown
        code is reported and scanning resumes so the next card can be tried.
        """
        decoded = self.scanner.deliver(session_id, code)
        if decoded is None:
            return False

        try:
            student = await repo.find_student_by_code(decoded)
        except StudentNotFoundError:
            self.notify("error", StudentNotFoundError.user_message)
            self.start_scan()
            return False

        self.selected_student = StudentSchema.model_validate(student)
        return True

    # ------------------------------------------------------------------
    # Form
    # ------------------------------------------------------------------

    def select_type(self, value: str | GrievanceType | None) -> bool:
        if not value:
            self.grievance_type = None
            return True
        try:
            self.grievance_type = validate_grievance_type(value)
        except ValidationError as e:
            self.notify("error", str(e))
            return False
        return True

    def set_description(self, text: str | None) -> None:
        self.description = text or ""

    def clear_student(self) -> None:
        self.selected_student = None

    def reset_form(self) -> None:
        self.selected_student = None
        self.grievance_type = None
        self.description = ""

    async def submit(self, repo: GrievanceRepository, today: date | None = None) -> bool:
        """Record the grievance currently in the form.

        Only one submission can be in flight; a second one is refused without
        touching the database. On failure the form is left as it was.
        """
        if self._submit_lock.locked():
            self.notify("info", "Submission already in progress")
            return False
        student, grievance_type = self.selected_student, self.grievance_type
        if student is None or grievance_type is None:
            self.notify("error", "Select a student and a grievance type first")
            return False

        async with self._submit_lock:
            try:
                await repo.insert_grievance(
                    student_id=student.id,
                    grievance_type=grievance_type,
                    description=self.description,
                    occurred_on=today,
                )
            except (DisciplineTrackerError, ValidationError) as e:
                logger.warning(f"Grievance submission failed: {e}")
                self.notify("error", "Failed to submit grievance")
                return False

        self.notify("success", "Grievance recorded successfully")
        self.reset_form()
        await self.load(repo, today)
        return True

    def close(self) -> None:
        """Release resources held by this dashboard (the camera)."""
        self.scanner.close()


class DashboardRegistry:
    """Dashboards of the signed-in staff, keyed by staff id.

    Owned by the application (``app.state.dashboards``).
    """

    def __init__(self) -> None:
        self._controllers: dict[UUID, DashboardController] = {}

    def get(self, actor_id: UUID) -> DashboardController:
        controller = self._controllers.get(actor_id)
        if controller is None:
            controller = DashboardController()
            self._controllers[actor_id] = controller
        return controller

    def remove(self, actor_id: UUID) -> None:
        controller = self._controllers.pop(actor_id, None)
        if controller is not None:
            controller.close()

    def close_all(self) -> None:
        for actor_id in list(self._controllers):
            self.remove(actor_id)

    def __len__(self) -> int:
        return len(self._controllers)
