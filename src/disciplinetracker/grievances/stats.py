"""
Weekly grievance statistics.

Pure functions: no I/O, deterministic for a given input. The week window is
computed separately and passed to the range query, never to the aggregation.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from typing import Literal

from disciplinetracker.core.schemas import GrievanceSchema, WeeklyStat

UNKNOWN_STUDENT = "Unknown"

WeekStart = Literal["sunday", "monday"]


def _display_key(record: GrievanceSchema) -> str:
    if record.student is None:
        return UNKNOWN_STUDENT
    return record.student.name or UNKNOWN_STUDENT


def weekly_stats(records: Iterable[GrievanceSchema]) -> list[WeeklyStat]:
    """Group grievances by student name and count them.

    Records without a joined student are counted under "Unknown". Each
    student's types are deduplicated in first-seen order. The result is sorted
    by count, highest first; ties keep the order in which students first
    appeared.

    Args:
        records: Grievances (with optional embedded student) for one window

    Returns:
        One WeeklyStat per distinct student name

    Examples:
        >>> weekly_stats([])
        []
    """
    counts: dict[str, int] = {}
    types: dict[str, list[str]] = {}

    for record in records:
        key = _display_key(record)
        if key not in counts:
            counts[key] = 0
            types[key] = []

        counts[key] += 1
        if record.type not in types[key]:
            types[key].append(record.type)

    stats = [
        WeeklyStat(student_name=key, count=count, types=list(types[key]))
        for key, count in counts.items()
    ]
    # sorted() is stable, so ties stay in first-appearance order
    return sorted(stats, key=lambda stat: stat.count, reverse=True)


def repeat_offenders(stats: Sequence[WeeklyStat], threshold: int = 3) -> list[WeeklyStat]:
    """Students with at least ``threshold`` grievances in the window."""
    return [stat for stat in stats if stat.count >= threshold]


def week_window(today: date, week_start: WeekStart = "sunday") -> tuple[date, date]:
    """Inclusive first and last day of the calendar week containing ``today``.

    Args:
        today: Reference day
        week_start: "sunday" (US locale convention) or "monday" (ISO)

    Returns:
        (start, end) where end is six days after start

    Examples:
        >>> week_window(date(2025, 2, 26))  # a Wednesday
        (datetime.date(2025, 2, 23), datetime.date(2025, 3, 1))
        >>> week_window(date(2025, 2, 26), "monday")
        (datetime.date(2025, 2, 24), datetime.date(2025, 3, 2))
    """
    if week_start == "monday":
        offset = today.weekday()
    elif week_start == "sunday":
        offset = (today.weekday() + 1) % 7
    else:
        raise ValueError(f"Unsupported week start: {week_start!r}")

    start = today - timedelta(days=offset)
    return start, start + timedelta(days=6)
