#!/usr/bin/env python3
"""
Roster Import: CSV → PostgreSQL

Provisions students (and staff accounts) out of band; the dashboard never
creates them. Existing rows are left untouched, matched on the student code
(or staff id).

Row-level security has no insert policy for students, so run this with a
database role that bypasses RLS.

Usage:
    python -m scripts.import_students roster.csv [--dry-run]
    python -m scripts.import_students staff.csv --staff

CSV columns:
    students: student_id,name,class,section
    staff:    id,email,full_name
"""

import argparse
import asyncio
import csv
import logging
import sys
from pathlib import Path
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from disciplinetracker.config import settings  # noqa: E402
from disciplinetracker.core.models import StaffUser, Student  # noqa: E402
from disciplinetracker.core.validation import ValidationError, validate_student_code  # noqa: E402

logger = logging.getLogger(__name__)

STUDENT_COLUMNS = ("student_id", "name", "class", "section")
STAFF_COLUMNS = ("id", "email")


def parse_student_row(row: dict[str, str]) -> dict[str, Any] | None:
    """Turn one roster CSV row into Student fields.

    Returns:
        Field dict, or None if the row is incomplete or the code is invalid
    """
    values = {key: (row.get(key) or "").strip() for key in STUDENT_COLUMNS}
    if not all(values.values()):
        return None

    try:
        code = validate_student_code(values["student_id"])
    except ValidationError:
        return None

    return {
        "student_id": code,
        "name": values["name"],
        "class_name": values["class"],
        "section": values["section"],
    }


def parse_staff_row(row: dict[str, str]) -> dict[str, Any] | None:
    """Turn one staff CSV row into StaffUser fields."""
    raw_id = (row.get("id") or "").strip()
    email = (row.get("email") or "").strip().lower()
    if not raw_id or not email:
        return None

    try:
        staff_id = UUID(raw_id)
    except ValueError:
        return None

    return {
        "id": staff_id,
        "email": email,
        "full_name": (row.get("full_name") or "").strip() or None,
    }


def read_rows(path: Path, staff: bool = False) -> tuple[list[dict[str, Any]], int]:
    """Parse a CSV file.

    Returns:
        (parsed rows, number of rows skipped as invalid)
    """
    parse = parse_staff_row if staff else parse_student_row
    required = STAFF_COLUMNS if staff else STUDENT_COLUMNS

    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        missing = [col for col in required if col not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"{path} is missing columns: {', '.join(missing)}")

        parsed: list[dict[str, Any]] = []
        skipped = 0
        for line_no, row in enumerate(reader, start=2):
            fields = parse(row)
            if fields is None:
                logger.warning(f"Skipping invalid row {line_no} in {path}")
                skipped += 1
                continue
            parsed.append(fields)

    return parsed, skipped


async def import_students(session: AsyncSession, rows: list[dict[str, Any]]) -> int:
    """Insert students whose code is not yet known. Returns the number added."""
    codes = [row["student_id"] for row in rows]
    result = await session.execute(select(Student.student_id).where(Student.student_id.in_(codes)))
    existing = set(result.scalars().all())

    added = 0
    for row in rows:
        if row["student_id"] in existing:
            continue
        session.add(Student(**row))
        existing.add(row["student_id"])
        added += 1

    await session.commit()
    return added


async def import_staff(session: AsyncSession, rows: list[dict[str, Any]]) -> int:
    """Insert staff accounts whose id is not yet known. Returns the number added."""
    ids = [row["id"] for row in rows]
    result = await session.execute(select(StaffUser.id).where(StaffUser.id.in_(ids)))
    existing = set(result.scalars().all())

    added = 0
    for row in rows:
        if row["id"] in existing:
            continue
        session.add(StaffUser(**row))
        existing.add(row["id"])
        added += 1

    await session.commit()
    return added


async def main(path: Path, staff: bool, dry_run: bool, db_url: str) -> None:
    kind = "staff accounts" if staff else "students"
    print(f"📖 Reading {kind} from: {path}")

    rows, skipped = read_rows(path, staff=staff)
    print(f"📊 Valid rows: {len(rows)} (skipped {skipped})")

    if dry_run:
        print("🔍 Dry run, nothing written")
        return

    engine = create_async_engine(db_url, echo=False)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_factory() as session:
            if staff:
                added = await import_staff(session, rows)
            else:
                added = await import_students(session, rows)
    finally:
        await engine.dispose()

    print(f"✅ Imported {added} new {kind} ({len(rows) - added} already present)")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Import students or staff from CSV")
    parser.add_argument("csv_path", type=Path, help="CSV file to import")
    parser.add_argument("--staff", action="store_true", help="Import staff accounts instead")
    parser.add_argument("--dry-run", action="store_true", help="Parse only, do not write")
    parser.add_argument("--db-url", default=settings.DATABASE_URL, help="Database URL")
    args = parser.parse_args()

    asyncio.run(main(args.csv_path, args.staff, args.dry_run, args.db_url))
