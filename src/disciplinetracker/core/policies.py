"""
Row-level access policies.

Application-side mirror of the rules the migration installs in PostgreSQL:

- any authenticated actor may read ``students`` and ``grievances``
- a grievance may be inserted only when ``created_by`` equals the actor
- nothing may be updated or deleted

The repository calls these on every backend, so the rules also hold when the
database itself has no row-level security (SQLite in tests).
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from disciplinetracker.core.errors import PolicyRejectedError

logger = logging.getLogger(__name__)

# Name of the transaction-local setting read by the PostgreSQL policies
ACTOR_SETTING = "app.current_actor"


def check_can_read(actor_id: UUID | None) -> None:
    """Reads are open to every authenticated actor."""
    if actor_id is None:
        raise PolicyRejectedError("Authentication required")


def check_can_insert_grievance(actor_id: UUID | None, created_by: UUID | None) -> None:
    """Insert is allowed only when the row's creator is the inserting actor."""
    check_can_read(actor_id)
    if created_by != actor_id:
        logger.warning(
            "Rejected grievance insert: created_by=%s does not match actor=%s",
            created_by,
            actor_id,
        )
        raise PolicyRejectedError("Grievances can only be recorded in your own name")


async def bind_actor(session: AsyncSession, actor_id: UUID) -> None:
    """Expose the actor to PostgreSQL row-level security for this transaction."""
    bind = session.get_bind()
    if bind.dialect.name != "postgresql":
        return
    await session.execute(
        text("SELECT set_config(:name, :value, true)"),
        {"name": ACTOR_SETTING, "value": str(actor_id)},
    )
