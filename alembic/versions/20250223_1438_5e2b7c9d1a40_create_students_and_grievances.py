"""Create students, grievances and staff users with row-level security

Revision ID: 5e2b7c9d1a40
Revises:
Create Date: 2025-02-23 14:38:25.000000+00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5e2b7c9d1a40"  # pragma: allowlist secret
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Transaction-local setting the application binds to the acting staff id
ACTOR = "NULLIF(current_setting('app.current_actor', true), '')::uuid"


def upgrade() -> None:
    op.create_table(
        "staff_users",
        sa.Column("id", sa.UUID(), primary_key=True, comment="UUID primary key"),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=200), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )

    op.create_table(
        "students",
        sa.Column(
            "id",
            sa.UUID(),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
            comment="UUID primary key",
        ),
        sa.Column("student_id", sa.Text(), nullable=False, unique=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("class", sa.String(length=50), nullable=False),
        sa.Column("section", sa.String(length=50), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )

    op.create_table(
        "grievances",
        sa.Column(
            "id",
            sa.UUID(),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
            comment="UUID primary key",
        ),
        sa.Column("student_id", sa.UUID(), sa.ForeignKey("students.id"), nullable=False),
        # Free text: allowed values are checked by the application
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False, server_default=sa.text("CURRENT_DATE")),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column("created_by", sa.UUID(), sa.ForeignKey("staff_users.id"), nullable=True),
    )
    op.create_index("idx_grievances_date", "grievances", ["date"])
    op.create_index("idx_grievances_created_at", "grievances", ["created_at"])

    # Row-level security: reads for any identified actor, inserts only in
    # the actor's own name, no update or delete policy at all.
    for table in ("students", "grievances"):
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY")
        op.execute(
            f'CREATE POLICY "Allow authenticated users to read {table}" '
            f"ON {table} FOR SELECT USING ({ACTOR} IS NOT NULL)"
        )

    op.execute(
        'CREATE POLICY "Allow authenticated users to insert grievances" '
        f"ON grievances FOR INSERT WITH CHECK (created_by = {ACTOR})"
    )


def downgrade() -> None:
    op.execute('DROP POLICY IF EXISTS "Allow authenticated users to insert grievances" ON grievances')
    for table in ("grievances", "students"):
        op.execute(f'DROP POLICY IF EXISTS "Allow authenticated users to read {table}" ON {table}')

    op.drop_index("idx_grievances_created_at", table_name="grievances")
    op.drop_index("idx_grievances_date", table_name="grievances")
    op.drop_table("grievances")
    op.drop_table("students")
    op.drop_table("staff_users")
