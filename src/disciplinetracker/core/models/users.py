"""
Staff User Models

Mirror of the identity provider's user records. The primary key is the
provider's subject id, so access tokens map directly onto rows.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class StaffUser(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """Staff member allowed to record grievances."""

    __tablename__ = "staff_users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True)
