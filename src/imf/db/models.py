"""ORM models for users and their gadgets.

The schema is created by the Alembic migration in alembic/versions; keep the
two in sync.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from imf.db.base import Base


class GadgetStatus(str, enum.Enum):
    """Lifecycle states of a gadget."""

    AVAILABLE = "AVAILABLE"
    DEPLOYED = "DEPLOYED"
    DESTROYED = "DESTROYED"
    DECOMMISSIONED = "DECOMMISSIONED"


# Reachable through the generic status update and visible in listings.
ACTIVE_STATUSES: frozenset[GadgetStatus] = frozenset({GadgetStatus.AVAILABLE, GadgetStatus.DEPLOYED})
TERMINAL_STATUSES: frozenset[GadgetStatus] = frozenset({GadgetStatus.DESTROYED, GadgetStatus.DECOMMISSIONED})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )

    gadgets: Mapped[list[Gadget]] = relationship(
        "Gadget", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )


# ---------------------------------------------------------------------------
# Gadgets
# ---------------------------------------------------------------------------


class Gadget(Base):
    """A gadget owned by exactly one user.

    ``confirmation_code`` is only set while a self-destruct is pending, and
    ``decommissioned_at`` / ``destroyed_at`` only once the matching terminal
    status has been reached.
    """

    __tablename__ = "gadgets"
    __table_args__ = (
        CheckConstraint(
            "status IN ('AVAILABLE', 'DEPLOYED', 'DESTROYED', 'DECOMMISSIONED')",
            name="status",
        ),
        CheckConstraint(
            "(status = 'DECOMMISSIONED') = (decommissioned_at IS NOT NULL)",
            name="decommissioned_at",
        ),
        Index("ix_gadgets_owner_status", "owner_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=GadgetStatus.AVAILABLE.value)
    confirmation_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    confirmation_issued_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    decommissioned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    destroyed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )

    owner: Mapped[User] = relationship("User", back_populates="gadgets")
