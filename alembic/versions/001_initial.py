"""Users and gadgets.

Creates the users table and the gadgets table with the lifecycle columns
(status, self-destruct confirmation code, decommission/destroy timestamps).

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create users and gadgets."""
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    # --- gadgets ---
    op.create_table(
        "gadgets",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), server_default="AVAILABLE", nullable=False),
        sa.Column("confirmation_code", sa.String(16), nullable=True),
        sa.Column("confirmation_issued_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("decommissioned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("destroyed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("owner_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_gadgets"),
        sa.UniqueConstraint("name", name="uq_gadgets_name"),
        sa.ForeignKeyConstraint(
            ["owner_id"], ["users.id"], name="fk_gadgets_owner_id_users", ondelete="CASCADE", onupdate="CASCADE"
        ),
        sa.CheckConstraint(
            "status IN ('AVAILABLE', 'DEPLOYED', 'DESTROYED', 'DECOMMISSIONED')",
            name="ck_gadgets_status",
        ),
        sa.CheckConstraint(
            "(status = 'DECOMMISSIONED') = (decommissioned_at IS NOT NULL)",
            name="ck_gadgets_decommissioned_at",
        ),
    )
    op.create_index("ix_gadgets_owner_id", "gadgets", ["owner_id"])
    op.create_index("ix_gadgets_owner_status", "gadgets", ["owner_id", "status"])


def downgrade() -> None:
    """Drop gadgets and users."""
    op.drop_index("ix_gadgets_owner_status", table_name="gadgets")
    op.drop_index("ix_gadgets_owner_id", table_name="gadgets")
    op.drop_table("gadgets")
    op.drop_table("users")
