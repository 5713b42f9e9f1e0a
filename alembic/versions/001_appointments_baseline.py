"""Baseline migration - appointments schema.

Revision ID: 001_appointments_baseline
Revises: None
Create Date: 2026-10-18

Creates the ``appointments`` table plus the minimal ``users``, ``owners``
and ``pets`` tables it references. In deployments where the account and
registry services already own those tables, stamp this revision after
creating ``appointments`` by hand.

Indexes:
- (practitioner_id, start_time): conflict prefilter and day listings
- status: excludes cancelled rows
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_appointments_baseline"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

APPOINTMENT_STATUS = sa.Enum(
    "pending",
    "confirmed",
    "completed",
    "cancelled",
    name="appointment_status",
)


def upgrade() -> None:
    """Create collaborator tables and the appointments table."""

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(150), nullable=True),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column(
            "role",
            sa.String(50),
            nullable=False,
            server_default="user",
            comment="'admin' users can be booked as practitioners",
        ),
    )
    op.create_index("ix_users_id", "users", ["id"])

    op.create_table(
        "owners",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
    )
    op.create_index("ix_owners_id", "owners", ["id"])

    op.create_table(
        "pets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "owner_id",
            sa.Integer(),
            sa.ForeignKey("owners.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("species", sa.String(50), nullable=True),
    )
    op.create_index("ix_pets_id", "pets", ["id"])
    op.create_index("ix_pets_owner_id", "pets", ["owner_id"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("pet_id", sa.Integer(), sa.ForeignKey("pets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("owners.id", ondelete="CASCADE"), nullable=False),
        sa.Column("practitioner_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "appointment_type",
            sa.String(50),
            nullable=False,
            server_default="general consultation",
        ),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "end_time",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="start_time + duration_minutes",
        ),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default=sa.text("30")),
        sa.Column("status", APPOINTMENT_STATUS, nullable=False, server_default="pending"),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("duration_minutes > 0", name="ck_appointments_duration_positive"),
    )
    op.create_index("ix_appointments_id", "appointments", ["id"])
    op.create_index("ix_appointments_pet_id", "appointments", ["pet_id"])
    op.create_index("ix_appointments_owner_id", "appointments", ["owner_id"])
    op.create_index("ix_appointments_start_time", "appointments", ["start_time"])
    op.create_index("ix_appointments_status", "appointments", ["status"])
    op.create_index(
        "ix_appointments_practitioner_start",
        "appointments",
        ["practitioner_id", "start_time"],
    )


def downgrade() -> None:
    """Drop everything created by upgrade()."""
    op.drop_index("ix_appointments_practitioner_start", table_name="appointments")
    op.drop_index("ix_appointments_status", table_name="appointments")
    op.drop_index("ix_appointments_start_time", table_name="appointments")
    op.drop_index("ix_appointments_owner_id", table_name="appointments")
    op.drop_index("ix_appointments_pet_id", table_name="appointments")
    op.drop_index("ix_appointments_id", table_name="appointments")
    op.drop_table("appointments")
    APPOINTMENT_STATUS.drop(op.get_bind(), checkfirst=True)

    op.drop_index("ix_pets_owner_id", table_name="pets")
    op.drop_index("ix_pets_id", table_name="pets")
    op.drop_table("pets")

    op.drop_index("ix_owners_id", table_name="owners")
    op.drop_table("owners")

    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
