# backend/alembic/versions/001_scheduling_core.py
"""Scheduling core - venue schedules, templates, sync queue, bookings, payments

Revision ID: 001_scheduling_core
Revises:
Create Date: 2026-10-18 00:00:00.000000

Bookings are self-contained: they carry venue, date and wall-clock times and
never reference availability rows, so editing templates or legacy blocks
cannot orphan a booking.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_scheduling_core"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create scheduling tables."""
    print("Creating scheduling core tables...")

    op.create_table(
        "venue_schedule_configs",
        sa.Column("venue_id", sa.String(64), nullable=False),
        sa.Column("regular_schedule_mode", sa.String(20), nullable=False, server_default="legacy"),
        sa.Column("drop_in_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("drop_in_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("venue_id"),
        sa.CheckConstraint(
            "regular_schedule_mode IN ('legacy', 'template')",
            name="ck_venue_schedule_configs_mode",
        ),
    )

    # Legacy explicit availability
    op.create_table(
        "availability",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("venue_id", sa.String(64), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_availability_venue_date", "availability", ["venue_id", "date"])

    op.create_table(
        "slot_templates",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("venue_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("action_type", sa.String(30), nullable=False, server_default="instant_book"),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("repeat_every_weeks", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("effective_from", sa.Date(), nullable=True),
        sa.Column("effective_until", sa.Date(), nullable=True),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("drop_in_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_slot_templates_day_of_week"),
        sa.CheckConstraint("start_time < end_time", name="ck_slot_templates_time_order"),
        sa.CheckConstraint("repeat_every_weeks >= 1", name="ck_slot_templates_repeat"),
    )
    op.create_index("ix_slot_templates_venue_id", "slot_templates", ["venue_id"])

    op.create_table(
        "slot_instances",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("venue_id", sa.String(64), nullable=False),
        sa.Column("template_id", sa.String(26), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("action_type", sa.String(30), nullable=False),
        sa.Column("drop_in_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["template_id"], ["slot_templates.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "venue_id",
            "template_id",
            "date",
            "start_time",
            "end_time",
            name="uq_slot_instances_natural_key",
        ),
    )
    op.create_index("idx_slot_instances_venue_date", "slot_instances", ["venue_id", "date"])

    # One row per venue; claimed with FOR UPDATE SKIP LOCKED
    op.create_table(
        "template_sync_queue",
        sa.Column("venue_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("reason", sa.String(255), nullable=True),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attempt_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("venue_id"),
        sa.CheckConstraint(
            "status IN ('pending', 'processing', 'done', 'failed')",
            name="ck_template_sync_queue_status",
        ),
    )
    op.create_index(
        "idx_template_sync_queue_status_requested",
        "template_sync_queue",
        ["status", "requested_at"],
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("venue_id", sa.String(64), nullable=False),
        sa.Column("renter_id", sa.String(64), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("recurring_type", sa.String(20), nullable=False, server_default="none"),
        sa.Column("recurring_end_date", sa.Date(), nullable=True),
        sa.Column("parent_booking_id", sa.String(26), nullable=True),
        sa.Column("payment_id", sa.String(26), nullable=True),
        sa.Column("notes", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_by_id", sa.String(64), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["parent_booking_id"], ["bookings.id"]),
        sa.CheckConstraint("start_time < end_time", name="ck_bookings_time_order"),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="ck_bookings_status",
        ),
        sa.CheckConstraint(
            "recurring_type IN ('none', 'daily', 'weekly', 'monthly')",
            name="ck_bookings_recurring_type",
        ),
    )
    op.create_index("ix_bookings_venue_id", "bookings", ["venue_id"])
    op.create_index("ix_bookings_renter_id", "bookings", ["renter_id"])
    op.create_index("ix_bookings_date", "bookings", ["date"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_parent_booking_id", "bookings", ["parent_booking_id"])
    op.create_index("idx_bookings_venue_date_status", "bookings", ["venue_id", "date", "status"])

    op.create_table(
        "payments",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("booking_id", sa.String(26), nullable=False),
        sa.Column("stripe_payment_intent_id", sa.String(255), nullable=True),
        sa.Column("amount_cents", sa.Integer(), nullable=False, comment="Captured amount in cents"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("refund_amount_cents", sa.Integer(), nullable=True),
        sa.Column("refund_id", sa.String(255), nullable=True),
        sa.Column("refunded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("stripe_payment_intent_id"),
    )
    op.create_index("ix_payments_booking_id", "payments", ["booking_id"])

    print("Scheduling core tables created")


def downgrade() -> None:
    """Drop scheduling tables."""
    print("Dropping scheduling core tables...")

    op.drop_index("ix_payments_booking_id", table_name="payments")
    op.drop_table("payments")

    op.drop_index("idx_bookings_venue_date_status", table_name="bookings")
    op.drop_index("ix_bookings_parent_booking_id", table_name="bookings")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_date", table_name="bookings")
    op.drop_index("ix_bookings_renter_id", table_name="bookings")
    op.drop_index("ix_bookings_venue_id", table_name="bookings")
    op.drop_table("bookings")

    op.drop_index("idx_template_sync_queue_status_requested", table_name="template_sync_queue")
    op.drop_table("template_sync_queue")

    op.drop_index("idx_slot_instances_venue_date", table_name="slot_instances")
    op.drop_table("slot_instances")

    op.drop_index("ix_slot_templates_venue_id", table_name="slot_templates")
    op.drop_table("slot_templates")

    op.drop_index("idx_availability_venue_date", table_name="availability")
    op.drop_table("availability")

    op.drop_table("venue_schedule_configs")
