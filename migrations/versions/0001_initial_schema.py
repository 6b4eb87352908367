"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-16 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # --- mood_entries ---
    op.create_table(
        "mood_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("logged_at", sa.DateTime(), nullable=False),
        sa.Column("mood_level", sa.Float(), nullable=False),
        sa.Column("factors", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("note", sa.Text(), nullable=False, server_default=""),
        sa.Column("photo_asset_ref", sa.String(1024), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_mood_entries_id", "mood_entries", ["id"])
    op.create_index("ix_mood_entries_user_id", "mood_entries", ["user_id"])
    op.create_index("ix_mood_entries_user_logged_at", "mood_entries", ["user_id", "logged_at"])

    # --- pending_entries ---
    op.create_table(
        "pending_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("logged_at", sa.DateTime(), nullable=False),
        sa.Column("mood_level", sa.Float(), nullable=False),
        sa.Column("factors", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("note", sa.Text(), nullable=False, server_default=""),
        sa.Column("photo_asset_ref", sa.String(1024), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pending_entries_id", "pending_entries", ["id"])
    op.create_index("ix_pending_entries_user_id", "pending_entries", ["user_id"], unique=True)

    # --- unlocked_achievements ---
    op.create_table(
        "unlocked_achievements",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("achievement_id", sa.String(64), nullable=False),
        sa.Column("unlocked_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "achievement_id", name="uq_unlocked_user_achievement"),
    )
    op.create_index("ix_unlocked_achievements_id", "unlocked_achievements", ["id"])
    op.create_index("ix_unlocked_achievements_user_id", "unlocked_achievements", ["user_id"])

    # --- used_factors ---
    op.create_table(
        "used_factors",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("factor", sa.String(64), nullable=False),
        sa.Column("first_used_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "factor", name="uq_used_factor_user_factor"),
    )
    op.create_index("ix_used_factors_id", "used_factors", ["id"])
    op.create_index("ix_used_factors_user_id", "used_factors", ["user_id"])

    # --- weekly_reviews ---
    op.create_table(
        "weekly_reviews",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("week_start", sa.DateTime(), nullable=False),
        sa.Column("week_end", sa.DateTime(), nullable=False),
        sa.Column("mood_summary", sa.Text(), nullable=False),
        sa.Column("highlights", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("photo_refs", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("notes", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("viewed", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_weekly_reviews_user_id", "weekly_reviews", ["user_id"])
    op.create_index("ix_weekly_reviews_week_start", "weekly_reviews", ["week_start"])

    # --- notification_events ---
    op.create_table(
        "notification_events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("kind", sa.String(64), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("payload", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notification_events_id", "notification_events", ["id"])
    op.create_index("ix_notification_events_user_id", "notification_events", ["user_id"])
    op.create_index("ix_notification_events_kind", "notification_events", ["kind"])

    # --- notification_preferences ---
    op.create_table(
        "notification_preferences",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("daily_reminder_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("daily_reminder_hour", sa.Integer(), nullable=False, server_default="19"),
        sa.Column("daily_reminder_minute", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("weekly_review_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("pattern_insights_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("reengagement_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notification_preferences_id", "notification_preferences", ["id"])
    op.create_index("ix_notification_preferences_user_id", "notification_preferences", ["user_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_notification_preferences_user_id", table_name="notification_preferences")
    op.drop_index("ix_notification_preferences_id", table_name="notification_preferences")
    op.drop_table("notification_preferences")
    op.drop_index("ix_notification_events_kind", table_name="notification_events")
    op.drop_index("ix_notification_events_user_id", table_name="notification_events")
    op.drop_index("ix_notification_events_id", table_name="notification_events")
    op.drop_table("notification_events")
    op.drop_index("ix_weekly_reviews_week_start", table_name="weekly_reviews")
    op.drop_index("ix_weekly_reviews_user_id", table_name="weekly_reviews")
    op.drop_table("weekly_reviews")
    op.drop_index("ix_used_factors_user_id", table_name="used_factors")
    op.drop_index("ix_used_factors_id", table_name="used_factors")
    op.drop_table("used_factors")
    op.drop_index("ix_unlocked_achievements_user_id", table_name="unlocked_achievements")
    op.drop_index("ix_unlocked_achievements_id", table_name="unlocked_achievements")
    op.drop_table("unlocked_achievements")
    op.drop_index("ix_pending_entries_user_id", table_name="pending_entries")
    op.drop_index("ix_pending_entries_id", table_name="pending_entries")
    op.drop_table("pending_entries")
    op.drop_index("ix_mood_entries_user_logged_at", table_name="mood_entries")
    op.drop_index("ix_mood_entries_user_id", table_name="mood_entries")
    op.drop_index("ix_mood_entries_id", table_name="mood_entries")
    op.drop_table("mood_entries")
