"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Creates all tables for OurMap:
users, categories, events, event_attendees, event_invites,
friendships, event_ratings, notifications.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("phone_e164", sa.String(20), nullable=True, unique=True),
        sa.Column("phone_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("auth_type", sa.String(20), nullable=False, server_default="local"),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("profile_image_url", sa.String(500), nullable=True),
        sa.Column("notify_friend_request", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("notify_friend_event", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("notify_friend_rating", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("notify_contact_joined", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("notify_attendance", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("notify_event_rated", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- categories ---
    op.create_table(
        "categories",
        sa.Column("category_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("value", sa.String(100), nullable=False, unique=True),
        sa.Column("icon", sa.String(100), nullable=True),
        sa.Column("parent_id", sa.String(36), sa.ForeignKey("categories.category_id", ondelete="CASCADE"), nullable=True),
        sa.Column("display_order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(100), nullable=False, server_default="outros"),
        sa.Column("date_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("location", sa.String(500), nullable=False),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column("creator_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("max_attendees", sa.Integer, nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("icon_emoji", sa.String(16), nullable=True),
        sa.Column("is_private", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("shareable_link", sa.String(64), nullable=False, unique=True),
        sa.Column("price_type", sa.String(20), nullable=False, server_default="free"),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("fundraising_goal", sa.Numeric(12, 2), nullable=True),
        sa.Column("minimum_contribution", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_recurring", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("recurrence_type", sa.String(20), nullable=True),
        sa.Column("recurrence_interval", sa.Integer, nullable=True, server_default="1"),
        sa.Column("recurrence_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_events_category", "events", ["category"])
    op.create_index("ix_events_date_time", "events", ["date_time"])
    op.create_index("ix_events_creator_id", "events", ["creator_id"])

    # --- event_attendees ---
    op.create_table(
        "event_attendees",
        sa.Column("attendance_id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="attending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_attendees_event_user"),
    )

    # --- event_invites ---
    op.create_table(
        "event_invites",
        sa.Column("invite_id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_invites_event_user"),
    )

    # --- friendships ---
    op.create_table(
        "friendships",
        sa.Column("friendship_id", sa.String(36), primary_key=True),
        sa.Column("requester_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("addressee_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("requester_id", "addressee_id", name="uq_friendships_pair"),
    )

    # --- event_ratings ---
    op.create_table(
        "event_ratings",
        sa.Column("rating_id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("organizer_rating", sa.Integer, nullable=False),
        sa.Column("event_rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_ratings_event_user"),
        sa.CheckConstraint("organizer_rating BETWEEN 1 AND 5", name="ck_event_ratings_organizer_range"),
        sa.CheckConstraint("event_rating BETWEEN 1 AND 5", name="ck_event_ratings_event_range"),
    )

    # --- notifications ---
    op.create_table(
        "notifications",
        sa.Column("notification_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("related_user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=True),
        sa.Column("related_event_id", sa.String(36), sa.ForeignKey("events.event_id", ondelete="CASCADE"), nullable=True),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("action_url", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("event_ratings")
    op.drop_table("friendships")
    op.drop_table("event_invites")
    op.drop_table("event_attendees")
    op.drop_index("ix_events_creator_id", table_name="events")
    op.drop_index("ix_events_date_time", table_name="events")
    op.drop_index("ix_events_category", table_name="events")
    op.drop_table("events")
    op.drop_table("categories")
    op.drop_table("users")
