"""Initial schema for ChurchSync

Revision ID: 20261019_000000
Revises: None
Create Date: 2026-10-19 00:00:00.000000

Creates every table of the church management backend:
- Tenancy (organizations, locations, dashboard users, staff invitations)
- Members, member notes, CRM links and volunteers
- Connect cards, prayer requests and their batches
- Onboarding documents, ministry requirements, background check settings
- Volunteer events with sessions, resources and assignments
- Courses, exports and integration bookkeeping

Enum columns are stored as plain strings.

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261019_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""

    # Tenancy
    op.create_table(
        "organizations",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("subscription_status", sa.String(32), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_organizations_slug", "slug", unique=True),
    )

    op.create_table(
        "locations",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("address", sa.String(300), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_locations_organization_id", "organization_id"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column("default_location_id", sa.String(64), nullable=True),
        sa.Column("can_see_all_locations", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["default_location_id"], ["locations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_users_organization_id", "organization_id"),
        sa.Index("ix_users_email", "email"),
    )

    op.create_table(
        "invitations",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column("location_id", sa.String(64), nullable=True),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("invited_by", sa.String(64), nullable=False),
        sa.Column("accepted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.ForeignKeyConstraint(["invited_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_invitations_organization_id", "organization_id"),
        sa.Index("ix_invitations_email", "email"),
        sa.Index("ix_invitations_token", "token", unique=True),
    )

    # Members and volunteers
    op.create_table(
        "church_members",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("location_id", sa.String(64), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("address", sa.String(300), nullable=True),
        sa.Column("member_type", sa.String(32), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_church_members_organization_id", "organization_id"),
        sa.Index("ix_church_members_email", "email"),
    )

    op.create_table(
        "member_notes",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("church_member_id", sa.String(64), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["church_member_id"], ["church_members.id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_member_notes_organization_id", "organization_id"),
        sa.Index("ix_member_notes_church_member_id", "church_member_id"),
    )

    op.create_table(
        "member_integrations",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("church_member_id", sa.String(64), nullable=False),
        sa.Column("provider", sa.String(32), nullable=False),
        sa.Column("external_id", sa.String(128), nullable=False),
        sa.Column("last_sync_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["church_member_id"], ["church_members.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("church_member_id", "provider", name="uq_member_integration_provider"),
        sa.Index("ix_member_integrations_organization_id", "organization_id"),
        sa.Index("ix_member_integrations_church_member_id", "church_member_id"),
        sa.Index("ix_member_integrations_external_id", "external_id"),
    )

    op.create_table(
        "volunteers",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("church_member_id", sa.String(64), nullable=False),
        sa.Column("location_id", sa.String(64), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("inactive_reason", sa.String(500), nullable=True),
        sa.Column("notes", sa.String(2000), nullable=True),
        sa.Column("last_served_date", sa.Date(), nullable=True),
        sa.Column("background_check_status", sa.String(32), nullable=False),
        sa.Column("background_check_date", sa.Date(), nullable=True),
        sa.Column("background_check_expiry", sa.Date(), nullable=True),
        sa.Column("bg_check_token", sa.String(64), nullable=True),
        sa.Column("bg_check_confirmed_at", sa.DateTime(), nullable=True),
        sa.Column("ready_for_export", sa.Boolean(), nullable=False),
        sa.Column("ready_for_export_date", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["church_member_id"], ["church_members.id"]),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_volunteers_organization_id", "organization_id"),
        sa.Index("ix_volunteers_church_member_id", "church_member_id"),
        sa.Index("ix_volunteers_bg_check_token", "bg_check_token", unique=True),
    )

    op.create_table(
        "volunteer_categories",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("volunteer_id", sa.String(64), nullable=False),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["volunteer_id"], ["volunteers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("volunteer_id", "category", name="uq_volunteer_category"),
        sa.Index("ix_volunteer_categories_organization_id", "organization_id"),
        sa.Index("ix_volunteer_categories_volunteer_id", "volunteer_id"),
    )

    # Connect cards
    op.create_table(
        "connect_card_batches",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("location_id", sa.String(64), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("card_count", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_connect_card_batches_organization_id", "organization_id"),
        sa.Index("ix_connect_card_batches_location_id", "location_id"),
        sa.Index("ix_connect_card_batches_created_at", "created_at"),
    )

    op.create_table(
        "connect_cards",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("location_id", sa.String(64), nullable=True),
        sa.Column("batch_id", sa.String(64), nullable=True),
        sa.Column("image_key", sa.String(500), nullable=True),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("address", sa.String(300), nullable=True),
        sa.Column("visit_type", sa.String(50), nullable=True),
        sa.Column("interests", sa.JSON(), nullable=False),
        sa.Column("keywords", sa.JSON(), nullable=False),
        sa.Column("prayer_request", sa.Text(), nullable=True),
        sa.Column("extracted_data", sa.JSON(), nullable=True),
        sa.Column("validation_issues", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("volunteer_category", sa.String(64), nullable=True),
        sa.Column("volunteer_onboarding_status", sa.String(32), nullable=True),
        sa.Column("assigned_leader_id", sa.String(64), nullable=True),
        sa.Column("sms_automation_enabled", sa.Boolean(), nullable=False),
        sa.Column("church_member_id", sa.String(64), nullable=True),
        sa.Column("scanned_by", sa.String(64), nullable=True),
        sa.Column("scanned_at", sa.DateTime(), nullable=False),
        sa.Column("reviewed_by", sa.String(64), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("last_exported_at", sa.DateTime(), nullable=True),
        sa.Column("last_exported_by", sa.String(64), nullable=True),
        sa.Column("last_export_format", sa.String(32), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.ForeignKeyConstraint(["batch_id"], ["connect_card_batches.id"]),
        sa.ForeignKeyConstraint(["church_member_id"], ["church_members.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_connect_cards_organization_id", "organization_id"),
        sa.Index("ix_connect_cards_location_id", "location_id"),
        sa.Index("ix_connect_cards_batch_id", "batch_id"),
        sa.Index("ix_connect_cards_scanned_at", "scanned_at"),
    )

    # Prayer requests
    op.create_table(
        "prayer_batches",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("location_id", sa.String(64), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("assigned_to_id", sa.String(64), nullable=True),
        sa.Column("assigned_to_name", sa.String(200), nullable=True),
        sa.Column("prayer_count", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.ForeignKeyConstraint(["assigned_to_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_prayer_batches_organization_id", "organization_id"),
        sa.Index("ix_prayer_batches_created_at", "created_at"),
    )

    op.create_table(
        "prayer_requests",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("location_id", sa.String(64), nullable=True),
        sa.Column("request", sa.Text(), nullable=False),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False),
        sa.Column("is_urgent", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("submitted_by", sa.String(200), nullable=True),
        sa.Column("submitter_email", sa.String(320), nullable=True),
        sa.Column("submitter_phone", sa.String(32), nullable=True),
        sa.Column("connect_card_id", sa.String(64), nullable=True),
        sa.Column("assigned_to_id", sa.String(64), nullable=True),
        sa.Column("batch_id", sa.String(64), nullable=True),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("answered_date", sa.DateTime(), nullable=True),
        sa.Column("answered_notes", sa.Text(), nullable=True),
        sa.Column("follow_up_date", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.ForeignKeyConstraint(["connect_card_id"], ["connect_cards.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["assigned_to_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["batch_id"], ["prayer_batches.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_prayer_requests_organization_id", "organization_id"),
        sa.Index("ix_prayer_requests_location_id", "location_id"),
        sa.Index("ix_prayer_requests_connect_card_id", "connect_card_id"),
        sa.Index("ix_prayer_requests_assigned_to_id", "assigned_to_id"),
        sa.Index("ix_prayer_requests_batch_id", "batch_id"),
        sa.Index("ix_prayer_requests_created_at", "created_at"),
    )

    # Onboarding
    op.create_table(
        "volunteer_documents",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("file_key", sa.String(500), nullable=False),
        sa.Column("scope", sa.String(32), nullable=False),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("uploaded_by", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_volunteer_documents_organization_id", "organization_id"),
    )

    op.create_table(
        "ministry_requirements",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("background_check_required", sa.Boolean(), nullable=False),
        sa.Column("background_check_valid_months", sa.Integer(), nullable=True),
        sa.Column("training_required", sa.Boolean(), nullable=False),
        sa.Column("training_url", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("organization_id", "category", name="uq_ministry_requirement_category"),
        sa.Index("ix_ministry_requirements_organization_id", "organization_id"),
    )

    op.create_table(
        "background_check_configs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("provider", sa.String(100), nullable=False),
        sa.Column("application_url", sa.String(500), nullable=False),
        sa.Column("validity_months", sa.Integer(), nullable=False),
        sa.Column("payment_model", sa.String(32), nullable=False),
        sa.Column("reminder_days", sa.JSON(), nullable=False),
        sa.Column("instructions", sa.String(2000), nullable=True),
        sa.Column("is_enabled", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_background_check_configs_organization_id", "organization_id", unique=True),
    )

    # Volunteer events
    op.create_table(
        "volunteer_events",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("location_id", sa.String(64), nullable=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("event_type", sa.String(32), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("requires_background_check", sa.Boolean(), nullable=False),
        sa.Column("volunteer_pool_scope", sa.String(32), nullable=False),
        sa.Column("confirmation_message", sa.Text(), nullable=True),
        sa.Column("leader_name", sa.String(200), nullable=True),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_volunteer_events_organization_id", "organization_id"),
        sa.Index("ix_volunteer_events_location_id", "location_id"),
    )

    op.create_table(
        "event_sessions",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("event_id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("slots_needed", sa.Integer(), nullable=False),
        sa.Column("slots_filled", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["volunteer_events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_event_sessions_event_id", "event_id"),
        sa.Index("ix_event_sessions_organization_id", "organization_id"),
    )

    op.create_table(
        "event_resources",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("event_id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["volunteer_events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_event_resources_event_id", "event_id"),
        sa.Index("ix_event_resources_organization_id", "organization_id"),
    )

    op.create_table(
        "event_assignments",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("event_id", sa.String(64), nullable=False),
        sa.Column("session_id", sa.String(64), nullable=False),
        sa.Column("volunteer_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("assigned_by", sa.String(64), nullable=True),
        sa.Column("invited_at", sa.DateTime(), nullable=True),
        sa.Column("responded_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["event_id"], ["volunteer_events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["session_id"], ["event_sessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["volunteer_id"], ["volunteers.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("session_id", "volunteer_id", name="uq_event_assignment_session_volunteer"),
        sa.Index("ix_event_assignments_organization_id", "organization_id"),
        sa.Index("ix_event_assignments_event_id", "event_id"),
        sa.Index("ix_event_assignments_session_id", "session_id"),
        sa.Index("ix_event_assignments_volunteer_id", "volunteer_id"),
        sa.Index("ix_event_assignments_created_at", "created_at"),
    )

    # Courses
    op.create_table(
        "courses",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("small_description", sa.String(200), nullable=False),
        sa.Column("file_key", sa.String(500), nullable=True),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("level", sa.String(32), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_courses_organization_id", "organization_id"),
        sa.Index("ix_courses_slug", "slug"),
    )

    op.create_table(
        "chapters",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("course_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_chapters_course_id", "course_id"),
    )

    op.create_table(
        "lessons",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("chapter_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("thumbnail_key", sa.String(500), nullable=True),
        sa.Column("video_key", sa.String(500), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["chapter_id"], ["chapters.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_lessons_chapter_id", "chapter_id"),
    )

    # Exports and integrations
    op.create_table(
        "data_exports",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("location_id", sa.String(64), nullable=True),
        sa.Column("format", sa.String(32), nullable=False),
        sa.Column("filters", sa.JSON(), nullable=False),
        sa.Column("record_count", sa.Integer(), nullable=False),
        sa.Column("file_name", sa.String(200), nullable=False),
        sa.Column("file_key", sa.String(500), nullable=False),
        sa.Column("file_size_bytes", sa.Integer(), nullable=False),
        sa.Column("exported_by", sa.String(64), nullable=True),
        sa.Column("exported_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.ForeignKeyConstraint(["exported_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_data_exports_organization_id", "organization_id"),
        sa.Index("ix_data_exports_exported_at", "exported_at"),
    )

    op.create_table(
        "ghl_tokens",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("ghl_location_id", sa.String(128), nullable=True),
        sa.Column("scope", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_ghl_tokens_organization_id", "organization_id", unique=True),
    )

    op.create_table(
        "email_logs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=True),
        sa.Column("to_address", sa.String(320), nullable=False),
        sa.Column("subject", sa.String(300), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("context", sa.JSON(), nullable=False),
        sa.Column("sent_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_email_logs_organization_id", "organization_id"),
        sa.Index("ix_email_logs_created_at", "created_at"),
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""

    op.drop_table("email_logs")
    op.drop_table("ghl_tokens")
    op.drop_table("data_exports")
    op.drop_table("lessons")
    op.drop_table("chapters")
    op.drop_table("courses")
    op.drop_table("event_assignments")
    op.drop_table("event_resources")
    op.drop_table("event_sessions")
    op.drop_table("volunteer_events")
    op.drop_table("background_check_configs")
    op.drop_table("ministry_requirements")
    op.drop_table("volunteer_documents")
    op.drop_table("prayer_requests")
    op.drop_table("prayer_batches")
    op.drop_table("connect_cards")
    op.drop_table("connect_card_batches")
    op.drop_table("volunteer_categories")
    op.drop_table("volunteers")
    op.drop_table("member_integrations")
    op.drop_table("member_notes")
    op.drop_table("church_members")
    op.drop_table("invitations")
    op.drop_table("users")
    op.drop_table("locations")
    op.drop_table("organizations")
