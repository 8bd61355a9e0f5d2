"""Domain enums shared by entities, services and I/O models."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Platform-wide role stored on the user account."""

    platform_admin = "platform_admin"
    church_owner = "church_owner"
    church_admin = "church_admin"
    user = "user"  # Staff member
    volunteer_leader = "volunteer_leader"


class SubscriptionStatus(str, Enum):
    TRIAL = "TRIAL"
    ACTIVE = "ACTIVE"
    PAST_DUE = "PAST_DUE"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class MemberType(str, Enum):
    VISITOR = "VISITOR"
    RETURNING = "RETURNING"
    MEMBER = "MEMBER"
    VOLUNTEER = "VOLUNTEER"
    STAFF = "STAFF"


class ConnectCardStatus(str, Enum):
    """Lifecycle of a scanned connect card."""

    EXTRACTED = "EXTRACTED"  # Saved after scanning, waiting for review
    REVIEWED = "REVIEWED"
    PROCESSED = "PROCESSED"  # Reconciled with a church member
    EXPORTED = "EXPORTED"
    FAILED = "FAILED"


class BatchStatus(str, Enum):
    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    COMPLETED = "COMPLETED"


class VolunteerOnboardingStatus(str, Enum):
    """Pipeline stage of a volunteer prospect captured from a connect card."""

    INQUIRY = "INQUIRY"
    WELCOME_SENT = "WELCOME_SENT"
    DOCUMENTS_SHARED = "DOCUMENTS_SHARED"
    LEADER_CONNECTED = "LEADER_CONNECTED"
    ORIENTATION_SET = "ORIENTATION_SET"
    READY = "READY"
    ADDED_TO_PCO = "ADDED_TO_PCO"


class VolunteerStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ON_BREAK = "ON_BREAK"
    INACTIVE = "INACTIVE"
    PENDING_APPROVAL = "PENDING_APPROVAL"


class BackgroundCheckStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    PENDING_REVIEW = "PENDING_REVIEW"
    CLEARED = "CLEARED"
    FLAGGED = "FLAGGED"
    EXPIRED = "EXPIRED"


class VolunteerCategoryType(str, Enum):
    GENERAL = "GENERAL"
    GREETER = "GREETER"
    USHER = "USHER"
    KIDS_MINISTRY = "KIDS_MINISTRY"
    WORSHIP_TEAM = "WORSHIP_TEAM"
    PARKING = "PARKING"
    HOSPITALITY = "HOSPITALITY"
    AV_TECH = "AV_TECH"
    PRAYER_TEAM = "PRAYER_TEAM"
    OTHER = "OTHER"


class DocumentScope(str, Enum):
    GLOBAL = "GLOBAL"
    MINISTRY_SPECIFIC = "MINISTRY_SPECIFIC"


class BackgroundCheckPaymentModel(str, Enum):
    CHURCH_PAID = "CHURCH_PAID"
    VOLUNTEER_PAID = "VOLUNTEER_PAID"
    SPLIT = "SPLIT"


class PrayerStatus(str, Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    PRAYING = "PRAYING"
    ANSWERED = "ANSWERED"
    ARCHIVED = "ARCHIVED"


class PrayerBatchStatus(str, Enum):
    IN_REVIEW = "IN_REVIEW"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class EventType(str, Enum):
    SUNDAY_SERVICE = "SUNDAY_SERVICE"
    MIDWEEK_SERVICE = "MIDWEEK_SERVICE"
    YOUTH = "YOUTH"
    KIDS = "KIDS"
    OUTREACH = "OUTREACH"
    SPECIAL_EVENT = "SPECIAL_EVENT"
    HOLIDAY = "HOLIDAY"
    OTHER = "OTHER"


class EventStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    ARCHIVED = "ARCHIVED"


class VolunteerPoolScope(str, Enum):
    organization = "organization"
    location = "location"


class AssignmentStatus(str, Enum):
    INVITED = "INVITED"
    ASSIGNED = "ASSIGNED"
    CONFIRMED = "CONFIRMED"
    DECLINED = "DECLINED"
    NO_SHOW = "NO_SHOW"
    COMPLETED = "COMPLETED"


class ResourceStatus(str, Enum):
    NEEDED = "NEEDED"
    CONFIRMED = "CONFIRMED"
    READY = "READY"


class CourseLevel(str, Enum):
    Core = "Core"
    Beginner = "Beginner"
    Intermediate = "Intermediate"
    Advanced = "Advanced"


class CourseStatus(str, Enum):
    Draft = "Draft"
    Published = "Published"
    Archived = "Archived"


class ExportFormat(str, Enum):
    BREEZE_CSV = "BREEZE_CSV"
    PLANNING_CENTER_CSV = "PLANNING_CENTER_CSV"
    GENERIC_CSV = "GENERIC_CSV"


class DeliveryStatus(str, Enum):
    """Outcome of an email or SMS attempt."""

    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    RATE_LIMITED = "RATE_LIMITED"


class TeamRole(str, Enum):
    """Role offered in a staff invitation."""

    admin = "admin"
    member = "member"

    @property
    def user_role(self) -> UserRole:
        return UserRole.church_admin if self is TeamRole.admin else UserRole.user


class InvitationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    EXPIRED = "EXPIRED"  # Also used for revoked invitations
