"""
Database entity models.

This package contains all database entity models organized by business domain.
Importing the package registers every table on ``Base.metadata``.

Modules:
- organizations: Organization, Location, dashboard User and staff Invitation
- members: ChurchMember, MemberNote and CRM MemberIntegration
- volunteers: Volunteer and VolunteerCategory
- onboarding: VolunteerDocument, MinistryRequirement, BackgroundCheckConfig
- connect_cards: ConnectCard and ConnectCardBatch
- prayer_requests: PrayerRequest and PrayerBatch
- events: VolunteerEvent, EventSession, EventResource, EventAssignment
- courses: Course, Chapter, Lesson
- exports: DataExport
- integrations: GHLToken and EmailLog
"""

from .connect_cards import ConnectCard, ConnectCardBatch
from .courses import Chapter, Course, Lesson
from .events import EventAssignment, EventResource, EventSession, VolunteerEvent
from .exports import DataExport
from .integrations import EmailLog, GHLToken
from .members import ChurchMember, MemberIntegration, MemberNote
from .onboarding import BackgroundCheckConfig, MinistryRequirement, VolunteerDocument
from .organizations import Invitation, Location, Organization, User
from .prayer_requests import PrayerBatch, PrayerRequest
from .volunteers import Volunteer, VolunteerCategory

__all__ = [
    "BackgroundCheckConfig",
    "Chapter",
    "ChurchMember",
    "ConnectCard",
    "ConnectCardBatch",
    "Course",
    "DataExport",
    "EmailLog",
    "EventAssignment",
    "EventResource",
    "EventSession",
    "GHLToken",
    "Invitation",
    "Lesson",
    "Location",
    "MemberIntegration",
    "MemberNote",
    "MinistryRequirement",
    "Organization",
    "PrayerBatch",
    "PrayerRequest",
    "User",
    "Volunteer",
    "VolunteerCategory",
    "VolunteerDocument",
    "VolunteerEvent",
]
