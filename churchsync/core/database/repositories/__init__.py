"""
Repository layer for the ChurchSync database.

This package provides async data access classes, one per entity, built on
``AsyncBaseRepository`` and SQLModel.
"""

from .base import AsyncBaseRepository, QueryBuilder, SQLModelRepository
from .connect_cards import ConnectCardBatchRepository, ConnectCardRepository
from .courses import ChapterRepository, CourseRepository, LessonRepository
from .events import (
    EventAssignmentRepository,
    EventResourceRepository,
    EventSessionRepository,
    VolunteerEventRepository,
)
from .exports import DataExportRepository
from .integrations import EmailLogRepository, GHLTokenRepository
from .members import ChurchMemberRepository, MemberIntegrationRepository, MemberNoteRepository
from .onboarding import (
    BackgroundCheckConfigRepository,
    MinistryRequirementRepository,
    VolunteerDocumentRepository,
)
from .organizations import InvitationRepository, LocationRepository, OrganizationRepository, UserRepository
from .prayer_requests import PrayerBatchRepository, PrayerQuery, PrayerRequestRepository
from .volunteers import VolunteerRepository

__all__ = [
    "AsyncBaseRepository",
    "BackgroundCheckConfigRepository",
    "ChapterRepository",
    "ChurchMemberRepository",
    "ConnectCardBatchRepository",
    "ConnectCardRepository",
    "CourseRepository",
    "DataExportRepository",
    "EmailLogRepository",
    "EventAssignmentRepository",
    "EventResourceRepository",
    "EventSessionRepository",
    "GHLTokenRepository",
    "InvitationRepository",
    "LessonRepository",
    "LocationRepository",
    "MemberIntegrationRepository",
    "MemberNoteRepository",
    "MinistryRequirementRepository",
    "OrganizationRepository",
    "PrayerBatchRepository",
    "PrayerQuery",
    "PrayerRequestRepository",
    "QueryBuilder",
    "SQLModelRepository",
    "UserRepository",
    "VolunteerDocumentRepository",
    "VolunteerEventRepository",
    "VolunteerRepository",
]
