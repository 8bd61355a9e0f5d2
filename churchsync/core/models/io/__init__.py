"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities to allow independent evolution of API contracts.

Modules:
- common: ActionResponse envelope, pagination, shared validators
- organizations: organization, location, user and team schemas
- contacts: contact edits, notes, tags and bulk actions
- connect_cards: scan, review and batch schemas
- volunteers: church member and volunteer schemas
- onboarding: documents, ministry requirements, background check config
- prayer_requests: prayer request and prayer batch schemas
- events: events, sessions, resources and assignments
- courses: courses, chapters and lessons
- exports: export filters, previews, history and upload tickets
- integrations: email statistics and CRM status
"""

from .common import ActionResponse, ErrorResponse, Page

__all__ = ["ActionResponse", "ErrorResponse", "Page"]
