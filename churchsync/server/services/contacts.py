"""
Contact Service.

Hand-maintained church members: create, edit and delete contacts, keep
staff notes and tags on them, and apply bulk changes to a selection.
Every lookup stays inside the caller's organization and campus scope.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.entities.members import ChurchMember, MemberNote
from churchsync.core.database.repositories.members import ChurchMemberRepository, MemberNoteRepository
from churchsync.core.database.repositories.organizations import LocationRepository
from churchsync.core.errors import BusinessRuleError, NotFoundError
from churchsync.core.logging_config import get_logger
from churchsync.core.models.domain.enums import MemberType
from churchsync.core.models.io.common import ActionResponse
from churchsync.core.models.io.contacts import (
    BulkContacts,
    BulkMemberType,
    BulkResult,
    BulkTag,
    ContactCreate,
    ContactUpdate,
    NoteCreate,
    NoteRead,
    TagsUpdate,
)
from churchsync.core.models.io.volunteers import ChurchMemberRead
from churchsync.core.rate_limit import RateLimitTier
from churchsync.core.tenancy import (
    can_access_location,
    default_location_for_new_records,
    location_filter,
    require_delete,
    require_location_access,
)

from .tenancy import TenantContext

logger = get_logger(__name__)

MAX_RESULTS = 200
DUPLICATE_EMAIL_MESSAGE = "A contact with this email already exists"


class ContactService:
    """Contact management inside a tenant."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.members = ChurchMemberRepository(session)
        self.notes = MemberNoteRepository(session)
        self.locations = LocationRepository(session)

    async def _get_in_scope(self, tenant: TenantContext, contact_id: str) -> ChurchMember:
        member = await self.members.get_in_organization(contact_id, tenant.organization_id)
        if member is None or not can_access_location(tenant.scope, member.location_id):
            raise NotFoundError("Contact not found")
        return member

    async def _selection(self, tenant: TenantContext, payload: BulkContacts) -> List[ChurchMember]:
        if not payload.contact_ids:
            raise BusinessRuleError("No contacts selected")
        return await self.members.list_by_ids(
            tenant.organization_id, payload.contact_ids, location_filter=location_filter(tenant.scope)
        )

    async def list_contacts(
        self, tenant: TenantContext, search: Optional[str] = None, member_type: Optional[MemberType] = None
    ) -> ActionResponse[List[ChurchMemberRead]]:
        members = await self.members.search(
            tenant.organization_id,
            search=search,
            location_filter=location_filter(tenant.scope),
            limit=MAX_RESULTS,
            member_type=member_type,
        )
        return ActionResponse(data=[ChurchMemberRead.model_validate(member) for member in members])

    async def create_contact(self, tenant: TenantContext, payload: ContactCreate) -> ActionResponse[ChurchMemberRead]:
        """
        Add a contact by hand.

        Args:
            tenant: Resolved request tenant
            payload: Contact fields; the campus defaults to the caller's own

        Returns:
            ActionResponse with the created contact

        Raises:
            BusinessRuleError: The email is already used in the organization,
                or a multi-campus caller did not choose an active campus.
        """
        tenant.rate_limit("create_contact", RateLimitTier.BULK)

        location_id = payload.location_id or default_location_for_new_records(tenant.scope)
        if location_id is not None:
            require_location_access(tenant.scope, location_id)
            if await self.locations.get_active(location_id, tenant.organization_id) is None:
                raise BusinessRuleError("Invalid location - location not found or inactive")

        if payload.email and await self.members.email_taken(tenant.organization_id, payload.email):
            raise BusinessRuleError(DUPLICATE_EMAIL_MESSAGE)

        member = await self.members.create(
            ChurchMember(
                organization_id=tenant.organization_id,
                location_id=location_id,
                name=payload.name.strip(),
                email=payload.email,
                phone=payload.phone,
                address=payload.address,
                member_type=payload.member_type,
                tags=payload.tags,
            )
        )
        logger.info(f"Created contact {member.id} in organization {tenant.organization_id}")
        return ActionResponse(message="Contact created successfully", data=ChurchMemberRead.model_validate(member))

    async def update_contact(
        self, tenant: TenantContext, contact_id: str, payload: ContactUpdate
    ) -> ActionResponse[ChurchMemberRead]:
        tenant.rate_limit("update_contact", RateLimitTier.BULK)
        member = await self._get_in_scope(tenant, contact_id)

        changes = payload.model_dump(exclude_unset=True)
        # Required columns cannot be cleared
        for required in ("name", "member_type", "tags"):
            if changes.get(required, "") is None:
                changes.pop(required)

        email = changes.get("email")
        if email and email.lower() != (member.email or "").lower():
            if await self.members.email_taken(tenant.organization_id, email, exclude_id=member.id):
                raise BusinessRuleError(DUPLICATE_EMAIL_MESSAGE)

        if "name" in changes:
            changes["name"] = changes["name"].strip()
        for field, value in changes.items():
            setattr(member, field, value)
        member = await self.members.update(member)
        return ActionResponse(message="Contact updated successfully", data=ChurchMemberRead.model_validate(member))

    async def delete_contact(self, tenant: TenantContext, contact_id: str) -> ActionResponse[None]:
        """Delete a contact with its notes. Contacts that volunteer must be deactivated instead."""
        require_delete(tenant.scope)
        tenant.rate_limit("delete_contact", RateLimitTier.STANDARD)
        member = await self._get_in_scope(tenant, contact_id)

        if await self.members.has_volunteer_record(member.id):
            raise BusinessRuleError("This contact has a volunteer record. Deactivate the volunteer instead.")

        await self.members.remove(member)
        await self.session.commit()
        logger.info(f"Deleted contact {contact_id} in organization {tenant.organization_id}")
        return ActionResponse(message="Contact deleted successfully")

    async def add_note(self, tenant: TenantContext, contact_id: str, payload: NoteCreate) -> ActionResponse[NoteRead]:
        member = await self._get_in_scope(tenant, contact_id)
        note = await self.notes.create(
            MemberNote(
                organization_id=tenant.organization_id,
                church_member_id=member.id,
                content=payload.content,
                created_by=tenant.user_id,
            )
        )
        return ActionResponse(message="Note added successfully", data=NoteRead.model_validate(note))

    async def list_notes(self, tenant: TenantContext, contact_id: str) -> ActionResponse[List[NoteRead]]:
        member = await self._get_in_scope(tenant, contact_id)
        notes = await self.notes.list_for_member(member.id)
        return ActionResponse(data=[NoteRead.model_validate(note) for note in notes])

    async def update_tags(
        self, tenant: TenantContext, contact_id: str, payload: TagsUpdate
    ) -> ActionResponse[ChurchMemberRead]:
        member = await self._get_in_scope(tenant, contact_id)
        member.tags = payload.tags
        member = await self.members.update(member)
        return ActionResponse(message="Tags updated successfully", data=ChurchMemberRead.model_validate(member))

    async def bulk_update_member_type(self, tenant: TenantContext, payload: BulkMemberType) -> ActionResponse[BulkResult]:
        members = await self._selection(tenant, payload)
        tenant.rate_limit("bulk_contacts", RateLimitTier.STANDARD)

        for member in members:
            member.member_type = payload.member_type
            self.session.add(member)
        await self.session.commit()
        return ActionResponse(message=f"Updated {len(members)} contact(s)", data=BulkResult(count=len(members)))

    async def bulk_add_tag(self, tenant: TenantContext, payload: BulkTag) -> ActionResponse[BulkResult]:
        """Add one tag to every selected contact that does not have it yet."""
        tag = payload.tag.strip()
        if not tag:
            raise BusinessRuleError("Tag is required")
        members = await self._selection(tenant, payload)
        tenant.rate_limit("bulk_contacts", RateLimitTier.STANDARD)

        updated = 0
        for member in members:
            if tag in member.tags:
                continue
            # New list so the JSON column is flagged as changed
            member.tags = [*member.tags, tag]
            self.session.add(member)
            updated += 1
        await self.session.commit()
        return ActionResponse(message=f"Added tag to {updated} contact(s)", data=BulkResult(count=updated))

    async def bulk_delete(self, tenant: TenantContext, payload: BulkContacts) -> ActionResponse[BulkResult]:
        require_delete(tenant.scope)
        members = await self._selection(tenant, payload)
        tenant.rate_limit("bulk_contacts", RateLimitTier.STANDARD)

        skipped: List[str] = []
        for member in members:
            if await self.members.has_volunteer_record(member.id):
                skipped.append(member.id)
                continue
            await self.members.remove(member)
        await self.session.commit()

        deleted = len(members) - len(skipped)
        message = f"Deleted {deleted} contact(s)"
        if skipped:
            message += f", {len(skipped)} with volunteer records kept"
        logger.info(f"Bulk deleted {deleted} contacts in organization {tenant.organization_id}")
        return ActionResponse(message=message, data=BulkResult(count=deleted, skipped=skipped))
