"""
Contact endpoints.

Contacts are the church members of the organization as staff edit them by
hand. Bulk routes take a list of contact ids and skip ids outside the
caller's scope.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, status

from churchsync.core.models.domain.enums import MemberType
from churchsync.core.models.io.common import ActionResponse, ErrorResponse
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
from churchsync.server.services.contacts import ContactService
from churchsync.server.services.deps import SessionDep, TenantDep

router = APIRouter(tags=["contacts"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Contact not found"}}


@router.get(
    "",
    response_model=ActionResponse[List[ChurchMemberRead]],
    summary="List Contacts",
)
async def list_contacts(
    tenant: TenantDep, session: SessionDep, search: Optional[str] = None, member_type: Optional[MemberType] = None
) -> ActionResponse[List[ChurchMemberRead]]:
    """
    List contacts in the caller's scope.

    - **search**: Case-insensitive match on name or email.
    - **member_type**: Only contacts of this type.
    """
    return await ContactService(session).list_contacts(tenant, search=search, member_type=member_type)


@router.post(
    "",
    response_model=ActionResponse[ChurchMemberRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Contact",
    responses={400: {"model": ErrorResponse, "description": "Duplicate email or invalid campus"}},
)
async def create_contact(
    payload: ContactCreate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[ChurchMemberRead]:
    return await ContactService(session).create_contact(tenant, payload)


@router.post("/bulk/member-type", response_model=ActionResponse[BulkResult], summary="Bulk Update Member Type")
async def bulk_update_member_type(
    payload: BulkMemberType, tenant: TenantDep, session: SessionDep
) -> ActionResponse[BulkResult]:
    return await ContactService(session).bulk_update_member_type(tenant, payload)


@router.post("/bulk/tags", response_model=ActionResponse[BulkResult], summary="Bulk Add Tag")
async def bulk_add_tag(payload: BulkTag, tenant: TenantDep, session: SessionDep) -> ActionResponse[BulkResult]:
    return await ContactService(session).bulk_add_tag(tenant, payload)


@router.post(
    "/bulk/delete",
    response_model=ActionResponse[BulkResult],
    summary="Bulk Delete Contacts",
    description="Delete the selected contacts. Contacts with a volunteer record are kept and listed as skipped.",
)
async def bulk_delete(payload: BulkContacts, tenant: TenantDep, session: SessionDep) -> ActionResponse[BulkResult]:
    return await ContactService(session).bulk_delete(tenant, payload)


@router.patch(
    "/{contact_id}",
    response_model=ActionResponse[ChurchMemberRead],
    summary="Update Contact",
    responses=NOT_FOUND,
)
async def update_contact(
    contact_id: str, payload: ContactUpdate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[ChurchMemberRead]:
    return await ContactService(session).update_contact(tenant, contact_id, payload)


@router.delete(
    "/{contact_id}",
    response_model=ActionResponse[None],
    summary="Delete Contact",
    responses=NOT_FOUND,
)
async def delete_contact(contact_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[None]:
    return await ContactService(session).delete_contact(tenant, contact_id)


@router.get(
    "/{contact_id}/notes",
    response_model=ActionResponse[List[NoteRead]],
    summary="List Contact Notes",
    responses=NOT_FOUND,
)
async def list_notes(contact_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[List[NoteRead]]:
    return await ContactService(session).list_notes(tenant, contact_id)


@router.post(
    "/{contact_id}/notes",
    response_model=ActionResponse[NoteRead],
    status_code=status.HTTP_201_CREATED,
    summary="Add Contact Note",
    responses=NOT_FOUND,
)
async def add_note(
    contact_id: str, payload: NoteCreate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[NoteRead]:
    return await ContactService(session).add_note(tenant, contact_id, payload)


@router.put(
    "/{contact_id}/tags",
    response_model=ActionResponse[ChurchMemberRead],
    summary="Replace Contact Tags",
    responses=NOT_FOUND,
)
async def update_tags(
    contact_id: str, payload: TagsUpdate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[ChurchMemberRead]:
    return await ContactService(session).update_tags(tenant, contact_id, payload)
