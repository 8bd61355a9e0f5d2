"""
Connect card endpoints.

Scanned cards are saved into the caller's daily review batch, reviewed
(reconciled with a church member and processed) and optionally enrolled as
volunteers. Batches group the cards scanned per campus per day.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, status

from churchsync.core.models.domain.enums import ConnectCardStatus
from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.connect_cards import (
    ConnectCardBatchRead,
    ConnectCardRead,
    ConnectCardReview,
    ConnectCardSave,
    ConnectCardSaved,
    DuplicateCheck,
    DuplicateMatch,
    OnboardingStatusUpdate,
)
from churchsync.server.services.connect_cards import ConnectCardService
from churchsync.server.services.deps import SessionDep, TenantDep

router = APIRouter(tags=["connect-cards"])


# ----------------------------------------------------------------------
# Batches
# ----------------------------------------------------------------------


@router.get(
    "/batches",
    response_model=ActionResponse[List[ConnectCardBatchRead]],
    summary="List Batches",
    description="List review batches visible to the caller, newest first.",
)
async def list_batches(tenant: TenantDep, session: SessionDep) -> ActionResponse[List[ConnectCardBatchRead]]:
    return await ConnectCardService(session).list_batches(tenant)


@router.post(
    "/batches",
    response_model=ActionResponse[ConnectCardBatchRead],
    status_code=status.HTTP_201_CREATED,
    summary="Start New Batch",
    description="Complete the caller's open batch for today and start a fresh one.",
)
async def start_new_batch(tenant: TenantDep, session: SessionDep) -> ActionResponse[ConnectCardBatchRead]:
    return await ConnectCardService(session).start_new_batch(tenant)


@router.post(
    "/batches/{batch_id}/complete",
    response_model=ActionResponse[ConnectCardBatchRead],
    summary="Complete Batch",
    description="Mark a review batch as completed.",
)
async def complete_batch(batch_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[ConnectCardBatchRead]:
    return await ConnectCardService(session).complete_batch(tenant, batch_id)


@router.delete(
    "/batches/{batch_id}",
    response_model=ActionResponse[None],
    summary="Delete Batch",
    description="Delete a batch and its cards. Completed batches that still hold cards cannot be deleted.",
    responses={
        400: {"model": ErrorResponse, "description": "Completed batch with cards"},
        403: {"model": ErrorResponse, "description": "Caller may not delete data"},
    },
)
async def delete_batch(batch_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[None]:
    return await ConnectCardService(session).delete_batch(tenant, batch_id)


# ----------------------------------------------------------------------
# Cards
# ----------------------------------------------------------------------


@router.post(
    "",
    response_model=ActionResponse[ConnectCardSaved],
    status_code=status.HTTP_201_CREATED,
    summary="Save Connect Card",
    description="Store the data extracted from a scanned card in the caller's active review batch.",
    response_description="The saved card with its data quality assessment.",
    responses={
        400: {"model": ErrorResponse, "description": "Caller has no default location"},
        429: {"model": ErrorResponse, "description": "Too many saves in the current window"},
    },
)
async def save_connect_card(
    payload: ConnectCardSave, tenant: TenantDep, session: SessionDep
) -> ActionResponse[ConnectCardSaved]:
    """
    Save a scanned connect card.

    The extracted fields are normalized (visit status, interests, keywords)
    and checked for quality problems; cards with issues are flagged for
    review but always saved.

    - **image_key**: Storage key of the uploaded card image.
    - **extracted_data**: Name, contact details, visit status, interests and prayer request read from the card.
    """
    return await ConnectCardService(session).save_connect_card(tenant, payload)


@router.post(
    "/check-duplicate",
    response_model=ActionResponse[DuplicateMatch],
    summary="Check Duplicate",
    description="Look for an earlier card with the same name and the same email or phone.",
)
async def check_duplicate(payload: DuplicateCheck, tenant: TenantDep, session: SessionDep) -> ActionResponse[DuplicateMatch]:
    return await ConnectCardService(session).check_duplicate(tenant, payload)


@router.get(
    "",
    response_model=ActionResponse[List[ConnectCardRead]],
    summary="List Connect Cards",
    description="List cards inside the caller's data scope, optionally filtered by status or batch.",
)
async def list_connect_cards(
    tenant: TenantDep,
    session: SessionDep,
    status: Optional[ConnectCardStatus] = None,
    batch_id: Optional[str] = None,
) -> ActionResponse[List[ConnectCardRead]]:
    return await ConnectCardService(session).list_connect_cards(tenant, status=status, batch_id=batch_id)


@router.get(
    "/{card_id}",
    response_model=ActionResponse[ConnectCardRead],
    summary="Get Connect Card",
    responses={404: {"model": ErrorResponse, "description": "Connect card not found"}},
)
async def get_connect_card(card_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[ConnectCardRead]:
    return await ConnectCardService(session).get_connect_card(tenant, card_id)


@router.put(
    "/{card_id}",
    response_model=ActionResponse[ConnectCardRead],
    summary="Review Connect Card",
    description="Save the reviewed card, link it to a church member and run the follow-up steps.",
    response_description="The processed card; the message lists every follow-up that ran.",
    responses={
        404: {"model": ErrorResponse, "description": "Card or assigned leader not found"},
        429: {"model": ErrorResponse, "description": "Too many reviews in the current window"},
    },
)
async def update_connect_card(
    card_id: str, payload: ConnectCardReview, tenant: TenantDep, session: SessionDep
) -> ActionResponse[ConnectCardRead]:
    """
    Review a connect card.

    The card is matched to a church member by email (created when missing)
    and marked PROCESSED. Depending on the payload the person is enrolled as
    a pending volunteer, a prayer request is created, the assigned leader is
    notified, onboarding documents are emailed and the contact is synced to
    the CRM. A failing follow-up step is reported in the message but never
    fails the review.

    - **name**: Corrected name (required).
    - **email** / **phone** / **address**: Corrected contact details.
    - **visit_type**: First Visit, Second Visit, Regular Attendee or Member.
    - **interests**: Interests ticked on the card.
    - **volunteer_category**: Enroll as a volunteer in this ministry.
    - **prayer_request**: Prayer request text.
    - **assigned_leader_id**: Team member who follows up.
    - **sms_automation_enabled**: Sync the contact to the CRM for SMS automation.
    - **send_message_to_leader**: Email the assigned leader about the new volunteer.
    - **send_background_check_info**: Email onboarding documents to the volunteer.
    """
    return await ConnectCardService(session).update_connect_card(tenant, card_id, payload)


@router.patch(
    "/{card_id}/onboarding-status",
    response_model=ActionResponse[ConnectCardRead],
    summary="Update Onboarding Status",
    description="Move a volunteer prospect to another onboarding pipeline stage.",
)
async def update_onboarding_status(
    card_id: str, payload: OnboardingStatusUpdate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[ConnectCardRead]:
    return await ConnectCardService(session).update_onboarding_status(tenant, card_id, payload)


@router.delete(
    "/{card_id}",
    response_model=ActionResponse[None],
    summary="Delete Connect Card",
    responses={403: {"model": ErrorResponse, "description": "Caller may not delete data"}},
)
async def delete_connect_card(card_id: str, tenant: TenantDep, session: SessionDep) -> ActionResponse[None]:
    return await ConnectCardService(session).delete_connect_card(tenant, card_id)
