"""
Volunteer onboarding configuration endpoints.

Documents, per-ministry requirements and the background check provider
make up the welcome package emailed to new volunteers.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, status

from churchsync.core.models.domain.enums import VolunteerCategoryType
from churchsync.core.models.io.common import ActionResponse, ErrorResponse
from churchsync.core.models.io.onboarding import (
    BackgroundCheckConfigRead,
    BackgroundCheckConfigUpsert,
    MinistryRequirementRead,
    MinistryRequirementUpsert,
    VolunteerDocumentCreate,
    VolunteerDocumentRead,
)
from churchsync.server.services.deps import SessionDep, StorageDep, TenantDep
from churchsync.server.services.onboarding import OnboardingService

router = APIRouter(tags=["onboarding"])

ADMIN_ONLY = {403: {"model": ErrorResponse, "description": "Caller is not an administrator"}}


@router.get(
    "/documents",
    response_model=ActionResponse[List[VolunteerDocumentRead]],
    summary="List Documents",
)
async def list_documents(tenant: TenantDep, session: SessionDep) -> ActionResponse[List[VolunteerDocumentRead]]:
    return await OnboardingService(session).list_documents(tenant)


@router.post(
    "/documents",
    response_model=ActionResponse[VolunteerDocumentRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Document",
    description="Register an uploaded file as an onboarding document. Administrators only.",
    responses={400: {"model": ErrorResponse, "description": "Ministry scope without a category"}, **ADMIN_ONLY},
)
async def create_document(
    payload: VolunteerDocumentCreate, tenant: TenantDep, session: SessionDep
) -> ActionResponse[VolunteerDocumentRead]:
    """
    Create an onboarding document.

    - **name**: Title shown to volunteers.
    - **file_key**: Key returned by the upload endpoint.
    - **scope**: GLOBAL documents go to every volunteer, MINISTRY_SPECIFIC documents only to one category.
    - **category**: Required when the scope is MINISTRY_SPECIFIC.
    """
    return await OnboardingService(session).create_document(tenant, payload)


@router.delete(
    "/documents/{document_id}",
    response_model=ActionResponse[None],
    summary="Delete Document",
    responses={404: {"model": ErrorResponse, "description": "Document not found"}, **ADMIN_ONLY},
)
async def delete_document(
    document_id: str, tenant: TenantDep, session: SessionDep, storage: StorageDep
) -> ActionResponse[None]:
    return await OnboardingService(session, storage=storage).delete_document(tenant, document_id)


@router.get(
    "/requirements",
    response_model=ActionResponse[List[MinistryRequirementRead]],
    summary="List Ministry Requirements",
)
async def list_requirements(tenant: TenantDep, session: SessionDep) -> ActionResponse[List[MinistryRequirementRead]]:
    return await OnboardingService(session).list_requirements(tenant)


@router.put(
    "/requirements/{category}",
    response_model=ActionResponse[MinistryRequirementRead],
    summary="Save Ministry Requirement",
    description="Create or replace the onboarding requirements of one ministry. Administrators only.",
    responses=ADMIN_ONLY,
)
async def upsert_requirement(
    category: VolunteerCategoryType, payload: MinistryRequirementUpsert, tenant: TenantDep, session: SessionDep
) -> ActionResponse[MinistryRequirementRead]:
    return await OnboardingService(session).upsert_requirement(tenant, category, payload)


@router.get(
    "/background-check-config",
    response_model=ActionResponse[Optional[BackgroundCheckConfigRead]],
    summary="Get Background Check Provider",
    description="The configured provider, or null data when none is set up.",
)
async def get_background_check_config(
    tenant: TenantDep, session: SessionDep
) -> ActionResponse[Optional[BackgroundCheckConfigRead]]:
    return await OnboardingService(session).get_background_check_config(tenant)


@router.put(
    "/background-check-config",
    response_model=ActionResponse[BackgroundCheckConfigRead],
    summary="Save Background Check Provider",
    responses=ADMIN_ONLY,
)
async def upsert_background_check_config(
    payload: BackgroundCheckConfigUpsert, tenant: TenantDep, session: SessionDep
) -> ActionResponse[BackgroundCheckConfigRead]:
    """
    Configure the background check provider.

    - **provider**: Provider name shown in emails.
    - **application_url**: Where volunteers apply.
    - **validity_months**: How long a cleared check stays valid.
    - **payment_model**: Who pays for the check.
    - **instructions**: Extra text included in the request email.
    """
    return await OnboardingService(session).upsert_background_check_config(tenant, payload)
