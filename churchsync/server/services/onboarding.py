"""
Volunteer Onboarding Service.

Manages what a new volunteer receives (documents, ministry requirements and
the background check provider) and sends the welcome package by email.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities.onboarding import (
    BackgroundCheckConfig,
    MinistryRequirement,
    VolunteerDocument,
)
from churchsync.core.database.entities.organizations import Organization
from churchsync.core.database.entities.volunteers import Volunteer
from churchsync.core.database.repositories.onboarding import (
    BackgroundCheckConfigRepository,
    MinistryRequirementRepository,
    VolunteerDocumentRepository,
)
from churchsync.core.errors import BusinessRuleError, NotFoundError
from churchsync.core.logging_config import get_logger
from churchsync.core.models.domain.enums import BackgroundCheckStatus, DocumentScope, VolunteerCategoryType
from churchsync.core.models.io.common import ActionResponse
from churchsync.core.models.io.onboarding import (
    BackgroundCheckConfigRead,
    BackgroundCheckConfigUpsert,
    MinistryRequirementRead,
    MinistryRequirementUpsert,
    OnboardingPackage,
    VolunteerDocumentCreate,
    VolunteerDocumentRead,
)
from churchsync.core.rate_limit import RateLimitTier
from churchsync.core.tenancy import require_admin
from churchsync.domain.volunteer_categories import category_label
from churchsync.integrations.email import (
    BackgroundCheckBlock,
    DocumentLink,
    EmailService,
    VolunteerDocumentsContext,
    volunteer_documents_email,
)
from churchsync.integrations.storage import FileStorage, get_storage
from churchsync.server.core.config import settings
from churchsync.server.core.constant import API_V1_STR

from .tenancy import TenantContext

logger = get_logger(__name__)


def document_url(document_id: str) -> str:
    return f"{settings.public_base_url}{API_V1_STR}/public/documents/{document_id}"


def background_check_confirmation_url(token: str) -> str:
    return f"{settings.public_base_url}{API_V1_STR}/public/background-check/{token}"


def new_confirmation_token() -> str:
    return str(uuid.uuid4())


@dataclass
class DocumentsDelivery:
    sent: bool
    ready_for_export: bool = False


class OnboardingService:
    """Onboarding configuration and welcome package delivery."""

    def __init__(
        self,
        session: AsyncSession,
        email: Optional[EmailService] = None,
        storage: Optional[FileStorage] = None,
    ) -> None:
        self.session = session
        self.email = email or EmailService(session)
        self.storage = storage or get_storage()
        self.documents = VolunteerDocumentRepository(session)
        self.requirements = MinistryRequirementRepository(session)
        self.bg_configs = BackgroundCheckConfigRepository(session)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def list_documents(self, tenant: TenantContext) -> ActionResponse[List[VolunteerDocumentRead]]:
        documents = await self.documents.list_for_organization(tenant.organization_id)
        return ActionResponse(
            message="Documents retrieved",
            data=[VolunteerDocumentRead.model_validate(document) for document in documents],
        )

    async def create_document(
        self, tenant: TenantContext, payload: VolunteerDocumentCreate
    ) -> ActionResponse[VolunteerDocumentRead]:
        require_admin(tenant.scope)
        tenant.rate_limit("volunteer_document_create", RateLimitTier.STANDARD)
        if payload.scope == DocumentScope.MINISTRY_SPECIFIC and payload.category is None:
            raise BusinessRuleError("Ministry category is required for ministry-specific documents")

        document = await self.documents.create(
            VolunteerDocument(
                organization_id=tenant.organization_id,
                name=payload.name,
                description=payload.description,
                file_key=payload.file_key,
                scope=payload.scope,
                category=payload.category if payload.scope == DocumentScope.MINISTRY_SPECIFIC else None,
                uploaded_by=tenant.user_id,
            )
        )
        logger.info(f"Volunteer document {document.id} created in organization {tenant.organization_id}")
        return ActionResponse(
            message="Document uploaded successfully", data=VolunteerDocumentRead.model_validate(document)
        )

    async def delete_document(self, tenant: TenantContext, document_id: str) -> ActionResponse[None]:
        require_admin(tenant.scope)
        tenant.rate_limit("volunteer_document_delete", RateLimitTier.STANDARD)
        document = await self.documents.get_in_organization(document_id, tenant.organization_id)
        if document is None:
            raise NotFoundError("Document not found")

        file_key = document.file_key
        await self.documents.delete(document.id)
        try:
            await self.storage.delete(file_key)
        except Exception:
            logger.warning(f"Failed to delete stored file for document {document_id}", exc_info=True)
        return ActionResponse(message="Document deleted successfully")

    async def get_public_document(self, document_id: str) -> tuple[VolunteerDocument, bytes]:
        """Document record and content for links sent to volunteers."""
        document = await self.documents.get_by_id(document_id)
        if document is None:
            raise NotFoundError("Document not found")
        return document, await self.storage.get(document.file_key)

    # ------------------------------------------------------------------
    # Ministry requirements
    # ------------------------------------------------------------------

    async def list_requirements(self, tenant: TenantContext) -> ActionResponse[List[MinistryRequirementRead]]:
        rows = await self.requirements.list_for_organization(tenant.organization_id)
        return ActionResponse(
            message="Requirements retrieved",
            data=[MinistryRequirementRead.model_validate(row) for row in rows],
        )

    async def upsert_requirement(
        self, tenant: TenantContext, category: VolunteerCategoryType, payload: MinistryRequirementUpsert
    ) -> ActionResponse[MinistryRequirementRead]:
        require_admin(tenant.scope)
        tenant.rate_limit("ministry_requirement_upsert", RateLimitTier.STANDARD)
        requirement = await self.requirements.get_for_category(tenant.organization_id, category)
        if requirement is None:
            requirement = MinistryRequirement(organization_id=tenant.organization_id, category=category)
        for field, value in payload.model_dump().items():
            setattr(requirement, field, value)
        requirement = await self.requirements.update(requirement)
        return ActionResponse(
            message="Ministry requirements saved", data=MinistryRequirementRead.model_validate(requirement)
        )

    # ------------------------------------------------------------------
    # Background check configuration
    # ------------------------------------------------------------------

    async def get_background_check_config(
        self, tenant: TenantContext
    ) -> ActionResponse[Optional[BackgroundCheckConfigRead]]:
        config = await self.bg_configs.get_for_organization(tenant.organization_id)
        if config is None:
            return ActionResponse(message="No configuration found", data=None)
        return ActionResponse(message="Configuration retrieved", data=BackgroundCheckConfigRead.model_validate(config))

    async def upsert_background_check_config(
        self, tenant: TenantContext, payload: BackgroundCheckConfigUpsert
    ) -> ActionResponse[BackgroundCheckConfigRead]:
        require_admin(tenant.scope)
        tenant.rate_limit("background_check_config_upsert", RateLimitTier.STANDARD)
        config = await self.bg_configs.get_for_organization(tenant.organization_id)
        if config is None:
            config = BackgroundCheckConfig(
                organization_id=tenant.organization_id,
                provider=payload.provider,
                application_url=payload.application_url,
            )
        for field, value in payload.model_dump().items():
            setattr(config, field, value)
        config = await self.bg_configs.update(config)
        return ActionResponse(
            message="Background check configuration saved", data=BackgroundCheckConfigRead.model_validate(config)
        )

    # ------------------------------------------------------------------
    # Welcome package
    # ------------------------------------------------------------------

    async def collect_onboarding_documents(
        self, organization_id: str, category: VolunteerCategoryType
    ) -> OnboardingPackage:
        """
        Gather everything a new volunteer of ``category`` should receive.

        The background check configuration is only included when the ministry
        requires a check and the configuration is enabled.
        """
        global_documents = await self.documents.list_for_organization(organization_id, scope=DocumentScope.GLOBAL)
        ministry_documents = await self.documents.list_for_organization(
            organization_id, scope=DocumentScope.MINISTRY_SPECIFIC, category=category
        )
        requirement = await self.requirements.get_for_category(organization_id, category)

        bg_config: Optional[BackgroundCheckConfig] = None
        if requirement is not None and requirement.background_check_required:
            config = await self.bg_configs.get_for_organization(organization_id)
            if config is not None and config.is_enabled:
                bg_config = config

        return OnboardingPackage(
            global_documents=[VolunteerDocumentRead.model_validate(d) for d in global_documents],
            ministry_documents=[VolunteerDocumentRead.model_validate(d) for d in ministry_documents],
            background_check=BackgroundCheckConfigRead.model_validate(bg_config) if bg_config else None,
            requirement=MinistryRequirementRead.model_validate(requirement) if requirement else None,
        )

    async def send_onboarding_documents(
        self,
        organization: Organization,
        volunteer_name: str,
        email: str,
        category: VolunteerCategoryType,
        volunteer: Optional[Volunteer] = None,
    ) -> DocumentsDelivery:
        """
        Email the welcome package to a prospective volunteer.

        Nothing is sent when the package is empty. After a successful send
        the volunteer is marked ready for export when no background check is
        required or the check is already cleared.

        Returns:
            DocumentsDelivery telling whether the email went out and whether
            the volunteer became ready for export
        """
        package = await self.collect_onboarding_documents(organization.id, category)
        requirement = package.requirement
        training_url = requirement.training_url if requirement and requirement.training_required else None
        if not package.has_content and not training_url:
            logger.info(f"No onboarding content configured for {category.value} in organization {organization.id}")
            return DocumentsDelivery(sent=False)

        check: Optional[BackgroundCheckBlock] = None
        if package.background_check is not None:
            confirmation_url = None
            if volunteer is not None:
                if not volunteer.bg_check_token:
                    volunteer.bg_check_token = new_confirmation_token()
                    self.session.add(volunteer)
                    await self.session.commit()
                confirmation_url = background_check_confirmation_url(volunteer.bg_check_token)
            check = BackgroundCheckBlock(
                provider=package.background_check.provider,
                application_url=package.background_check.application_url,
                instructions=package.background_check.instructions,
                confirmation_url=confirmation_url,
            )

        rendered = volunteer_documents_email(
            VolunteerDocumentsContext(
                church_name=organization.name,
                volunteer_name=volunteer_name or "Volunteer",
                category_label=category_label(category),
                documents=[
                    DocumentLink(name=d.name, url=document_url(d.id), description=d.description)
                    for d in package.global_documents + package.ministry_documents
                ],
                background_check=check,
                training_url=training_url,
            )
        )
        result = await self.email.send(
            to=email,
            subject=rendered.subject,
            html=rendered.html,
            text=rendered.text,
            organization_id=organization.id,
            metadata={"template": "volunteer_documents", "category": category.value},
        )
        if not result.success:
            return DocumentsDelivery(sent=False)

        ready = False
        if volunteer is not None:
            bg_not_required = requirement is None or not requirement.background_check_required
            if bg_not_required or volunteer.background_check_status == BackgroundCheckStatus.CLEARED:
                volunteer.ready_for_export = True
                volunteer.ready_for_export_date = utc_now()
                volunteer.version += 1
                self.session.add(volunteer)
                await self.session.commit()
                ready = True
        return DocumentsDelivery(sent=True, ready_for_export=ready)
