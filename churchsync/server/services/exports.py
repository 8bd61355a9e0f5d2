"""
Data Export Service.

Exports reviewed connect cards as CSV for a church management system
(Breeze, Planning Center or a generic layout). Each export is stored in file
storage, recorded in the export history and stamped on the exported cards
so "only new" exports can skip them next time.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.base import new_id, utc_now
from churchsync.core.database.entities.connect_cards import ConnectCard
from churchsync.core.database.entities.exports import DataExport
from churchsync.core.database.repositories.connect_cards import ConnectCardRepository
from churchsync.core.database.repositories.exports import DataExportRepository
from churchsync.core.database.repositories.organizations import LocationRepository
from churchsync.core.errors import BusinessRuleError, NotFoundError
from churchsync.core.logging_config import get_logger
from churchsync.core.models.domain.enums import ConnectCardStatus
from churchsync.core.models.io.common import ActionResponse
from churchsync.core.models.io.exports import DataExportRead, ExportFilters, ExportPreview, ExportRequest
from churchsync.core.monitoring import log_export
from churchsync.core.rate_limit import RateLimitTier
from churchsync.core.tenancy import require_export_role, require_location_access
from churchsync.domain.exports import (
    csv_byte_size,
    dedupe_by_email,
    duplicate_warning,
    export_file_name,
    export_format_tag,
    generate_csv,
    get_profile,
    render_rows,
)
from churchsync.integrations.storage import FileStorage, get_storage

from .tenancy import TenantContext

logger = get_logger(__name__)

PREVIEW_STATUSES = (ConnectCardStatus.REVIEWED, ConnectCardStatus.PROCESSED)
EXPORT_STATUSES = (ConnectCardStatus.EXTRACTED, ConnectCardStatus.REVIEWED, ConnectCardStatus.PROCESSED)
PREVIEW_ROWS = 5


class ExportService:
    def __init__(self, session: AsyncSession, storage: Optional[FileStorage] = None) -> None:
        self.session = session
        self.storage = storage or get_storage()
        self.cards = ConnectCardRepository(session)
        self.exports = DataExportRepository(session)
        self.locations = LocationRepository(session)

    def _effective_location(self, tenant: TenantContext, filters: ExportFilters) -> Optional[str]:
        """Requested campus, or the caller's own campus for single-campus scopes."""
        if filters.location_id:
            require_location_access(tenant.scope, filters.location_id)
            return filters.location_id
        if not tenant.scope.can_see_all_locations:
            return tenant.scope.location_id
        return None

    async def _campus_names(self, organization_id: str) -> Dict[Optional[str], str]:
        locations = await self.locations.list_for_organization(organization_id)
        return {location.id: location.name for location in locations}

    async def _cards(
        self, tenant: TenantContext, filters: ExportFilters, statuses
    ) -> Tuple[List[ConnectCard], Optional[str]]:
        location_id = self._effective_location(tenant, filters)
        cards = await self.cards.list_for_export(
            tenant.organization_id,
            statuses,
            location_id=location_id,
            date_from=filters.date_from,
            date_to=filters.date_to,
            only_new=filters.only_new,
        )
        return cards, location_id

    async def export_preview(self, tenant: TenantContext, request: ExportRequest) -> ActionResponse[ExportPreview]:
        """
        Preview an export: headers, the first rows and the de-duplicated total.

        Only reviewed or processed cards are previewed; when several cards
        share an email only the most recent one is counted.
        """
        require_export_role(tenant.scope)
        cards, _ = await self._cards(tenant, request.filters, PREVIEW_STATUSES)
        unique, skipped = dedupe_by_email(cards)
        campus_names = await self._campus_names(tenant.organization_id)
        return ActionResponse(
            data=ExportPreview(
                headers=get_profile(request.format).headers,
                rows=render_rows(unique[:PREVIEW_ROWS], request.format, campus_names),
                total=len(unique),
                duplicates_skipped=skipped,
                warning=duplicate_warning(skipped),
            )
        )

    async def create_export(self, tenant: TenantContext, request: ExportRequest) -> ActionResponse[DataExportRead]:
        """
        Generate the CSV, store it and record the export.

        Raises:
            PermissionDeniedError: The caller has no export role.
            BusinessRuleError: No card matches the filters.
        """
        require_export_role(tenant.scope)
        tenant.rate_limit("create_export", RateLimitTier.EXPORT)
        cards, location_id = await self._cards(tenant, request.filters, EXPORT_STATUSES)
        if not cards:
            raise BusinessRuleError("No records match your filter criteria")

        content = generate_csv(cards, request.format, await self._campus_names(tenant.organization_id))
        file_name = export_file_name(request.format, utc_now().date())
        export_id = new_id()
        file_key = f"exports/{tenant.organization.slug}/{export_id}/{file_name}"
        await self.storage.put(file_key, content.encode("utf-8"))

        export = DataExport(
            id=export_id,
            organization_id=tenant.organization_id,
            location_id=location_id,
            format=request.format,
            filters=request.filters.model_dump(mode="json"),
            record_count=len(cards),
            file_name=file_name,
            file_key=file_key,
            file_size_bytes=csv_byte_size(content),
            exported_by=tenant.user_id,
        )
        self.session.add(export)
        now = utc_now()
        tag = export_format_tag(request.format)
        for card in cards:
            card.last_exported_at = now
            card.last_exported_by = tenant.user_id
            card.last_export_format = tag
            self.session.add(card)
        await self.session.commit()

        log_export(tenant.organization_id, request.format.value, export.record_count, export.file_size_bytes)
        logger.info(f"Export {export.id} created with {export.record_count} records")
        return ActionResponse(
            message=f"Exported {export.record_count} records", data=DataExportRead.model_validate(export)
        )

    async def export_history(self, tenant: TenantContext) -> ActionResponse[List[DataExportRead]]:
        require_export_role(tenant.scope)
        exports = await self.exports.history(tenant.organization_id)
        return ActionResponse(data=[DataExportRead.model_validate(export) for export in exports])

    async def download_export(self, tenant: TenantContext, export_id: str) -> Tuple[DataExport, bytes]:
        require_export_role(tenant.scope)
        export = await self.exports.get_in_organization(export_id, tenant.organization_id)
        if export is None:
            raise NotFoundError("Export not found")
        return export, await self.storage.get(export.file_key)
