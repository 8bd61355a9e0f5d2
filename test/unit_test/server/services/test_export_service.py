"""Unit tests for ExportService."""

from datetime import datetime

import pytest

from churchsync.core.database.entities import ConnectCard, DataExport
from churchsync.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from churchsync.core.models.domain.enums import ConnectCardStatus, ExportFormat
from churchsync.core.models.io.exports import ExportFilters, ExportRequest
from churchsync.server.services.exports import ExportService


@pytest.fixture
def add_card(session, seeded):
    async def _add(name, email=None, *, scanned_at, location=None, status=ConnectCardStatus.PROCESSED, **fields):
        card = ConnectCard(
            organization_id=seeded.organization.id,
            location_id=(location or seeded.main).id,
            name=name,
            email=email,
            status=status,
            scanned_at=scanned_at,
            **fields,
        )
        session.add(card)
        await session.commit()
        return card

    return _add


@pytest.fixture
async def cards(add_card, seeded):
    return [
        await add_card("Ruth Moab", "ruth@example.com", scanned_at=datetime(2025, 1, 5, 10), visit_type="First Visit"),
        await add_card("Ruth M.", "RUTH@example.com", scanned_at=datetime(2025, 1, 4, 10)),
        await add_card("Boaz", "boaz@example.com", scanned_at=datetime(2025, 1, 3, 10), location=seeded.north),
        await add_card(
            "Draft",
            "draft@example.com",
            scanned_at=datetime(2025, 1, 2, 10),
            location=seeded.north,
            status=ConnectCardStatus.EXTRACTED,
        ),
    ]


class TestPreview:
    async def test_preview_dedupes_by_email(self, session, seeded, tenant_for, cards):
        response = await ExportService(session).export_preview(
            await tenant_for(seeded.owner), ExportRequest(format=ExportFormat.GENERIC_CSV)
        )

        preview = response.data
        assert preview.headers[:3] == ["ID", "Full Name", "Email"]
        assert [row[1] for row in preview.rows] == ["Ruth Moab", "Boaz"]
        assert preview.total == 2
        assert preview.duplicates_skipped == 1
        assert preview.warning == "1 duplicate skipped (same email, kept most recent)"
        assert preview.rows[1][8] == "North Campus"

    async def test_preview_filters_by_campus(self, session, seeded, tenant_for, cards):
        response = await ExportService(session).export_preview(
            await tenant_for(seeded.owner), ExportRequest(filters=ExportFilters(location_id=seeded.north.id))
        )

        assert [row[1] for row in response.data.rows] == ["Boaz"]
        assert response.data.warning is None

    async def test_single_campus_admin_is_scoped(self, session, seeded, tenant_for, cards):
        service = ExportService(session)
        campus_admin = await tenant_for(seeded.campus_admin)

        response = await service.export_preview(campus_admin, ExportRequest())
        assert [row[1] for row in response.data.rows] == ["Boaz"]

        with pytest.raises(PermissionDeniedError):
            await service.export_preview(campus_admin, ExportRequest(filters=ExportFilters(location_id=seeded.main.id)))

    async def test_staff_cannot_export(self, session, seeded, tenant_for):
        with pytest.raises(PermissionDeniedError, match="owners and admins"):
            await ExportService(session).export_preview(await tenant_for(seeded.staff), ExportRequest())


class TestCreateExport:
    async def test_create_export_stores_csv(self, session, seeded, tenant_for, cards, storage, session_maker):
        service = ExportService(session)
        owner = await tenant_for(seeded.owner)

        response = await service.create_export(
            owner, ExportRequest(format=ExportFormat.BREEZE_CSV, filters=ExportFilters(location_id=seeded.main.id))
        )

        export = response.data
        assert response.message == "Exported 2 records"
        assert export.record_count == 2
        assert export.file_key.startswith(f"exports/grace/{export.id}/connect-cards-breeze-")
        content = (await storage.get(export.file_key)).decode("utf-8")
        assert len(content.splitlines()) == 3
        assert export.file_size_bytes == len(content.encode("utf-8"))
        async with session_maker() as fresh:
            stored = await fresh.get(ConnectCard, cards[0].id)
            assert stored.last_export_format == "breeze"
            assert stored.last_exported_by == seeded.owner.id
            assert (await fresh.get(ConnectCard, cards[2].id)).last_exported_at is None

    async def test_only_new_skips_exported_cards(self, session, seeded, tenant_for, cards):
        service = ExportService(session)
        owner = await tenant_for(seeded.owner)
        await service.create_export(owner, ExportRequest(filters=ExportFilters(location_id=seeded.main.id)))

        response = await service.create_export(owner, ExportRequest(filters=ExportFilters(only_new=True)))

        assert response.data.record_count == 2

    async def test_nothing_to_export(self, session, seeded, tenant_for):
        with pytest.raises(BusinessRuleError, match="No records match"):
            await ExportService(session).create_export(await tenant_for(seeded.owner), ExportRequest())

    async def test_history_and_download(self, session, seeded, tenant_for, cards):
        service = ExportService(session)
        owner = await tenant_for(seeded.owner)
        created = (await service.create_export(owner, ExportRequest())).data

        history = (await service.export_history(owner)).data
        export, content = await service.download_export(owner, created.id)

        assert [e.id for e in history] == [created.id]
        assert isinstance(export, DataExport)
        assert content.decode("utf-8").startswith("ID,Full Name,Email")

    async def test_same_day_exports_keep_their_own_files(self, session, seeded, tenant_for, cards):
        service = ExportService(session)
        owner = await tenant_for(seeded.owner)
        main_only = ExportRequest(filters=ExportFilters(location_id=seeded.main.id))
        first = (await service.create_export(owner, main_only)).data
        second = (await service.create_export(owner, ExportRequest())).data

        assert first.file_name == second.file_name
        assert first.file_key != second.file_key
        _, first_content = await service.download_export(owner, first.id)
        _, second_content = await service.download_export(owner, second.id)
        assert len(first_content.decode("utf-8").splitlines()) == 3
        assert len(second_content.decode("utf-8").splitlines()) == 4

    async def test_download_unknown_export(self, session, seeded, tenant_for):
        with pytest.raises(NotFoundError):
            await ExportService(session).download_export(await tenant_for(seeded.owner), "missing")
