from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncGenerator, Awaitable, Callable, Dict, Iterable

import httpx
import pytest
import pytest_asyncio
from dotenv import load_dotenv

# Load dotenv files early so the settings below can be overridden locally
TEST_ROOT = Path(__file__).resolve().parent
load_dotenv(TEST_ROOT / ".env", override=False)

# Use in-memory SQLite; must be set before the application settings load
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("EMAIL_SEND_ENABLED", "false")
os.environ.setdefault("GHL_CALL_ENABLED", "false")

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from churchsync.core.database import create_all, create_sessionmaker  # noqa: E402
from churchsync.core.database.entities import Location, Organization, User  # noqa: E402
from churchsync.core.models.domain.enums import SubscriptionStatus, UserRole  # noqa: E402
from churchsync.core.rate_limit import get_rate_limiter  # noqa: E402
from churchsync.integrations import storage as storage_module  # noqa: E402
from churchsync.integrations.storage import LocalFileStorage  # noqa: E402
from churchsync.server.core.constant import USER_ID_HEADER  # noqa: E402
from churchsync.server.services.tenancy import TenantContext, require_dashboard_access  # noqa: E402


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://0.0.0.0",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    get_rate_limiter().reset()
    yield
    get_rate_limiter().reset()


@pytest.fixture(autouse=True)
def storage(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> LocalFileStorage:
    """File storage rooted in a per-test temporary directory."""
    local = LocalFileStorage(tmp_path / "storage")
    monkeypatch.setattr(storage_module, "_storage", local)
    return local


# ----------------------------------------------------------------------
# Database
# ----------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine():
    """A fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


@pytest_asyncio.fixture(name="session")
async def session_fixture(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


# ----------------------------------------------------------------------
# Tenant
# ----------------------------------------------------------------------


@dataclass
class SeededTenant:
    """One organization with two campuses and a user per role."""

    organization: Organization
    main: Location
    north: Location
    owner: User
    admin: User
    campus_admin: User
    staff: User
    north_staff: User

    @property
    def slug(self) -> str:
        return self.organization.slug

    def headers(self, user: User) -> Dict[str, str]:
        return {USER_ID_HEADER: user.id}

    def url(self, path: str = "") -> str:
        return f"/api/v1/orgs/{self.slug}{path}"


@pytest_asyncio.fixture
async def seeded(session_maker) -> SeededTenant:
    async with session_maker() as session:
        organization = Organization(name="Grace Church", slug="grace", subscription_status=SubscriptionStatus.ACTIVE)
        session.add(organization)
        await session.flush()
        main = Location(organization_id=organization.id, name="Main Campus", slug="main")
        north = Location(organization_id=organization.id, name="North Campus", slug="north")
        session.add_all([main, north])
        await session.flush()

        def user(name: str, role: UserRole, location: Location | None, all_locations: bool = False) -> User:
            return User(
                organization_id=organization.id,
                name=name,
                email=f"{name.lower().replace(' ', '.')}@grace.test",
                role=role,
                default_location_id=location.id if location else None,
                can_see_all_locations=all_locations,
            )

        owner = user("Olivia Owner", UserRole.church_owner, None)
        admin = user("Adam Admin", UserRole.church_admin, main, all_locations=True)
        campus_admin = user("Carla Campus", UserRole.church_admin, north)
        staff = user("Sam Staff", UserRole.user, main)
        north_staff = user("Nina North", UserRole.user, north)
        session.add_all([owner, admin, campus_admin, staff, north_staff])
        await session.commit()

    return SeededTenant(
        organization=organization,
        main=main,
        north=north,
        owner=owner,
        admin=admin,
        campus_admin=campus_admin,
        staff=staff,
        north_staff=north_staff,
    )


@pytest.fixture
def tenant_for(session: AsyncSession, seeded: SeededTenant) -> Callable[[User], Awaitable[TenantContext]]:
    """Resolve the request tenant of a seeded user against the test session."""

    async def _resolve(user: User) -> TenantContext:
        return await require_dashboard_access(session, seeded.slug, user.id)

    return _resolve


# ----------------------------------------------------------------------
# HTTP client
# ----------------------------------------------------------------------


@pytest_asyncio.fixture(name="client")
async def client_fixture(session_maker, seeded: SeededTenant) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app with the test database."""
    from churchsync.core.database import get_session
    from churchsync.server.main import app

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client
    app.dependency_overrides.clear()
