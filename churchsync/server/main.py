"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request timing), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from churchsync import __version__
from churchsync.core.database import init_db
from churchsync.core.logging_config import get_logger, setup_logging
from churchsync.core.monitoring import initialize_logfire

from .api.v1 import (
    connect_cards,
    contacts,
    courses,
    events,
    exports,
    health,
    integrations,
    members,
    onboarding,
    organizations,
    prayer_requests,
    public,
    team,
    uploads,
    volunteers,
    webhooks,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import RequestTimingMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates the schema on startup when ``DATABASE_AUTO_CREATE`` is set.
    """
    try:
        logger.info("Starting up ChurchSync Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down ChurchSync Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    ChurchSync Server API

    Backend of the ChurchSync church operations dashboard: connect card intake and review,
    volunteers and onboarding, prayer requests, volunteer events with SMS invitations,
    courses, and CSV exports for church management systems.
    """,
    version=__version__,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

app.add_middleware(RequestTimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)

setup_exception_handlers(app)
initialize_logfire(app)

ORG = constant.ORG_PREFIX

app.include_router(health.router, tags=["health"])
app.include_router(organizations.router, prefix=ORG)
app.include_router(connect_cards.router, prefix=f"{ORG}/connect-cards")
app.include_router(members.router, prefix=f"{ORG}/members")
app.include_router(contacts.router, prefix=f"{ORG}/contacts")
app.include_router(team.router, prefix=f"{ORG}/team")
app.include_router(volunteers.router, prefix=f"{ORG}/volunteers")
app.include_router(onboarding.router, prefix=f"{ORG}/onboarding")
app.include_router(prayer_requests.router, prefix=f"{ORG}/prayer-requests")
app.include_router(events.router, prefix=f"{ORG}/events")
app.include_router(courses.router, prefix=f"{ORG}/courses")
app.include_router(exports.router, prefix=f"{ORG}/exports")
app.include_router(uploads.router, prefix=f"{ORG}/uploads")
app.include_router(integrations.router, prefix=f"{ORG}/integrations")
app.include_router(webhooks.router, prefix=f"{constant.API_V1_STR}/webhooks")
app.include_router(public.router, prefix=f"{constant.API_V1_STR}/public")
app.include_router(team.invitations_router, prefix=f"{constant.API_V1_STR}/invitations")
