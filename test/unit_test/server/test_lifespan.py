"""
Unit tests for FastAPI application lifespan management.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI

from churchsync.server.main import lifespan

pytestmark = pytest.mark.asyncio


async def test_startup_initializes_database():
    with patch("churchsync.server.main.init_db", new_callable=AsyncMock) as mock_init_db:
        async with lifespan(FastAPI()):
            mock_init_db.assert_awaited_once()


async def test_startup_and_shutdown_are_logged():
    with (
        patch("churchsync.server.main.init_db", new_callable=AsyncMock),
        patch("churchsync.server.main.logger") as mock_logger,
    ):
        async with lifespan(FastAPI()):
            pass

    messages = [call[0][0] for call in mock_logger.info.call_args_list]
    assert any("Starting up" in message for message in messages)
    assert any("Database initialized successfully" in message for message in messages)
    assert any("Shutting down" in message for message in messages)


async def test_database_failure_does_not_stop_startup():
    with (
        patch("churchsync.server.main.init_db", new_callable=AsyncMock) as mock_init_db,
        patch("churchsync.server.main.logger") as mock_logger,
    ):
        mock_init_db.side_effect = Exception("Database connection failed")

        async with lifespan(FastAPI()):
            pass

    mock_logger.error.assert_called_once()
    assert "Database initialization failed" in mock_logger.error.call_args[0][0]
