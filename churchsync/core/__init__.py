"""
Core utilities and configuration for ChurchSync.

This package provides core functionality including logging configuration,
error types, rate limiting, database setup, and other shared utilities.
"""

from churchsync.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
