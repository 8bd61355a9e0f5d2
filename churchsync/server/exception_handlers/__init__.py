"""
Exception handlers for the ChurchSync server.

This package turns domain errors, validation failures and unexpected
exceptions into JSON responses, and provides a setup function that
registers them with the FastAPI application.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
