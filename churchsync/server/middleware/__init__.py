"""
Middleware modules for the ChurchSync server.

This package contains request timing and logging middleware.
"""

from .request_timing import RequestTimingMiddleware

__all__ = ["RequestTimingMiddleware"]
