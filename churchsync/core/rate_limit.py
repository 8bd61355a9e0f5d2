"""
Fixed-window rate limiting.

Each mutating operation is keyed by a fingerprint of
``"{user_id}_{organization_id}_{action}"`` so one user hammering one action
does not block anybody else. Counting is delegated to ``limits``: an
in-memory storage with its fixed-window strategy, which also expires old
windows on its own.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from limits import RateLimitItem, RateLimitItemPerHour, RateLimitItemPerMinute, strategies
from limits.storage import MemoryStorage, Storage

from churchsync.core.errors import RateLimitExceededError
from churchsync.core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_LIMIT_MESSAGE = "Too many requests. Please wait a moment."


class RateLimitTier(str, Enum):
    """Named limits shared by the operations that use them."""

    CRITICAL = "critical"
    STANDARD = "standard"
    BULK = "bulk"
    ASSIGNMENT = "assignment"
    EXPORT = "export"
    PUBLIC_TOKEN = "public_token"


TIER_LIMITS: Dict[RateLimitTier, RateLimitItem] = {
    RateLimitTier.CRITICAL: RateLimitItemPerMinute(3, namespace=RateLimitTier.CRITICAL.value),
    RateLimitTier.STANDARD: RateLimitItemPerMinute(5, namespace=RateLimitTier.STANDARD.value),
    RateLimitTier.BULK: RateLimitItemPerMinute(10, namespace=RateLimitTier.BULK.value),
    RateLimitTier.ASSIGNMENT: RateLimitItemPerMinute(30, namespace=RateLimitTier.ASSIGNMENT.value),
    RateLimitTier.EXPORT: RateLimitItemPerHour(10, namespace=RateLimitTier.EXPORT.value),
    RateLimitTier.PUBLIC_TOKEN: RateLimitItemPerMinute(5, namespace=RateLimitTier.PUBLIC_TOKEN.value),
}


def fingerprint(user_id: str, organization_id: str, action: str) -> str:
    return f"{user_id}_{organization_id}_{action}"


class FixedWindowRateLimiter:
    """Tiered limiter over a ``limits`` fixed-window strategy."""

    def __init__(self, enabled: bool = True, storage: Optional[Storage] = None) -> None:
        self.enabled = enabled
        self.storage = storage or MemoryStorage()
        self._strategy = strategies.FixedWindowRateLimiter(self.storage)

    def hit(self, key: str, tier: RateLimitTier) -> bool:
        """Count one request and return whether it is allowed."""
        if not self.enabled:
            return True

        allowed = self._strategy.hit(TIER_LIMITS[tier], key)
        if not allowed:
            logger.warning(f"Rate limit exceeded: key={key} tier={tier.value}")
        return allowed

    def remaining(self, key: str, tier: RateLimitTier) -> int:
        return self._strategy.get_window_stats(TIER_LIMITS[tier], key).remaining

    def check(self, key: str, tier: RateLimitTier, message: Optional[str] = None) -> None:
        """Count one request and raise when the tier is exhausted."""
        if not self.hit(key, tier):
            raise RateLimitExceededError(message or DEFAULT_LIMIT_MESSAGE)

    def reset(self) -> None:
        self.storage.reset()


_limiter: Optional[FixedWindowRateLimiter] = None


def get_rate_limiter() -> FixedWindowRateLimiter:
    global _limiter
    if _limiter is None:
        from churchsync.server.core.config import settings

        _limiter = FixedWindowRateLimiter(enabled=settings.rate_limit.enabled)
    return _limiter
