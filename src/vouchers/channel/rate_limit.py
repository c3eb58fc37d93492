"""Fixed-window rate limiter for the voucher resend endpoint.

The limiter is an injected collaborator, reached through
``get_rate_limiter()`` and replaceable with ``set_rate_limiter()``. Counting
is delegated to the ``limits`` fixed-window strategy. Its default in-memory
storage expires each key's counter when the key's window closes, so the key
table only holds clients seen within the current window. A shared storage
(``limits.storage.storage_from_string("redis://...")``) can be passed in
when several processes serve the endpoint.
"""

import os

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import FixedWindowRateLimiter as FixedWindowStrategy

DEFAULT_LIMIT = 10
DEFAULT_WINDOW_SECONDS = 60
NAMESPACE = "voucher-resend"


class FixedWindowRateLimiter:
    """Allows ``limit`` requests per key in each ``window_seconds`` window."""

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        storage: Storage | None = None,
    ):
        if limit < 1 or window_seconds < 1:
            raise ValueError("limit and window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self.storage = storage or MemoryStorage()
        self._item = RateLimitItemPerSecond(limit, window_seconds)
        self._strategy = FixedWindowStrategy(self.storage)

    def allow(self, key: str) -> bool:
        """Count a request for ``key``; False once the window's limit is used up."""
        return self._strategy.hit(self._item, NAMESPACE, key)

    def remaining(self, key: str) -> int:
        """Requests ``key`` may still make in its current window."""
        return self._strategy.get_window_stats(self._item, NAMESPACE, key).remaining

    def reset(self) -> None:
        self.storage.reset()


_rate_limiter: FixedWindowRateLimiter | None = None


def get_rate_limiter() -> FixedWindowRateLimiter:
    """Return the configured limiter (RESEND_RATE_LIMIT per RESEND_RATE_WINDOW_SECONDS)."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = FixedWindowRateLimiter(
            limit=int(os.environ.get("RESEND_RATE_LIMIT", DEFAULT_LIMIT)),
            window_seconds=int(os.environ.get("RESEND_RATE_WINDOW_SECONDS", DEFAULT_WINDOW_SECONDS)),
        )
    return _rate_limiter


def set_rate_limiter(limiter: FixedWindowRateLimiter) -> None:
    global _rate_limiter
    _rate_limiter = limiter


def reset_rate_limiter() -> None:
    """Drop the configured limiter (useful for testing)."""
    global _rate_limiter
    _rate_limiter = None
