# app/core/rate_limit.py
import logging
from typing import Optional

from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from app.core.errors import RateLimitError

logger = logging.getLogger("portal.ratelimit")


class AttemptLimiter:
    """
    Fixed-window attempt counter: the window opens on the first attempt for a
    key and at most `max_attempts` fit in it.

    Counts live in process memory; several server instances each keep their
    own, so the limit is best effort. Expired windows are dropped by the
    storage itself.
    """

    def __init__(self, name: str, max_attempts: int = 5, window_seconds: int = 15 * 60):
        self.name = name
        self.item = parse(f"{max_attempts}/{window_seconds} seconds")
        self.storage = MemoryStorage()
        self._strategy = FixedWindowRateLimiter(self.storage)

    def hit(self, key: str) -> None:
        """Record an attempt for `key`, raising RateLimitError once over the limit."""
        if not self._strategy.hit(self.item, self.name, key):
            logger.warning("Rate limit hit on %s for %s", self.name, key)
            raise RateLimitError()

    def remaining(self, key: str) -> int:
        return max(0, self._strategy.get_window_stats(self.item, self.name, key).remaining)

    def reset(self) -> None:
        self.storage.reset()


def attempt_key(client_host: Optional[str], identity: Optional[str]) -> str:
    # identities compare case-insensitively, like the email lookup at login
    normalized = (identity or "").strip().lower() or "unknown"
    return f"{client_host or 'unknown'}:{normalized}"
