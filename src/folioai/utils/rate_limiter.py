"""
Rate Limiting Utility for AI Generation Requests.

This module provides the keyed rate-limit state owned by the prompt security
mediator, plus the client IP helper used by the request logging middleware.

Rate limiting uses a fixed window that resets on expiry (not a sliding window):
- Each user gets a fixed number of requests per window (default window: 1 hour)
- The first request after the window's reset time starts a new window with count 1
- Requests over the limit are denied with the window's reset time

The read-check-increment runs under the store's lock, so concurrent requests
for the same user cannot both see a stale under-limit count. Expired windows
are swept out at most once per window length, so entries for users that stop
sending requests do not accumulate. State is per process; multi-instance
deployments get one window per instance.
"""

import threading
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from folioai.utils.logger import get_logger

logger = get_logger(__name__)

RATE_LIMIT_WINDOW_SECONDS = 3600


@dataclass
class RateLimitEntry:
    count: int
    reset_time: float  # Unix timestamp (seconds) when the window expires


class RateLimitStore:
    """In-memory rate-limit entries keyed by user id."""

    def __init__(self, window_seconds: int = RATE_LIMIT_WINDOW_SECONDS):
        self.window_seconds = window_seconds
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()
        self._next_sweep: Optional[float] = None

    def size(self) -> int:
        """Number of live windows held in memory."""
        with self._lock:
            return len(self._entries)

    def _sweep_expired(self, now: float) -> None:
        """Drop expired windows; caller holds the lock."""
        if self._next_sweep is not None and now < self._next_sweep:
            return
        self._next_sweep = now + self.window_seconds

        expired = [key for key, entry in self._entries.items() if now > entry.reset_time]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(
                "Evicted expired rate limit windows",
                extra={"extra_fields": {"evicted": len(expired)}},
            )

    def hit(self, key: str, limit: int, now: float) -> Tuple[bool, float]:
        """Record a request for ``key`` if it is under the limit.

        Args:
            key: The user id.
            limit: Maximum requests per window.
            now: Current Unix timestamp in seconds.

        Returns:
            Tuple[bool, float]:
                - allowed (bool): True if the request was counted, False if denied
                - reset_time (float): When the current window expires
        """
        with self._lock:
            self._sweep_expired(now)
            entry = self._entries.get(key)

            if entry is None or now > entry.reset_time:
                entry = RateLimitEntry(count=1, reset_time=now + self.window_seconds)
                self._entries[key] = entry
                return True, entry.reset_time

            if entry.count >= limit:
                return False, entry.reset_time

            entry.count += 1
            return True, entry.reset_time

    def get(self, key: str) -> Optional[RateLimitEntry]:
        """Snapshot of the entry for ``key`` (None if the user has no window)."""
        with self._lock:
            entry = self._entries.get(key)
            return RateLimitEntry(entry.count, entry.reset_time) if entry else None

    def reset(self, key: Optional[str] = None) -> None:
        """Drop the entry for ``key``, or every entry when no key is given."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)


def get_client_ip(request) -> str:
    """Extract client IP address from FastAPI request.

    Checks common headers for real IP (X-Forwarded-For, X-Real-IP) to handle
    proxies, load balancers, and API Gateway. Falls back to direct client host.

    Args:
        request: FastAPI Request object.

    Returns:
        str: Client IP address as string.
    """
    # X-Forwarded-For can contain multiple IPs, take the first one
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        ip = forwarded_for.split(",")[0].strip()
        if ip:
            return ip

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"
