"""In-process registry of logged-out tokens that are still cryptographically valid."""

import hashlib
import heapq
import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def token_key(token: str) -> str:
    """Stable key for a raw token string (SHA-256 hex); avoids holding bearer tokens in memory."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class RevocationRegistry:
    """
    Thread-safe set of revoked tokens.

    Each entry remembers the token's expiry and is dropped lazily once that
    instant has passed, so memory is bounded by the number of revoked tokens
    that could still verify. Entries revoked without an expiry are kept for
    the lifetime of the process. Callers must still check expiry through the
    token service; this registry only answers "was this token logged out".
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._entries: dict[str, datetime | None] = {}
        self._expiry_heap: list[tuple[datetime, str]] = []
        self._lock = threading.Lock()
        self._clock = clock

    def revoke(self, token: str, expires_at: datetime | None = None) -> None:
        """Mark ``token`` as revoked. Revoking again keeps the latest known expiry."""
        key = token_key(token)
        with self._lock:
            self._evict_expired()
            if key in self._entries:
                current = self._entries[key]
                if current is None or expires_at is None:
                    expires_at = None
                else:
                    expires_at = max(current, expires_at)
            self._entries[key] = expires_at
            if expires_at is not None:
                heapq.heappush(self._expiry_heap, (expires_at, key))
        logger.debug("Token revoked (key=%s...)", key[:12])

    def revoke_if_absent(self, token: str, expires_at: datetime | None = None) -> bool:
        """
        Revoke ``token`` unless it is already revoked, as one atomic step.

        Returns True for the single caller that revoked it. Used to make a
        token single-use when several requests present it at once.
        """
        key = token_key(token)
        with self._lock:
            self._evict_expired()
            if key in self._entries:
                return False
            self._entries[key] = expires_at
            if expires_at is not None:
                heapq.heappush(self._expiry_heap, (expires_at, key))
        logger.debug("Token claimed (key=%s...)", key[:12])
        return True

    def is_revoked(self, token: str) -> bool:
        key = token_key(token)
        with self._lock:
            self._evict_expired()
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired()
            return len(self._entries)

    def _evict_expired(self) -> None:
        # Caller holds the lock.
        now = self._clock()
        evicted = 0
        while self._expiry_heap and self._expiry_heap[0][0] <= now:
            expires_at, key = heapq.heappop(self._expiry_heap)
            # Skip stale heap items for entries whose expiry was extended or cleared.
            if key in self._entries and self._entries[key] == expires_at:
                del self._entries[key]
                evicted += 1
        if evicted:
            logger.debug("Evicted %s expired revocation entries", evicted)
