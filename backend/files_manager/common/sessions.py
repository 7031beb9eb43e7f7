from __future__ import annotations

import logging
from uuid import uuid4

from .cache import KeyValueCache


logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "auth_"


class SessionStore:
    """Maps opaque tokens to user ids for a fixed time-to-live.

    An unknown token and an expired token look exactly the same to callers.
    Cache outages surface as ``InfrastructureFailure`` from the cache layer
    and are never reported as "not logged in".
    """

    def __init__(self, cache: KeyValueCache, ttl_seconds: int) -> None:
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(token: str) -> str:
        return f"{SESSION_KEY_PREFIX}{token}"

    def issue(self, user_id: int) -> str:
        token = str(uuid4())
        self.cache.set(self._key(token), str(user_id), self.ttl_seconds)
        logger.info("session issued for user %s (token %s...)", user_id, token[:8])
        return token

    def resolve(self, token: str | None) -> int | None:
        if not token:
            return None
        raw = self.cache.get(self._key(token))
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            logger.warning("discarding malformed session entry for token %s...", token[:8])
            return None

    def revoke(self, token: str | None) -> bool:
        if not token:
            return False
        removed = self.cache.delete(self._key(token))
        if removed:
            logger.info("session revoked (token %s...)", token[:8])
        return removed
