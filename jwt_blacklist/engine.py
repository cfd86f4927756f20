"""Revocation engine for issued JWTs.

Tokens are stored under their exact string until their own ``exp`` claim
passes. Lookups treat an entry as live only while ``now < expires_at``, no
matter whether the backend has purged it yet.

Availability trade-off: ``is_blacklisted`` fails open. If the storage backend
errors during a check, the token is reported as *not* blacklisted so that a
storage outage does not lock everybody out. ``blacklist`` and ``remove`` do
not fail open; their storage errors reach the caller.
"""

import logging
from typing import Callable, Optional

from jwt_blacklist.scheduler import CleanupScheduler
from jwt_blacklist.storage.base import StorageAdapter, now_ms
from jwt_blacklist.storage.memory import InMemoryAdapter
from jwt_blacklist.tokens import get_expiry

logger = logging.getLogger(__name__)

DEFAULT_CLEANUP_INTERVAL = 3600000  # 1 hour, in milliseconds


class JWTBlacklist:

    def __init__(
        self,
        storage: Optional[StorageAdapter] = None,
        cleanup_interval: int = DEFAULT_CLEANUP_INTERVAL,
        auto_cleanup: bool = True,
        clock: Callable[[], int] = now_ms,
    ):
        self.storage = storage if storage is not None else InMemoryAdapter()
        self.clock = clock
        self.scheduler = CleanupScheduler(self.cleanup, cleanup_interval)
        if auto_cleanup:
            self.scheduler.start()

    @property
    def cleanup_interval(self) -> int:
        return self.scheduler.interval

    async def blacklist(self, token: str) -> bool:
        """
        Revokes ``token`` until its natural expiry.

        Returns False without storing anything when the token has already
        expired. Raises InvalidTokenError if the token has no readable
        ``exp`` claim.
        """
        self.scheduler.ensure_started()
        expires_at = get_expiry(token)
        if expires_at <= self.clock():
            return False
        await self.storage.set(token, expires_at)
        return True

    async def is_blacklisted(self, token: str) -> bool:
        self.scheduler.ensure_started()
        try:
            expires_at = await self.storage.get(token)
            if expires_at is None:
                return False
            if self.clock() >= expires_at:
                await self.storage.delete(token)
                logger.debug("Lazily removed expired blacklist entry")
                return False
            return True
        except Exception as e:
            return self._fail_open(e)

    def _fail_open(self, error: Exception) -> bool:
        """Answer "not blacklisted" for a check the storage could not complete."""
        logger.warning(f"Error checking blacklist, allowing token: {error}")
        return False

    async def remove(self, token: str) -> bool:
        self.scheduler.ensure_started()
        return await self.storage.delete(token)

    async def cleanup(self) -> int:
        removed = await self.storage.cleanup(self.clock())
        if removed:
            logger.info(f"Removed {removed} expired tokens from blacklist")
        return removed

    async def count(self) -> int:
        return await self.storage.count()

    def start_auto_cleanup(self) -> None:
        self.scheduler.start()

    def stop_auto_cleanup(self) -> None:
        self.scheduler.stop()

    async def close(self) -> None:
        self.scheduler.stop()
        await self.storage.close()
