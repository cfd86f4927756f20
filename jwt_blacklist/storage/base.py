"""Storage adapter contract shared by every blacklist backend.

An entry is ``(token, expires_at)`` where ``expires_at`` is the token's own
expiry in epoch milliseconds. Adapters only store and return entries; the
decision whether an entry is still live belongs to the engine.
"""

import time
from abc import ABC, abstractmethod
from typing import Optional


def now_ms() -> int:
    return int(time.time() * 1000)


class StorageAdapter(ABC):

    @abstractmethod
    async def set(self, token: str, expires_at: int) -> None:
        """Store or overwrite the entry for ``token``.

        Backends with native expiry must make the entry unreadable once
        ``expires_at`` has passed, and store nothing if it already has.
        """

    @abstractmethod
    async def get(self, token: str) -> Optional[int]:
        """Return the stored expiry, or None if never set, removed or expired by the backend."""

    @abstractmethod
    async def delete(self, token: str) -> bool:
        """Remove the entry. Returns whether an entry existed."""

    @abstractmethod
    async def cleanup(self, now: int) -> int:
        """Purge entries with ``expires_at <= now``. Returns the number removed."""

    @abstractmethod
    async def count(self) -> int:
        """Number of entries currently stored, expired or not."""

    async def close(self) -> None:
        return None
