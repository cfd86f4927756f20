from typing import Dict, Optional
from jwt_blacklist.storage.base import StorageAdapter


class InMemoryAdapter(StorageAdapter):
    """
    Process-local blacklist backed by a dict of token -> expiry.

    Nothing is evicted proactively: ``count()`` includes expired entries until
    the next cleanup pass or until a lookup lazily removes them.
    """

    def __init__(self):
        self._entries: Dict[str, int] = {}

    async def set(self, token: str, expires_at: int) -> None:
        self._entries[token] = expires_at

    async def get(self, token: str) -> Optional[int]:
        return self._entries.get(token)

    async def delete(self, token: str) -> bool:
        return self._entries.pop(token, None) is not None

    async def cleanup(self, now: int) -> int:
        expired = [token for token, expires_at in self._entries.items() if expires_at <= now]
        for token in expired:
            del self._entries[token]
        return len(expired)

    async def count(self) -> int:
        return len(self._entries)
