"""Redis-backed blacklist.

Keys are ``prefix + token`` and hold the expiry as a decimal string. Each key
gets a TTL matching the token's remaining lifetime, so Redis evicts entries by
itself and ``cleanup`` has nothing to do.
"""

import math
import re
from typing import Callable, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from jwt_blacklist.exceptions import StorageError
from jwt_blacklist.storage.base import StorageAdapter, now_ms

DEFAULT_PREFIX = "jwt_blacklist:"

_GLOB_CHARS = re.compile(r"([*?\[\]\\])")


def escape_glob(value: str) -> str:
    """Escape Redis MATCH pattern metacharacters so ``value`` matches literally."""
    return _GLOB_CHARS.sub(r"\\\1", value)


class RedisAdapter(StorageAdapter):

    def __init__(self, client: Redis, prefix: str = DEFAULT_PREFIX, clock: Callable[[], int] = now_ms):
        self.client = client
        self.prefix = prefix
        self.clock = clock
        self._owns_client = False

    @classmethod
    def from_url(cls, url: str, prefix: str = DEFAULT_PREFIX) -> "RedisAdapter":
        adapter = cls(Redis.from_url(url), prefix=prefix)
        adapter._owns_client = True
        return adapter

    def _key(self, token: str) -> str:
        return f"{self.prefix}{token}"

    async def set(self, token: str, expires_at: int) -> None:
        ttl = math.ceil((expires_at - self.clock()) / 1000)
        if ttl <= 0:
            return
        try:
            await self.client.set(self._key(token), str(expires_at), ex=ttl)
        except RedisError as e:
            raise StorageError(f"Redis SET failed: {e}") from e

    async def get(self, token: str) -> Optional[int]:
        try:
            value = await self.client.get(self._key(token))
        except RedisError as e:
            raise StorageError(f"Redis GET failed: {e}") from e
        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode()
        try:
            return int(value)
        except ValueError as e:
            raise StorageError(f"Malformed blacklist entry: {value!r}") from e

    async def delete(self, token: str) -> bool:
        try:
            result = await self.client.delete(self._key(token))
        except RedisError as e:
            raise StorageError(f"Redis DEL failed: {e}") from e
        return result > 0

    async def cleanup(self, now: int) -> int:
        # Expiry is enforced by the key TTLs
        return 0

    async def count(self) -> int:
        total = 0
        try:
            async for _ in self.client.scan_iter(match=f"{escape_glob(self.prefix)}*"):
                total += 1
        except RedisError as e:
            raise StorageError(f"Redis SCAN failed: {e}") from e
        return total

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()
