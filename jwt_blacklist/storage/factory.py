from jwt_blacklist.config import Settings, settings
from jwt_blacklist.storage.base import StorageAdapter
from jwt_blacklist.storage.memory import InMemoryAdapter


def build_storage(config: Settings = settings) -> StorageAdapter:
    backend = config.STORAGE_BACKEND.lower()
    if backend == "memory":
        return InMemoryAdapter()
    if backend == "redis":
        from jwt_blacklist.storage.redis_store import RedisAdapter
        return RedisAdapter.from_url(config.REDIS_URL, prefix=config.REDIS_PREFIX)
    if backend == "database":
        from jwt_blacklist.database import init_db
        from jwt_blacklist.storage.sql import DatabaseAdapter
        init_db()
        return DatabaseAdapter()
    raise ValueError(f"Unknown storage backend: {config.STORAGE_BACKEND}")
