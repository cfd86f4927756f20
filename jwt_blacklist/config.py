import os

class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./jwt_blacklist.db")
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "memory")
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    REDIS_PREFIX: str = os.getenv("REDIS_PREFIX", "jwt_blacklist:")
    CLEANUP_INTERVAL_MS: int = int(os.getenv("CLEANUP_INTERVAL_MS", "3600000"))
    AUTO_CLEANUP: bool = os.getenv("AUTO_CLEANUP", "true").lower() not in ("0", "false", "no")
    ADMIN_API_KEY: str = os.getenv("ADMIN_API_KEY", "")

settings = Settings()
