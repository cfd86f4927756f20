import fnmatch
from typing import Optional

import pytest
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jwt_blacklist.database import init_db

SECRET_KEY = "test-secret-key"
ALGORITHM = "HS256"

# A whole second, so token exp claims (seconds) line up with the clock (ms)
START_MS = 1_700_000_000_000


class FakeClock:
    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeRedis:
    """Async stand-in for redis.asyncio.Redis with TTLs driven by a FakeClock."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.data = {}  # key -> (value, deadline_ms)
        self.closed = False

    def _live(self, key) -> bool:
        item = self.data.get(key)
        if item is None:
            return False
        if item[1] is not None and self.clock() >= item[1]:
            del self.data[key]
            return False
        return True

    async def set(self, key, value, ex: Optional[int] = None):
        deadline = self.clock() + ex * 1000 if ex is not None else None
        self.data[key] = (value.encode(), deadline)
        return True

    async def get(self, key):
        return self.data[key][0] if self._live(key) else None

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self._live(key):
                del self.data[key]
                removed += 1
        return removed

    async def scan_iter(self, match=None):
        for key in list(self.data):
            if self._live(key) and (match is None or fnmatch.fnmatchcase(key, match)):
                yield key.encode()

    async def aclose(self):
        self.closed = True


def create_test_token(exp: Optional[int] = None, **claims) -> str:
    to_encode = {"sub": "42", "type": "access"}
    to_encode.update(claims)
    if exp is not None:
        to_encode["exp"] = exp
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis(clock):
    return FakeRedis(clock)


@pytest.fixture
def token_factory(clock):
    """Builds tokens expiring ``expires_in`` milliseconds after the fake clock's now."""
    def make(expires_in: int = 60_000, **claims) -> str:
        return create_test_token(exp=(clock() + expires_in) // 1000, **claims)
    return make


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'blacklist.db'}", connect_args={"check_same_thread": False}
    )
    init_db(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()
