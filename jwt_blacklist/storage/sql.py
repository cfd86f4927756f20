from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from jwt_blacklist.database import SessionLocal
from jwt_blacklist.exceptions import StorageError
from jwt_blacklist.models.blacklisted_token import BlacklistedToken
from jwt_blacklist.storage.base import StorageAdapter


class DatabaseAdapter(StorageAdapter):
    """
    Blacklist persisted in the ``blacklisted_tokens`` table.

    Entries survive restarts. The ORM is synchronous, so every call runs in
    the threadpool. Like the in-memory adapter there is no native expiry:
    expired rows stay until they are read or cleaned up.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or SessionLocal

    @contextmanager
    def _session(self, action: str):
        db: Session = self.session_factory()
        try:
            yield db
            db.commit()
        except (SQLAlchemyError, OverflowError) as e:
            # OverflowError comes from the DB-API driver for out-of-range integers
            db.rollback()
            raise StorageError(f"Database {action} failed: {e}") from e
        finally:
            db.close()

    def _set(self, token: str, expires_at: int) -> None:
        with self._session("write") as db:
            row = db.query(BlacklistedToken).filter(BlacklistedToken.token == token).first()
            if row:
                row.expires_at = expires_at
            else:
                db.add(BlacklistedToken(token=token, expires_at=expires_at))

    def _get(self, token: str) -> Optional[int]:
        with self._session("read") as db:
            row = db.query(BlacklistedToken.expires_at).filter(BlacklistedToken.token == token).first()
            return row.expires_at if row else None

    def _delete(self, token: str) -> bool:
        with self._session("delete") as db:
            removed = db.query(BlacklistedToken).filter(
                BlacklistedToken.token == token
            ).delete(synchronize_session=False)
            return removed > 0

    def _cleanup(self, now: int) -> int:
        with self._session("cleanup") as db:
            return db.query(BlacklistedToken).filter(
                BlacklistedToken.expires_at <= now
            ).delete(synchronize_session=False)

    def _count(self) -> int:
        with self._session("count") as db:
            return db.query(BlacklistedToken).count()

    async def set(self, token: str, expires_at: int) -> None:
        await run_in_threadpool(self._set, token, expires_at)

    async def get(self, token: str) -> Optional[int]:
        return await run_in_threadpool(self._get, token)

    async def delete(self, token: str) -> bool:
        return await run_in_threadpool(self._delete, token)

    async def cleanup(self, now: int) -> int:
        return await run_in_threadpool(self._cleanup, now)

    async def count(self) -> int:
        return await run_in_threadpool(self._count)
