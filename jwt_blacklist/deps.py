import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from jwt_blacklist.config import settings
from jwt_blacklist.engine import JWTBlacklist
from jwt_blacklist.middleware import REVOKED_CONTENT

bearer_scheme = HTTPBearer(auto_error=False)
admin_key_header = APIKeyHeader(name="X-Admin-Key", auto_error=False)


def get_blacklist(request: Request) -> JWTBlacklist:
    return request.app.state.blacklist


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def require_not_blacklisted(
    token: str = Depends(get_bearer_token),
    blacklist: JWTBlacklist = Depends(get_blacklist),
) -> str:
    """Dependency form of BlacklistMiddleware for routes that always require a token."""
    if await blacklist.is_blacklisted(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=REVOKED_CONTENT,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def require_admin_key(api_key: Optional[str] = Depends(admin_key_header)) -> None:
    # Admin routes stay closed until ADMIN_API_KEY is configured
    if not settings.ADMIN_API_KEY or not api_key or not secrets.compare_digest(api_key, settings.ADMIN_API_KEY):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin key")
