import logging
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse
from starlette.types import ASGIApp

from jwt_blacklist.engine import JWTBlacklist

logger = logging.getLogger(__name__)

REVOKED_CONTENT = {
    "error": "Token has been revoked",
    "message": "This token is no longer valid",
}


def bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:] or None  # Remove "Bearer " prefix
    return None


class BlacklistMiddleware(BaseHTTPMiddleware):
    """Rejects requests that carry a blacklisted token.

    - Requests without a token pass through untouched; requiring a token is
      the job of the authentication layer.
    - A blacklisted token gets a 401 and the route is never called.
    - Errors raised while extracting or checking the token are re-raised so
      the app's own error handling deals with them.

    When ``blacklist`` is not given, the engine is read from
    ``request.app.state.blacklist`` on every request.
    """

    def __init__(
        self,
        app: ASGIApp,
        blacklist: Optional[JWTBlacklist] = None,
        get_token: Optional[Callable[[Request], Optional[str]]] = None,
    ):
        super().__init__(app)
        self.blacklist = blacklist
        self.get_token = get_token or bearer_token

    def _engine(self, request: Request) -> JWTBlacklist:
        if self.blacklist is not None:
            return self.blacklist
        return request.app.state.blacklist

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            token = self.get_token(request)
            revoked = bool(token) and await self._engine(request).is_blacklisted(token)
        except Exception as e:
            logger.error(f"Blacklist middleware error: {e}")
            raise

        if revoked:
            logger.warning(f"Revoked token used for: {request.method} {request.url.path}")
            return JSONResponse(
                status_code=401,
                content=REVOKED_CONTENT,
                headers={"WWW-Authenticate": "Bearer"},
            )
        return await call_next(request)
