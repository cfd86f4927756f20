import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, APIRouter, Depends, HTTPException, Form
from jwt_blacklist.config import settings
from jwt_blacklist.deps import get_blacklist, get_bearer_token, require_admin_key
from jwt_blacklist.engine import JWTBlacklist
from jwt_blacklist.exceptions import InvalidTokenError, StorageError
from jwt_blacklist.middleware import BlacklistMiddleware
from jwt_blacklist.schemas import blacklist as blacklist_schemas
from jwt_blacklist.schemas.errors import Error400, Error401, Error403, Error503, RevokedError
from jwt_blacklist.storage.factory import build_storage


@asynccontextmanager
async def lifespan(app: FastAPI):
    blacklist = JWTBlacklist(
        storage=build_storage(settings),
        cleanup_interval=settings.CLEANUP_INTERVAL_MS,
        auto_cleanup=settings.AUTO_CLEANUP,
    )
    app.state.blacklist = blacklist
    logging.info(f"Token blacklist started with '{settings.STORAGE_BACKEND}' storage")
    try:
        yield
    finally:
        await blacklist.close()
        logging.info("Token blacklist stopped")


auth_router = APIRouter(prefix="/api/v1/auth")
admin_router = APIRouter(prefix="/api/v1/blacklist", dependencies=[Depends(require_admin_key)])


@auth_router.post("/logout", status_code=200, tags=["auth"],
            description="Revokes the bearer token of the current request until its natural expiry.",
            summary="User Logout", response_model=blacklist_schemas.LogoutResponse,
            responses={400: {"model": Error400}, 401: {"model": RevokedError}, 503: {"model": Error503}},
            operation_id="logout_user")
async def logout(
    token: str = Depends(get_bearer_token),
    blacklist: JWTBlacklist = Depends(get_blacklist),
):
    """
    Logs out the caller by blacklisting the presented access token.
    An already expired token is accepted but nothing is stored for it.
    """
    try:
        blacklisted = await blacklist.blacklist(token)
    except InvalidTokenError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        logging.error(f"Logout: failed to blacklist token: {e}")
        raise HTTPException(status_code=503, detail="Blacklist storage unavailable")
    logging.info(f"Logout: token blacklisted={blacklisted}")
    return {"message": "Successfully logged out", "blacklisted": blacklisted}


@admin_router.post("/check", status_code=200, tags=["blacklist"],
            summary="Check token", response_model=blacklist_schemas.CheckResponse,
            responses={403: {"model": Error403}},
            operation_id="check_token")
async def check_token(
    token: str = Form(...),
    blacklist: JWTBlacklist = Depends(get_blacklist),
):
    return {"blacklisted": await blacklist.is_blacklisted(token)}


@admin_router.post("/remove", status_code=200, tags=["blacklist"],
            description="Takes a token off the blacklist before its expiry.",
            summary="Remove token", response_model=blacklist_schemas.RemoveResponse,
            responses={403: {"model": Error403}, 503: {"model": Error503}},
            operation_id="remove_token")
async def remove_token(
    token: str = Form(...),
    blacklist: JWTBlacklist = Depends(get_blacklist),
):
    try:
        removed = await blacklist.remove(token)
    except StorageError as e:
        logging.error(f"Remove: failed to remove token: {e}")
        raise HTTPException(status_code=503, detail="Blacklist storage unavailable")
    logging.info(f"Remove: token removed={removed}")
    return {"removed": removed}


@admin_router.post("/cleanup", status_code=200, tags=["blacklist"],
            description="Purges expired entries immediately instead of waiting for the scheduled cleanup.",
            summary="Cleanup blacklist", response_model=blacklist_schemas.CleanupResponse,
            responses={403: {"model": Error403}, 503: {"model": Error503}},
            operation_id="cleanup_blacklist")
async def cleanup_blacklist(blacklist: JWTBlacklist = Depends(get_blacklist)):
    try:
        removed = await blacklist.cleanup()
    except StorageError as e:
        logging.error(f"Cleanup: failed: {e}")
        raise HTTPException(status_code=503, detail="Blacklist storage unavailable")
    return {"removed": removed}


@admin_router.get("/count", status_code=200, tags=["blacklist"],
            summary="Count entries", response_model=blacklist_schemas.CountResponse,
            responses={403: {"model": Error403}, 503: {"model": Error503}},
            operation_id="count_blacklist")
async def count_blacklist(blacklist: JWTBlacklist = Depends(get_blacklist)):
    try:
        count = await blacklist.count()
    except StorageError as e:
        logging.error(f"Count: failed: {e}")
        raise HTTPException(status_code=503, detail="Blacklist storage unavailable")
    return {"count": count}


@auth_router.get("/protected", status_code=200, tags=["auth"],
            summary="Protected resource", response_model=blacklist_schemas.ProtectedResponse,
            responses={401: {"model": Error401}},
            operation_id="protected_resource")
async def protected(token: str = Depends(get_bearer_token)):
    """
    Sample route. Revoked tokens never reach it because of BlacklistMiddleware;
    signature verification is left to the host's authentication layer.
    """
    return {"message": "Token accepted"}


app = FastAPI(lifespan=lifespan)
app.add_middleware(BlacklistMiddleware)
app.include_router(auth_router)
app.include_router(admin_router)
