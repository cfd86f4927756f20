import asyncio

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from jwt_blacklist.deps import require_not_blacklisted
from jwt_blacklist.engine import JWTBlacklist
from jwt_blacklist.exceptions import StorageError
from jwt_blacklist.middleware import BlacklistMiddleware, bearer_token
from jwt_blacklist.storage.memory import InMemoryAdapter


class DownAdapter(InMemoryAdapter):
    async def get(self, token):
        raise StorageError("connection refused")


def build_app(blacklist: JWTBlacklist, **middleware_options):
    app = FastAPI()
    app.state.handled = []
    app.add_middleware(BlacklistMiddleware, blacklist=blacklist, **middleware_options)

    @app.get("/resource")
    def resource(request: Request):
        request.app.state.handled.append(request.url.path)
        return {"ok": True}

    return app


@pytest.fixture
def engine(clock):
    return JWTBlacklist(auto_cleanup=False, clock=clock)


def test_request_without_token_passes_through(engine):
    app = build_app(engine)
    client = TestClient(app)

    response = client.get("/resource")
    assert response.status_code == 200
    assert app.state.handled == ["/resource"]


def test_non_bearer_authorization_passes_through(engine):
    app = build_app(engine)
    client = TestClient(app)

    response = client.get("/resource", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert response.status_code == 200


def test_valid_token_passes_through(engine, token_factory):
    app = build_app(engine)
    client = TestClient(app)

    response = client.get("/resource", headers={"Authorization": f"Bearer {token_factory()}"})
    assert response.status_code == 200
    assert app.state.handled == ["/resource"]


def test_blacklisted_token_is_rejected(engine, token_factory):
    token = token_factory()
    asyncio.run(engine.blacklist(token))
    app = build_app(engine)
    client = TestClient(app)

    response = client.get("/resource", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json() == {
        "error": "Token has been revoked",
        "message": "This token is no longer valid",
    }
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert app.state.handled == []


def test_token_passes_again_after_expiry(engine, clock, token_factory):
    token = token_factory(expires_in=5000)
    asyncio.run(engine.blacklist(token))
    app = build_app(engine)
    client = TestClient(app)
    headers = {"Authorization": f"Bearer {token}"}

    assert client.get("/resource", headers=headers).status_code == 401
    clock.advance(5000)
    assert client.get("/resource", headers=headers).status_code == 200


def test_custom_token_extractor(engine, token_factory):
    token = token_factory()
    asyncio.run(engine.blacklist(token))
    app = build_app(engine, get_token=lambda request: request.cookies.get("access_token"))
    client = TestClient(app)

    assert client.get("/resource", headers={"Authorization": f"Bearer {token}"}).status_code == 200
    client.cookies.set("access_token", token)
    assert client.get("/resource").status_code == 401


def test_storage_outage_fails_open(clock, token_factory):
    engine = JWTBlacklist(storage=DownAdapter(), auto_cleanup=False, clock=clock)
    app = build_app(engine)
    client = TestClient(app)

    response = client.get("/resource", headers={"Authorization": f"Bearer {token_factory()}"})
    assert response.status_code == 200


def test_unexpected_error_goes_to_host_error_handling(engine):
    def broken_extractor(request):
        raise RuntimeError("extractor bug")

    app = build_app(engine, get_token=broken_extractor)

    with pytest.raises(RuntimeError):
        TestClient(app).get("/resource")

    response = TestClient(app, raise_server_exceptions=False).get("/resource")
    assert response.status_code == 500
    assert app.state.handled == []


def test_engine_read_from_app_state(engine, token_factory):
    token = token_factory()
    asyncio.run(engine.blacklist(token))
    app = FastAPI()
    app.state.blacklist = engine
    app.add_middleware(BlacklistMiddleware)

    @app.get("/resource")
    def resource():
        return {"ok": True}

    response = TestClient(app).get("/resource", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.parametrize("header, expected", [
    ("Bearer abc.def.ghi", "abc.def.ghi"),
    ("Bearer ", None),
    ("bearer abc", None),
    ("Token abc", None),
    ("", None),
])
def test_bearer_token(header, expected):
    headers = [(b"authorization", header.encode())] if header else []
    request = Request({"type": "http", "headers": headers})
    assert bearer_token(request) == expected


def test_dependency_rejects_blacklisted_token(engine, token_factory):
    revoked = token_factory()
    asyncio.run(engine.blacklist(revoked))
    app = FastAPI()
    app.state.blacklist = engine

    @app.get("/me")
    def me(token: str = Depends(require_not_blacklisted)):
        return {"token": token}

    client = TestClient(app)
    fresh = token_factory(expires_in=120_000)

    assert client.get("/me", headers={"Authorization": f"Bearer {fresh}"}).json() == {"token": fresh}

    response = client.get("/me", headers={"Authorization": f"Bearer {revoked}"})
    assert response.status_code == 401
    assert response.json()["detail"]["error"] == "Token has been revoked"

    assert client.get("/me").status_code == 401
