from __future__ import annotations

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from app.domain.account import Account
from app.security.session_middleware import ServerSessionMiddleware
from app.security.session_store import MemorySessionStore
from app.security.sessions import bind_session, clear_session, session_account_id

COOKIE = "sid"


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def client(store):
    app = FastAPI()
    app.add_middleware(ServerSessionMiddleware, store=store, secret_key="k", cookie_name=COOKIE, max_age=60)

    @app.get("/visit")
    def visit(request: Request):
        request.session["visits"] = request.session.get("visits", 0) + 1
        return {"visits": request.session["visits"], "account": session_account_id(request.session)}

    @app.get("/bind")
    def bind(request: Request):
        bind_session(request.session, Account(account_id="acct-1", email="a@example.com", password_hash="x"))
        return {}

    @app.get("/unbind")
    def unbind(request: Request):
        clear_session(request.session)
        return {}

    @app.get("/reset")
    def reset(request: Request):
        request.session.clear()
        return {}

    with TestClient(app) as test_client:
        yield test_client


def test_session_persists_between_requests(client):
    assert client.get("/visit").json()["visits"] == 1
    assert client.get("/visit").json()["visits"] == 2


def test_cookie_is_signed_and_http_only(client):
    response = client.get("/visit")
    header = response.headers["set-cookie"]
    assert header.startswith(f"{COOKIE}=")
    assert "httponly" in header.lower()
    assert "samesite=lax" in header.lower()
    assert "." in client.cookies.get(COOKIE)


def test_tampered_cookie_starts_fresh_session(client):
    client.get("/visit")
    session_id, _ = client.cookies.get(COOKIE).rsplit(".", 1)
    client.cookies.clear()
    response = client.get("/visit", headers={"cookie": f"{COOKIE}={session_id}.forged"})
    assert response.json()["visits"] == 1


def test_bind_rotates_identifier_and_keeps_data(client, store):
    client.get("/visit")
    before = client.cookies.get(COOKIE)

    client.get("/bind")
    after = client.cookies.get(COOKIE)

    assert after != before
    assert len(store) == 1
    body = client.get("/visit").json()
    assert body == {"visits": 2, "account": "acct-1"}


def test_unbind_drops_identity_and_rotates(client, store):
    client.get("/bind")
    bound = client.cookies.get(COOKIE)

    client.get("/unbind")
    assert client.get("/visit").json()["account"] is None
    assert client.cookies.get(COOKIE) != bound


def test_empty_session_is_deleted(client, store):
    client.get("/visit")
    assert len(store) == 1

    client.get("/reset")
    assert len(store) == 0
    assert client.cookies.get(COOKIE) is None


def test_cookie_for_vanished_session_is_cleared(client, store):
    client.get("/visit")
    session_id, _ = client.cookies.get(COOKIE).rsplit(".", 1)
    store.delete(session_id)

    response = client.get("/reset")

    assert f"{COOKIE}=" in response.headers["set-cookie"]
    assert client.cookies.get(COOKIE) is None
    assert len(store) == 0
