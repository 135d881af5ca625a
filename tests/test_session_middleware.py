import json
import logging

import pytest
from cryptography.fernet import Fernet
from fastapi import Depends
from fastapi.testclient import TestClient

from app.app_context import get_session
from app.main import create_app
from Sessions.native_session import MemorySessionBackend
from Sessions.session_middleware import _derive_fernet_key
from Sessions.session_store import Session


SECRET = "integration-secret"


def _header_principal(request):
    return request.headers.get("x-user-id")


@pytest.fixture
def backend():
    return MemorySessionBackend(max_age_seconds=600)


@pytest.fixture
def client(backend):
    app = create_app(
        settings={"SESSION_HTTPS_ONLY": False, "SESSION_MAX_AGE": 600},
        secret_key=SECRET,
        backend=backend,
        principal_resolver=_header_principal,
    )

    @app.get("/visit")
    def visit(session: Session = Depends(get_session)):
        count = session.get("count", 0) + 1
        session.set("count", count)
        return {"count": count, "valid": session.is_valid}

    @app.get("/same-handler")
    def same_handler(first: Session = Depends(get_session), request_session=Depends(get_session)):
        return {"same": first is request_session}

    @app.post("/logout")
    def logout(session: Session = Depends(get_session)):
        session.destroy()
        return {"valid": session.is_valid}

    with TestClient(app) as test_client:
        yield test_client


def test_session_persists_across_requests(client, backend):
    first = client.get("/visit")
    assert first.status_code == 200
    assert first.json() == {"count": 1, "valid": True}
    assert "session" in first.cookies
    assert "httponly" in first.headers["set-cookie"].lower()

    second = client.get("/visit")
    assert second.json()["count"] == 2
    assert len(backend) == 1


def test_request_id_is_echoed(client):
    response = client.get("/visit", headers={"x-request-id": "req-123"})
    assert response.headers["x-request-id"] == "req-123"


def test_handler_is_built_once_per_request(client):
    assert client.get("/same-handler").json() == {"same": True}


def _cookie_session_id(cookie):
    fernet = Fernet(_derive_fernet_key(SECRET))
    return json.loads(fernet.decrypt(cookie.encode("utf-8")))["sid"]


def test_create_app_keeps_injected_backend(client, backend):
    assert len(backend) == 0
    assert client.app.state.session_backend is backend


def test_principal_change_rotates_session_id(client, backend):
    client.get("/visit")
    fixed_cookie = client.cookies.get("session")
    fixed_id = _cookie_session_id(fixed_cookie)
    assert fixed_id in backend

    response = client.get("/visit", headers={"x-user-id": "42"})
    assert response.json()["count"] == 2
    rotated_cookie = response.cookies.get("session")
    rotated_id = _cookie_session_id(rotated_cookie)
    assert rotated_id != fixed_id
    assert fixed_id not in backend
    assert backend.load(rotated_id)["-session-count"] == {"value": 2}
    assert backend.load(rotated_id)["-session-user_check"] == {"value": "42"}
    assert len(backend) == 1

    replay = TestClient(client.app)
    replay.cookies.set("session", fixed_cookie)
    assert replay.get("/visit", headers={"x-user-id": "42"}).json()["count"] == 1


def test_logout_expires_cookie_and_drops_data(client, backend):
    client.get("/visit")
    session_id = _cookie_session_id(client.cookies.get("session"))
    assert session_id in backend

    response = client.post("/logout")
    assert response.json() == {"valid": False}
    set_cookie = response.headers["set-cookie"].lower()
    assert "max-age=0" in set_cookie
    assert session_id not in backend
    assert len(backend) == 0


def test_tampered_cookie_starts_fresh_session(client):
    client.cookies.set("session", "not-a-fernet-token")
    assert client.get("/visit").json()["count"] == 1


def test_audit_lines_carry_request_id(client, caplog):
    caplog.set_level(logging.INFO, logger="session.audit")
    client.get("/visit")
    client.post("/logout", headers={"x-request-id": "req-logout"})
    messages = [record.getMessage() for record in caplog.records if record.name == "session.audit"]
    destroyed = [message for message in messages if "event=session_destroyed" in message]
    assert destroyed
    assert "request_id=req-logout" in destroyed[0]
    assert "path=/logout" in destroyed[0]
