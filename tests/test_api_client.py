from __future__ import annotations

import pytest

from deeptalk.data.api_client import (
    ApiClient,
    ApiError,
    AuthenticationError,
    MalformedResponseError,
    NetworkError,
    error_message,
)

from .conftest import BASE_URL
from .fakes import FakeResponse, connection_error


def test_bearer_header_sent_when_token_stored(client, session, token_store):
    token_store.set_token("abc123")
    session.add("GET", "/api/tasks/", FakeResponse(200, {"tasks": []}))

    client.get("/api/tasks/")

    headers = session.calls[0]["headers"]
    assert headers["Authorization"] == "Bearer abc123"
    assert headers["Content-Type"] == "application/json"


def test_no_bearer_header_without_token_or_when_unauthenticated(client, session, token_store):
    session.add("POST", "/auth/verify-session/", FakeResponse(200, {}))
    client.post("/auth/verify-session/")
    assert "Authorization" not in session.calls[0]["headers"]

    token_store.set_token("abc123")
    client.post("/auth/verify-session/", authenticated=False)
    assert "Authorization" not in session.calls[1]["headers"]


def test_error_body_message_is_surfaced(client, session):
    session.add("PUT", "/api/tasks/1/", FakeResponse(400, {"error": "Name required"}, reason="Bad Request"))

    with pytest.raises(ApiError) as excinfo:
        client.put("/api/tasks/1/", json={})

    assert str(excinfo.value) == "Name required"
    assert excinfo.value.status_code == 400
    assert not excinfo.value.is_server_error


def test_error_without_body_uses_status_line():
    response = FakeResponse(503, text="<html>down</html>", reason="Service Unavailable")
    assert error_message(response) == "HTTP 503: Service Unavailable"


def test_message_key_used_when_error_missing():
    assert error_message(FakeResponse(400, {"message": "Bad dates"})) == "Bad dates"


def test_unauthorized_raises_authentication_error(client, session):
    session.add("GET", "/api/tasks/", FakeResponse(401, {"error": "Invalid token"}, reason="Unauthorized"))

    with pytest.raises(AuthenticationError):
        client.get("/api/tasks/")


def test_transport_failure_becomes_network_error(client, session):
    session.add("GET", "/api/tasks/", connection_error())

    with pytest.raises(NetworkError):
        client.get("/api/tasks/")


def test_empty_and_no_content_bodies_return_none(client, session):
    session.add("DELETE", "/api/tasks/1/", FakeResponse(204))
    session.add("POST", "/auth/logout/", FakeResponse(200))

    assert client.delete("/api/tasks/1/") is None
    assert client.post("/auth/logout/") is None


def test_invalid_json_is_malformed(client, session):
    session.add("GET", "/api/task-stats/", FakeResponse(200, text="not json"))

    with pytest.raises(MalformedResponseError):
        client.get("/api/task-stats/")


def test_from_settings_strips_trailing_slash(settings, session):
    settings.api_base_url = BASE_URL + "/"
    client = ApiClient.from_settings(settings, session=session)
    session.add("GET", "/api/categories/", FakeResponse(200, {"categories": []}))

    client.get("/api/categories/")

    assert client.base_url == BASE_URL
    assert session.calls[0]["path"] == "/api/categories/"


def test_clear_cookies_empties_the_jar(client, session):
    session.cookies.set("sessionid", "abc")

    client.clear_cookies()

    assert len(session.cookies) == 0
