from __future__ import annotations

import pytest

from deeptalk.auth.resolver import AUTHENTICATED, UNAUTHENTICATED, build_user
from deeptalk.constants import LEGACY_TOKEN_KEY, LEGACY_TOKEN_TIMESTAMP_KEY, TOKEN_KEY, TOKEN_TIMESTAMP_KEY
from deeptalk.data.api_client import MalformedResponseError
from deeptalk.schemas import VerifyResponse

from .fakes import DAY_MS, FakeResponse, connection_error, verify_payload

VERIFY_TOKEN = ("POST", "/auth/verify-token/")
VERIFY_SESSION = ("POST", "/auth/verify-session/")
REJECTED = FakeResponse(401, {"error": "Invalid token"}, reason="Unauthorized")


def _verify_token_calls(session):
    return [call for call in session.calls if call["path"] == VERIFY_TOKEN[1]]


def test_url_token_wins_and_is_persisted(resolver, session, storage, clock):
    session.add(*VERIFY_TOKEN, FakeResponse(200, verify_payload()))

    state = resolver.resolve({"token": "url-token"})

    assert state.status == AUTHENTICATED
    assert state.method == "token"
    assert state.clear_url
    assert state.user.login_method == "token"
    assert storage[TOKEN_KEY] == "url-token"
    assert storage[TOKEN_TIMESTAMP_KEY] == str(clock.now_ms)
    assert _verify_token_calls(session)[0]["json"] == {"token": "url-token"}
    assert VERIFY_SESSION[1] not in session.paths()


def test_query_token_given_as_list(resolver, session):
    session.add(*VERIFY_TOKEN, FakeResponse(200, verify_payload()))

    state = resolver.resolve({"token": ["listed"]})

    assert state.is_authenticated
    assert _verify_token_calls(session)[0]["json"] == {"token": "listed"}


def test_fresh_stored_token_is_verified(resolver, session, token_store, clock):
    token_store.set_token("stored")
    clock.advance(DAY_MS)
    session.add(*VERIFY_TOKEN, FakeResponse(200, verify_payload()))

    state = resolver.resolve({})

    assert state.is_authenticated
    assert state.method == "token"
    assert not state.clear_url


def test_expired_token_falls_through_to_session(resolver, session, token_store, storage, clock):
    token_store.set_token("stale")
    clock.advance(8 * DAY_MS)
    session.add(*VERIFY_SESSION, FakeResponse(200, verify_payload()))

    state = resolver.resolve({})

    assert state.is_authenticated
    assert state.method == "session"
    assert state.user.login_method == "session"
    assert _verify_token_calls(session) == []
    assert TOKEN_KEY not in storage


def test_rejected_stored_token_is_cleared_silently(resolver, session, token_store, storage):
    token_store.set_token("revoked")
    session.add(*VERIFY_TOKEN, REJECTED)
    session.add(*VERIFY_SESSION, FakeResponse(401, {"authenticated": False}))

    state = resolver.resolve({})

    assert state.status == UNAUTHENTICATED
    assert state.error is None
    assert TOKEN_KEY not in storage


def test_rejected_url_token_is_not_retried_from_storage(resolver, session, storage):
    session.add(*VERIFY_TOKEN, [REJECTED])
    session.add(*VERIFY_SESSION, FakeResponse(403, {"error": "No session"}))

    state = resolver.resolve({"token": "bad"})

    assert not state.is_authenticated
    assert state.clear_url
    assert len(_verify_token_calls(session)) == 1
    assert TOKEN_KEY not in storage


def test_server_error_is_surfaced_and_token_kept(resolver, session, token_store, storage):
    token_store.set_token("stored")
    session.add(*VERIFY_TOKEN, FakeResponse(500, {"error": "Database down"}, reason="Server Error"))
    session.add(*VERIFY_SESSION, REJECTED)

    state = resolver.resolve({})

    assert state.status == UNAUTHENTICATED
    assert state.error == "Database down"
    assert storage[TOKEN_KEY] == "stored"


def test_network_error_is_surfaced(resolver, session):
    session.add(*VERIFY_SESSION, connection_error())

    state = resolver.resolve({})

    assert not state.is_authenticated
    assert "Network error" in state.error


def test_session_fallback_when_nothing_stored(resolver, session):
    session.add(*VERIFY_SESSION, FakeResponse(200, verify_payload(email="sam@example.com")))

    state = resolver.resolve(None)

    assert state.is_authenticated
    assert state.user.name == "sam"
    assert state.user.email == "sam@example.com"


def test_legacy_token_is_migrated_before_verification(resolver, session, storage, clock):
    storage[LEGACY_TOKEN_KEY] = "legacy"
    storage[LEGACY_TOKEN_TIMESTAMP_KEY] = str(clock.now_ms - DAY_MS)
    session.add(*VERIFY_TOKEN, FakeResponse(200, verify_payload()))

    state = resolver.resolve({})

    assert state.is_authenticated
    assert storage[TOKEN_KEY] == "legacy"
    assert LEGACY_TOKEN_KEY not in storage


def test_malformed_verification_response_is_an_error(resolver, session, token_store, storage):
    token_store.set_token("stored")
    session.add(*VERIFY_TOKEN, FakeResponse(200, {"email": "no-id@example.com"}))
    session.add(*VERIFY_SESSION, REJECTED)

    state = resolver.resolve({})

    assert not state.is_authenticated
    assert state.error
    assert storage[TOKEN_KEY] == "stored"


def test_sign_out_clears_storage_even_when_logout_fails(resolver, session, token_store, storage):
    token_store.set_token("t")
    storage[LEGACY_TOKEN_KEY] = "old"
    session.add("POST", "/auth/logout/", connection_error())

    state = resolver.sign_out()

    assert state.status == UNAUTHENTICATED
    assert storage == {}
    assert session.calls[0]["headers"]["Authorization"] == "Bearer t"


def test_start_google_login_returns_auth_url(resolver, session):
    session.add("GET", "/auth/google/", FakeResponse(200, {"auth_url": "https://accounts.example/auth"}))

    assert resolver.start_google_login() == "https://accounts.example/auth"


def test_start_google_login_without_url(resolver, session):
    session.add("GET", "/auth/google/", FakeResponse(200, {}))

    with pytest.raises(MalformedResponseError):
        resolver.start_google_login()


def test_current_user_requires_token(resolver, session, token_store):
    assert resolver.current_user() is None

    token_store.set_token("t")
    session.add(*VERIFY_TOKEN, FakeResponse(200, verify_payload()))
    assert resolver.current_user().email == "alex.doe@example.com"


def test_build_user_derives_name_and_avatar():
    verification = VerifyResponse.model_validate(
        verify_payload(email="jo+cal@example.com", first_name="", last_name=None)
    )

    user = build_user(verification, "session")

    assert user.name == "jo+cal"
    assert user.first_name == "jo+cal"
    assert user.last_name == ""
    assert "name=jo%2Bcal" in user.avatar
    assert user.has_gmail_access is True


def test_failed_logout_does_not_leave_session_behind(resolver, session, token_store):
    session.cookies.set("sessionid", "abc")
    token_store.set_token("t")
    session.add("POST", "/auth/logout/", FakeResponse(500, {"error": "Logout failed"}, reason="Server Error"))
    session.add(*VERIFY_SESSION, FakeResponse(200, verify_payload()), cookie="sessionid")

    resolver.sign_out()
    state = resolver.resolve({})

    assert state.status == UNAUTHENTICATED
    assert "sessionid" not in session.cookies
    assert state.error is None


def test_url_token_beats_stored_token_and_session(resolver, session, token_store, storage, clock):
    token_store.set_token("stored")
    clock.advance(DAY_MS)
    session.cookies.set("sessionid", "abc")
    session.add(*VERIFY_TOKEN, FakeResponse(200, verify_payload(email="url@example.com")))
    session.add(*VERIFY_SESSION, FakeResponse(200, verify_payload(email="session@example.com")), cookie="sessionid")

    state = resolver.resolve({"token": "url-token"})

    assert state.method == "token"
    assert state.user.email == "url@example.com"
    assert [call["json"] for call in _verify_token_calls(session)] == [{"token": "url-token"}]
    assert VERIFY_SESSION[1] not in session.paths()
    assert storage[TOKEN_KEY] == "url-token"
