"""Decides who the current user is when the dashboard loads.

Three sources are tried in order and the first verified one wins:

1. a ``token`` query parameter handed back by the OAuth callback,
2. the token persisted by an earlier visit, if younger than the TTL,
3. an existing cookie session on the backend.

Rejections are silent; only transport or 5xx failures surface an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from pydantic import ValidationError

from deeptalk.constants import AVATAR_URL_TEMPLATE
from deeptalk.data.api_client import (
    ApiError,
    DeepTalkError,
    MalformedResponseError,
    NetworkError,
)
from deeptalk.logging_config import mask_token
from deeptalk.schemas import User, VerifyResponse

logger = logging.getLogger(__name__)

GOOGLE_LOGIN_PATH = "/auth/google/"
VERIFY_TOKEN_PATH = "/auth/verify-token/"
VERIFY_SESSION_PATH = "/auth/verify-session/"
LOGOUT_PATH = "/auth/logout/"

UNAUTHENTICATED = "unauthenticated"
CHECKING = "checking"
AUTHENTICATED = "authenticated"


@dataclass
class AuthState:
    status: str = UNAUTHENTICATED
    user: Optional[User] = None
    method: Optional[str] = None
    error: Optional[str] = None
    clear_url: bool = False

    @property
    def is_authenticated(self):
        return self.status == AUTHENTICATED and self.user is not None

    @classmethod
    def checking(cls):
        return cls(status=CHECKING)


def build_user(verification: VerifyResponse, method: str) -> User:
    local_part = verification.email.split("@")[0]
    return User(
        id=verification.user_id,
        email=verification.email,
        name=local_part,
        first_name=verification.first_name or local_part,
        last_name=verification.last_name or "",
        avatar=AVATAR_URL_TEMPLATE.format(name=quote(local_part, safe="")),
        login_method=method,
        has_gmail_access=bool(verification.has_gmail_access),
    )


def _query_token(query_params):
    if not query_params:
        return None
    value = query_params.get("token")
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    value = str(value or "").strip()
    return value or None


def _parse_verification(payload) -> VerifyResponse:
    try:
        return VerifyResponse.model_validate(payload or {})
    except ValidationError as exc:
        raise MalformedResponseError("Unexpected verification response") from exc


class AuthResolver:
    def __init__(self, client, token_store):
        self.client = client
        self.token_store = token_store

    def verify_token(self, token) -> User:
        payload = self.client.post(VERIFY_TOKEN_PATH, json={"token": token}, authenticated=False)
        return build_user(_parse_verification(payload), "token")

    def verify_session(self) -> User:
        payload = self.client.post(VERIFY_SESSION_PATH, authenticated=False)
        return build_user(_parse_verification(payload), "session")

    def _attempt(self, verify, label):
        """Return ``(user, error, rejected)`` for one verification path."""
        try:
            return verify(), None, False
        except NetworkError:
            logger.warning("Network error during %s verification", label)
            return None, f"Network error during {label} verification", False
        except ApiError as exc:
            if exc.is_server_error:
                logger.error("Server error during %s verification: %s", label, exc)
                return None, str(exc), False
            logger.info("%s verification rejected (%s)", label.capitalize(), exc.status_code)
            return None, None, True
        except MalformedResponseError as exc:
            logger.error("Malformed %s verification response: %s", label, exc)
            return None, str(exc), False

    def resolve(self, query_params=None) -> AuthState:
        error = None
        tried = set()

        url_token = _query_token(query_params)
        if url_token:
            logger.info("Found token in URL, verifying %s", mask_token(url_token))
            self.token_store.set_token(url_token)
            tried.add(url_token)
            user, attempt_error, rejected = self._attempt(lambda: self.verify_token(url_token), "token")
            if user is not None:
                return AuthState(AUTHENTICATED, user=user, method="token", clear_url=True)
            error = attempt_error or error
            if rejected:
                self.token_store.clear()

        stored_token, timestamp, legacy = self.token_store.read()
        if stored_token and stored_token not in tried:
            if self.token_store.is_expired(timestamp):
                logger.info("Stored token expired, cleaning up")
                self.token_store.clear()
            else:
                if legacy:
                    self.token_store.migrate_legacy()
                user, attempt_error, rejected = self._attempt(lambda: self.verify_token(stored_token), "token")
                if user is not None:
                    return AuthState(AUTHENTICATED, user=user, method="token", clear_url=bool(url_token))
                error = attempt_error or error
                if rejected:
                    self.token_store.clear()

        user, attempt_error, _ = self._attempt(self.verify_session, "session")
        if user is not None:
            return AuthState(AUTHENTICATED, user=user, method="session", clear_url=bool(url_token))
        error = attempt_error or error
        return AuthState(UNAUTHENTICATED, error=error, clear_url=bool(url_token))

    def start_google_login(self) -> str:
        payload = self.client.get(GOOGLE_LOGIN_PATH, authenticated=False)
        auth_url = payload.get("auth_url") if isinstance(payload, dict) else None
        if not auth_url:
            raise MalformedResponseError("No auth URL received")
        return str(auth_url)

    def current_user(self) -> Optional[User]:
        token = self.token_store.get_token()
        if not token:
            return None
        try:
            return self.verify_token(token)
        except DeepTalkError as exc:
            logger.info("Current user lookup failed: %s", exc)
            return None

    def sign_out(self) -> AuthState:
        try:
            self.client.post(LOGOUT_PATH)
        except DeepTalkError as exc:
            logger.warning("Backend logout error: %s", exc)
        finally:
            self.token_store.clear()
            self.client.clear_cookies()
        return AuthState(UNAUTHENTICATED)
