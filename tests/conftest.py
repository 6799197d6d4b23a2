# tests/conftest.py

from __future__ import annotations

import pytest

from deeptalk.auth.resolver import AuthResolver
from deeptalk.auth.token_store import TokenStore
from deeptalk.data.api_client import ApiClient
from deeptalk.data.calendar_store import CalendarStore
from deeptalk.settings import Settings, reset_settings

from .fakes import FakeClock, FakeSession

BASE_URL = "http://backend.test"


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        DEEPTALK_API_BASE_URL=BASE_URL,
        DEEPTALK_STORAGE_PATH=str(tmp_path / "storage.json"),
        _env_file=None,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def storage() -> dict:
    """Plain dict standing in for persistent local storage."""
    return {}


@pytest.fixture()
def token_store(storage, clock) -> TokenStore:
    return TokenStore(storage, clock=clock)


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def client(session, token_store) -> ApiClient:
    return ApiClient(BASE_URL, token_store=token_store, session=session)


@pytest.fixture()
def resolver(client, token_store) -> AuthResolver:
    return AuthResolver(client, token_store)


@pytest.fixture()
def store(client) -> CalendarStore:
    return CalendarStore.from_client(client)
