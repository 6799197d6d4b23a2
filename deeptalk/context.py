from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from deeptalk.auth.resolver import AuthResolver, AuthState
from deeptalk.auth.token_store import JsonFileStorage, TokenStore
from deeptalk.data.api_client import ApiClient
from deeptalk.data.calendar_store import CalendarStore
from deeptalk.settings import Settings


@dataclass
class AppContext:
    settings: Settings
    token_store: TokenStore
    client: ApiClient
    auth: AuthResolver
    store: CalendarStore
    auth_state: AuthState = field(default_factory=AuthState.checking)
    loaded_for: Optional[str] = None

    @property
    def user(self):
        return self.auth_state.user

    def sign_out(self):
        self.auth_state = self.auth.sign_out()
        self.store.events = []
        self.store.auth_failed = False
        self.loaded_for = None
        return self.auth_state


def build_context(settings: Settings, storage=None, session=None, clock=None) -> AppContext:
    if storage is None:
        storage = JsonFileStorage(settings.storage_path)
    token_store = TokenStore(storage, clock=clock, ttl_ms=settings.token_ttl_ms)
    client = ApiClient.from_settings(settings, token_store=token_store, session=session)
    return AppContext(
        settings=settings,
        token_store=token_store,
        client=client,
        auth=AuthResolver(client, token_store),
        store=CalendarStore.from_client(client),
    )
