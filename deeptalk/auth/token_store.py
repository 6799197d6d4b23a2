from __future__ import annotations

import json
import logging
import os
import time
from collections.abc import MutableMapping
from pathlib import Path

from deeptalk.constants import (
    ALL_TOKEN_KEYS,
    LEGACY_TOKEN_KEY,
    LEGACY_TOKEN_TIMESTAMP_KEY,
    TOKEN_KEY,
    TOKEN_TIMESTAMP_KEY,
    TOKEN_TTL_MS,
)

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class JsonFileStorage(MutableMapping):
    """String key/value storage persisted to a JSON file.

    Plays the role browser local storage plays for the web front end: it
    survives restarts and is shared by every process pointing at the same
    file, without any locking between them.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable storage file %s", self.path)
            return {}
        return payload if isinstance(payload, dict) else {}

    def _save(self, payload: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(payload, handle)
        os.replace(tmp_path, self.path)

    def __getitem__(self, key):
        return self._load()[key]

    def __setitem__(self, key, value):
        payload = self._load()
        payload[key] = str(value)
        self._save(payload)

    def __delitem__(self, key):
        payload = self._load()
        del payload[key]
        self._save(payload)

    def __iter__(self):
        return iter(self._load())

    def __len__(self):
        return len(self._load())


class TokenStore:
    """Single owner of the persisted bearer token and its timestamp."""

    def __init__(self, storage: MutableMapping, clock=None, ttl_ms: int = TOKEN_TTL_MS):
        self.storage = storage
        self.clock = clock or now_ms
        self.ttl_ms = ttl_ms

    def get_token(self) -> str | None:
        return self.storage.get(TOKEN_KEY) or None

    def get_timestamp(self) -> int | None:
        return _parse_timestamp(self.storage.get(TOKEN_TIMESTAMP_KEY))

    def set_token(self, token: str) -> None:
        self.storage[TOKEN_KEY] = token
        self.storage[TOKEN_TIMESTAMP_KEY] = str(self.clock())
        self._remove(LEGACY_TOKEN_KEY, LEGACY_TOKEN_TIMESTAMP_KEY)

    def read(self):
        """Return ``(token, timestamp, legacy)`` preferring the current keys.

        The timestamp always comes from the same key family as the token.
        """
        token = self.storage.get(TOKEN_KEY)
        if token:
            return token, _parse_timestamp(self.storage.get(TOKEN_TIMESTAMP_KEY)), False
        token = self.storage.get(LEGACY_TOKEN_KEY)
        if token:
            return token, _parse_timestamp(self.storage.get(LEGACY_TOKEN_TIMESTAMP_KEY)), True
        return None, None, False

    def token_age_ms(self, timestamp: int | None) -> int | None:
        if timestamp is None:
            return None
        return self.clock() - timestamp

    def is_expired(self, timestamp: int | None) -> bool:
        age = self.token_age_ms(timestamp)
        if age is None:
            return True
        return age >= self.ttl_ms

    def migrate_legacy(self) -> bool:
        token = self.storage.get(LEGACY_TOKEN_KEY)
        if not token:
            return False
        timestamp = self.storage.get(LEGACY_TOKEN_TIMESTAMP_KEY)
        self.storage[TOKEN_KEY] = token
        if timestamp is not None:
            self.storage[TOKEN_TIMESTAMP_KEY] = str(timestamp)
        self._remove(LEGACY_TOKEN_KEY, LEGACY_TOKEN_TIMESTAMP_KEY)
        logger.info("Migrated legacy token keys")
        return True

    def clear(self) -> None:
        self._remove(*ALL_TOKEN_KEYS)
        logger.info("All tokens cleaned up")

    def _remove(self, *keys):
        for key in keys:
            if key in self.storage:
                del self.storage[key]


def _parse_timestamp(value):
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
