from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    api_base_url: str = Field("http://localhost:8000", alias="DEEPTALK_API_BASE_URL")
    request_timeout: float = Field(10.0, alias="DEEPTALK_REQUEST_TIMEOUT")
    api_retries: int = Field(0, alias="DEEPTALK_API_RETRIES")

    storage_path: str = Field(".local/deeptalk/storage.json", alias="DEEPTALK_STORAGE_PATH")
    token_ttl_days: int = Field(7, alias="DEEPTALK_TOKEN_TTL_DAYS")

    log_level: str = Field("INFO", alias="DEEPTALK_LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    @property
    def base_url(self) -> str:
        return self.api_base_url.strip().rstrip("/")

    @property
    def token_ttl_ms(self) -> int:
        return int(self.token_ttl_days) * 24 * 60 * 60 * 1000


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    global _settings
    _settings = None
