"""Settings of the Roster API, read from the environment.

Values come from OS environment variables first, then from one ``.env``
file: the path in ``ROSTER_ENV_FILE`` if set, else ``config/.env.dev``,
else ``config/.env``. Anything still unset takes the default below.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE_VAR = "ROSTER_ENV_FILE"
ENV_FILE_CANDIDATES = (".env.dev", ".env")
SQLITE_URL_PREFIXES = ("sqlite+aiosqlite:///", "sqlite:///")
PROJECT_MARKERS = ("config", ".git", "pyproject.toml")


def _project_root() -> Path:
    here = Path(__file__).resolve().parent
    for directory in (here, *here.parents):
        if any((directory / marker).exists() for marker in PROJECT_MARKERS):
            return directory
    return here.parents[1]


def get_config_dir() -> Path:
    return _project_root() / "config"


def _env_file() -> Path | None:
    explicit = os.environ.get(ENV_FILE_VAR)
    if explicit:
        path = Path(explicit)
        if not path.is_absolute():
            path = _project_root() / path
        if path.exists():
            return path

    config_dir = get_config_dir()
    for name in ENV_FILE_CANDIDATES:
        if (config_dir / name).exists():
            return config_dir / name
    return None


class Settings(BaseSettings):
    # The env file is chosen per call in get_settings, not at import
    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Required; startup fails without it
    jwt_secret_key: SecretStr
    jwt_access_token_expire_minutes: int = 15
    jwt_refresh_token_expire_days: int = 7

    app_name: str = "Roster"
    app_env: Literal["development", "testing", "production"] = "production"
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./data/roster.db"

    api_host: str = "127.0.0.1"
    api_port: int = 5172
    api_debug: bool = False
    # Comma-separated; empty disables CORS
    api_cors_origins: str = ""
    api_cookie_secure: bool = True
    api_cookie_samesite: Literal["lax", "strict", "none"] = "strict"

    registration_mode: Literal["open", "admin_only"] = "open"
    max_failed_login_attempts: int = 5
    lockout_minutes: int = 15
    # Per-client request caps on the auth and reset endpoints
    rate_limit_enabled: bool = True

    @field_validator("api_cors_origins", mode="before")
    @classmethod
    def _join_origin_list(cls, value: Any) -> str:
        if isinstance(value, (list, tuple)):
            return ",".join(value)
        return str(value) if value else ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins(self) -> list[str]:
        origins = (origin.strip() for origin in self.api_cors_origins.split(","))
        return [origin for origin in origins if origin]

    @property
    def database_path(self) -> Path | None:
        """File behind a SQLite ``database_url``; None for memory or non-SQLite."""
        prefix = next(
            (p for p in SQLITE_URL_PREFIXES if self.database_url.startswith(p)),
            None,
        )
        if prefix is None:
            return None
        location = self.database_url.removeprefix(prefix).partition("?")[0]
        if location in ("", ":memory:"):
            return None
        return Path(location)

    @property
    def testing_endpoints_enabled(self) -> bool:
        return self.app_env != "production"


@lru_cache()
def get_settings() -> Settings:
    return Settings(_env_file=_env_file())  # type: ignore[call-arg]


def clear_settings_cache() -> None:
    get_settings.cache_clear()
