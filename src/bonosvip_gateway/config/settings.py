from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from bonosvip_gateway.utils.errors import ConfigError

_UNSET = object()

# .env lives in the project root: src/bonosvip_gateway/config/settings.py -> 3 parents up
ENV_FILE = Path(__file__).resolve().parents[3] / ".env"

DEFAULT_PORTAL_URL = "https://empresas.bonosvip.com"
DEFAULT_VALIDATOR_NAME = "Lido San Telmo"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    portal_url: str = Field(default=DEFAULT_PORTAL_URL, alias="BONOSVIP_URL")
    auth_mode: Literal["auto", "cookies", "login"] = Field(default="auto", alias="BONOSVIP_AUTH_MODE")
    portal_username: str | None = Field(default=None, alias="BONOSVIP_EMAIL")
    portal_password: str | None = Field(default=None, alias="BONOSVIP_PASSWORD")
    portal_cookies: str | None = Field(default=None, alias="BONOSVIP_COOKIES")
    validator_name: str = Field(default=DEFAULT_VALIDATOR_NAME, alias="VALIDADOR_NAME")

    session_ttl_seconds: int = Field(default=3600, alias="SESSION_TTL_SECONDS", gt=0)
    portal_timeout_ms: int = Field(default=15_000, alias="PORTAL_TIMEOUT_MS", gt=0)

    def effective_auth_mode(self) -> Literal["cookies", "login"]:
        """
        `auto` prefers a configured cookie string and falls back to the login form.
        """
        if self.auth_mode != "auto":
            return self.auth_mode
        return "cookies" if (self.portal_cookies or "").strip() else "login"


def load_settings() -> Settings:
    """Re-reads the environment and `.env`; used where values may change at runtime."""
    return Settings()


def require_login_credentials(
    username: object = _UNSET,
    password: object = _UNSET,
) -> tuple[str, str]:
    """
    If a value is provided (even None), use it. Otherwise fall back to settings.
    Keeps the check unit-testable without a local .env file.
    """
    user = settings.portal_username if username is _UNSET else username
    pwd = settings.portal_password if password is _UNSET else password

    missing = []
    if not isinstance(user, str) or not user.strip():
        missing.append("BONOSVIP_EMAIL")
    if not isinstance(pwd, str) or not pwd:
        missing.append("BONOSVIP_PASSWORD")
    if missing:
        raise ConfigError(f"Missing required portal settings: {', '.join(missing)}")

    return user.strip(), pwd


settings = Settings()
