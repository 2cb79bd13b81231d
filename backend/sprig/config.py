from typing import Any, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings

from sprig.core.errors import ConfigMissing
from sprig.core.timefmt import OFFSET_TERM


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings defaulting to ``None`` are required by the code paths that use
    them and fail through ``require()`` when left unset.
    """

    app_name: str = "Sprig"
    app_env: str = "development"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./sprig.db"

    # Auth / session
    auth_key: str | None = None
    session_cookie_name: str | None = None
    session_cookie_name_active: str | None = None
    session_ttl: int | None = None
    session_ttl_guest: int | None = None
    session_cookie_http_only: bool | None = None
    session_cookie_samesite: Literal["lax", "strict", "none"] = "lax"
    base_uri: str | None = None
    uri_login: str | None = None
    uri_logout: str | None = None
    alerts_cookie_name: str = "alerts"

    # Timestamps
    datetime_format: str | None = None
    datetime_offset: str | None = None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("datetime_offset")
    @classmethod
    def _check_offset(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        if OFFSET_TERM.sub("", value).strip():
            raise ValueError(f"Unsupported datetime offset expression: {value!r}")
        return value.strip()

    def require(self, name: str) -> Any:
        """Return a required setting, raising ConfigMissing when it is unset."""
        value = getattr(self, name)
        if value is None:
            raise ConfigMissing(name)
        return value

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


settings = Settings()
