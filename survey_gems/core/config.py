from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="dev", alias="APP_ENV")
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")
    enable_openapi_docs: bool = Field(default=True, alias="ENABLE_OPENAPI_DOCS")

    database_url: str = Field(alias="DATABASE_URL")

    internal_api_token: str = Field(
        default="dev_internal_token_change_me",
        alias="INTERNAL_API_TOKEN",
    )
    internal_api_allowlist: str = Field(
        default="127.0.0.1/32,::1/128",
        alias="INTERNAL_API_ALLOWLIST",
    )
    internal_api_trusted_proxies: str = Field(default="", alias="INTERNAL_API_TRUSTED_PROXIES")

    session_cookie_name: str = Field(default="survey_gems_sid", alias="SESSION_COOKIE_NAME")
    session_cookie_secure: bool = Field(default=False, alias="SESSION_COOKIE_SECURE")
    session_ttl_hours: int = Field(default=168, ge=1, alias="SESSION_TTL_HOURS")

    admin_emails: str = Field(default="", alias="ADMIN_EMAILS")

    min_withdrawal_gems: int = Field(default=100, ge=1, alias="MIN_WITHDRAWAL_GEMS")
    gem_usd_rate: Decimal = Field(default=Decimal("0.05"), alias="GEM_USD_RATE")
    transactions_page_size: int = Field(default=10, ge=1, le=100, alias="TRANSACTIONS_PAGE_SIZE")

    @property
    def admin_email_set(self) -> frozenset[str]:
        return frozenset(
            email.strip().lower() for email in self.admin_emails.split(",") if email.strip()
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
