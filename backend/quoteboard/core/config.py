from pathlib import Path
import secrets

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILE, env_file_encoding="utf-8", extra="ignore")

    app_env: str = "dev"
    app_secret_key: str | None = None
    auth_access_token_expire_days: int = 14
    log_level: str = "INFO"

    finnhub_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FINNHUB_API_KEY", "FINNHUB_TOKEN"),
    )
    finnhub_base_url: str = "https://finnhub.io/api/v1"
    finnhub_timeout_seconds: float = 10.0

    quote_refresh_interval_seconds: float = 10.0
    news_limit: int = 6
    news_category: str = "general"
    default_watchlist: list[str] = ["AAPL", "GOOGL", "MSFT", "AMZN"]
    dashboard_stream_queue_size: int = 16

    postgres_db: str = "quoteboard"
    postgres_user: str = "quoteboard"
    postgres_password: str = "quoteboard"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    cors_allow_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    @field_validator("default_watchlist")
    @classmethod
    def _validate_default_watchlist(cls, value: list[str]) -> list[str]:
        normalized: list[str] = []
        for symbol in value:
            candidate = symbol.strip().upper()
            if candidate and candidate not in normalized:
                normalized.append(candidate)
        if not normalized:
            raise ValueError("DEFAULT_WATCHLIST must contain at least one symbol")
        return normalized

    @model_validator(mode="after")
    def _validate_app_secret_key(self) -> "Settings":
        normalized = (self.app_secret_key or "").strip()
        insecure_placeholders = {
            "change-me",
            "changeme",
            "replace-me",
            "replace-with-strong-random-secret",
        }
        is_prod = self.app_env.lower() in {"prod", "production"}

        if not normalized:
            if is_prod:
                raise ValueError("APP_SECRET_KEY is required in production")
            normalized = secrets.token_urlsafe(48)

        if normalized.lower() in insecure_placeholders:
            if is_prod:
                raise ValueError("APP_SECRET_KEY must be replaced with a strong random secret in production")
            normalized = secrets.token_urlsafe(48)

        if len(normalized) < 32:
            raise ValueError("APP_SECRET_KEY must be at least 32 characters")

        self.app_secret_key = normalized
        return self

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+psycopg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
