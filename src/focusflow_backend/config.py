from __future__ import annotations

from typing import ClassVar, final

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PLACEHOLDER_TOKEN_SECRET = "access_token_secret_change_me"


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [x.strip() for x in value.split(",") if x.strip()]


@final
class Settings(BaseSettings):
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )
    app_name: str = "FocusFlow Backend"
    api_prefix: str = "/api"

    # Environment (ENVIRONMENT): development | production
    environment: str = "development"

    database_url: str = "sqlite:///./dev.db"

    # Primary env: CORS_ALLOW_ORIGINS; also accept CORS_ORIGINS as alias.
    cors_allow_origins: str = Field(
        default="*",
        validation_alias=AliasChoices("CORS_ALLOW_ORIGINS", "CORS_ORIGINS"),
    )
    frontend_url: str = "http://localhost:5173"

    log_level: str = "INFO"

    # Bearer tokens handed out by the identity layer (signed, stateless).
    access_token_secret: str = _PLACEHOLDER_TOKEN_SECRET
    access_token_max_age_seconds: int = 60 * 60 * 24 * 7  # 7 days

    # Default page size for the single-entity list endpoints.
    entity_list_limit: int = 50

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "Settings":  # pyright: ignore[reportUnusedFunction]
        if self.environment.strip().lower() != "production":
            return self

        errors: list[str] = []

        secret = self.access_token_secret.strip()
        if not secret or secret == _PLACEHOLDER_TOKEN_SECRET:
            errors.append("ACCESS_TOKEN_SECRET must be set in production")

        cors_v = self.cors_allow_origins.strip()
        if not cors_v or cors_v == "*":
            errors.append("CORS_ALLOW_ORIGINS must be explicit (not '*') in production")

        if self.access_token_max_age_seconds <= 0:
            errors.append("ACCESS_TOKEN_MAX_AGE_SECONDS must be positive")

        if errors:
            raise ValueError("Invalid production settings: " + "; ".join(errors))
        return self

    def cors_origins_list(self) -> list[str]:
        v = self.cors_allow_origins.strip()
        if not v:
            return []
        if v == "*":
            return ["*"]
        return _split_csv(v)

    def security_warnings(self) -> list[str]:
        warnings: list[str] = []
        secret = self.access_token_secret.strip()
        if not secret or secret == _PLACEHOLDER_TOKEN_SECRET:
            warnings.append("ACCESS_TOKEN_SECRET is missing or using placeholder value")
        if self.cors_allow_origins.strip() == "*":
            warnings.append("CORS_ALLOW_ORIGINS='*' is permissive")
        return warnings


settings = Settings()
