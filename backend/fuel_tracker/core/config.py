from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./fuel_tracker.db"
DEFAULT_VEHICLE = "Nissan Xtrail"
DEFAULT_CANONICAL_VEHICLES = "Nissan Xtrail,Nissan Sentra,Subaru Legacy"

INSECURE_SESSION_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(DEFAULT_DATABASE_URL, alias="DATABASE_URL")
    # Create missing tables at startup; production deployments run alembic instead.
    db_auto_create: bool = Field(True, alias="DB_AUTO_CREATE")

    session_secret: str = Field(INSECURE_SESSION_SECRET, alias="SESSION_SECRET")
    session_max_age_seconds: int = Field(60 * 60 * 24 * 7, alias="SESSION_MAX_AGE_SECONDS")
    session_https_only: bool = Field(False, alias="SESSION_HTTPS_ONLY")
    bcrypt_rounds: int = Field(12, ge=4, le=31, alias="BCRYPT_ROUNDS")

    default_vehicle: str = Field(DEFAULT_VEHICLE, alias="DEFAULT_VEHICLE")
    canonical_vehicles: str = Field(DEFAULT_CANONICAL_VEHICLES, alias="CANONICAL_VEHICLES")
    page_size: int = Field(8, ge=1, le=100, alias="PAGE_SIZE")

    # --- Rate limiting (slowapi limit strings) ---
    rate_limit_enabled: bool = Field(True, alias="RATE_LIMIT_ENABLED")
    rate_limit_login: str = Field("5 per 15 minutes", alias="RATE_LIMIT_LOGIN")
    rate_limit_register: str = Field("5 per hour", alias="RATE_LIMIT_REGISTER")
    rate_limit_write: str = Field("100 per minute", alias="RATE_LIMIT_WRITE")

    cors_origins: str | None = Field(None, alias="CORS_ORIGINS")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    @field_validator("default_vehicle", mode="before")
    @classmethod
    def _normalize_default_vehicle(cls, v: object) -> object:
        if v is None:
            return DEFAULT_VEHICLE
        if isinstance(v, str):
            return v.strip() or DEFAULT_VEHICLE
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _normalize_cors_origins(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v

    @property
    def canonical_vehicle_names(self) -> list[str]:
        return [name.strip() for name in self.canonical_vehicles.split(",") if name.strip()]

    @property
    def cors_origin_list(self) -> list[str]:
        if not self.cors_origins:
            return []
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def uses_insecure_session_secret(self) -> bool:
        return self.session_secret == INSECURE_SESSION_SECRET


@lru_cache
def get_settings() -> Settings:
    return Settings()
