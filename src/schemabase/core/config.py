"""Runtime configuration for SchemaBase.

Values come from ``SCHEMABASE_*`` environment variables or a ``.env`` file
and are validated once when the settings object is built.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SchemaBase settings.

    Groups: service identity and HTTP surface, the backing database that
    holds both the schema registry and the document collections, CORS,
    and logging.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SCHEMABASE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Service
    app_name: str = "SchemaBase"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = Field(default=1, ge=1)

    # Registry and document store database
    database_url: str = "sqlite+aiosqlite:///./sb_data/schemabase.db"
    db_echo: bool = False
    # Pool options apply to server databases only
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    # Seconds a SQLite connection waits on a locked database before failing
    db_sqlite_busy_timeout: float = Field(default=30.0, gt=0)
    # None: create tables on startup outside production
    db_auto_create_tables: bool | None = None

    cors_origins: list[str] = Field(default=["http://localhost:3000", "http://localhost:8000"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        """Routes mount at ``{api_prefix}/schemas`` and ``{api_prefix}/data``."""
        v = v.rstrip("/")
        if not v.startswith("/"):
            raise ValueError("api_prefix must start with '/' and name at least one segment")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def auto_create_tables(self) -> bool:
        """Whether startup creates the ``schemas`` and ``documents`` tables."""
        if self.db_auto_create_tables is not None:
            return self.db_auto_create_tables
        return not self.is_production

    @property
    def uses_console_logs(self) -> bool:
        return self.is_development or self.log_format == "console"

    @model_validator(mode="after")
    def validate_sqlite_workers(self) -> "Settings":
        """SQLite serializes writers in one file; several processes would fight over it."""
        if self.workers > 1 and self.is_sqlite:
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                f"Requested {self.workers} workers, but SQLite requires workers=1. "
                "Either use --workers 1 or switch to PostgreSQL."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, built on first use."""
    return Settings()
