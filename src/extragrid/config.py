"""Application configuration using pydantic-settings.

Every setting can be given as an ``EXTRAGRID_`` prefixed environment variable or
in a ``.env`` file.
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server and default sheet settings.

    Environment variables:
    - EXTRAGRID_PORT: HTTP port (default 8002)
    - EXTRAGRID_ENVIRONMENT: development, staging or production
    - EXTRAGRID_DEFAULT_COLUMN_WIDTH / EXTRAGRID_DEFAULT_ROW_HEIGHT: pixel sizes
    - EXTRAGRID_FROZEN_COLUMNS / EXTRAGRID_FROZEN_ROWS: frozen pane counts
    - EXTRAGRID_RATE_LIMIT: slowapi limit string applied to every grid endpoint
    """

    model_config = SettingsConfigDict(
        env_prefix="EXTRAGRID_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    port: int = 8002
    environment: str = "development"
    log_level: str = "INFO"
    rate_limit: str = "120/minute"

    # Sheet geometry
    default_column_width: float = 100.0
    default_row_height: float = 30.0
    frozen_columns: int = 0
    frozen_rows: int = 0

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of: {allowed}")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known value, normalising to upper case."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of: {allowed}")
        return v_upper

    @field_validator("default_column_width", "default_row_height")
    @classmethod
    def validate_size(cls, v: float) -> float:
        if not v > 0:
            raise ValueError("default sizes must be greater than 0")
        return v

    @model_validator(mode="after")
    def validate_frozen_panes(self) -> "Settings":
        """Frozen pane counts cannot be negative."""
        errors = []
        if self.frozen_columns < 0:
            errors.append("FROZEN_COLUMNS must be 0 or more")
        if self.frozen_rows < 0:
            errors.append("FROZEN_ROWS must be 0 or more")
        if errors:
            raise ValueError("Configuration errors:\n  - " + "\n  - ".join(errors))
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the application.
    """
    return Settings()
