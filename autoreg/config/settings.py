from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get default database URL, using an absolute path for SQLite to avoid path resolution issues."""
    db_path = Path(__file__).parent.parent.parent / "autoreg.db"
    abs_path = db_path.resolve()
    db_url = f"sqlite:///{abs_path}"
    logger.debug(f"Using default database path: {db_url}")
    return db_url


class Settings(BaseSettings):
    log_level: str = Field(default="INFO")
    log_file: str | None = Field(default=None)
    log_rotation: str = Field(default="10 MB", description="Size or interval at which the log file rolls over")
    log_retention: str = Field(default="14 days", description="How long rolled log files are kept")
    log_json: bool = Field(default=False, description="Write the log file as JSON lines")
    database_url: str = Field(default_factory=get_database_url)
    storage_backend: Literal["sql", "memory"] = Field(
        default="sql",
        description="Key-value backend used to persist training state",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="AUTOREG_",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value


settings = Settings()
