"""
Runtime configuration.

Defaults suit a single-user desktop install under ``~/.zonetrack``. Every
field can be overridden through a ``ZONETRACK_*`` environment variable.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path.home() / ".zonetrack"
DB_FILENAME = "fitness.db"


class AppConfig(BaseSettings):
    """ZoneTrack settings."""

    data_dir: Path = Field(default=DEFAULT_DATA_DIR, description="Directory for the activity store")
    db_path: Optional[Path] = Field(default=None, description="Database file; defaults to <data_dir>/fitness.db")
    geocode_enabled: bool = Field(default=True, description="Reverse geocode the start position")
    import_workers: int = Field(default=1, description="Files decoded concurrently during import")
    stop_on_error: bool = Field(default=False, description="Skip remaining files after a failure")
    log_level: str = Field(default="INFO", description="Root logging level")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    model_config = SettingsConfigDict(
        env_prefix="ZONETRACK_",
        env_ignore_empty=True,
        extra="ignore",
    )

    @field_validator("import_workers")
    @classmethod
    def validate_import_workers(cls, value: int) -> int:
        return max(1, value)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = value.upper()
        if level not in valid_levels:
            raise ValueError(f"log_level must be one of {sorted(valid_levels)}")
        return level

    @model_validator(mode="after")
    def default_db_path(self) -> "AppConfig":
        if self.db_path is None:
            self.db_path = self.data_dir / DB_FILENAME
        return self

    def ensure_data_dir(self) -> None:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
