"""
Configuration management for ATS Tracker.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent
LOGS_DIR = ROOT_DIR / "logs"


class DatabaseSettings(BaseSettings):
    """MongoDB database configuration."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    host: str = "localhost"
    port: int = 27017
    name: str = "ats_tracker"
    username: str | None = None
    password: str | None = None
    server_selection_timeout_ms: int = 5000


class ScreeningSettings(BaseSettings):
    """Auto-screening and skill matching configuration."""

    model_config = SettingsConfigDict(env_prefix="SCREENING_")

    # Minimum similarity for a candidate skill to satisfy a required skill
    skill_match_threshold: float = Field(default=0.70, ge=0.0, le=1.0)

    # Days without activity before an open application is flagged as stale
    stale_after_days: int = Field(default=7, ge=1)

    # Composite score weights (percent)
    skills_weight: float = Field(default=40.0, ge=0.0)
    experience_weight: float = Field(default=30.0, ge=0.0)
    resume_quality_weight: float = Field(default=20.0, ge=0.0)
    completeness_weight: float = Field(default=10.0, ge=0.0)

    @model_validator(mode="after")
    def validate_weights(self) -> "ScreeningSettings":
        """At least one component must carry weight."""
        total = (
            self.skills_weight
            + self.experience_weight
            + self.resume_quality_weight
            + self.completeness_weight
        )
        if total <= 0:
            raise ValueError("Screening weights must not all be zero")
        return self

    @property
    def weights(self) -> dict[str, float]:
        """Component weights keyed by component name."""
        return {
            "skills": self.skills_weight,
            "experience": self.experience_weight,
            "resume_quality": self.resume_quality_weight,
            "completeness": self.completeness_weight,
        }


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_path: Path = LOGS_DIR / "ats_tracker.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    audit_file_name: str = "audit.log"
    audit_retention: str = "1 year"
    console_output: bool = True
    file_output: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Accept lowercase level names from the environment."""
        if isinstance(v, str):
            return v.upper()
        return v


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "ATS-Tracker"
    version: str = "0.1.0"
    description: str = "Application tracking and auto-screening engine"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    screening: ScreeningSettings = Field(default_factory=ScreeningSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings


# Convenience exports
settings = get_settings()
