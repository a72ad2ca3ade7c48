"""
Configuration management for the PreopFlow application.

This module provides centralized configuration using Pydantic Settings
for environment-based configuration management.
"""

import json
import os
from pathlib import Path
from typing import Annotated, Dict, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ..domain.catalog import DEFAULT_STATION_COUNTS
from ..domain.enums.circuit import CircuitStep


def _parse_list(v):
    """Accept a list, a JSON list string or a comma-separated string."""
    if isinstance(v, str):
        if v.startswith("[") and v.endswith("]"):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [v.strip()]
        return [item.strip() for item in v.split(",") if item.strip()]
    return v


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    backend: str = Field(default="memory", description="Storage backend (memory or mongo)")
    uri: str = Field(default="", description="MongoDB connection URI (replica set)")
    db_name: str = Field(default="preopflow", description="MongoDB database name")

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        valid_backends = ["memory", "mongo"]
        if v.lower() not in valid_backends:
            raise ValueError(f"Database backend must be one of: {valid_backends}")
        return v.lower()

    @model_validator(mode="after")
    def validate_mongo_uri(self) -> "DatabaseSettings":
        """MongoDB URI is required and validated only for the mongo backend."""
        if self.backend != "mongo":
            return self
        if not self.uri:
            raise ValueError(
                "MongoDB URI is required. Please set DATABASE_URI environment variable."
            )
        if not self.uri.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("MongoDB URI must start with 'mongodb://' or 'mongodb+srv://'")
        return self


class CORSSettings(BaseSettings):
    """CORS configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    allowed_origins: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins",
    )
    allowed_methods: Annotated[List[str], NoDecode] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods",
    )
    allowed_headers: Annotated[List[str], NoDecode] = Field(
        default=["*"], description="Allowed HTTP headers"
    )
    allow_credentials: bool = Field(default=True, description="Allow credentials in CORS")

    @field_validator("allowed_origins", "allowed_methods", "allowed_headers", mode="before")
    @classmethod
    def parse_lists(cls, v):
        return _parse_list(v)


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class CircuitSettings(BaseSettings):
    """Call selection and circuit behaviour."""

    model_config = SettingsConfigDict(env_prefix="CIRCUIT_")

    call_timeout_seconds: int = Field(
        default=180, description="Seconds a call may stay 'called' before it expires"
    )
    priority_burst_limit: int = Field(
        default=3, description="Consecutive priority calls before a normal patient is called"
    )
    double_capacity_steps: Annotated[List[str], NoDecode] = Field(
        default=[CircuitStep.EXAMES_LAB_ECG.value, CircuitStep.AGENDAMENTO.value],
        description="Steps whose stations serve two patients at once",
    )
    announcement_limit: int = Field(default=5, description="Active announcements shown")
    bottleneck_threshold_minutes: int = Field(
        default=30, description="Average service minutes above which a step is a bottleneck"
    )
    expiry_sweeper_enabled: bool = Field(
        default=True, description="Run the background call expiry sweeper in the API process"
    )
    expiry_sweeper_interval_seconds: int = Field(
        default=15, description="Interval in seconds between sweeper runs"
    )
    default_pending_scheduling_reason: str = Field(
        default="Data da cirurgia não definida",
        description="Reason recorded when scheduling ends without a surgery date",
    )
    seed_default_stations: bool = Field(
        default=True, description="Create the default stations when the store has none"
    )
    default_station_counts: Dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_STATION_COUNTS),
        description="Stations per step created by seeding",
    )

    @field_validator("double_capacity_steps", mode="before")
    @classmethod
    def parse_double_capacity_steps(cls, v):
        return _parse_list(v)

    @field_validator("double_capacity_steps")
    @classmethod
    def validate_steps(cls, v: List[str]) -> List[str]:
        valid = {step.value for step in CircuitStep}
        unknown = [step for step in v if step not in valid]
        if unknown:
            raise ValueError(f"Unknown circuit steps: {unknown}")
        return v

    @field_validator("default_station_counts")
    @classmethod
    def validate_station_counts(cls, v: Dict[str, int]) -> Dict[str, int]:
        valid = {step.value for step in CircuitStep}
        for step, count in v.items():
            if step not in valid:
                raise ValueError(f"Unknown circuit step: {step}")
            if count < 0:
                raise ValueError("Station counts cannot be negative")
        return v

    @field_validator(
        "call_timeout_seconds",
        "priority_burst_limit",
        "announcement_limit",
        "expiry_sweeper_interval_seconds",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Value must be positive")
        return v


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="PreopFlow", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")
    port: int = Field(default=8000, description="Application port")
    host: str = Field(default="0.0.0.0", description="Application host")

    # Sub-settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    circuit: CircuitSettings = Field(default_factory=CircuitSettings)

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate application environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number."""
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_testing(self) -> bool:
        return self.app_env == "testing"


# Global settings instance (loaded after attempting to read .env)
_settings: Optional[Settings] = None


def _load_env_file_if_available() -> None:
    """Load the nearest .env found in the current directory or its parents.

    Helps when the working directory is not the project root and pydantic's
    env_file does not resolve.
    """
    from dotenv import load_dotenv

    cwd = Path(os.getcwd()).resolve()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / ".env"
        if candidate.exists():
            # Do not override already-set environment variables
            load_dotenv(dotenv_path=str(candidate), override=False)
            break


def get_settings() -> Settings:
    """Get application settings instance (lazy-init with .env discovery)."""
    global _settings
    if _settings is None:
        _load_env_file_if_available()
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
