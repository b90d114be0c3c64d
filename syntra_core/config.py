"""
Configuration for the Syntra conversation pipeline.
"""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    CONSOLE = "console"


class ClassifierConfig(BaseSettings):
    """Configuration for lexical emotion classification."""

    model_config = SettingsConfigDict(env_prefix="SYNTRA_CLASSIFIER_")

    confidence_cap: float = Field(
        default=95.0,
        ge=0.0,
        le=100.0,
        description="Upper bound for heuristic confidence",
    )
    latency_s: float = Field(
        default=1.0,
        ge=0.0,
        description="Simulated classification latency per turn (seconds)",
    )


class TutorConfig(BaseSettings):
    """Configuration for feedback sessions."""

    model_config = SettingsConfigDict(env_prefix="SYNTRA_TUTOR_")

    session_window: int = Field(
        default=10,
        ge=1,
        description="Number of tutor sessions kept in the rolling window",
    )
    streak_cap: int = Field(default=7, ge=1, description="Maximum streak counter value")


class SecurityConfig(BaseSettings):
    """Configuration for the security vault."""

    model_config = SettingsConfigDict(env_prefix="SYNTRA_SECURITY_")

    audit_window: int = Field(
        default=20,
        ge=1,
        description="Number of audit entries kept in the rolling window",
    )
    key_bundle_version: str = Field(default="1.0", description="Exported key bundle version")
    kdf_iterations: int = Field(
        default=100_000,
        ge=1,
        description="PBKDF2 iterations used to derive the AES key from a key string",
    )
    redaction_mask: str = Field(
        default="*",
        min_length=1,
        max_length=1,
        description="Character used to mask redacted keywords",
    )


class HistoryConfig(BaseSettings):
    """Configuration for conversation history persistence."""

    model_config = SettingsConfigDict(env_prefix="SYNTRA_HISTORY_")

    storage_slot: str = Field(
        default="syntra_conversation_history",
        description="Named slot the entry list is persisted under",
    )
    storage_dir: Optional[str] = Field(
        default=None,
        description="Directory for file-backed storage (in-memory when unset)",
    )
    translation_latency_s: float = Field(
        default=0.0,
        ge=0.0,
        description="Simulated translation latency per turn (seconds)",
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SYNTRA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    service_name: str = Field(default="syntra", description="Service name")
    environment: str = Field(default="development", description="Deployment environment")
    log_level: str = Field(default="info", description="Log level")
    log_format: LogFormat = Field(default=LogFormat.CONSOLE, description="Log output format")

    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    tutor: TutorConfig = Field(default_factory=TutorConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()
