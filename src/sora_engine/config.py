"""Configuration management for the classification engine."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
import tomllib


class LoggingConfig(BaseModel):
    """Logging configuration settings."""

    # Logging severity threshold (INFO/DEBUG/etc.).
    level: str = Field(default="INFO", description="Logging level")
    # Emit JSON if True; otherwise emit a human-readable format.
    json: bool = Field(default=True, description="Emit JSON logs")
    # Optional file path for log output; if None, logs go to stderr.
    log_file: str | None = Field(default=None, description="Optional log file path")
    max_bytes: int = Field(default=1_000_000, description="Max log file size before rotation")
    backup_count: int = Field(default=3, description="Number of rotated log files to keep")


class CacheConfig(BaseModel):
    """Memoization of per-site results."""

    enabled: bool = Field(default=True, description="Memoize site results by content hash")
    max_entries: int = Field(default=256, ge=1, description="Maximum cached site results")


class EngineSettings(BaseSettings):
    """Configuration settings loaded from env or optional TOML."""

    # Environment keys use the SORA_ prefix and "__" nesting, e.g. SORA_CACHE__MAX_ENTRIES.
    model_config = SettingsConfigDict(env_prefix="SORA_", env_nested_delimiter="__", extra="ignore")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    @classmethod
    def from_toml(cls, path: str | Path) -> "EngineSettings":
        data = tomllib.loads(Path(path).read_text())
        return cls.model_validate(data)
