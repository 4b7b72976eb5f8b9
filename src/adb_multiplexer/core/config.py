"""
Configuration management for adb-multiplexer.

Uses Pydantic Settings for environment variable validation and type safety.
Every setting can be provided as ADB_MULTIPLEXER_<NAME> or in a .env file;
command-line flags override the loaded values.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MultiplexerConfig(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ADB_MULTIPLEXER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    adb_path: str = Field(
        default="adb",
        description="Path to the adb executable"
    )
    poll_interval: float = Field(
        default=1.0,
        gt=0.0,
        description="Seconds between two device samples in continuous mode"
    )
    command_timeout: float = Field(
        default=300.0,
        gt=0.0,
        description="Timeout for a single command on a single device (seconds)"
    )
    list_timeout: float = Field(
        default=10.0,
        gt=0.0,
        description="Timeout for listing the attached devices (seconds)"
    )
    color: bool = Field(
        default=True,
        description="Colorize terminal output"
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v


# Global config instance
_config: Optional[MultiplexerConfig] = None


def get_config() -> MultiplexerConfig:
    """
    Get the global configuration instance.

    Lazily loads configuration on first access.

    Returns:
        MultiplexerConfig: The global configuration instance
    """
    global _config
    if _config is None:
        _config = MultiplexerConfig()
    return _config


def reload_config() -> MultiplexerConfig:
    """
    Reload configuration from environment variables.

    Useful for testing or when environment changes.

    Returns:
        MultiplexerConfig: The reloaded configuration instance
    """
    global _config
    _config = None
    return get_config()
