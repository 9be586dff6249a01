"""PHOTOINGEST_* environment variables, read with pydantic-settings.

These carry machine-specific values. They rank below config.yaml and the
command line:

    PHOTOINGEST_EXIFTOOL           exiftool binary (default "exiftool")
    PHOTOINGEST_DNG_CONVERTER      converter executable (default: auto-detect)
    PHOTOINGEST_CONVERTER_TIMEOUT  seconds per conversion (default 600)
    PHOTOINGEST_LOG_LEVEL          console log level (default INFO)
    PHOTOINGEST_LOG_FILE           extra DEBUG log file
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from photoingest.derive import DEFAULT_CONVERTER_TIMEOUT

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class PhotoIngestEnvSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PHOTOINGEST_", extra="ignore")

    exiftool: str = "exiftool"
    dng_converter: str = Field(default="", description="Empty means search the default locations")
    converter_timeout: float = Field(default=DEFAULT_CONVERTER_TIMEOUT, gt=0)
    log_level: str = "INFO"
    log_file: str = ""

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}, got '{value}'")
        return level


@lru_cache(maxsize=1)
def get_env_settings() -> PhotoIngestEnvSettings:
    """Settings for this process, read once."""
    return PhotoIngestEnvSettings()


def clear_env_settings_cache() -> None:
    """Forget the cached settings so the environment is read again."""
    get_env_settings.cache_clear()
