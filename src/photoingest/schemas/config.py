"""
Pydantic schema for config.yaml validation.

Every key is optional; command-line options override whatever is set here.

Example config.yaml:

    file_pattern: "[%yyyy]/[%MM]/img_[%yyyy][%MM][%dd]_[%FILE]"
    incremental: true
    exclude:
      - '/\\.Trashes/'
    trash_dir: ~/Pictures/.photoingest-trash
    dng:
      enabled: true
      keep_raw: false
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from photoingest.derive import DEFAULT_DNG_OPTIONS
from photoingest.naming import DEFAULT_FILE_PATTERN, template_problem


class DngSchema(BaseModel):
    """DNG conversion settings."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    converter: str | None = None
    options: str = DEFAULT_DNG_OPTIONS
    keep_raw: bool = False
    # None: PHOTOINGEST_CONVERTER_TIMEOUT or the built-in default
    timeout_seconds: float | None = Field(default=None, gt=0)


class ConfigSchema(BaseModel):
    """Top-level config.yaml structure."""

    model_config = ConfigDict(extra="forbid")

    file_pattern: str = DEFAULT_FILE_PATTERN
    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    incremental: bool = False
    overwrite: bool = False
    verify: bool = True
    jpg_extract: bool = True
    trash_dir: str | None = None
    log_file: str | None = None
    exiftool: str | None = None
    dng: DngSchema = Field(default_factory=DngSchema)

    @field_validator("file_pattern")
    @classmethod
    def validate_file_pattern(cls, v: str) -> str:
        """Ensure the filename template names a file inside a destination."""
        problem = template_problem(v)
        if problem:
            raise ValueError(f"file_pattern {problem}")
        return v

    @field_validator("include", "exclude")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        """Ensure every pattern is a valid regular expression."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid regular expression '{pattern}': {e}") from e
        return v
