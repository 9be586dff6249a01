"""
Run configuration: the immutable ImportRun and how it is assembled.

Setting Sources and Precedence
==============================
1. Command-line options (IngestOptions; None means "not given")
2. config.yaml (--config, default: platformdirs user config dir)
3. PHOTOINGEST_* environment variables (tool locations, log settings)
4. Built-in defaults

Preconditions on directories and tools are checked separately by
validate_preconditions(), before anything is read or written.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from photoingest.derive import DEFAULT_CONVERTER_TIMEOUT, DEFAULT_DNG_OPTIONS, locate_dng_converter
from photoingest.env_settings import PhotoIngestEnvSettings, get_env_settings
from photoingest.exceptions import ConfigurationError, PreconditionError
from photoingest.filters import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_INCLUDE_PATTERNS,
    InclusionFilter,
)
from photoingest.history import history_path
from photoingest.naming import DEFAULT_FILE_PATTERN, template_problem
from photoingest.paths import default_config_file
from photoingest.resolver import ScanStrategy
from photoingest.schemas.config import ConfigSchema
from photoingest.utils.cmd import which

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportRun:
    """Configuration snapshot for one invocation. Never mutated during a run."""

    source: Path
    destinations: tuple[Path, ...]
    file_pattern: str = DEFAULT_FILE_PATTERN
    include: tuple[str, ...] = DEFAULT_INCLUDE_PATTERNS
    exclude: tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS
    convert_dng: bool = False
    keep_raw: bool = False
    extract_jpg: bool = True
    verify: bool = True
    overwrite: bool = False
    incremental: bool = False
    dng_converter: str | None = None
    dng_options: str = DEFAULT_DNG_OPTIONS
    converter_timeout: float = DEFAULT_CONVERTER_TIMEOUT
    exiftool: str = "exiftool"
    trash_dir: Path | None = None
    verbose: bool = False
    dry_run: bool = False
    scan_strategy: ScanStrategy = ScanStrategy.SHORT_CIRCUIT

    @property
    def primary(self) -> Path:
        """Destination used as the source for derived artifacts."""
        return self.destinations[0]

    @property
    def replicas(self) -> tuple[Path, ...]:
        return self.destinations[1:]

    @property
    def history_file(self) -> Path:
        return history_path(self.source)

    def inclusion_filter(self) -> InclusionFilter:
        return InclusionFilter.from_patterns(self.include, self.exclude)


@dataclass
class IngestOptions:
    """Values given on the command line. None means "use config/defaults"."""

    source: Path
    destinations: list[Path]
    config_file: Path | None = None
    file_pattern: str | None = None
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    dng: bool | None = None
    dng_converter: str | None = None
    dng_options: str | None = None
    dng_keep_raw: bool | None = None
    jpg_extract: bool | None = None
    incremental: bool | None = None
    overwrite: bool | None = None
    verify: bool | None = None
    trash_dir: Path | None = None
    converter_timeout: float | None = None
    log_file: Path | None = None
    dry_run: bool = False
    verbose: bool = False


# =============================================================================
# Config file
# =============================================================================


def load_config_file(path: Path | None = None) -> ConfigSchema:
    """
    Load and validate config.yaml.

    Args:
        path: Explicit config file; None uses the default location

    Returns:
        Validated config (all defaults when the default file does not exist)

    Raises:
        ConfigurationError: If an explicit file is missing, or any file is
            unreadable, not YAML, or fails validation
    """
    explicit = path is not None
    config_path = path if path is not None else default_config_file()

    if not config_path.exists():
        if explicit:
            raise ConfigurationError(
                f"Config file not found: {config_path}", config_file=config_path
            )
        logger.debug("No config file at %s, using defaults", config_path)
        return ConfigSchema()

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(
            f"Unable to read {config_path}: {e}", config_file=config_path
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}", config_file=config_path) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"{config_path} must contain a mapping at the top level", config_file=config_path
        )

    try:
        config = ConfigSchema.model_validate(raw)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field_name = ".".join(str(part) for part in first["loc"])
        raise ConfigurationError(
            f"Invalid config {config_path}: {field_name}: {first['msg']}",
            config_file=config_path,
            field=field_name,
        ) from e

    logger.debug("Loaded config from %s", config_path)
    return config


# =============================================================================
# ImportRun assembly
# =============================================================================


def _pick(*values: object) -> object:
    """First value that is not None."""
    return next(v for v in values if v is not None)


def _absolute(path: Path) -> Path:
    return Path(os.path.abspath(path.expanduser()))


def _check_patterns(patterns: tuple[str, ...], option: str) -> None:
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ConfigurationError(
                f"Invalid regular expression for {option} '{pattern}': {e}", field=option
            ) from e


def build_import_run(
    options: IngestOptions,
    file_config: ConfigSchema | None = None,
    env: PhotoIngestEnvSettings | None = None,
) -> ImportRun:
    """
    Merge command-line options, config file and environment into an ImportRun.

    Raises:
        ConfigurationError: If a merged value is invalid
    """
    cfg = file_config or ConfigSchema()
    env = env or get_env_settings()

    include = tuple(options.include or cfg.include) or DEFAULT_INCLUDE_PATTERNS
    exclude = tuple(options.exclude or cfg.exclude) or DEFAULT_EXCLUDE_PATTERNS
    _check_patterns(include, "--include")
    _check_patterns(exclude, "--exclude")

    file_pattern = str(_pick(options.file_pattern, cfg.file_pattern))
    problem = template_problem(file_pattern)
    if problem:
        raise ConfigurationError(
            f"--file-pattern {problem}: '{file_pattern}'", field="file_pattern"
        )

    convert_dng = bool(_pick(options.dng, cfg.dng.enabled))
    dng_options = str(_pick(options.dng_options, cfg.dng.options))
    if convert_dng and not dng_options.strip():
        raise ConfigurationError("No DNG options provided in --dng-options", field="dng_options")

    trash_dir = options.trash_dir or (Path(cfg.trash_dir) if cfg.trash_dir else None)

    return ImportRun(
        source=_absolute(options.source),
        destinations=tuple(_absolute(d) for d in options.destinations),
        file_pattern=file_pattern,
        include=include,
        exclude=exclude,
        convert_dng=convert_dng,
        keep_raw=bool(_pick(options.dng_keep_raw, cfg.dng.keep_raw)),
        extract_jpg=bool(_pick(options.jpg_extract, cfg.jpg_extract)),
        verify=bool(_pick(options.verify, cfg.verify)),
        overwrite=bool(_pick(options.overwrite, cfg.overwrite)),
        incremental=bool(_pick(options.incremental, cfg.incremental)),
        dng_converter=options.dng_converter or cfg.dng.converter or env.dng_converter or None,
        dng_options=dng_options,
        converter_timeout=float(
            _pick(options.converter_timeout, cfg.dng.timeout_seconds, env.converter_timeout)
        ),
        exiftool=cfg.exiftool or env.exiftool,
        trash_dir=_absolute(trash_dir) if trash_dir else None,
        verbose=options.verbose,
        dry_run=options.dry_run,
    )


# =============================================================================
# Preconditions
# =============================================================================


def validate_preconditions(run: ImportRun) -> ImportRun:
    """
    Check directories and tools before processing starts.

    Returns:
        The run with ``dng_converter`` resolved to an executable path when
        conversion is enabled

    Raises:
        PreconditionError: On the first failed check
    """
    source = run.source
    if not source.exists():
        raise PreconditionError(f"Source directory {source} does not exist", path=source)
    if not source.is_dir():
        raise PreconditionError(f"Source {source} is not a directory", path=source)
    if not os.access(source, os.R_OK | os.X_OK):
        raise PreconditionError(f"Unable to read from {source}", path=source)

    if not run.destinations:
        raise PreconditionError("Destination directories not specified")
    for dest in run.destinations:
        if not dest.exists():
            raise PreconditionError(f"Destination directory {dest} does not exist", path=dest)
        if not dest.is_dir():
            raise PreconditionError(f"Destination {dest} is not a directory", path=dest)
        if not os.access(dest, os.W_OK | os.X_OK):
            raise PreconditionError(f"Unable to write to {dest}", path=dest)
        if dest == source:
            raise PreconditionError(
                f"Destination {dest} is the source directory", path=dest
            )

    if run.extract_jpg and which(run.exiftool) is None:
        raise PreconditionError(
            f"exiftool ('{run.exiftool}') is required for --jpg-extract but was not found. "
            "Install it or pass --no-jpg-extract"
        )

    if run.convert_dng:
        converter = locate_dng_converter(run.dng_converter)
        logger.debug("Using DNG converter %s", converter)
        run = dataclasses.replace(run, dng_converter=converter)

    return run
