"""Run settings and TOML configuration file support for popstar."""

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import PopstarError
from .output import OutputFormat
from .prs import SamplingReference

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 1000
DEFAULT_BINS = 100
DEFAULT_SEED = 314159265
DEFAULT_FORMAT = OutputFormat.COMPLETE
DEFAULT_REFERENCE = SamplingReference.EXTERNAL

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigValidationError(PopstarError):
    """Raised when configuration validation fails."""

    pass


@dataclass
class RunConfig:
    """Everything needed to score models and their null iterations."""

    dosages_path: Path
    models_path: Path
    output_format: OutputFormat = DEFAULT_FORMAT
    reference: SamplingReference = DEFAULT_REFERENCE
    iterations: int = DEFAULT_ITERATIONS
    n_bins: int = DEFAULT_BINS
    seed: int = DEFAULT_SEED


@dataclass
class FileSettings:
    """Settings read from the ``[popstar]`` table of a TOML file."""

    output_format: OutputFormat = DEFAULT_FORMAT
    reference: SamplingReference = DEFAULT_REFERENCE
    iterations: int = DEFAULT_ITERATIONS
    n_bins: int = DEFAULT_BINS
    seed: int = DEFAULT_SEED
    log_level: str | None = None


def _require_int(config_dict: dict[str, Any], key: str, minimum: int) -> None:
    if key not in config_dict:
        return
    value = config_dict[key]
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigValidationError(f"{key} must be an integer, got {type(value).__name__}")
    if value < minimum:
        raise ConfigValidationError(f"{key} must be at least {minimum}, got {value}")


def _require_choice(config_dict: dict[str, Any], key: str, choices: type) -> None:
    if key not in config_dict:
        return
    valid = {member.value for member in choices}
    value = config_dict[key]
    if not isinstance(value, str) or value.lower() not in valid:
        raise ConfigValidationError(f"{key} must be one of {sorted(valid)}, got '{value}'")


def validate_config(config_dict: dict[str, Any]) -> None:
    """Validate configuration values.

    Raises:
        ConfigValidationError: If any configuration value is invalid.
    """
    _require_int(config_dict, "iterations", 0)
    _require_int(config_dict, "bins", 1)
    _require_int(config_dict, "seed", 0)
    _require_choice(config_dict, "format", OutputFormat)
    _require_choice(config_dict, "reference", SamplingReference)

    if "log_level" in config_dict:
        log_level = config_dict["log_level"]
        if not isinstance(log_level, str):
            raise ConfigValidationError(
                f"log_level must be a string, got {type(log_level).__name__}"
            )
        if log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigValidationError(
                f"log_level must be one of {VALID_LOG_LEVELS}, got '{log_level}'"
            )


def load_config(config_path: Path, overrides: dict[str, Any] | None = None) -> FileSettings:
    """Load run settings from a TOML file.

    Args:
        config_path: Path to the TOML configuration file.
        overrides: Optional dict of values to override loaded config.

    Returns:
        FileSettings instance with loaded values.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigValidationError: If any configuration value is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "rb") as f:
        try:
            toml_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigValidationError(f"Invalid TOML in {config_path}: {e}") from e

    config_dict = dict(toml_data.get("popstar", {}))

    if overrides:
        config_dict.update(overrides)

    validate_config(config_dict)

    unknown = set(config_dict) - {"iterations", "bins", "seed", "format", "reference", "log_level"}
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))

    settings = FileSettings(
        iterations=config_dict.get("iterations", DEFAULT_ITERATIONS),
        n_bins=config_dict.get("bins", DEFAULT_BINS),
        seed=config_dict.get("seed", DEFAULT_SEED),
        log_level=config_dict.get("log_level"),
    )
    if "format" in config_dict:
        settings.output_format = OutputFormat(config_dict["format"].lower())
    if "reference" in config_dict:
        settings.reference = SamplingReference(config_dict["reference"].lower())

    return settings
