"""
Configuration Management for sfvforge.

Settings live in a single dataclass mapped from an optional YAML file
(``sfvforge.yaml`` in the working directory) with environment variable
overrides on top.

Configuration precedence: 1. Env vars, 2. YAML file, 3. Defaults

    # sfvforge.yaml
    algorithm: sha256
    chunk_size: 131072
    log_level: ${SFV_LEVEL:INFO}
    progress: false

Environment Variables
---------------------
    SFVFORGE_ALGORITHM    default algorithm for `create`
    SFVFORGE_CHUNK_SIZE   read size in bytes
    SFVFORGE_LOG_LEVEL    DEBUG, INFO, WARNING, ERROR, CRITICAL
    SFVFORGE_LOG_FILE     also log to this file
    SFVFORGE_PROGRESS     "0"/"false" disables the progress bar

String values in the YAML file may use ${VAR_NAME} or ${VAR_NAME:default}.
"""

import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from sfvforge.core.exceptions import ConfigValidationError

CONFIG_FILENAMES = ("sfvforge.yaml", "sfvforge.yml")

DEFAULT_CHUNK_SIZE = 64 * 1024

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_ALGORITHMS = ("crc32", "md5", "sha1", "sha256")
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class SfvConfig:
    """sfvforge configuration."""

    algorithm: str = "crc32"
    chunk_size: int = DEFAULT_CHUNK_SIZE
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    progress: bool = True
    tool_name: str = "sfvforge"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.algorithm not in _ALGORITHMS:
            raise ConfigValidationError(
                f"algorithm must be one of {', '.join(_ALGORITHMS)}, got {self.algorithm!r}",
                field="algorithm",
                value=self.algorithm,
            )
        if not isinstance(self.chunk_size, int) or self.chunk_size <= 0:
            raise ConfigValidationError(
                f"chunk_size must be a positive integer, got {self.chunk_size!r}",
                field="chunk_size",
                value=self.chunk_size,
            )
        if str(self.log_level).upper() not in _LOG_LEVELS:
            raise ConfigValidationError(
                f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {self.log_level!r}",
                field="log_level",
                value=self.log_level,
            )
        self.log_level = str(self.log_level).upper()

    @property
    def log_path(self) -> Optional[Path]:
        """Log file as a Path, if configured."""
        return Path(self.log_file) if self.log_file else None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SfvConfig":
        """Build a config from a parsed YAML mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        if "progress" in kwargs:
            kwargs["progress"] = _parse_bool("progress", kwargs["progress"])
        if "chunk_size" in kwargs:
            kwargs["chunk_size"] = _parse_int("chunk_size", kwargs["chunk_size"])
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def expand_env_vars(value: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:default} in config values."""
    if isinstance(value, str):
        pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

        def replace_env_var(match: re.Match) -> str:
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replace_env_var, value)
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def _parse_bool(field: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigValidationError(
        f"{field} must be a boolean, got {value!r}", field=field, value=value
    )


def _parse_int(field: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigValidationError(
            f"{field} must be an integer, got {value!r}", field=field, value=value
        )
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(
            f"{field} must be an integer, got {value!r}", field=field, value=value
        ) from e


def _env_overrides() -> Dict[str, Any]:
    """Collect SFVFORGE_* overrides from the environment."""
    overrides: Dict[str, Any] = {}

    algorithm = os.environ.get("SFVFORGE_ALGORITHM")
    if algorithm:
        overrides["algorithm"] = algorithm

    chunk_size = os.environ.get("SFVFORGE_CHUNK_SIZE")
    if chunk_size:
        overrides["chunk_size"] = _parse_int("chunk_size", chunk_size)

    log_level = os.environ.get("SFVFORGE_LOG_LEVEL")
    if log_level:
        overrides["log_level"] = log_level

    log_file = os.environ.get("SFVFORGE_LOG_FILE")
    if log_file:
        overrides["log_file"] = log_file

    progress = os.environ.get("SFVFORGE_PROGRESS")
    if progress:
        overrides["progress"] = _parse_bool("progress", progress)

    return overrides


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigValidationError(
            f"Could not load config from {config_path}: {e}"
        ) from e

    if not isinstance(data, dict):
        raise ConfigValidationError(
            f"Config file {config_path} must contain a mapping, got {type(data).__name__}"
        )
    return expand_env_vars(data)


def load_config(
    config_path: Optional[Path] = None, base_path: Optional[Path] = None
) -> SfvConfig:
    """
    Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file. Defaults to sfvforge.yaml in base_path.
        base_path: Directory searched for the default config file.
            Defaults to the current directory.

    Returns:
        SfvConfig with all settings.

    Raises:
        ConfigValidationError: If an explicit config_path does not exist,
            the file cannot be parsed, or a value is invalid.
    """
    base_path = base_path or Path.cwd()

    if config_path is None:
        for filename in CONFIG_FILENAMES:
            candidate = base_path / filename
            if candidate.exists():
                config_path = candidate
                break

    data: Dict[str, Any] = {}
    if config_path is not None:
        if not config_path.exists():
            raise ConfigValidationError(f"Config file not found: {config_path}")
        data = _read_yaml(config_path)

    data.update(_env_overrides())
    return SfvConfig.from_dict(data)
