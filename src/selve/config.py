"""
Runtime configuration for the selve command.

Values are resolved in this order, later sources winning:
    1. SelveConfig defaults
    2. A YAML file (`selve.yaml` in the working directory, or an explicit path)
    3. SELVE_* environment variables
    4. Command line flags (applied by cli.py)

Example selve.yaml:

    prompt: "selve> "
    show_ast: false
    ast_format: json
    max_call_depth: 200
    log_level: INFO
"""

from __future__ import annotations

import logging
import os
import warnings
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from selve.errors import ConfigError
from selve.interpreter import DEFAULT_MAX_CALL_DEPTH

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "selve.yaml"
ENV_PREFIX = "SELVE_"
AST_FORMATS = ("yaml", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class SelveConfig:
    """
    Settings for running programs and the REPL.

    Properties:
        prompt: REPL prompt
        show_ast: Print each parsed program before evaluating it
        ast_format: "yaml" or "json", used for AST dumps
        max_call_depth: Nested function calls allowed before evaluation fails
        log_level: Name of the logging level for the root handler
    """

    prompt: str = "> "
    show_ast: bool = False
    ast_format: str = "yaml"
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH
    log_level: str = "WARNING"


def _to_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"Invalid boolean for {key}: {value!r}")


def _to_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"Invalid integer for {key}: {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid integer for {key}: {value!r}") from None
    if number < 1:
        raise ConfigError(f"{key} must be at least 1, got {number}")
    return number


def _coerce(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate raw values and convert them to the field types."""
    result: Dict[str, Any] = {}
    for key, value in values.items():
        if key == "prompt":
            result[key] = str(value)
        elif key == "show_ast":
            result[key] = _to_bool(key, value)
        elif key == "max_call_depth":
            result[key] = _to_int(key, value)
        elif key == "ast_format":
            fmt = str(value).lower()
            if fmt not in AST_FORMATS:
                raise ConfigError(f"Invalid ast_format {value!r}, expected one of {AST_FORMATS}")
            result[key] = fmt
        elif key == "log_level":
            level = str(value).upper()
            if level not in LOG_LEVELS:
                raise ConfigError(f"Invalid log_level {value!r}, expected one of {LOG_LEVELS}")
            result[key] = level
    return result


def _read_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse config file {path}: {e}") from None

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    known = {f.name for f in fields(SelveConfig)}
    for key in data:
        if key not in known:
            warnings.warn(f"Unknown config key {key!r} in {path}", UserWarning)
    return {k: v for k, v in data.items() if k in known}


def _read_environ(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for f in fields(SelveConfig):
        name = ENV_PREFIX + f.name.upper()
        if name in environ:
            values[f.name] = environ[name]
    return values


def load_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SelveConfig:
    """
    Resolve configuration from defaults, a YAML file and the environment.

    Args:
        path: Explicit config file. It must exist. When None, `selve.yaml`
            in the working directory is used if present.
        environ: Environment mapping (defaults to os.environ)

    Returns:
        SelveConfig

    Raises:
        ConfigError: If the file is missing, malformed or holds invalid values
    """
    config = SelveConfig()

    if path is not None:
        file_path = Path(path)
        if not file_path.is_file():
            raise ConfigError(f"Config file not found: {path}")
    else:
        file_path = Path(DEFAULT_CONFIG_FILE)

    if file_path.is_file():
        logger.debug("Loading config from %s", file_path)
        config = replace(config, **_coerce(_read_file(file_path)))

    env_values = _read_environ(os.environ if environ is None else environ)
    if env_values:
        config = replace(config, **_coerce(env_values))

    return config


def apply_overrides(config: SelveConfig, **overrides: Any) -> SelveConfig:
    """Return a copy of `config` with every non-None override applied."""
    values = {k: v for k, v in overrides.items() if v is not None}
    return replace(config, **_coerce(values)) if values else config


__all__ = ["SelveConfig", "load_config", "apply_overrides", "ConfigError"]
