"""Configuration loading.

Layers, lowest to highest precedence:
1. Built-in defaults
2. Global YAML (~/.config/movediff/config.yaml)
3. Explicit YAML passed to load_config()
4. Environment variables (MOVEDIFF__SECTION__KEY)
5. Direct kwargs

Each layer is reduced to a plain dict of the values it actually sets, the
dicts are merged section by section, and the result is validated once.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from movediff.config.models import (
    DiffConfig,
    FormatConfig,
    LoggingConfig,
    MoveDiffConfig,
)
from movediff.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/movediff/config.yaml").expanduser()


class _EnvSettings(BaseSettings):
    """Environment layer only: MOVEDIFF__DIFF__CONTEXT_LINES=5 and friends."""

    model_config = SettingsConfigDict(
        env_prefix="MOVEDIFF__",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    diff: DiffConfig = Field(default_factory=DiffConfig)
    format: FormatConfig = Field(default_factory=FormatConfig)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _invalid(e: ValidationError) -> ConfigError:
    err = e.errors()[0]
    field = ".".join(str(loc) for loc in err["loc"])
    return ConfigError.invalid_value(field, err.get("input"), err["msg"])


def _env_layer() -> dict[str, Any]:
    try:
        return _EnvSettings().model_dump(exclude_unset=True)
    except ValidationError as e:
        raise _invalid(e) from e


def load_config(config_path: Path | None = None, **kwargs: Any) -> MoveDiffConfig:
    """Load config: defaults < global yaml < explicit yaml < env vars < kwargs.

    Args:
        config_path: Optional YAML file layered over the global config.
                     Must exist when given.
        **kwargs: Override values (highest precedence).

    Raises:
        ConfigError: On a missing explicit file, invalid YAML syntax,
            or validation errors.
    """
    layers = [_load_yaml(GLOBAL_CONFIG_PATH)]
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError.file_not_found(str(config_path))
        layers.append(_load_yaml(config_path))
    layers.append(_env_layer())
    layers.append(kwargs)

    merged: dict[str, Any] = {}
    for layer in layers:
        merged = _deep_merge(merged, layer)
    try:
        return MoveDiffConfig.model_validate(merged)
    except ValidationError as e:
        raise _invalid(e) from e
