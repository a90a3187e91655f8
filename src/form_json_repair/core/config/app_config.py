from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator

from form_json_repair.core.common.exceptions import ConfigurationError
from form_json_repair.core.interfaces.model_bases import DomainModel
from form_json_repair.core.services.diagnostic_composer import SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)

ENV_PREFIX = "FORM_JSON_REPAIR_"

# Same cap the console applies to a single textarea submission
DEFAULT_MAX_FIELD_BYTES = 64 * 1024


def _env_to_int(name: str, default: int, env: Mapping[str, str]) -> int:
    """Return an environment variable parsed as an integer."""
    value = env.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            message=f"{name} must be an integer, got {value!r}",
            details={"variable": name},
        ) from e


def _get_env_value(
    env: Mapping[str, str],
    name: str,
    default: Any,
    *,
    transform: Callable[[str], Any] | None = None,
) -> Any:
    if name in env:
        raw_value = env[name]
        return transform(raw_value) if transform is not None else raw_value
    return default


class LogLevel(str, Enum):
    """Log levels for configuration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(DomainModel):
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    log_file: str | None = None

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class JsonFieldConfig(DomainModel):
    """A form field whose value is operator-typed JSON."""

    label: str
    labels: dict[str, str] = Field(default_factory=dict)

    def label_for(self, language: str | None) -> str:
        if language and language in self.labels:
            return self.labels[language]
        return self.label


def _default_json_fields() -> dict[str, JsonFieldConfig]:
    return {
        "translations": JsonFieldConfig(
            label="Translations", labels={"ar": "الترجمات"}
        ),
        "packaging_options": JsonFieldConfig(
            label="Packaging options", labels={"ar": "خيارات التعبئة"}
        ),
    }


class RepairConfig(DomainModel):
    """Settings for the repair engine and the form payload gate."""

    max_field_bytes: int = DEFAULT_MAX_FIELD_BYTES
    language: str = "en"
    json_fields: dict[str, JsonFieldConfig] = Field(
        default_factory=_default_json_fields
    )

    @field_validator("max_field_bytes")
    @classmethod
    def validate_max_field_bytes(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_field_bytes must be positive")
        return v

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        if v not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"language must be one of {', '.join(SUPPORTED_LANGUAGES)}"
            )
        return v


class AppConfig(DomainModel):
    """Top-level application configuration."""

    host: str = "127.0.0.1"
    port: int = 8010
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    repair: RepairConfig = Field(default_factory=RepairConfig)

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("port must be between 1 and 65535")
        return v

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Build a configuration from defaults and environment variables only."""
        return load_config(None, environ=environ)


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_overrides(env: Mapping[str, str], current: AppConfig) -> dict[str, Any]:
    """Collect FORM_JSON_REPAIR_* overrides into the nested config layout."""
    sections: dict[str, dict[str, Any]] = {"logging": {}, "repair": {}}
    overrides: dict[str, Any] = {}

    for key, name, section in (
        ("host", "HOST", None),
        ("level", "LOG_LEVEL", "logging"),
        ("log_file", "LOG_FILE", "logging"),
        ("language", "LANGUAGE", "repair"),
    ):
        value = _get_env_value(env, ENV_PREFIX + name, None)
        if value is None:
            continue
        if section is None:
            overrides[key] = value
        else:
            sections[section][key] = value

    if ENV_PREFIX + "PORT" in env:
        overrides["port"] = _env_to_int(ENV_PREFIX + "PORT", current.port, env)
    if ENV_PREFIX + "MAX_FIELD_BYTES" in env:
        sections["repair"]["max_field_bytes"] = _env_to_int(
            ENV_PREFIX + "MAX_FIELD_BYTES", current.repair.max_field_bytes, env
        )

    overrides.update({name: values for name, values in sections.items() if values})
    return overrides


def load_config(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """
    Load configuration from an optional YAML file and the environment.

    Environment variables take precedence over the file, which takes
    precedence over defaults.

    Args:
        config_path: Optional path to a .yaml/.yml configuration file
        environ: Environment mapping, defaults to os.environ

    Returns:
        AppConfig instance

    Raises:
        ConfigurationError: If the file cannot be read or a value is invalid
    """
    env = os.environ if environ is None else environ
    config_data: dict[str, Any] = AppConfig().model_dump()

    if config_path:
        path = Path(config_path)
        if not path.exists():
            logger.warning("Configuration file not found: %s", config_path)
        else:
            if path.suffix.lower() not in (".yaml", ".yml"):
                raise ConfigurationError(
                    message=f"Unsupported configuration file format: {path.suffix}. Use YAML (.yaml/.yml).",
                    details={"path": str(path)},
                )
            try:
                with open(path, encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    message=f"Could not parse configuration file {path}: {e}",
                    details={"path": str(path)},
                ) from e
            if not isinstance(file_config, dict):
                raise ConfigurationError(
                    message="Configuration file must contain a mapping at the top level",
                    details={"path": str(path)},
                )
            config_data = _deep_merge(config_data, file_config)
            repair_section = file_config.get("repair")
            if isinstance(repair_section, dict) and "json_fields" in repair_section:
                # A configured field list replaces the defaults instead of extending them
                config_data["repair"]["json_fields"] = repair_section["json_fields"]

    try:
        file_level = AppConfig.model_validate(config_data)
        return AppConfig.model_validate(
            _deep_merge(config_data, _env_overrides(env, file_level))
        )
    except ValidationError as e:
        raise ConfigurationError(
            message=f"Invalid configuration: {e}",
            details={
                "errors": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                    for err in e.errors()
                ]
            },
        ) from e
