# Configuration package

from form_json_repair.core.config.app_config import (
    AppConfig,
    JsonFieldConfig,
    LoggingConfig,
    LogLevel,
    RepairConfig,
    load_config,
)

__all__ = [
    "AppConfig",
    "JsonFieldConfig",
    "LogLevel",
    "LoggingConfig",
    "RepairConfig",
    "load_config",
]
