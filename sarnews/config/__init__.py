"""Configuration management for the news pipeline."""

from .loader import Config, load_config, save_config
from .models import (
    ApiConfig,
    ClassifierConfig,
    ConfigModel,
    PostgresConfig,
    RefreshConfig,
    TranslationConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "PostgresConfig",
    "RefreshConfig",
    "TranslationConfig",
    "ApiConfig",
    "ClassifierConfig",
    "load_config",
    "save_config",
]
