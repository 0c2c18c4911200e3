"""Layered configuration: bundled defaults, project YAML, environment, CLI."""

from .manager import ENV_PREFIX, PROJECT_CONFIG_NAME, ConfigManager

__all__ = ["ConfigManager", "ENV_PREFIX", "PROJECT_CONFIG_NAME"]
