"""Configuration management for codekit."""

from .config import Config, ConfigData, ConfigError, ResourcePaths

__all__ = ["Config", "ConfigData", "ConfigError", "ResourcePaths"]
