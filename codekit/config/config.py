"""Configuration management class for codekit.

The config file is optional; every key has a default.
"""

import os
import sys
from pathlib import Path
from typing import Any, TypedDict

import yaml

from codekit.core.types import ResourcePaths
from codekit.output import MessageType, VerbosityLevel, message

# Bundled templates shipped inside the package
PACKAGE_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

TEMPLATES_DIR_ENV = "CODEKIT_TEMPLATES_DIR"
DEFAULT_FETCH_TIMEOUT = 120.0
PROJECT_DIR_NAME = ".claude"

KNOWN_KEYS = ("templates_dir", "global_dir", "project_dir", "fetch_timeout")


class ConfigData(TypedDict, total=False):
    """Type definition for the configuration file."""

    templates_dir: str
    global_dir: str
    project_dir: str
    fetch_timeout: float


class ConfigError(Exception):
    """Exception raised for configuration validation errors.

    Can contain multiple error messages.
    """

    def __init__(self, errors: str | list[str]):
        """Initialize ConfigError.

        Args:
            errors: Single error message or list of error messages
        """
        if isinstance(errors, str):
            self.errors = [errors]
        else:
            self.errors = errors
        super().__init__(self._format_errors())

    def _format_errors(self) -> str:
        """Format errors for display."""
        if len(self.errors) == 1:
            return self.errors[0]
        else:
            error_list = "\n".join(f"  - {err}" for err in self.errors)
            return f"Configuration has {len(self.errors)} errors:\n{error_list}"


class Config:
    """Manages configuration for codekit."""

    def __init__(self, config_dir: Path | None = None):
        """Initialize the Config manager.

        Args:
            config_dir: Optional custom config directory.
                       Defaults to ~/.codekit
        """
        if config_dir is None:
            config_dir = Path.home() / ".codekit"

        self.config_directory = config_dir
        self.config_file = self.config_directory / "config.yaml"
        self.sources_directory = self.config_directory / "sources"

    def ensure_directories(self) -> None:
        """Create config directories if they don't exist.

        Raises:
            SystemExit: If directories cannot be created
        """
        directories = {
            "config": self.config_directory,
            "sources": self.sources_directory,
        }

        for dir_name, dir_path in directories.items():
            try:
                dir_path.mkdir(parents=True, exist_ok=True)
                message(f"Ensured {dir_name} directory exists: {dir_path}", MessageType.DEBUG, VerbosityLevel.DEBUG)
            except PermissionError:
                message(
                    f"Permission denied creating {dir_name} directory: {dir_path}",
                    MessageType.ERROR,
                    VerbosityLevel.ALWAYS,
                )
                sys.exit(1)
            except OSError as e:
                message(f"Failed to create {dir_name} directory: {e}", MessageType.ERROR, VerbosityLevel.ALWAYS)
                sys.exit(1)

    @staticmethod
    def validate(config: dict[str, Any]) -> list[str]:
        """Validate the configuration structure.

        Collects all validation errors before raising an exception.

        Args:
            config: The configuration dictionary to validate

        Returns:
            List of warnings (non-fatal issues)

        Raises:
            ConfigError: If the configuration is invalid, with all errors
        """
        errors: list[str] = []
        warnings: list[str] = []

        if not isinstance(config, dict):
            raise ConfigError("Configuration must be a mapping")

        for key in ("templates_dir", "global_dir", "project_dir"):
            if key in config:
                value = config[key]
                if not isinstance(value, str):
                    errors.append(f"'{key}' must be a string, got {type(value).__name__}")
                elif not value:
                    errors.append(f"'{key}' cannot be empty")

        if "fetch_timeout" in config:
            timeout = config["fetch_timeout"]
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
                errors.append(f"'fetch_timeout' must be a number, got {type(timeout).__name__}")
            elif timeout <= 0:
                errors.append("'fetch_timeout' must be greater than zero")

        for key in config:
            if key not in KNOWN_KEYS:
                warnings.append(f"Unknown configuration key '{key}' is ignored")

        if errors:
            raise ConfigError(errors)

        return warnings

    def exists(self) -> bool:
        """Check if the configuration file exists."""
        return self.config_file.exists()

    def read(self) -> ConfigData:
        """Load the configuration file, falling back to defaults.

        Returns:
            The validated configuration dictionary

        Raises:
            ConfigError: If the file cannot be parsed or is invalid
        """
        if not self.exists():
            message(
                f"No configuration file at {self.config_file}, using defaults",
                MessageType.DEBUG,
                VerbosityLevel.DEBUG,
            )
            return {}

        try:
            with open(self.config_file) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse configuration file: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read configuration file: {e}") from e

        if config is None:
            return {}

        warnings = self.validate(config)
        for warning in warnings:
            message(f"Warning: {warning}", MessageType.WARNING, VerbosityLevel.ALWAYS)

        message(f"Configuration loaded from {self.config_file}", MessageType.DEBUG, VerbosityLevel.DEBUG)
        return config

    def write(self, config: ConfigData) -> None:
        """Validate and write the configuration to the config file.

        Args:
            config: The configuration dictionary to write

        Raises:
            ConfigError: If validation fails
        """
        self.validate(dict(config))
        clean_config = {key: config[key] for key in KNOWN_KEYS if key in config}

        self.config_directory.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            yaml.dump(clean_config, f, default_flow_style=False, sort_keys=False)
        message(f"Configuration saved to {self.config_file}", MessageType.SUCCESS, VerbosityLevel.ALWAYS)

    def templates_directory(self, config: ConfigData | None = None) -> Path:
        """Resolve the bundled templates directory.

        Precedence: ``CODEKIT_TEMPLATES_DIR``, then ``templates_dir`` from
        the config file, then the templates shipped with the package.
        """
        env_value = os.environ.get(TEMPLATES_DIR_ENV)
        if env_value:
            return Path(env_value).expanduser().resolve()
        if config is None:
            config = self.read()
        if config.get("templates_dir"):
            return Path(config["templates_dir"]).expanduser().resolve()
        return PACKAGE_TEMPLATES_DIR

    def fetch_timeout(self, config: ConfigData | None = None) -> float:
        if config is None:
            config = self.read()
        return float(config.get("fetch_timeout", DEFAULT_FETCH_TIMEOUT))

    def paths(self, cwd: Path | None = None, config: ConfigData | None = None) -> ResourcePaths:
        """Resolve the tier roots.

        Args:
            cwd: Working directory the project tier is relative to
            config: Already loaded configuration (read from disk if None)

        Returns:
            ResourcePaths for the bundled, project and global tiers
        """
        if config is None:
            config = self.read()
        if cwd is None:
            cwd = Path.cwd()

        project_dir = Path(config.get("project_dir", PROJECT_DIR_NAME)).expanduser()
        if not project_dir.is_absolute():
            project_dir = cwd / project_dir

        global_dir = Path(config.get("global_dir", str(Path.home() / PROJECT_DIR_NAME))).expanduser()

        return ResourcePaths(
            templates_root=self.templates_directory(config),
            project_root=project_dir,
            global_root=global_dir,
        )

    @staticmethod
    def generate_template() -> str:
        """Generate a commented YAML template for a new configuration.

        Returns:
            Template string suitable for writing to stdout or a file
        """
        return f"""# codekit configuration (~/.codekit/config.yaml)
# Every key is optional.

# Bundled template catalog (defaults to the templates shipped with codekit).
# The {TEMPLATES_DIR_ENV} environment variable takes precedence.
# templates_dir: /path/to/templates

# Global install tier
# global_dir: ~/.claude

# Project install tier, relative to the working directory
# project_dir: .claude

# Seconds to wait for a source fetch before giving up
fetch_timeout: {int(DEFAULT_FETCH_TIMEOUT)}
"""
