"""CLI command extensions for codekit."""

from .config_commands import ConfigCommands
from .init_commands import InitCommands
from .resource_commands import ResourceCommands
from .source_commands import SourceCommands

__all__ = [
    "ConfigCommands",
    "InitCommands",
    "ResourceCommands",
    "SourceCommands",
]
