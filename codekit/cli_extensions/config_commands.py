"""CLI commands for the codekit configuration file."""

import argparse
import sys

from codekit.config import Config, ConfigError
from codekit.config.config import TEMPLATES_DIR_ENV
from codekit.output import MessageType, VerbosityLevel, message


class ConfigCommands:
    """Manages configuration-related CLI commands."""

    @staticmethod
    def add_cli_arguments(subparsers) -> None:
        """Add config subcommands to the argument parser.

        Args:
            subparsers: The subparsers object to add commands to
        """
        config_parser = subparsers.add_parser("config", help="Manage configuration")
        config_subparsers = config_parser.add_subparsers(dest="config_command", help="Configuration commands")

        config_subparsers.add_parser(
            "show",
            help="Display current configuration",
            description="Display the effective settings and the tier directories they resolve to.",
        )
        config_subparsers.add_parser(
            "where",
            help="Show configuration file location",
            description="Show the paths of the configuration file, config directory and source checkouts.",
        )
        config_subparsers.add_parser(
            "validate",
            help="Validate configuration",
            description="Validate the configuration file and report every problem found.",
        )
        config_subparsers.add_parser(
            "template",
            help="Dump a starter configuration template to stdout",
            description="Print a commented YAML template to stdout that can be redirected to a config file.",
        )

    @staticmethod
    def process_cli_command(args: argparse.Namespace, config: Config) -> None:
        """Process config CLI commands.

        Args:
            args: Parsed command-line arguments
            config: Config instance to operate on
        """
        if args.config_command is None:
            message("Usage: codekit config <command>", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("Available commands:", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("  show       Display current configuration", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("  where      Show configuration file location", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("  validate   Validate configuration", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("  template   Dump starter template to stdout", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return
        elif args.config_command == "show":
            ConfigCommands.display(config)
        elif args.config_command == "where":
            ConfigCommands.show_location(config)
        elif args.config_command == "validate":
            ConfigCommands.validate(config)
        elif args.config_command == "template":
            ConfigCommands.template()

    @staticmethod
    def display(config: Config) -> None:
        """Display the effective configuration."""
        config_data = config.read()
        paths = config.paths(config=config_data)

        message("\n=== Settings ===\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        if config.exists():
            message(f"  Loaded from: {config.config_file}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        else:
            message("  No configuration file, using defaults", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  fetch_timeout: {config.fetch_timeout(config_data):g}s", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        message("\n=== Tiers ===\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  bundled: {paths.templates_root}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  project: {paths.project_root}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  global:  {paths.global_root}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def show_location(config: Config) -> None:
        """Show the location of the configuration file and directories."""
        message("\nConfiguration Locations:\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Config directory:  {config.config_directory}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Config file:       {config.config_file}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Sources directory: {config.sources_directory}", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        message("\nStatus:", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        if config.config_file.exists():
            message("  Config file exists", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
        else:
            message("  Config file does not exist", MessageType.WARNING, VerbosityLevel.ALWAYS)

        if config.sources_directory.exists():
            message("  Sources directory exists", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
        else:
            message("  Sources directory does not exist", MessageType.WARNING, VerbosityLevel.ALWAYS)

        message(f"\n  {TEMPLATES_DIR_ENV} overrides templates_dir when set", MessageType.NORMAL, VerbosityLevel.VERBOSE)
        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def validate(config: Config) -> None:
        """Validate the configuration file, exiting non-zero on problems."""
        if not config.exists():
            message("No configuration file found; defaults are in use.", MessageType.INFO, VerbosityLevel.ALWAYS)
            return

        try:
            config.read()
        except ConfigError as e:
            message(str(e), MessageType.ERROR, VerbosityLevel.ALWAYS)
            sys.exit(1)

        message("Configuration is valid", MessageType.SUCCESS, VerbosityLevel.ALWAYS)

    @staticmethod
    def template() -> None:
        """Dump a starter configuration template to stdout."""
        print(Config.generate_template())
