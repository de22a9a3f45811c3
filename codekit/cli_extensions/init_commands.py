"""CLI command for setting up a tier with the bundled catalog."""

import argparse
import sys

from codekit.cli_extensions.resource_commands import ResourceCommands, confirm
from codekit.config import Config
from codekit.core.installer import InitResult
from codekit.core.types import Tier
from codekit.output import MessageType, VerbosityLevel, message, output_json


class InitCommands:
    """Manages the init command."""

    @staticmethod
    def add_cli_arguments(subparsers) -> None:
        """Add the init command to the argument parser.

        Args:
            subparsers: The subparsers object to add commands to
        """
        init_parser = subparsers.add_parser(
            "init",
            help="Set up .claude with every bundled agent and command",
            description="Create the agents/ and commands/ directories and install every bundled agent and command.",
        )
        init_parser.add_argument(
            "-g", "--global", dest="global_", action="store_true",
            help="Initialize the global tier (~/.claude)",
        )
        init_parser.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
        init_parser.add_argument(
            "-f", "--force", action="store_true",
            help="Initialize an existing directory and overwrite installed artifacts",
        )
        init_parser.add_argument("--dry-run", action="store_true", help="Show what would be installed")
        init_parser.add_argument("--json", action="store_true", help="Output as JSON")

    @classmethod
    def process_cli_command(cls, args: argparse.Namespace, config: Config) -> None:
        """Process the init command.

        Args:
            args: Parsed command-line arguments
            config: Config instance to operate on
        """
        installer = ResourceCommands.from_config(config).installer
        tier = Tier.GLOBAL if args.global_ else Tier.PROJECT
        root = installer.paths.tier_root(tier)

        force = args.force
        if root.exists() and not force and not args.yes and not args.dry_run:
            force = confirm(f"{root} already exists. Reinitialize?")

        result = installer.initialize(tier, force=force, dry_run=args.dry_run)

        if args.json:
            output_json(result.to_dict())
        else:
            cls.show_result(result)

        if result.failed:
            sys.exit(1)

    @staticmethod
    def show_result(result: InitResult) -> None:
        if result.already_initialized:
            message(f"{result.root} already exists", MessageType.INFO, VerbosityLevel.ALWAYS)
            message("Use --force to initialize it anyway", MessageType.INFO, VerbosityLevel.ALWAYS)
            return

        if result.dry_run:
            message("Would create:", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"  {result.root}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            for kind, names in result.planned.items():
                message(f"  ├── {kind.subdir}/", MessageType.NORMAL, VerbosityLevel.ALWAYS)
                for name in names:
                    message(f"  │   └── {name}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return

        for label in result.installed:
            message(f"Installed {label}", MessageType.SUCCESS, VerbosityLevel.ALWAYS)

        summary = f"Initialized {result.root} with {len(result.installed)} resources"
        if result.failed:
            summary += f" ({len(result.failed)} failed)"
        message(summary, MessageType.SUCCESS, VerbosityLevel.ALWAYS)
