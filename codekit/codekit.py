#!/usr/bin/env python

"""Manage agents, skills and commands for your AI coding assistant."""

import argparse
import sys

from codekit.cli_extensions import ConfigCommands, InitCommands, ResourceCommands, SourceCommands
from codekit.config import Config, ConfigError
from codekit.core.errors import CodekitError
from codekit.output import MessageType, VerbosityLevel, get_output, message

# Grouped command help text
COMMAND_GROUPS = """
resource commands:
  init                Set up .claude with every bundled agent and command
  agents              List, install, remove and search agents
  skills              List, install, remove and search skills
  commands            List, install, remove and search slash commands

catalog commands:
  sources             Manage and sync external template sources

configuration file commands:
  config              Manage the configuration file
"""


class GroupedHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Custom formatter that hides the subparser choices from positional arguments."""

    def _metavar_formatter(self, action, default_metavar):
        if action.choices is not None and isinstance(action, argparse._SubParsersAction):
            result = action.metavar if action.metavar is not None else ""

            def format_fn(tuple_size):
                if isinstance(result, tuple):
                    return result
                return (result,) * tuple_size

            return format_fn
        return super()._metavar_formatter(action, default_metavar)

    def _format_action(self, action):
        # Subparser actions are listed in the epilog instead
        if isinstance(action, argparse._SubParsersAction):
            return ""
        return super()._format_action(action)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codekit",
        description="Manage agents, skills and commands for your AI coding assistant",
        formatter_class=GroupedHelpFormatter,
        epilog=COMMAND_GROUPS,
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase verbosity (-v, -vv, -vvv)",
    )
    parser.add_argument(
        "--no-color", action="store_true",
        help="Disable colored output",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    InitCommands.add_cli_arguments(subparsers)      # init
    ResourceCommands.add_cli_arguments(subparsers)  # agents, skills, commands
    SourceCommands.add_cli_arguments(subparsers)    # sources
    ConfigCommands.add_cli_arguments(subparsers)    # config
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the codekit CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure output system
    output_mgr = get_output()
    output_mgr.verbosity = args.verbose
    output_mgr.use_color = not args.no_color and sys.stdout.isatty()

    message(f"Verbosity level: {args.verbose}", MessageType.DEBUG, VerbosityLevel.DEBUG)
    message(f"Command: {args.command}", MessageType.DEBUG, VerbosityLevel.DEBUG)

    if args.command is None:
        parser.print_help()
        return

    config = Config()

    try:
        if args.command == "config":
            ConfigCommands.process_cli_command(args, config)
        elif args.command == "init":
            InitCommands.process_cli_command(args, config)
        elif args.command == "sources":
            SourceCommands.process_cli_command(args, config)
        else:
            ResourceCommands.process_cli_command(args, config)
    except (CodekitError, ConfigError) as e:
        message(f"Error: {e}", MessageType.ERROR, VerbosityLevel.ALWAYS)
        sys.exit(1)
    except KeyboardInterrupt:
        message("Interrupted", MessageType.WARNING, VerbosityLevel.ALWAYS)
        sys.exit(130)


if __name__ == "__main__":
    main()
