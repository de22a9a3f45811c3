"""CLI commands for agents, skills and commands.

Each kind gets the same set of subcommands (``list``, ``add``, ``remove``
and ``search``); the kind is carried on the parsed arguments.
"""

import argparse

from codekit.config import Config
from codekit.core.catalog import Catalog
from codekit.core.errors import NotInstalledError
from codekit.core.installer import Installer
from codekit.core.scanner import TierScanner
from codekit.core.types import (
    Artifact,
    ArtifactKind,
    InstallOptions,
    ListOptions,
    RemoveOptions,
    Tier,
)
from codekit.output import MessageType, VerbosityLevel, message, output_json

KIND_HELP = {
    ArtifactKind.AGENT: "Manage agents",
    ArtifactKind.SKILL: "Manage skills",
    ArtifactKind.COMMAND: "Manage slash commands",
}


def confirm(prompt: str) -> bool:
    """Ask a yes/no question, defaulting to no."""
    try:
        answer = input(f"{prompt} [y/N]: ").strip().lower()
    except EOFError:
        return False
    return answer in ("y", "yes")


class ResourceCommands:
    """Manages the per-kind resource CLI commands."""

    def __init__(self, catalog: Catalog, scanner: TierScanner, installer: Installer):
        self.catalog = catalog
        self.scanner = scanner
        self.installer = installer

    @classmethod
    def from_config(cls, config: Config) -> "ResourceCommands":
        """Wire up the catalog, scanner and installer from *config*."""
        paths = config.paths()
        catalog = Catalog(paths.templates_root)
        scanner = TierScanner(catalog, paths)
        return cls(catalog, scanner, Installer(catalog, scanner, paths))

    @staticmethod
    def add_cli_arguments(subparsers) -> None:
        """Add agents/skills/commands subcommands to the argument parser.

        Args:
            subparsers: The subparsers object to add commands to
        """
        for kind in ArtifactKind:
            kind_parser = subparsers.add_parser(kind.subdir, help=KIND_HELP[kind])
            kind_parser.set_defaults(resource_kind=kind)
            kind_sub = kind_parser.add_subparsers(dest="resource_command", help=f"{kind.value.capitalize()} commands")

            # <kind> list
            list_parser = kind_sub.add_parser(
                "list",
                help=f"List {kind.subdir}",
                description=f"List installed and available {kind.subdir}.",
            )
            list_parser.add_argument(
                "-g", "--global", dest="global_only", action="store_true",
                help="Only look at the global tier",
            )
            list_parser.add_argument("-c", "--category", help="Only show this category")
            state = list_parser.add_mutually_exclusive_group()
            state.add_argument("-i", "--installed", action="store_true", help="Only show installed")
            state.add_argument("-a", "--available", action="store_true", help="Only show not yet installed")
            list_parser.add_argument("--json", action="store_true", help="Output as JSON")

            # <kind> add
            add_parser = kind_sub.add_parser(
                "add",
                help=f"Install a {kind.value}",
                description=f"Install a bundled {kind.value} and its dependencies.",
            )
            add_parser.add_argument("name", help=f"{kind.value.capitalize()} name")
            add_parser.add_argument(
                "-g", "--global", dest="global_", action="store_true",
                help="Install into the global tier (~/.claude)",
            )
            add_parser.add_argument("-f", "--force", action="store_true", help="Overwrite if already installed")
            add_parser.add_argument("--dry-run", action="store_true", help="Show what would be installed")
            add_parser.add_argument("--skip-deps", action="store_true", help="Do not install dependencies")
            add_parser.add_argument("--json", action="store_true", help="Output as JSON")

            # <kind> remove
            remove_parser = kind_sub.add_parser(
                "remove",
                help=f"Remove an installed {kind.value}",
                description=f"Remove a single installed {kind.value}. Dependencies are left in place.",
            )
            remove_parser.add_argument("name", help=f"{kind.value.capitalize()} name")
            remove_parser.add_argument(
                "-g", "--global", dest="global_", action="store_true",
                help="Remove from the global tier",
            )
            remove_parser.add_argument("-f", "--force", action="store_true", help="Do not ask for confirmation")
            remove_parser.add_argument("--dry-run", action="store_true", help="Show what would be removed")

            # <kind> search
            search_parser = kind_sub.add_parser(
                "search",
                help=f"Search bundled {kind.subdir}",
                description=f"Search bundled {kind.subdir} by name, description and tags.",
            )
            search_parser.add_argument("query", help="Text to search for")
            search_parser.add_argument("--json", action="store_true", help="Output as JSON")

    @classmethod
    def process_cli_command(cls, args: argparse.Namespace, config: Config) -> None:
        """Process agents/skills/commands CLI commands.

        Args:
            args: Parsed command-line arguments
            config: Config instance to operate on
        """
        kind: ArtifactKind = args.resource_kind
        cmd = getattr(args, "resource_command", None)
        if cmd is None:
            cls._show_usage(kind)
            return

        commands = cls.from_config(config)
        if cmd == "list":
            commands.list_resources(kind, args)
        elif cmd == "add":
            commands.add(kind, args)
        elif cmd == "remove":
            commands.remove(kind, args)
        elif cmd == "search":
            commands.search(kind, args.query, as_json=args.json)

    @staticmethod
    def _show_usage(kind: ArtifactKind) -> None:
        message(f"Usage: codekit {kind.subdir} <command>", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("Available commands:", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  list      List {kind.subdir}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  add       Install a {kind.value}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  remove    Remove an installed {kind.value}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  search    Search bundled {kind.subdir}", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------
    @staticmethod
    def _show_section(title: str, artifacts: list[Artifact]) -> None:
        message(f"\n=== {title} ===\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        if not artifacts:
            message("  (none)", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return
        for artifact in artifacts:
            category = f" [{artifact.category}]" if artifact.category else ""
            message(f"  {artifact.name}{category}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            if artifact.description:
                message(f"    {artifact.description}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"    {artifact.path}", MessageType.NORMAL, VerbosityLevel.VERBOSE)

    def list_resources(self, kind: ArtifactKind, args: argparse.Namespace) -> None:
        options = ListOptions(
            category=args.category,
            installed_only=args.installed,
            available_only=args.available,
            global_only=args.global_only,
        )
        listing = self.scanner.list_artifacts(kind, options)

        if args.json:
            output_json(listing.to_dict())
            return

        if not options.global_only and not options.available_only:
            self._show_section("Project", listing.project)
        if not options.available_only:
            self._show_section("Global", listing.global_)
        if not options.installed_only:
            self._show_section("Available", listing.available)
        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        for warning in listing.warnings:
            message(warning, MessageType.WARNING, VerbosityLevel.ALWAYS)

    # ------------------------------------------------------------------
    # add / remove
    # ------------------------------------------------------------------
    def add(self, kind: ArtifactKind, args: argparse.Namespace) -> None:
        tier = Tier.GLOBAL if args.global_ else Tier.PROJECT
        options = InstallOptions(force=args.force, dry_run=args.dry_run, skip_deps=args.skip_deps)
        result = self.installer.install(args.name, kind, tier, options)

        if args.json:
            output_json(result.to_dict())
            return

        verb = "Would install" if result.dry_run else "Installed"
        for action in result.actions:
            if action.action == "skip":
                message(f"{action.name} is already installed, skipping", MessageType.INFO, VerbosityLevel.ALWAYS)
            else:
                message(f"{verb} {action.name} -> {action.destination}", MessageType.SUCCESS, VerbosityLevel.ALWAYS)

    def remove(self, kind: ArtifactKind, args: argparse.Namespace) -> None:
        tier = Tier.GLOBAL if args.global_ else Tier.PROJECT
        if not self.scanner.is_installed(kind, args.name, tier):
            raise NotInstalledError(args.name, tier.value)

        if not (args.force or args.dry_run) and not confirm(f"Remove {kind.value} '{args.name}' from {tier.value}?"):
            message("Cancelled", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return

        result = self.installer.remove(args.name, kind, tier, RemoveOptions(force=args.force, dry_run=args.dry_run))
        if result.dry_run:
            message(f"Would remove {result.path}", MessageType.INFO, VerbosityLevel.ALWAYS)
        else:
            message(f"Removed {args.name} from {result.path}", MessageType.SUCCESS, VerbosityLevel.ALWAYS)

    # ------------------------------------------------------------------
    # search
    # ------------------------------------------------------------------
    def search(self, kind: ArtifactKind, query: str, as_json: bool = False) -> None:
        matches = self.catalog.search(kind, query)
        if as_json:
            output_json([entry.to_dict() for entry in matches])
            return

        if not matches:
            message(f"No {kind.subdir} found matching '{query}'", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return
        for entry in matches:
            category = f" [{entry.category}]" if entry.category else ""
            message(f"  {entry.name}{category}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            if entry.description:
                message(f"    {entry.description}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
