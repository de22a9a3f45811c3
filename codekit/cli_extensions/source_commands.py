"""CLI commands for external template sources."""

import argparse
import sys

from codekit.cli_extensions.resource_commands import confirm
from codekit.config import Config
from codekit.core.catalog import Catalog
from codekit.core.sources import SourceManager
from codekit.core.sync import SyncEngine, SyncReport
from codekit.core.types import ArtifactKind
from codekit.output import MessageType, VerbosityLevel, message, output_json


class SourceCommands:
    """Manages the ``sources`` CLI commands."""

    @staticmethod
    def add_cli_arguments(subparsers) -> None:
        """Add sources subcommands to the argument parser.

        Args:
            subparsers: The subparsers object to add commands to
        """
        sources_parser = subparsers.add_parser("sources", help="Manage external template sources")
        sources_sub = sources_parser.add_subparsers(dest="sources_command", help="Source commands")

        # sources list
        list_parser = sources_sub.add_parser("list", help="List configured sources")
        list_parser.add_argument("--json", action="store_true", help="Output as JSON")

        # sources add
        add_parser = sources_sub.add_parser(
            "add",
            help="Add a source",
            description="Register a git repository (or local directory) to sync templates from.",
        )
        add_parser.add_argument("url", help="Repository URL or local path")
        add_parser.add_argument("-n", "--name", help="Source name (derived from the URL if omitted)")
        add_parser.add_argument("-b", "--branch", default="main", help="Branch to fetch (default: main)")
        add_parser.add_argument(
            "--dir", dest="subdirectory", default="skills",
            help="Directory inside the repository holding templates (default: skills)",
        )
        add_parser.add_argument(
            "--kind", choices=[kind.value for kind in ArtifactKind], default=ArtifactKind.SKILL.value,
            help="Kind of template the source provides (default: skill)",
        )

        # sources remove
        remove_parser = sources_sub.add_parser("remove", help="Remove a source")
        remove_parser.add_argument("name", help="Source name")
        remove_parser.add_argument("-f", "--force", action="store_true", help="Do not ask for confirmation")
        remove_parser.add_argument("--keep-checkout", action="store_true", help="Keep the local checkout")

        # sources pull
        pull_parser = sources_sub.add_parser("pull", help="Clone or update source checkouts")
        pull_parser.add_argument("-s", "--source", help="Only pull this source")
        pull_parser.add_argument("--timeout", type=float, help="Seconds before a fetch is abandoned")

        # sources sync
        sync_parser = sources_sub.add_parser(
            "sync",
            help="Sync templates from sources into the catalog",
            description="Fetch sources and import their templates into the bundled catalog.",
        )
        sync_parser.add_argument("-s", "--source", help="Only sync this source")
        sync_parser.add_argument("--dry-run", action="store_true", help="Show changes without applying them")
        sync_parser.add_argument("--timeout", type=float, help="Seconds before a fetch is abandoned")
        sync_parser.add_argument("--json", action="store_true", help="Output as JSON")

    @classmethod
    def process_cli_command(cls, args: argparse.Namespace, config: Config) -> None:
        """Process sources CLI commands.

        Args:
            args: Parsed command-line arguments
            config: Config instance to operate on
        """
        cmd = getattr(args, "sources_command", None)
        if cmd is None:
            cls._show_usage()
            return

        config_data = config.read()
        config.ensure_directories()
        templates_dir = config.templates_directory(config_data)
        manager = SourceManager(templates_dir, config.sources_directory)
        timeout = getattr(args, "timeout", None) or config.fetch_timeout(config_data)

        if cmd == "list":
            cls.list_sources(manager, as_json=args.json)
        elif cmd == "add":
            source = manager.add_source(
                args.url,
                name=args.name,
                branch=args.branch,
                subdirectory=args.subdirectory,
                kind=ArtifactKind.from_name(args.kind),
            )
            message(f"Added source '{source.name}' ({source.url})", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
        elif cmd == "remove":
            manager.get(args.name)
            if not args.force and not confirm(f"Remove source '{args.name}'?"):
                message("Cancelled", MessageType.NORMAL, VerbosityLevel.ALWAYS)
                return
            manager.remove_source(args.name, delete_checkout=not args.keep_checkout)
            message(f"Removed source '{args.name}'", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
        elif cmd == "pull":
            report = manager.pull(args.source, timeout=timeout)
            for name in report.paths:
                message(f"{name} is up to date", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
            if report.errors:
                sys.exit(1)
        elif cmd == "sync":
            sources = manager.select(args.source)
            if not sources:
                message("No sources configured. Use 'codekit sources add <url>'.", MessageType.WARNING,
                        VerbosityLevel.ALWAYS)
                return
            engine = SyncEngine(Catalog(templates_dir), config.sources_directory, timeout=timeout)
            report = engine.sync_all(sources, dry_run=args.dry_run)
            if args.json:
                output_json(report.to_dict())
            else:
                cls.show_report(report)
            if report.errors:
                sys.exit(1)

    @staticmethod
    def _show_usage() -> None:
        message("Usage: codekit sources <command>", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("Available commands:", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  list      List configured sources", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  add       Add a source", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  remove    Remove a source", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  pull      Clone or update source checkouts", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  sync      Sync templates into the catalog", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def list_sources(manager: SourceManager, as_json: bool = False) -> None:
        statuses = manager.list_sources()
        if as_json:
            output_json([status.to_dict() for status in statuses])
            return

        if not statuses:
            message("No sources configured.", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("Use 'codekit sources add <url>' to add one.", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return

        for status in statuses:
            source = status.source
            message(f"\n  {source.name} ({source.kind.subdir})", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"    URL:    {status.display_url}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"    Branch: {source.branch}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"    Dir:    {source.subdirectory}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            if status.checked_out:
                message(
                    f"    {len(status.candidates)} {source.kind.subdir} found",
                    MessageType.NORMAL,
                    VerbosityLevel.ALWAYS,
                )
                for name in status.candidates:
                    message(f"      - {name}", MessageType.NORMAL, VerbosityLevel.VERBOSE)
            else:
                message("    Not pulled yet", MessageType.WARNING, VerbosityLevel.ALWAYS)
        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def show_report(report: SyncReport) -> None:
        for name, result in report.results.items():
            prefix = "[dry run] " if result.dry_run else ""
            message(
                f"{prefix}{name}: {len(result.added)} added, {len(result.updated)} updated, "
                f"{len(result.skipped)} unchanged, {len(result.removed)} removed",
                MessageType.SUCCESS,
                VerbosityLevel.ALWAYS,
            )
            for label, names in (("+", result.added), ("~", result.updated), ("-", result.removed)):
                for item in names:
                    message(f"  {label} {item}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            for item in result.skipped:
                message(f"  = {item}", MessageType.NORMAL, VerbosityLevel.VERBOSE)
            for candidate, reason in result.failed:
                message(f"  {candidate}: {reason}", MessageType.WARNING, VerbosityLevel.ALWAYS)