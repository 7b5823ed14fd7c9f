#!/usr/bin/env python3
"""
openclaw-migrate CLI

Command-line interface for moving an OpenClaw installation to OpenFang.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from common.exceptions import MigrationError, ReportWriteError
from common.logging_config import setup_logging

from .detector import STATE_DIR_ENV, detect_openclaw_home
from .migrator import MigrateOptions, migrate
from .report import MigrationReport
from .scanner import scan_workspace

logger = logging.getLogger(__name__)

DEFAULT_TARGET = Path.home() / ".openfang"


def _resolve_source(arg):
    """Source from the command line, else auto-detected."""
    if arg:
        return Path(arg).expanduser()

    source = detect_openclaw_home()
    if source is None:
        print("No OpenClaw installation found.")
        print(f"Pass the directory explicitly or set {STATE_DIR_ENV}.")
    return source


def print_report(report: MigrationReport):
    """Print a short summary of a migration report."""
    title = "Migration preview" if report.dry_run else "Migration complete"
    print(f"{title}: {len(report.imported)} imported, {len(report.skipped)} skipped")

    for kind, count in report.counts.items():
        print(f"  {kind}: {count}")

    if report.skipped:
        print(f"\nSkipped ({len(report.skipped)}):")
        for item in report.skipped:
            print(f"  - [{item.kind.value}] {item.name}: {item.reason}")

    if report.warnings:
        print(f"\nWarnings ({len(report.warnings)}):")
        for warning in report.warnings[:10]:
            print(f"  - {warning}")
        if len(report.warnings) > 10:
            print(f"  ... and {len(report.warnings) - 10} more")


def cmd_scan(args):
    """Preview what a migration would pick up."""
    source = _resolve_source(args.source)
    if source is None:
        return 1

    result = scan_workspace(source)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0 if result.error is None else 1

    print(f"OpenClaw installation: {result.path}")
    if result.error:
        print(f"Error: {result.error}")
        return 1

    print(f"  Format: {result.format}")
    print(f"  Config file: {'yes' if result.has_config else 'no'}")
    print(f"  Memory notes: {'yes' if result.has_memory else 'no'}")

    if result.agents:
        print(f"\nAgents ({len(result.agents)}):")
        for agent in result.agents:
            print(f"  {agent.id} ({agent.name}) - {agent.provider}/{agent.model}")
            print(f"    Tools: {', '.join(agent.tools) if agent.tools else 'none'}")

    if result.channels:
        print(f"\nChannels: {', '.join(result.channels)}")
    if result.skills:
        print(f"Skills (not migrated): {', '.join(result.skills)}")

    return 0


def cmd_migrate(args):
    """Run a migration."""
    source = _resolve_source(args.source)
    if source is None:
        return 1

    target = Path(args.target).expanduser() if args.target else DEFAULT_TARGET
    options = MigrateOptions(source_dir=source, target_dir=target, dry_run=args.dry_run)

    print(f"Migration: OpenClaw -> OpenFang{' (dry run)' if args.dry_run else ''}")
    print(f"Source: {options.source_dir}")
    print(f"Target: {options.target_dir}")
    print()

    try:
        report = migrate(options)
    except ReportWriteError as e:
        logger.error(str(e))
        print_report(e.report)
        return 1
    except MigrationError as e:
        logger.error(str(e))
        print(f"Error: {e.message}")
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print_report(report)
        if not args.dry_run:
            print(f"\nFull report: {options.target_dir / 'migration_report.md'}")

    return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Migrate an OpenClaw installation to OpenFang",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  openclaw-migrate scan                          # Find and preview ~/.openclaw
  openclaw-migrate migrate --dry-run             # Show what would be migrated
  openclaw-migrate migrate ~/.clawdbot -t /tmp/openfang
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")
    parser.add_argument("--json-logs", action="store_true", help="Write the log file as JSON lines")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # scan command
    scan_parser = subparsers.add_parser("scan", help="Preview an OpenClaw installation")
    scan_parser.add_argument("source", nargs="?", help="OpenClaw directory (default: auto-detect)")
    scan_parser.add_argument("--json", action="store_true", help="Print the scan as JSON")
    scan_parser.set_defaults(func=cmd_scan)

    # migrate command
    migrate_parser = subparsers.add_parser("migrate", help="Migrate to OpenFang")
    migrate_parser.add_argument("source", nargs="?", help="OpenClaw directory (default: auto-detect)")
    migrate_parser.add_argument("-t", "--target", help=f"OpenFang directory (default: {DEFAULT_TARGET})")
    migrate_parser.add_argument("-n", "--dry-run", action="store_true", help="Report only, write nothing")
    migrate_parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    migrate_parser.set_defaults(func=cmd_migrate)

    args = parser.parse_args(argv)

    # Setup logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    setup_logging(level=level, log_file=args.log_file, json_logs=args.json_logs)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
