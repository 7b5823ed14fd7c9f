"""
Migration orchestrator.

Runs the stages in order: locate the source, pick the schema adapter,
parse into a canonical model, emit the OpenFang files, copy auxiliary
files, then persist the report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from common.decorators import timed
from common.exceptions import SourceNotFoundError
from common.logging_config import LogContext

from .adapters import create_adapter
from .auxiliary import AuxiliaryMigrator
from .emitter import TargetEmitter
from .models import CanonicalModel
from .report import MigrationReport

logger = logging.getLogger(__name__)


@dataclass
class MigrateOptions:
    """Options for one migration run."""
    source_dir: Path
    target_dir: Path
    dry_run: bool = False

    def __post_init__(self):
        self.source_dir = Path(self.source_dir).expanduser()
        self.target_dir = Path(self.target_dir).expanduser()


def _copy_parse_events(model: CanonicalModel, report: MigrationReport):
    report.skipped.extend(model.skipped)
    report.warnings.extend(model.warnings)
    for message in model.warnings:
        logger.warning(message)


@timed(label="migration")
def migrate(options: MigrateOptions) -> MigrationReport:
    """
    Migrate an OpenClaw installation into an OpenFang directory.

    In dry-run mode the same report is built but no file is written.

    Raises:
        SourceNotFoundError: Source directory missing (nothing written).
        NoInstallationError: No OpenClaw config or agents in the source.
        ConfigParseError: Primary config cannot be parsed (nothing written).
        MigrationError: config.toml could not be written.
        ReportWriteError: migration_report.md could not be written; the
            report is attached.
    """
    source_dir = options.source_dir
    target_dir = options.target_dir
    materialize = not options.dry_run

    with LogContext(source=str(source_dir), target=str(target_dir), dry_run=options.dry_run):
        if not source_dir.is_dir():
            raise SourceNotFoundError(source_dir)

        adapter = create_adapter(source_dir)
        logger.info(f"Migrating {adapter.source_format.value} installation at {source_dir}")

        model = adapter.parse()

        report = MigrationReport(dry_run=options.dry_run)
        _copy_parse_events(model, report)

        if materialize:
            target_dir.mkdir(parents=True, exist_ok=True)

        TargetEmitter(source_dir, target_dir, report, materialize=materialize).emit(model)
        AuxiliaryMigrator(source_dir, target_dir, report, materialize=materialize).run()

        if materialize:
            report.save(target_dir)

        logger.info(
            f"Migration {'preview ' if options.dry_run else ''}complete: "
            f"{len(report.imported)} imported, {len(report.skipped)} skipped, "
            f"{len(report.warnings)} warnings"
        )
        return report
