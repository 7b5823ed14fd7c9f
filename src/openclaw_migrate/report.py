"""
Migration report.

Every imported item, skipped item and warning of a run is recorded here
in order. The report is rendered to Markdown from a Jinja2 template and
written next to the migrated files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader

from common.exceptions import ReportWriteError
from utils.atomic_write import atomic_write_text

from .models import ItemKind, SkippedItem

logger = logging.getLogger(__name__)

REPORT_FILE_NAME = "migration_report.md"
TEMPLATE_NAME = "migration_report.md.j2"
TEMPLATE_DIR = Path(__file__).parent / "templates"


@dataclass
class ImportedItem:
    """Something that was (or in preview, would be) written to the target."""
    kind: ItemKind
    name: str
    destination: str


@dataclass
class MigrationReport:
    """Outcome of one migration run."""
    source: str = "OpenClaw"
    dry_run: bool = False
    imported: List[ImportedItem] = field(default_factory=list)
    skipped: List[SkippedItem] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_imported(self, kind: ItemKind, name: str, destination: str):
        self.imported.append(ImportedItem(kind=kind, name=name, destination=destination))

    def add_skipped(self, kind: ItemKind, name: str, reason: str):
        self.skipped.append(SkippedItem(kind=kind, name=name, reason=reason))

    def warn(self, message: str):
        logger.warning(message)
        self.warnings.append(message)

    def imported_names(self, kind: ItemKind) -> List[str]:
        return [item.name for item in self.imported if item.kind == kind]

    def skipped_names(self, kind: ItemKind) -> List[str]:
        return [item.name for item in self.skipped if item.kind == kind]

    @property
    def counts(self) -> Dict[str, int]:
        """Imported item count per kind, in first-seen order."""
        counts: Dict[str, int] = {}
        for item in self.imported:
            counts[item.kind.value] = counts.get(item.kind.value, 0) + 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "source": self.source,
            "dry_run": self.dry_run,
            "imported": [
                {"kind": i.kind.value, "name": i.name, "destination": i.destination}
                for i in self.imported
            ],
            "skipped": [
                {"kind": s.kind.value, "name": s.name, "reason": s.reason}
                for s in self.skipped
            ],
            "warnings": list(self.warnings),
        }

    def to_markdown(self) -> str:
        return render_report(self)

    def save(self, target_dir: Path) -> Path:
        """
        Write the rendered report into the target directory.

        Raises:
            ReportWriteError: If the file cannot be written. The report is
                attached to the exception.
        """
        path = Path(target_dir) / REPORT_FILE_NAME
        try:
            atomic_write_text(path, self.to_markdown())
        except OSError as e:
            raise ReportWriteError(path, self, cause=e)
        logger.info(f"Migration report written to {path}")
        return path


def _cell(value: Any) -> str:
    """Make a value safe inside a Markdown table cell."""
    return str(value).replace("|", "\\|").replace("\n", " ")


def _create_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["cell"] = _cell
    return env


def render_report(report: MigrationReport) -> str:
    """Render a report to Markdown."""
    template = _create_environment().get_template(TEMPLATE_NAME)
    return template.render(report=report)
