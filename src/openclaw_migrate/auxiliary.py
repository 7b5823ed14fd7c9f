"""
Auxiliary migration: memory notes, session logs, workspaces.

These are plain file copies shared by both source schemas. A filesystem
error on one item becomes a warning in the report and the run moves on
to the next item.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Set, Tuple

from utils.atomic_write import atomic_write_text

from .adapters.base import is_safe_agent_id
from .models import ItemKind
from .report import MigrationReport

logger = logging.getLogger(__name__)

MEMORY_FILE_NAME = "MEMORY.md"
IMPORTED_MEMORY_NAME = "imported_memory.md"
IMPORTED_SESSIONS_DIR = "imported_sessions"

# Source artifacts that are never portable: (relative path, kind, reason)
NON_PORTABLE_ARTIFACTS: Tuple[Tuple[str, ItemKind, str], ...] = (
    ("auth-profiles.json", ItemKind.CONFIG,
     "Credential file not migrated for security - set API keys as env vars"),
    ("memory-search/index.db", ItemKind.MEMORY,
     "SQLite vector index not portable - OpenFang will rebuild embeddings"),
    ("cron/cron-store.json", ItemKind.CONFIG,
     "Cron run state not portable"),
)


def _count_files(path: Path) -> int:
    return sum(1 for p in path.rglob("*") if p.is_file())


class AuxiliaryMigrator:
    """
    Copies the files that sit next to an OpenClaw config.

    Directory listings are sorted so reports come out in the same order
    on every run.
    """

    def __init__(
        self,
        source_dir: Path,
        target_dir: Path,
        report: MigrationReport,
        materialize: bool = True,
    ):
        self.source_dir = Path(source_dir)
        self.target_dir = Path(target_dir)
        self.report = report
        self.materialize = materialize

    def run(self):
        self.migrate_memory()
        self.migrate_sessions()
        self.migrate_workspaces()
        self.report_non_portable()

    def _subdirs(self, path: Path) -> List[Path]:
        if not path.is_dir():
            return []
        try:
            return sorted(p for p in path.iterdir() if p.is_dir())
        except OSError as e:
            self.report.warn(f"Error scanning {path}: {e}")
            return []

    # ------------------------------------------------------------------
    # Memory
    # ------------------------------------------------------------------

    def migrate_memory(self):
        """
        Import MEMORY.md notes.

        memory/<id>/MEMORY.md is preferred; agents/<id>/MEMORY.md is only
        used for ids the first layout did not provide.
        """
        migrated: Set[str] = set()

        for layout in ("memory", "agents"):
            for agent_dir in self._subdirs(self.source_dir / layout):
                agent_id = agent_dir.name
                memory_md = agent_dir / MEMORY_FILE_NAME
                if agent_id in migrated or not memory_md.is_file():
                    continue
                if self._copy_memory(agent_id, memory_md):
                    migrated.add(agent_id)

    def _copy_memory(self, agent_id: str, memory_md: Path) -> bool:
        if not is_safe_agent_id(agent_id):
            self.report.warn(f"Memory for '{agent_id}' skipped: not a valid agent directory name")
            return False

        try:
            content = memory_md.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.report.warn(f"Failed to read {memory_md}: {e}")
            return False

        if not content.strip():
            return False

        relative = f"agents/{agent_id}/{IMPORTED_MEMORY_NAME}"
        if self.materialize:
            try:
                atomic_write_text(self.target_dir / relative, content)
            except OSError as e:
                self.report.warn(f"Failed to write {relative}: {e}")
                return False

        self.report.add_imported(ItemKind.MEMORY, f"{agent_id}/{MEMORY_FILE_NAME}", relative)
        logger.info(f"Migrated memory for {agent_id}")
        return True

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def migrate_sessions(self):
        """Copy JSONL session logs; they are kept for reference, not replayed."""
        shared = self.source_dir / "sessions"
        if shared.is_dir():
            self._copy_sessions(shared, IMPORTED_SESSIONS_DIR, "")

        for agent_dir in self._subdirs(self.source_dir / "agents"):
            sessions = agent_dir / "sessions"
            if sessions.is_dir() and is_safe_agent_id(agent_dir.name):
                self._copy_sessions(
                    sessions,
                    f"{IMPORTED_SESSIONS_DIR}/{agent_dir.name}",
                    f"{agent_dir.name}: ",
                )

    def _copy_sessions(self, source: Path, relative: str, prefix: str):
        files = sorted(p for p in source.glob("*.jsonl") if p.is_file())
        if not files:
            return

        copied = 0
        for path in files:
            if self.materialize:
                try:
                    dest_dir = self.target_dir / relative
                    dest_dir.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(path, dest_dir / path.name)
                except PermissionError:
                    self.report.warn(f"Permission denied: {path}")
                    continue
                except OSError as e:
                    self.report.warn(f"Error copying {path.name}: {e}")
                    continue
            copied += 1

        if copied:
            self.report.add_imported(
                ItemKind.SESSION, f"{prefix}{copied} session files", f"{relative}/"
            )
            logger.info(f"Migrated {copied} session files to {relative}")

    # ------------------------------------------------------------------
    # Workspaces
    # ------------------------------------------------------------------

    def migrate_workspaces(self):
        """
        Copy per-agent workspace directories.

        workspaces/<id>/ is preferred over agents/<id>/workspace/. The
        legacy location is never merged into a destination workspace that
        already exists. Empty workspaces are not copied.
        """
        migrated: Set[str] = set()

        for workspace in self._subdirs(self.source_dir / "workspaces"):
            if self._copy_workspace(workspace.name, workspace):
                migrated.add(workspace.name)

        for agent_dir in self._subdirs(self.source_dir / "agents"):
            agent_id = agent_dir.name
            workspace = agent_dir / "workspace"
            if agent_id in migrated or not workspace.is_dir():
                continue
            if (self.target_dir / f"agents/{agent_id}/workspace").exists():
                logger.debug(f"Workspace for {agent_id} already exists, legacy copy skipped")
                continue
            self._copy_workspace(agent_id, workspace)

    def _copy_workspace(self, agent_id: str, workspace: Path) -> bool:
        if not is_safe_agent_id(agent_id):
            self.report.warn(f"Workspace for '{agent_id}' skipped: not a valid agent directory name")
            return False

        try:
            file_count = _count_files(workspace)
        except OSError as e:
            self.report.warn(f"Error scanning {workspace}: {e}")
            return False

        if file_count == 0:
            return False

        relative = f"agents/{agent_id}/workspace"
        if self.materialize:
            try:
                shutil.copytree(workspace, self.target_dir / relative, dirs_exist_ok=True)
            except PermissionError:
                self.report.warn(f"Permission denied: {workspace}")
                return False
            except OSError as e:
                self.report.warn(f"Error copying {workspace}: {e}")
                return False

        self.report.add_imported(
            ItemKind.WORKSPACE, f"{agent_id}/workspace ({file_count} files)", relative
        )
        logger.info(f"Migrated workspace for {agent_id} ({file_count} files)")
        return True

    # ------------------------------------------------------------------
    # Non-portable artifacts
    # ------------------------------------------------------------------

    def report_non_portable(self):
        for relative, kind, reason in NON_PORTABLE_ARTIFACTS:
            if (self.source_dir / relative).exists():
                self.report.add_skipped(kind, relative, reason)
