"""
Read-only preview of an OpenClaw installation.

Uses the same adapters as a real migration, so agents, tools and
channels are reported exactly as they would be migrated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from common.exceptions import MigrationError

from .adapters import create_adapter
from .detector import find_config_file

logger = logging.getLogger(__name__)


@dataclass
class ScannedAgent:
    """Summary of one agent found in a scan."""
    id: str
    name: str
    provider: str
    model: str
    tools: List[str] = field(default_factory=list)


@dataclass
class ScanResult:
    """What a migration of this directory would pick up."""
    path: Path
    has_config: bool = False
    format: Optional[str] = None
    agents: List[ScannedAgent] = field(default_factory=list)
    channels: List[str] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)
    has_memory: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "path": str(self.path),
            "has_config": self.has_config,
            "format": self.format,
            "agents": [
                {
                    "id": a.id,
                    "name": a.name,
                    "provider": a.provider,
                    "model": a.model,
                    "tools": list(a.tools),
                }
                for a in self.agents
            ],
            "channels": list(self.channels),
            "skills": list(self.skills),
            "has_memory": self.has_memory,
            "error": self.error,
        }


def _has_memory(path: Path) -> bool:
    if any(path.glob("memory/*/MEMORY.md")):
        return True
    return any(path.glob("agents/*/MEMORY.md"))


def scan_workspace(path: Path) -> ScanResult:
    """
    Inspect an installation without writing anything.

    Errors are captured in the result rather than raised.
    """
    path = Path(path).expanduser()
    result = ScanResult(path=path)

    if not path.is_dir():
        result.error = f"Directory not found: {path}"
        return result

    result.has_config = find_config_file(path) is not None
    result.has_memory = _has_memory(path)

    try:
        adapter = create_adapter(path)
        result.format = adapter.source_format.value
        model = adapter.parse()
    except MigrationError as e:
        logger.debug(f"Scan of {path} failed: {e}")
        result.error = e.message
        return result

    result.agents = [
        ScannedAgent(
            id=agent.id,
            name=agent.name,
            provider=agent.model.provider,
            model=agent.model.model,
            tools=list(agent.tools),
        )
        for agent in model.agents
    ]
    result.channels = [c.table_name for c in model.channels if c.skip_reason is None]
    result.skills = list(model.skills)

    return result
