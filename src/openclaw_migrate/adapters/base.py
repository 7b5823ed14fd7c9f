"""
Schema adapter base class and factory.

An adapter reads one OpenClaw schema and produces a CanonicalModel. The
rules that must not differ between schemas (agent id checks, tool and
profile resolution, capability derivation, channel de-duplication) live
here so both adapters go through the same code.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional, Set

from common.exceptions import NoInstallationError, SourceNotFoundError

from ..detector import detect_format, find_config_file
from ..mapping import (
    FALLBACK_TOOLS,
    derive_capabilities,
    resolve_tool_names,
    unmapped_tool_warning,
)
from ..models import (
    AgentSpec,
    CanonicalModel,
    ChannelSpec,
    ItemKind,
    SkippedItem,
    SourceFormat,
)
from ..tool_compat import ToolProfile, tools_for_profile

logger = logging.getLogger(__name__)

_UNSAFE_ID_CHARS = set('/\\:*?"<>|\0')


def is_safe_agent_id(agent_id: str) -> bool:
    """Check that an agent id can be used as a single directory name."""
    if not agent_id or agent_id.strip() != agent_id:
        return False
    if agent_id in (".", ".."):
        return False
    return not any(ch in _UNSAFE_ID_CHARS for ch in agent_id)


class SourceAdapter(ABC):
    """
    Base class for OpenClaw schema adapters.

    Subclasses implement parse(); everything else is shared.
    """

    source_format: SourceFormat

    def __init__(self, source_dir: Path, config_path: Optional[Path] = None):
        self.source_dir = Path(source_dir)
        self.config_path = config_path

    @abstractmethod
    def parse(self) -> CanonicalModel:
        """
        Read the installation into a canonical model.

        Raises:
            ConfigParseError: If the primary config exists but cannot be read.
        """

    def _new_model(self) -> CanonicalModel:
        return CanonicalModel(
            source_dir=self.source_dir,
            source_format=self.source_format,
            config_name=self.config_path.name if self.config_path else None,
        )

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------

    def _skip(self, model: CanonicalModel, kind: ItemKind, name: str, reason: str):
        logger.warning(f"Skipping {kind.value} {name}: {reason}")
        model.skipped.append(SkippedItem(kind=kind, name=name, reason=reason))

    def _check_agent_id(self, model: CanonicalModel, agent_id: str) -> Optional[str]:
        """Return a skip reason if the id cannot be used, else None."""
        if not is_safe_agent_id(agent_id):
            return f"Agent id '{agent_id}' cannot be used as a directory name"
        if agent_id in model.agent_ids:
            return f"Duplicate agent id '{agent_id}'"
        return None

    def _profile_tools(self, model: CanonicalModel, agent_id: str, profile: str) -> List[str]:
        if ToolProfile.lookup(profile) is None:
            model.warnings.append(
                f"Agent '{agent_id}': unknown tool profile '{profile}', using 'full'"
            )
        return tools_for_profile(profile)

    def _resolve_allow_lists(
        self,
        model: CanonicalModel,
        agent_id: str,
        *name_lists: Optional[Iterable[str]],
    ) -> List[str]:
        """Map explicit tool lists, warning once per unmapped tool."""
        resolution = resolve_tool_names(*name_lists)
        seen: Set[str] = set()
        for tool in resolution.unmapped:
            if tool not in seen:
                seen.add(tool)
                model.warnings.append(unmapped_tool_warning(agent_id, tool))
        return resolution.tools

    @staticmethod
    def _fallback_tools() -> List[str]:
        return list(FALLBACK_TOOLS)

    def _add_agent(self, model: CanonicalModel, spec: AgentSpec):
        spec.capabilities = derive_capabilities(spec.tools)
        model.agents.append(spec)
        logger.debug(f"Parsed agent {spec.id} ({spec.model.provider}/{spec.model.model})")

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------

    def _add_channel(self, model: CanonicalModel, spec: ChannelSpec):
        """Record a channel, marking a second source for the same kind as a duplicate."""
        if spec.skip_reason is None and spec.kind is not None:
            for existing in model.channels:
                if existing.kind == spec.kind and existing.skip_reason is None:
                    spec.skip_reason = (
                        f"Duplicate of channel '{existing.name}' "
                        f"(both map to [channels.{spec.kind.value}])"
                    )
                    break
        model.channels.append(spec)


def create_adapter(source_dir: Path) -> SourceAdapter:
    """
    Factory function to create the adapter for an installation.

    Args:
        source_dir: OpenClaw state directory

    Returns:
        Adapter instance for the detected schema

    Raises:
        SourceNotFoundError: If the directory does not exist.
        NoInstallationError: If no OpenClaw layout is found in it.
    """
    from .json5_adapter import Json5Adapter
    from .yaml_adapter import LegacyYamlAdapter

    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        raise SourceNotFoundError(source_dir)

    source_format = detect_format(source_dir)
    config_path = find_config_file(source_dir)

    if source_format == SourceFormat.JSON5:
        return Json5Adapter(source_dir, config_path)
    if source_format == SourceFormat.LEGACY_YAML:
        return LegacyYamlAdapter(source_dir, config_path)

    raise NoInstallationError(source_dir)
