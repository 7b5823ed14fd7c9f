"""
openclaw-migrate

Migrates an OpenClaw installation into the OpenFang layout:
- Configuration and default model
- Agent definitions and tool permissions
- Messaging channels, with credentials moved to secrets.env
- Memory notes, session logs and agent workspaces
"""

from .models import (
    SourceFormat,
    ItemKind,
    ChannelKind,
    ModelRef,
    CapabilityGrant,
    AgentSpec,
    ChannelSpec,
    CanonicalModel,
)
from .tool_compat import ToolProfile, tools_for_profile, map_tool_name, is_known_openfang_tool
from .detector import detect_format, detect_openclaw_home, find_config_file
from .report import MigrationReport
from .migrator import MigrateOptions, migrate
from .scanner import ScanResult, ScannedAgent, scan_workspace

__version__ = "0.1.0"

__all__ = [
    "SourceFormat",
    "ItemKind",
    "ChannelKind",
    "ModelRef",
    "CapabilityGrant",
    "AgentSpec",
    "ChannelSpec",
    "CanonicalModel",
    "ToolProfile",
    "tools_for_profile",
    "map_tool_name",
    "is_known_openfang_tool",
    "detect_format",
    "detect_openclaw_home",
    "find_config_file",
    "MigrationReport",
    "MigrateOptions",
    "migrate",
    "ScanResult",
    "ScannedAgent",
    "scan_workspace",
]
