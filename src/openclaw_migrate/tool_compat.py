"""
Tool name compatibility between OpenClaw and OpenFang.

The three functions here are the only place tool names are interpreted:
both schema adapters and the preview scanner go through them, so a
profile expands to the same list wherever it is looked up.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple


class ToolProfile(Enum):
    """Named tool bundles understood by OpenFang."""
    MINIMAL = "minimal"
    CODING = "coding"
    RESEARCH = "research"
    MESSAGING = "messaging"
    AUTOMATION = "automation"
    FULL = "full"

    def tools(self) -> List[str]:
        """Canonical tool identifiers for this profile, in manifest order."""
        return list(_PROFILE_TOOLS[self])

    @classmethod
    def lookup(cls, name: str) -> Optional["ToolProfile"]:
        """Find a profile by name (case-insensitive), or None."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


_PROFILE_TOOLS: Dict[ToolProfile, Tuple[str, ...]] = {
    ToolProfile.MINIMAL: ("file_read", "file_list"),
    ToolProfile.CODING: (
        "file_read", "file_write", "file_list", "shell_exec", "web_fetch",
    ),
    ToolProfile.RESEARCH: (
        "web_fetch", "web_search", "file_read", "file_write",
    ),
    ToolProfile.MESSAGING: (
        "agent_send", "agent_list", "channel_send", "memory_store", "memory_recall",
    ),
    ToolProfile.AUTOMATION: (
        "file_read", "file_write", "file_list", "shell_exec",
        "web_fetch", "web_search", "agent_send", "agent_list",
        "memory_store", "memory_recall", "schedule_create", "schedule_list",
    ),
    ToolProfile.FULL: ("*",),
}

WILDCARD_TOOL = "*"

# Canonical OpenFang tool identifiers (exact spelling)
KNOWN_OPENFANG_TOOLS: FrozenSet[str] = frozenset({
    WILDCARD_TOOL,
    "file_read", "file_write", "file_list", "file_delete",
    "shell_exec",
    "web_fetch", "web_search", "browser_navigate",
    "agent_send", "agent_list", "agent_spawn",
    "memory_store", "memory_recall",
    "channel_send",
    "schedule_create", "schedule_list", "schedule_delete",
    "image_analyze",
})

# OpenClaw / Claude-style tool names, keyed lowercase
TOOL_NAME_MAP: Dict[str, str] = {
    # files
    "read": "file_read",
    "read_file": "file_read",
    "readfile": "file_read",
    "cat": "file_read",
    "write": "file_write",
    "write_file": "file_write",
    "writefile": "file_write",
    "edit": "file_write",
    "multiedit": "file_write",
    "apply_patch": "file_write",
    "notebookedit": "file_write",
    "list_files": "file_list",
    "list_dir": "file_list",
    "ls": "file_list",
    "glob": "file_list",
    "grep": "file_list",
    "delete_file": "file_delete",
    # shell
    "bash": "shell_exec",
    "shell": "shell_exec",
    "exec": "shell_exec",
    "execute_command": "shell_exec",
    "run_command": "shell_exec",
    "process": "shell_exec",
    # web
    "fetch_url": "web_fetch",
    "webfetch": "web_fetch",
    "http_get": "web_fetch",
    "websearch": "web_search",
    "search_web": "web_search",
    "browser": "browser_navigate",
    "browse": "browser_navigate",
    # agents
    "sessions_send": "agent_send",
    "sessions_spawn": "agent_send",
    "sessions_list": "agent_list",
    "sessions_history": "agent_list",
    "subagents": "agent_spawn",
    # memory
    "memory_search": "memory_recall",
    "memory_get": "memory_recall",
    "memory_save": "memory_store",
    "memory_write": "memory_store",
    # messaging and scheduling
    "message": "channel_send",
    "send_message": "channel_send",
    "cron": "schedule_create",
    # media
    "image": "image_analyze",
}


def tools_for_profile(profile: str) -> List[str]:
    """
    Expand an OpenClaw tool profile name to OpenFang tool identifiers.

    Unknown profile names expand to the full profile.
    """
    return (ToolProfile.lookup(profile) or ToolProfile.FULL).tools()


def is_known_openfang_tool(name: str) -> bool:
    """Check whether a name is already a canonical OpenFang tool identifier."""
    return name in KNOWN_OPENFANG_TOOLS


def map_tool_name(name: str) -> Optional[str]:
    """Rename an OpenClaw tool to its OpenFang equivalent, or None."""
    return TOOL_NAME_MAP.get(name.strip().lower())


def recognize_tool(name: str) -> Optional[str]:
    """Canonical identifier for a source tool name, or None if unmapped."""
    if is_known_openfang_tool(name):
        return name
    return map_tool_name(name)
