"""
OpenClaw installation detector.

Locates an OpenClaw state directory and identifies which schema it uses.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

from .models import SourceFormat

logger = logging.getLogger(__name__)

STATE_DIR_ENV = "OPENCLAW_STATE_DIR"

# Modern single-file configs, in lookup order. OpenClaw shipped under
# several product names before settling on openclaw.json.
JSON5_CONFIG_NAMES = ("openclaw.json", "clawdbot.json", "moldbot.json", "moltbot.json")
LEGACY_CONFIG_NAME = "config.yaml"
CONFIG_FILE_NAMES = JSON5_CONFIG_NAMES + (LEGACY_CONFIG_NAME,)


def find_config_file(directory: Path) -> Optional[Path]:
    """
    Find the primary config file of an installation.

    Returns:
        Path of the first existing JSON5 config, else the legacy
        config.yaml, else None.
    """
    for name in CONFIG_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def detect_format(directory: Path) -> Optional[SourceFormat]:
    """Identify the schema of an installation, or None if there is none."""
    config = find_config_file(directory)
    if config is not None:
        if config.name in JSON5_CONFIG_NAMES:
            return SourceFormat.JSON5
        return SourceFormat.LEGACY_YAML

    # A legacy layout may lack config.yaml but still carry agents
    if (directory / "agents").is_dir() and any((directory / "agents").glob("*/agent.yaml")):
        return SourceFormat.LEGACY_YAML

    return None


def _is_openclaw_home(directory: Path) -> bool:
    if not directory.is_dir():
        return False
    if find_config_file(directory) is not None:
        return True
    return (directory / "sessions").is_dir() or (directory / "memory").is_dir()


def candidate_homes() -> List[Path]:
    """Default state directory locations, in lookup order."""
    home = Path.home()
    candidates = [
        home / ".openclaw",
        home / ".clawdbot",
        home / ".moldbot",
        home / ".moltbot",
        home / "openclaw",
        home / ".config" / "openclaw",
    ]

    for var in ("APPDATA", "LOCALAPPDATA"):
        base = os.environ.get(var)
        if base:
            candidates.append(Path(base) / "openclaw")

    return candidates


def detect_openclaw_home() -> Optional[Path]:
    """
    Find the OpenClaw state directory on this machine.

    OPENCLAW_STATE_DIR wins when it names an existing directory.
    """
    override = os.environ.get(STATE_DIR_ENV)
    if override:
        path = Path(override).expanduser()
        if path.is_dir():
            logger.debug(f"Using {STATE_DIR_ENV}: {path}")
            return path
        logger.warning(f"{STATE_DIR_ENV} is set but is not a directory: {path}")

    for candidate in candidate_homes():
        if _is_openclaw_home(candidate):
            logger.debug(f"Found OpenClaw installation at {candidate}")
            return candidate

    return None
