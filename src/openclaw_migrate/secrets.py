"""
Secret quarantine.

Credential values never go into config.toml. They are written to a
dotenv-style `secrets.env` (one KEY=value per line, owner-only) and the
config refers to them by variable name. Opaque credential files are
copied under `credentials/` with the same restriction.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List

from common.exceptions import SecretStoreError
from utils.atomic_write import OWNER_ONLY_FILE, atomic_write_text, restrict_to_owner

from .models import CredentialBundle

logger = logging.getLogger(__name__)

SECRETS_FILE_NAME = "secrets.env"


class SecretStore:
    """
    Key/value store backed by a dotenv-style file.

    Upserting a key replaces the first line that sets it and leaves every
    other line (comments, unrelated keys, later duplicates) untouched, so
    a rerun never grows the file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_lines(self) -> List[str]:
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()

    def get(self, key: str):
        prefix = f"{key}="
        for line in self._read_lines():
            if line.startswith(prefix):
                return line[len(prefix):]
        return None

    def keys(self) -> List[str]:
        result = []
        for line in self._read_lines():
            if "=" in line and not line.lstrip().startswith("#"):
                result.append(line.split("=", 1)[0])
        return result

    def upsert(self, key: str, value: str):
        """
        Set a key, replacing its existing value.

        Raises:
            SecretStoreError: If the value cannot be stored on one line or
                the file cannot be written.
        """
        if "\n" in value or "\r" in value:
            raise SecretStoreError(key, "value contains a line break")
        if not key or "=" in key or "\n" in key:
            raise SecretStoreError(key, "invalid key")

        try:
            lines = self._read_lines()
        except (OSError, UnicodeDecodeError) as e:
            raise SecretStoreError(key, str(e), cause=e)

        entry = f"{key}={value}"
        prefix = f"{key}="
        for i, line in enumerate(lines):
            if line.startswith(prefix):
                lines[i] = entry
                break
        else:
            lines.append(entry)

        try:
            atomic_write_text(self.path, "\n".join(lines) + "\n", mode=OWNER_ONLY_FILE)
        except OSError as e:
            raise SecretStoreError(key, str(e), cause=e)

        logger.debug(f"Stored {key} in {self.path.name}")


def resolve_bundle_source(bundle: CredentialBundle, source_root: Path) -> Path:
    """Expand ~ and resolve relative bundle paths against the source root."""
    path = bundle.source.expanduser()
    if not path.is_absolute():
        path = source_root / path
    return path


def copy_bundle(bundle: CredentialBundle, source_root: Path, target_dir: Path) -> Path:
    """
    Copy a credential file or directory under the target, owner-only.

    Returns:
        Destination path

    Raises:
        FileNotFoundError: If the bundle source does not exist.
        OSError: On copy failure.
    """
    source = resolve_bundle_source(bundle, source_root)
    dest = target_dir / bundle.destination

    if not source.exists():
        raise FileNotFoundError(f"Credential path not found: {source}")

    dest.parent.mkdir(parents=True, exist_ok=True)
    if source.is_dir():
        shutil.copytree(source, dest, dirs_exist_ok=True)
    else:
        shutil.copy2(source, dest)

    restrict_to_owner(dest)
    return dest
