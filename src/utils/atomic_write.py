"""
Atomic file operations for migration output.

Destination files are written with the write-to-temp-then-rename pattern,
so a rerun or a crash never leaves a half-written config, manifest or
secret store behind.
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import Union

OWNER_ONLY_FILE = 0o600
OWNER_ONLY_DIR = 0o700


def atomic_write_text(path: Union[str, Path], content: str, mode: int = 0o644) -> None:
    """
    Write text content to file atomically.

    On POSIX systems, rename() is atomic within the same filesystem.
    The mode is applied before the rename so the final file never exists
    with looser permissions.

    Args:
        path: Destination file path
        content: Text content to write
        mode: File permissions (default 0o644)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    # Same directory as the destination so the rename stays on one filesystem
    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp"
    )

    try:
        # newline="" keeps "\n" line endings on every platform
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.chmod(temp_path, mode)
        os.replace(temp_path, path)

        try:
            dir_fd = os.open(str(path.parent), os.O_RDONLY | os.O_DIRECTORY)
            try:
                os.fsync(dir_fd)
            finally:
                os.close(dir_fd)
        except (OSError, AttributeError):
            # O_DIRECTORY not available on all platforms
            pass

    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def restrict_to_owner(path: Union[str, Path]) -> None:
    """
    Restrict a file or directory tree to its owner.

    Files get 0o600 and directories 0o700. On platforms without POSIX
    permission bits os.chmod only toggles the read-only flag, which is
    left alone.
    """
    path = Path(path)
    if os.name != "posix":
        return

    if path.is_dir():
        os.chmod(path, OWNER_ONLY_DIR)
        for root, dirs, files in os.walk(path):
            for name in dirs:
                os.chmod(os.path.join(root, name), OWNER_ONLY_DIR)
            for name in files:
                os.chmod(os.path.join(root, name), OWNER_ONLY_FILE)
    elif path.exists():
        os.chmod(path, OWNER_ONLY_FILE)


def is_owner_only(path: Union[str, Path]) -> bool:
    """Check that no group or other permission bits are set."""
    mode = Path(path).stat().st_mode
    return not mode & (stat.S_IRWXG | stat.S_IRWXO)
