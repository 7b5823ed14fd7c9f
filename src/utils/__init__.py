"""
openclaw-migrate Utility Modules

File operations used when writing migration output.
"""

from .atomic_write import (
    atomic_write_text,
    restrict_to_owner,
    is_owner_only,
    OWNER_ONLY_FILE,
    OWNER_ONLY_DIR,
)

__all__ = [
    "atomic_write_text",
    "restrict_to_owner",
    "is_owner_only",
    "OWNER_ONLY_FILE",
    "OWNER_ONLY_DIR",
]
