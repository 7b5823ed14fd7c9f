"""
openclaw-migrate Common Utilities

Exceptions, logging setup and instrumentation shared by the migration
packages.
"""

from .exceptions import (
    MigrationError, SourceNotFoundError, NoInstallationError, ConfigParseError,
    AgentConversionError, SecretStoreError, ReportWriteError,
)
from .decorators import timed
from .logging_config import setup_logging, LogContext, register_secret, redact

__all__ = [
    # Exceptions
    "MigrationError", "SourceNotFoundError", "NoInstallationError", "ConfigParseError",
    "AgentConversionError", "SecretStoreError", "ReportWriteError",
    # Decorators
    "timed",
    # Logging
    "setup_logging", "LogContext", "register_secret", "redact",
]
