"""
openclaw-migrate Exception Hierarchy

Provides clear, actionable error messages with structured information
for logging, the migration report, and programmatic error handling.
"""

from pathlib import Path
from typing import Optional, Dict, Any


class MigrationError(Exception):
    """
    Base exception for all migration errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context as key-value pairs
        cause: Original exception that caused this error
        recoverable: Whether the run can continue past this error
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        self.recoverable = recoverable

    def __str__(self):
        s = f"[{self.code}] {self.message}"
        if self.details:
            s += f" (details: {self.details})"
        if self.cause:
            s += f" caused by: {self.cause}"
        return s

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Source errors (fatal)
# =============================================================================

class SourceNotFoundError(MigrationError):
    """Source installation directory does not exist."""
    def __init__(self, path: Path):
        super().__init__(
            f"Source directory not found: {path}",
            code="SOURCE_NOT_FOUND",
            details={"path": str(path)},
            recoverable=False,
        )


class NoInstallationError(MigrationError):
    """Source directory exists but holds no recognizable OpenClaw layout."""
    def __init__(self, path: Path):
        super().__init__(
            f"No OpenClaw configuration found in {path}",
            code="NO_OPENCLAW_CONFIG",
            details={"path": str(path)},
            recoverable=False,
        )


class ConfigParseError(MigrationError):
    """Primary configuration file exists but cannot be parsed."""
    def __init__(self, path: Path, reason: str, cause: Optional[Exception] = None):
        super().__init__(
            f"Cannot parse {path.name}: {reason}",
            code="CONFIG_PARSE_FAILED",
            details={"path": str(path)},
            cause=cause,
            recoverable=False,
        )


# =============================================================================
# Per-item errors (recorded in the report, run continues)
# =============================================================================

class AgentConversionError(MigrationError):
    """A single agent definition could not be converted."""
    def __init__(self, agent_id: str, reason: str):
        super().__init__(
            reason,
            code="AGENT_CONVERSION_FAILED",
            details={"agent": agent_id},
        )


class SecretStoreError(MigrationError):
    """A credential could not be written to the secret store."""
    def __init__(self, key: str, reason: str, cause: Optional[Exception] = None):
        super().__init__(
            f"Failed to write {key} to secrets.env: {reason}",
            code="SECRET_STORE_FAILED",
            details={"key": key},
            cause=cause,
        )


# =============================================================================
# Report errors
# =============================================================================

class ReportWriteError(MigrationError):
    """The migration report could not be persisted.

    The fully built report is attached so callers can still show it.
    """
    def __init__(self, path: Path, report: Any, cause: Optional[Exception] = None):
        super().__init__(
            f"Failed to write migration report to {path}",
            code="REPORT_WRITE_FAILED",
            details={"path": str(path)},
            cause=cause,
        )
        self.report = report
