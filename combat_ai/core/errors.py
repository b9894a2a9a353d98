"""
Combat AI Engine - Custom Error Types
Structured exceptions for faults at the host boundary.

The decision engine itself never raises: invalid overrides and
difficulties are reported as no-ops. These errors cover malformed
snapshots handed in by the host and unusable configuration.
"""
from typing import Dict, Any, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the combat AI engine."""
    # General errors
    UNKNOWN = "UNKNOWN"

    # Snapshot errors
    SNAPSHOT_INVALID = "SNAPSHOT_INVALID"

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"


class EngineError(Exception):
    """
    Base exception for all engine errors.

    Provides structured error information with:
    - Error code for programmatic handling
    - Human-readable message
    - Additional context details
    - Recovery hints for the host application
    """

    def __init__(
        self,
        code: ErrorCode = ErrorCode.UNKNOWN,
        message: str = "An unexpected error occurred",
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for the host."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
                "recoverable": self.recoverable,
                "recovery_hint": self.recovery_hint
            }
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# =============================================================================
# Snapshot Errors
# =============================================================================

class SnapshotValidationError(EngineError):
    """Raised when the host hands in a combatant snapshot that cannot be read."""

    def __init__(
        self,
        message: str = "Combatant snapshot is invalid",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=ErrorCode.SNAPSHOT_INVALID,
            message=message,
            details=details,
            recovery_hint="Check the combatant fields against the snapshot models",
        )


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(EngineError):
    """Raised when an environment setting cannot be parsed."""

    def __init__(
        self,
        message: str = "Invalid engine configuration",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=ErrorCode.CONFIG_INVALID,
            message=message,
            details=details,
            recoverable=False,
            recovery_hint="Fix the COMBAT_AI_* environment variables",
        )
