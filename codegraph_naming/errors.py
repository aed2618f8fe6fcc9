"""
Standardized Error Handling for codegraph-naming

Hierarchical exception classes with error codes and context.
Naming policies never raise; these cover configuration, parsing,
source editing and the file-system commit.
"""

from typing import Any


class NamingError(Exception):
    """Base exception for all codegraph-naming errors.

    Includes error code for programmatic handling and context for debugging.

    Example:
        raise NamingError(
            code="FILE_RENAME_FAILED",
            message="Failed to move file",
            source="src/Entity.php",
        )
    """

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")

    def __repr__(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r}, {ctx_str})"


# ==============================================================================
# Configuration Errors
# ==============================================================================


class ConfigurationError(NamingError):
    """Error in configuration."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(code="CONFIGURATION_ERROR", message=message, **context)


class UnknownPolicyError(ConfigurationError):
    """A policy name does not exist in the catalog."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, **context)
        self.code = "UNKNOWN_POLICY"


# ==============================================================================
# Parsing / Editing Errors
# ==============================================================================


class ParseError(NamingError):
    """Error while parsing a source file."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(code="PARSE_ERROR", message=message, **context)


class EditConflictError(NamingError):
    """Two queued edits partially overlap in the same file."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(code="EDIT_CONFLICT", message=message, **context)


# ==============================================================================
# Planning / Commit Errors
# ==============================================================================


class PlanConflictError(NamingError):
    """A file was planned twice with different destinations."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(code="PLAN_CONFLICT", message=message, **context)


class FileRenameError(NamingError):
    """A planned file move could not be applied."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(code="FILE_RENAME_FAILED", message=message, **context)


class SessionStateError(NamingError):
    """Operation attempted on a session that was already finalized."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(code="SESSION_STATE", message=message, **context)


__all__ = [
    "NamingError",
    "ConfigurationError",
    "UnknownPolicyError",
    "ParseError",
    "EditConflictError",
    "PlanConflictError",
    "FileRenameError",
    "SessionStateError",
]
