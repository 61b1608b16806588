"""
Exception hierarchy for safe-gh.

All safe-gh exceptions inherit from SafeGhError, allowing the command
boundary to catch every expected failure with a single except clause and
turn it into exactly one error payload.

Error Codes:
    - PERMISSION_DENIED: The decision was a deny
    - NOT_OWNER: A linked resource lives outside allowedOwners
    - CONFIG_ERROR: Config missing, malformed, or missing selfUserId
    - GH_CLI_ERROR: The gh CLI exited non-zero
    - GRAPHQL_ERROR: A GraphQL response carried errors
    - VALIDATION_ERROR: Malformed numeric or reference input
    - ENFORCE_ERROR: Primary action succeeded, enforcement failed
    - NOT_FOUND: The fetch succeeded but the target resource is absent
    - UNKNOWN_ERROR: Anything else

Design Principles:
    - Every error has a string code for programmatic handling
    - Every error serializes to {error, code, details?}
    - Suggestions are for humans and never part of the payload
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

ERROR_PERMISSION_DENIED = "PERMISSION_DENIED"
ERROR_NOT_OWNER = "NOT_OWNER"
ERROR_CONFIG = "CONFIG_ERROR"
ERROR_GH_CLI = "GH_CLI_ERROR"
ERROR_VALIDATION = "VALIDATION_ERROR"
ERROR_ENFORCE = "ENFORCE_ERROR"
ERROR_GRAPHQL = "GRAPHQL_ERROR"
ERROR_NOT_FOUND = "NOT_FOUND"
ERROR_UNKNOWN = "UNKNOWN_ERROR"


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class SafeGhError(Exception):
    """
    Base exception for all safe-gh errors.

    Attributes:
        message: Human-readable error description
        code: One of the ERROR_* codes above
        suggestion: Optional hint for how to resolve the error
        details: Optional dict with structured context for the payload
    """

    message: str = ""
    code: str = ERROR_UNKNOWN
    suggestion: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r})"
        )

    def to_payload(self) -> dict[str, Any]:
        """Convert to the JSON error payload."""
        payload: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


# =============================================================================
# Decision Errors
# =============================================================================


@dataclass
class PermissionDeniedError(SafeGhError):
    """
    Raised when the decision for an operation is a deny.

    Attributes:
        resource: Resource type of the request (issue, pr, ...)
        operation: Operation name that was denied
        reason: The decision's reason
        rule: Name of the matched rule, if any
        context: Context snapshot the decision was evaluated against
    """

    resource: str = ""
    operation: str = ""
    reason: str = ""
    rule: str | None = None
    context: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = self.reason or f"Permission denied for {self.resource} {self.operation}"
        self.code = ERROR_PERMISSION_DENIED
        self.details.setdefault("resource", self.resource)
        self.details.setdefault("operation", self.operation)
        if self.rule:
            self.details["ruleName"] = self.rule
        if self.context is not None:
            self.details["context"] = self.context


@dataclass
class NotOwnerError(SafeGhError):
    """Raised when a linked resource belongs to an owner outside allowedOwners."""

    target_repo: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Repository owner not allowed: {self.target_repo}"
        self.code = ERROR_NOT_OWNER
        if not self.suggestion:
            self.suggestion = "Add the owner to allowedOwners in config"
        self.details.setdefault("targetRepo", self.target_repo)


# =============================================================================
# Config and Input Errors
# =============================================================================


@dataclass
class ConfigError(SafeGhError):
    """
    Raised when the config cannot be loaded or is unusable.

    Attributes:
        path: Config file path, if known
    """

    path: str | None = None

    def __post_init__(self) -> None:
        self.code = ERROR_CONFIG
        if self.path:
            self.details.setdefault("path", self.path)


@dataclass
class InputValidationError(SafeGhError):
    """Raised for malformed numbers, references, or unknown operations."""

    value: str | None = None

    def __post_init__(self) -> None:
        self.code = ERROR_VALIDATION
        if self.value is not None:
            self.details.setdefault("value", self.value)


# =============================================================================
# External Call Errors
# =============================================================================


@dataclass
class GhCliError(SafeGhError):
    """
    Raised when the gh CLI exits non-zero or cannot be started.

    Attributes:
        stderr: Trimmed stderr of the gh process
        exit_code: Process exit code
    """

    stderr: str = ""
    exit_code: int = 1

    def __post_init__(self) -> None:
        if not self.message:
            self.message = self.stderr or "gh CLI error"
        self.code = ERROR_GH_CLI
        self.details.setdefault("exitCode", self.exit_code)


@dataclass
class GraphQLError(SafeGhError):
    """Raised when a GraphQL response carries an errors array."""

    errors: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.message:
            self.message = "; ".join(self.errors) or "GraphQL error"
        self.code = ERROR_GRAPHQL


@dataclass
class NotFoundError(SafeGhError):
    """
    Raised when a fetch succeeded but the target resource is null.

    Attributes:
        resource: Resource type that was fetched
        repo: Repository the fetch targeted
        number: Issue or pull request number
    """

    resource: str = ""
    repo: str | None = None
    number: int | None = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"{self.resource} #{self.number} not found in {self.repo}"
        self.code = ERROR_NOT_FOUND
        self.details.setdefault("resource", self.resource)
        self.details.setdefault("repo", self.repo)
        self.details.setdefault("number", self.number)


@dataclass
class EnforceError(SafeGhError):
    """
    Raised when the primary action succeeded but enforcement did not.

    The primary action's effect stands; details carry its output so the
    caller can tell what happened.

    Attributes:
        primary_output: Trimmed stdout of the primary action
        underlying_error: What went wrong during enforcement
    """

    primary_output: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = "Primary action succeeded but enforce failed"
        self.code = ERROR_ENFORCE
        self.details.setdefault("primaryOutput", self.primary_output)
        if self.underlying_error:
            self.details.setdefault("enforceError", self.underlying_error)


@dataclass
class UnknownError(SafeGhError):
    """Catch-all for unexpected exceptions converted at the boundary."""

    def __post_init__(self) -> None:
        self.code = ERROR_UNKNOWN
