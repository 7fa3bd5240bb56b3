"""Exception hierarchy for the fanfic video pipeline.

Every error raised on purpose by the pipeline derives from ``FvgError`` so the
CLI can report it once and exit with a non-zero status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models.plan import ValidationIssue


class FvgError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """Initialize the exception.

        Args:
            message: User-friendly error message.
            details: Additional technical details for debugging.
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\n  Details: {self.details}"
        return self.message

    @property
    def retryable(self) -> bool:
        """Whether repeating the failed action could succeed."""
        return False


class ConfigurationError(FvgError):
    """Raised when configuration is missing or invalid."""

    pass


class PlanValidationError(FvgError):
    """Raised when a scene plan is missing, unreadable or malformed.

    Carries the complete, ordered list of issues found in one pass.
    """

    def __init__(self, message: str, issues: list["ValidationIssue"]) -> None:
        super().__init__(message)
        self.issues = list(issues)

    def format_issues(self) -> str:
        """Render every issue with its remediation hint."""
        lines = []
        for issue in self.issues:
            line = f" • {issue.path}: {issue.message}"
            if issue.suggestion:
                line += f"\n   ↳ {issue.suggestion}"
            lines.append(line)
        return "\n".join(lines)


class PlanNotFoundError(PlanValidationError):
    """The scene plan file does not exist."""

    pass


class PlanEmptyError(PlanValidationError):
    """The scene plan file exists but is blank."""

    pass


class PlanSyntaxError(PlanValidationError):
    """The scene plan file is not valid JSON."""

    pass


# 408 and 429 are the only client errors worth repeating.
_RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})


class CollaboratorError(FvgError):
    """Raised when an external service answers with a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message, details=body or None)
        self.status_code = status_code
        self.body = body

    @property
    def retryable(self) -> bool:
        if self.status_code is None:
            return True
        if self.status_code in _RETRYABLE_CLIENT_STATUSES:
            return True
        return self.status_code >= 500


class TaskFailedError(FvgError):
    """A remote task finished with a failure-like terminal status."""

    def __init__(self, message: str, status: str, remote_error: Optional[str] = None) -> None:
        super().__init__(message, details=remote_error or None)
        self.status = status
        self.remote_error = remote_error

    @property
    def retryable(self) -> bool:
        # A resubmitted task may succeed where the last one failed.
        return True


class NoOutputError(FvgError):
    """A remote task reported success without an output reference."""

    pass


class PollTimeoutError(FvgError):
    """Polling a remote task exceeded the configured maximum wait."""

    pass


class PollCancelledError(FvgError):
    """Polling a remote task was cancelled by the caller."""

    pass


class MissingArtifactError(FvgError):
    """A file produced by an earlier stage is required but absent."""

    pass


class ConcatError(FvgError):
    """The concatenation step failed."""

    pass
