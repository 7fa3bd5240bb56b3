"""User-facing progress reporting scoped to a pipeline stage."""

from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

import typer

T = TypeVar("T")


class StatusLevel(str, Enum):
    """Severity of a status line."""

    START = "start"
    INFO = "info"
    SUCCESS = "success"
    WARN = "warn"
    ERROR = "error"


ICONS = {
    StatusLevel.START: "⏳",
    StatusLevel.INFO: "ℹ️",
    StatusLevel.SUCCESS: "✅",
    StatusLevel.WARN: "⚠️",
    StatusLevel.ERROR: "❌",
}


_REPORTED_ATTR = "_fvg_status_reported"


def mark_reported(error: BaseException) -> None:
    """Flag an error as already shown to the user."""
    setattr(error, _REPORTED_ATTR, True)


def was_reported(error: BaseException) -> bool:
    """Return True if a reporter already announced this error."""
    return bool(getattr(error, _REPORTED_ATTR, False))


class StatusReporter:
    """Prints leveled, icon-prefixed status lines for one scope.

    Warnings and errors go to stderr. Errors mention the escalation contact
    when one is configured, and ``advanced`` lines only appear when the
    reporter was created with ``advanced=True``.
    """

    def __init__(
        self,
        scope: str = "pipeline",
        escalation_contact: Optional[str] = None,
        advanced: bool = False,
    ) -> None:
        self.scope = scope
        self.escalation_contact = escalation_contact
        self.show_advanced = advanced

    def _emit(self, level: StatusLevel, message: str) -> None:
        line = f"{ICONS[level]} [{self.scope}] {message}"
        to_stderr = level in (StatusLevel.WARN, StatusLevel.ERROR)
        typer.echo(line, err=to_stderr)
        if level == StatusLevel.ERROR and self.escalation_contact:
            typer.echo(f"   ↳ Need help? Reach out at {self.escalation_contact}", err=True)

    def start(self, message: str) -> None:
        self._emit(StatusLevel.START, message)

    def info(self, message: str) -> None:
        self._emit(StatusLevel.INFO, message)

    def success(self, message: str) -> None:
        self._emit(StatusLevel.SUCCESS, message)

    def warn(self, message: str) -> None:
        self._emit(StatusLevel.WARN, message)

    def error(self, message: str) -> None:
        self._emit(StatusLevel.ERROR, message)

    def advanced(self, message: str) -> None:
        """Emit a diagnostic line, only when advanced output is enabled."""
        if not self.show_advanced:
            return
        self._emit(StatusLevel.INFO, f"(advanced) {message}")

    def empty_state(self, context: str, guidance: str) -> None:
        """Report that there is nothing to do, with a hint on what to change."""
        self.warn(f"{context} is empty.")
        self.info(guidance)

    async def step(self, label: str, action: Callable[[], Awaitable[T]]) -> T:
        """Run ``action`` bracketed by start and success/failure lines.

        The failure is reported once and then re-raised; enclosing steps do
        not report it again.
        """
        self.start(label)
        try:
            result = await action()
        except Exception as e:
            if not was_reported(e):
                self.error(f"{label} - failed: {e}")
                mark_reported(e)
            raise
        self.success(f"{label} - done.")
        return result

    def child(self, scope: str) -> "StatusReporter":
        """Return a reporter for another scope with the same settings."""
        return StatusReporter(
            scope,
            escalation_contact=self.escalation_contact,
            advanced=self.show_advanced,
        )
