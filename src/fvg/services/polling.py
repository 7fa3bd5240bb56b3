"""Polling remote tasks until they reach a terminal status."""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from ..exceptions import PollCancelledError, PollTimeoutError, TaskFailedError

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = frozenset({"succeeded", "completed", "finished"})
FAILURE_STATUSES = frozenset({"failed", "error", "canceled", "cancelled"})

DEFAULT_POLL_INTERVAL = 2.0


def normalize_status(value: Any) -> str:
    """Lower-case a remote status, tolerating missing values."""
    return str(value or "").strip().lower()


def remote_error(payload: Dict[str, Any]) -> str:
    """Extract whatever error text a task payload carries."""
    for key in ("error", "failure", "message", "failureCode"):
        value = payload.get(key)
        if value:
            return str(value)
    return ""


class TaskPoller:
    """Checks a remote task at a fixed interval until it finishes.

    Waiting is bounded by ``max_wait`` seconds and can be interrupted by
    setting ``cancel_event``.
    """

    def __init__(
        self,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_wait: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.interval = interval
        self.max_wait = max_wait
        self.cancel_event = cancel_event
        self._clock = clock
        self._sleep = sleep

    async def poll(
        self,
        fetch: Callable[[], Awaitable[Dict[str, Any]]],
        describe: str,
    ) -> Dict[str, Any]:
        """Call ``fetch`` until the task payload reports a terminal status.

        Args:
            fetch: Returns the current task payload (a dict with ``status``).
            describe: Short task description used in messages.

        Returns:
            The payload of the successful task.

        Raises:
            TaskFailedError: If the task ends with a failure-like status.
            PollTimeoutError: If ``max_wait`` elapses first.
            PollCancelledError: If ``cancel_event`` is set.
        """
        started = self._clock()
        checks = 0

        while True:
            self._raise_if_cancelled(describe)

            payload = await fetch()
            checks += 1
            raw_status = payload.get("status")
            status = normalize_status(raw_status)
            logger.debug(f"{describe}: status {raw_status!r} (check {checks})")

            if status in SUCCESS_STATUSES:
                return payload
            if status in FAILURE_STATUSES:
                error_text = remote_error(payload)
                raise TaskFailedError(
                    f"{describe} failed ({raw_status}): {error_text}".rstrip(": "),
                    status=status,
                    remote_error=error_text or None,
                )

            elapsed = self._clock() - started
            if self.max_wait is not None and elapsed >= self.max_wait:
                raise PollTimeoutError(
                    f"{describe} did not finish within {self.max_wait:.0f}s "
                    f"(last status: {raw_status})"
                )

            await self._wait()

    def _raise_if_cancelled(self, describe: str) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise PollCancelledError(f"{describe} was cancelled")

    async def _wait(self) -> None:
        if self.cancel_event is None:
            await self._sleep(self.interval)
            return
        try:
            await asyncio.wait_for(self.cancel_event.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            pass
