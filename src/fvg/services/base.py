"""Base class shared by the HTTP service adapters."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx

from ..config import Config
from .http import download, new_client
from .polling import TaskPoller

logger = logging.getLogger(__name__)


class ServiceClient:
    """Holds the HTTP client and task poller for one external service.

    Adapters receive the process-wide ``Config``; an ``httpx.AsyncClient``
    and a ``TaskPoller`` may be injected, otherwise they are built from it.
    """

    service_name = "service"
    required_settings: tuple[str, ...] = ()

    def __init__(
        self,
        config: Config,
        client: Optional[httpx.AsyncClient] = None,
        poller: Optional[TaskPoller] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> None:
        config.require(*self.required_settings)
        self._config = config
        self._owns_client = client is None
        self._client = client or new_client(config.request_timeout)
        self._poller = poller or TaskPoller(
            interval=config.poll_interval,
            max_wait=config.max_poll_wait,
            cancel_event=cancel_event,
        )

    async def download(self, url: str, output_path: Path) -> Path:
        """Save a result URL produced by this service."""
        return await download(self._client, url, output_path, service=self.service_name)

    async def aclose(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()
