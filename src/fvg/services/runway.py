"""Runway text-to-video API client."""

import logging
from typing import Any, Dict

from ..exceptions import NoOutputError
from .base import ServiceClient
from .http import json_body, raise_for_status

logger = logging.getLogger(__name__)


class RunwayClient(ServiceClient):
    """Client for Runway's text-to-video task API.

    A generation is submitted as a task, polled until it reaches a terminal
    status, and the first output URL is returned.
    """

    service_name = "Runway"
    required_settings = ("runway_api_key",)

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.runway_api_key}",
            "X-Runway-Version": self._config.runway_api_version,
        }

    @property
    def _base_url(self) -> str:
        return self._config.runway_base_url.rstrip("/")

    async def generate_video(
        self,
        prompt: str,
        model: str,
        ratio: str,
        duration: int,
    ) -> str:
        """Generate a clip and return the URL of the rendered video.

        Args:
            prompt: Text description of the clip.
            model: Runway model name, e.g. ``veo3.1_fast``.
            ratio: Output resolution ratio, e.g. ``1920:1080``.
            duration: Supported clip duration in seconds.

        Raises:
            CollaboratorError: If a request is rejected.
            TaskFailedError: If the task fails remotely.
            NoOutputError: If the task succeeds without an output URL.
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")

        response = await self._client.post(
            f"{self._base_url}/v1/text_to_video",
            headers=self._headers,
            json={
                "model": model,
                "promptText": prompt,
                "ratio": ratio,
                "duration": duration,
            },
        )
        raise_for_status(response, self.service_name, "generate")
        task_id = json_body(response, self.service_name).get("id")
        if not task_id:
            raise NoOutputError("Runway response missing task id")

        logger.info(f"Started Runway task {task_id} ({model}, {ratio}, {duration}s)")
        task = await self._poller.poll(lambda: self._fetch_task(task_id), f"Runway task {task_id}")

        output = task.get("output") or []
        url = output[0] if isinstance(output, list) and output else None
        if not url:
            raise NoOutputError("No video output from Runway")
        return url

    async def _fetch_task(self, task_id: str) -> Dict[str, Any]:
        response = await self._client.get(f"{self._base_url}/v1/tasks/{task_id}", headers=self._headers)
        raise_for_status(response, self.service_name, "task poll")
        return json_body(response, self.service_name)
